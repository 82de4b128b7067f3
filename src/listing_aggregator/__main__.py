import argparse
import json
import logging
from dataclasses import replace

from .catalog import canonical_city, normalize_location_query
from .config import get_settings
from .pipeline import SearchRequest, SearchService


def _build_parser():
    parser = argparse.ArgumentParser(
        description="Property listing aggregator CLI",
    )
    parser.add_argument(
        "--location",
        default=None,
        help="City or free-text location (e.g. 'Miami Beach, FL')",
    )
    parser.add_argument(
        "--listing-type",
        default=None,
        help="sale, lease, auction or unknown",
    )
    parser.add_argument(
        "--property-type",
        default=None,
        help="Property type substring (e.g. office, retail)",
    )
    parser.add_argument("--min-price", default=None, help="Minimum price")
    parser.add_argument("--max-price", default=None, help="Maximum price")
    parser.add_argument("--min-sqft", default=None, help="Minimum square footage")
    parser.add_argument("--max-sqft", default=None, help="Maximum square footage")
    parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="1-based result page",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Dataset directory (overrides LISTINGS_DATA_DIR)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the resolved dataset sources without loading them",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit one JSON log line per dataset source",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format for results",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    return parser


def _describe(index, item):
    address = item.get("address") or {}
    price = item.get("price") or {}
    where = ", ".join(p for p in (address.get("street"), address.get("city"), address.get("state")) if p)
    price_text = price.get("display")
    if not price_text and price.get("amount") is not None:
        price_text = f"${price['amount']:,.0f}"
    return (
        f"{index}. [{item.get('listing_category')}] {item.get('property_type') or 'N/A'} - "
        f"{where or 'N/A'} - {price_text or 'Contact for price'}"
    )


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level.upper())

    settings = get_settings()
    if args.data_dir:
        settings = replace(settings, data_dir=args.data_dir)
    service = SearchService(settings=settings)
    request = SearchRequest(
        location_query=args.location,
        listing_category=args.listing_type,
        property_type=args.property_type,
        min_price=args.min_price,
        max_price=args.max_price,
        min_size=args.min_sqft,
        max_size=args.max_sqft,
        page=args.page,
    )

    if args.dry_run:
        sources = service.resolve_sources(request)
        print(f"Location: {normalize_location_query(args.location) or '(any)'}")
        print(f"City: {canonical_city(args.location) or '(default sources)'}")
        for source in sources:
            print(f"{source.id}: {source.kind.value} -> {source.path}")
            if args.log_json:
                print(
                    json.dumps(
                        {
                            "source": source.id,
                            "kind": source.kind.value,
                            "path": source.path,
                            "items_found": 0,
                            "status": "skipped",
                        }
                    )
                )
        summary = {
            "total_sources": len(sources),
            "attempted": 0,
            "succeeded": 0,
            "failed": 0,
            "skipped": len(sources),
            "total_items": 0,
        }
        print(json.dumps(summary))
        return

    response = service.search(request)
    payload = response.to_dict()
    if args.format == "json":
        print(json.dumps(payload))
    else:
        print(
            f"Found {response.total_count} properties "
            f"(page {response.page} of {response.total_pages}):"
        )
        offset = (response.page - 1) * response.page_size
        for i, item in enumerate(payload["page_items"]):
            print(_describe(offset + i + 1, item))
    entries = response.sources
    if args.log_json:
        for entry in entries:
            print(json.dumps(entry))
    failed = [e for e in entries if e["status"] == "failed"]
    if failed and args.format == "text":
        print("Failures:")
        for entry in failed:
            print(f"{entry.get('source')}: {entry.get('error')}")
    summary = {
        "total_sources": len(entries),
        "attempted": len(entries),
        "succeeded": sum(1 for e in entries if e["status"] == "success"),
        "failed": len(failed),
        "skipped": 0,
        "total_items": response.total_count,
        "dropped_records": response.dropped_records,
    }
    print(json.dumps(summary))


def _safe_main():
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:
        print(json.dumps({"error": str(exc)}))
        raise SystemExit(1)


if __name__ == "__main__":
    _safe_main()
