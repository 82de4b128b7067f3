"""Turn raw dataset records into canonical Property values."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from listing_aggregator.errors import MalformedRecord
from listing_aggregator.schema import ListingCategory, Property
from listing_aggregator.sources.base import RawBatch, SourceKind

from .adapters import (
    adapt_aggregator_lease,
    adapt_aggregator_sale,
    adapt_commercial_export,
    adapt_residential,
)
from .categories import category_from_tags, classify_listing_category
from .completeness import clean_address, completeness_score
from .fields import first_non_null


logger = logging.getLogger("listings.normalize")


@dataclass(frozen=True)
class NormalizationFailure:
    source_id: str
    position: int
    reason: str


Adapter = Callable[[Mapping[str, Any], ListingCategory], Dict[str, Any]]

ADAPTERS: Dict[SourceKind, Adapter] = {
    SourceKind.COMMERCIAL_EXPORT: adapt_commercial_export,
    SourceKind.AGGREGATOR_SALE: adapt_aggregator_sale,
    SourceKind.AGGREGATOR_LEASE: adapt_aggregator_lease,
    SourceKind.RESIDENTIAL: adapt_residential,
}


def normalize(
    raw: Any,
    source_kind: SourceKind,
    *,
    source_id: str,
    position: int = 0,
    listing_tags: Optional[FrozenSet[str]] = None,
) -> Union[Property, NormalizationFailure]:
    """Normalize one raw record; never raises for bad data.

    `listing_tags` is the catalog's sale/lease tag of the source, used when the
    record itself does not say what kind of listing it is.
    """

    if not isinstance(raw, Mapping):
        return NormalizationFailure(source_id, position, "record is not an object")
    adapter = ADAPTERS.get(source_kind)
    if adapter is None:
        return NormalizationFailure(source_id, position, f"no adapter for {source_kind}")
    default_category = category_from_tags(listing_tags or frozenset())
    try:
        fields = adapter(raw, default_category)
    except MalformedRecord as exc:
        return NormalizationFailure(source_id, position, str(exc))
    except (ValueError, TypeError, OverflowError) as exc:
        logger.debug("unusable value in %s record %d: %s", source_id, position, exc)
        return NormalizationFailure(source_id, position, f"unusable value: {exc}")

    if not fields.get("id"):
        fields["id"] = f"{source_id}-{position}"
        fields["synthetic_id"] = True
    address = fields["address"]
    size = fields["size"]
    fields["completeness_score"] = completeness_score(
        image_count=len(fields.get("images") or ()),
        has_price=fields.get("price") is not None and fields["price"].amount is not None,
        street=address.street,
        city=address.city,
        state=address.state,
        property_type=first_non_null(fields.get("property_type"), fields.get("property_type_detailed")),
        square_feet=size.square_feet,
        description=fields.get("description"),
        data_points=fields.get("data_points") or (),
    )
    return Property(
        source_dataset=source_id,
        property_category=source_kind.property_category,
        position=position,
        raw_payload=dict(raw),
        **fields,
    )


def normalize_batch(batch: RawBatch) -> Tuple[List[Property], List[NormalizationFailure]]:
    properties: List[Property] = []
    failures: List[NormalizationFailure] = []
    for position, raw in enumerate(batch.records):
        result = normalize(
            raw,
            batch.kind,
            source_id=batch.source.id,
            position=position,
            listing_tags=batch.source.listing_tags,
        )
        if isinstance(result, NormalizationFailure):
            failures.append(result)
        else:
            properties.append(result)
    if failures:
        logger.debug(
            "dropped %d malformed record(s) from %s", len(failures), batch.source.id
        )
    return properties, failures


__all__ = [
    "ADAPTERS",
    "NormalizationFailure",
    "classify_listing_category",
    "clean_address",
    "completeness_score",
    "normalize",
    "normalize_batch",
]
