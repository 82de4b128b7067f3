import re
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import unquote_plus

from listing_aggregator.schema import ListingCategory
from listing_aggregator.sources.base import SourceKind, SourceRef


_SALE = frozenset({"sale"})
_LEASE = frozenset({"lease"})
_BOTH = frozenset({"sale", "lease"})


def _src(path: str, kind: SourceKind, tags=_BOTH) -> dict:
    return {"path": path, "kind": kind, "listing_tags": tags}


_C = SourceKind.COMMERCIAL_EXPORT
_AS = SourceKind.AGGREGATOR_SALE
_AL = SourceKind.AGGREGATOR_LEASE
_R = SourceKind.RESIDENTIAL


_SOURCE_ENTRIES: Dict[str, dict] = {
    # Combined commercial exports covering many cities.
    "commercial_combined": _src("commercial/commercial_dataset_combined.json", _C),
    "commercial_combined_2": _src("commercial/commercial_dataset2.json", _C),
    # City commercial exports.
    "commercial_chicago": _src("commercial/commercial_dataset_chicago.json", _C),
    "commercial_houston": _src("commercial/commercial_dataset_houston.json", _C),
    "commercial_la": _src("commercial/commercial_dataset_la.json", _C),
    "commercial_la_sale": _src("commercial/dataset_los_angeles_sale.json", _C, _SALE),
    "commercial_la_lease": _src("commercial/dataset_los_angeles_lease.json", _C, _LEASE),
    "commercial_ny": _src("commercial/commercial_dataset_ny.json", _C),
    "commercial_manhattan": _src("commercial/dataset_manhattan_ny.json", _C),
    "commercial_miami_sale": _src("commercial/dataset_miami_sale.json", _C, _SALE),
    "commercial_miami_beach": _src("commercial/dataset_miami_beach.json", _C, _SALE),
    "commercial_miami_beach_lease": _src("commercial/dataset_miamibeach_lease.json", _C, _LEASE),
    "commercial_philadelphia": _src("commercial/dataset_philadelphia.json", _C),
    "commercial_philadelphia_sale": _src("commercial/dataset_philadelphia_sale.json", _C, _SALE),
    "commercial_phoenix": _src("commercial/dataset_phoenix.json", _C),
    "commercial_san_antonio_sale": _src("commercial/dataset_san_antonio_sale.json", _C, _SALE),
    "commercial_san_antonio_lease": _src("commercial/dataset_san_antonio_lease.json", _C, _LEASE),
    "commercial_austin_sale": _src("commercial/dataset_austin_sale.json", _C, _SALE),
    "commercial_austin_lease": _src("commercial/dataset_austin_lease.json", _C, _LEASE),
    "commercial_sf_sale": _src("commercial/dataset_sanfrancisco_sale.json", _C, _SALE),
    "commercial_sf_lease": _src("commercial/dataset_sanfrancisco_lease.json", _C, _LEASE),
    # Aggregator exports (sale and lease shapes differ).
    "aggregator_las_vegas_sale": _src("commercial/dataset_las_vegas_sale.json", _AS, _SALE),
    "aggregator_las_vegas_lease": _src("commercial/dataset_lasvegas_lease.json", _AL, _LEASE),
    "aggregator_miami_sale": _src("aggregator/miami_all_sale.json", _AS, _SALE),
    "aggregator_miami_lease": _src("aggregator/miami_all_lease.json", _AL, _LEASE),
    # Residential sale/lease exports.
    "residential_miami_sale": _src("residential/sale/miami_sale.json", _R, _SALE),
    "residential_miami_lease": _src("residential/lease/miami_rental.json", _R, _LEASE),
    "residential_miami_beach_sale": _src("residential/sale/miami_beach_sale.json", _R, _SALE),
    "residential_miami_beach_lease": _src("residential/lease/miami_beach_rental.json", _R, _LEASE),
    "residential_new_york_sale": _src("residential/sale/new_york_sale.json", _R, _SALE),
    "residential_new_york_lease": _src("residential/lease/newyork_rental.json", _R, _LEASE),
    "residential_los_angeles_sale": _src("residential/sale/losangeles_sale.json", _R, _SALE),
    "residential_los_angeles_lease": _src("residential/lease/losangeles_rental.json", _R, _LEASE),
    "residential_las_vegas_sale": _src("residential/sale/las_vegas_sale.json", _R, _SALE),
    "residential_las_vegas_lease": _src("residential/lease/lasvegas_rental.json", _R, _LEASE),
    "residential_chicago_sale": _src("residential/sale/chicago_sale.json", _R, _SALE),
    "residential_chicago_lease": _src("residential/lease/chicago_rental.json", _R, _LEASE),
    "residential_houston_sale": _src("residential/sale/houston_sale.json", _R, _SALE),
    "residential_houston_lease": _src("residential/lease/houston_rental.json", _R, _LEASE),
    "residential_philadelphia_sale": _src("residential/sale/philadelphia_sale.json", _R, _SALE),
    "residential_philadelphia_lease": _src("residential/lease/philadelphia_rental.json", _R, _LEASE),
    "residential_phoenix_sale": _src("residential/sale/phoenix_sale.json", _R, _SALE),
    "residential_phoenix_lease": _src("residential/lease/phoenix_rental.json", _R, _LEASE),
    "residential_san_antonio_sale": _src("residential/sale/san-antonio_sale.json", _R, _SALE),
    "residential_san_antonio_lease": _src("residential/lease/san_antonio_rental.json", _R, _LEASE),
}


DEFAULT_SOURCES: Tuple[str, ...] = ("commercial_combined", "commercial_combined_2")

_GENERAL = DEFAULT_SOURCES


def _city(city: str, *groups: Sequence[str]) -> dict:
    ordered: List[str] = []
    for group in groups:
        for source_id in group:
            if source_id not in ordered:
                ordered.append(source_id)
    return {"city": city, "sources": tuple(ordered)}


# Load order inside an entry is the dedup precedence: general exports, city
# sale, city lease, aggregator, residential.
_CHICAGO = _city(
    "chicago", _GENERAL, ["commercial_chicago"],
    ["residential_chicago_sale", "residential_chicago_lease"],
)
_HOUSTON = _city(
    "houston", _GENERAL, ["commercial_houston"],
    ["residential_houston_sale", "residential_houston_lease"],
)
_LOS_ANGELES = _city(
    "los angeles", _GENERAL, ["commercial_la", "commercial_la_sale", "commercial_la_lease"],
    ["residential_los_angeles_sale", "residential_los_angeles_lease"],
)
_NEW_YORK = _city(
    "new york", _GENERAL, ["commercial_ny", "commercial_manhattan"],
    ["residential_new_york_sale", "residential_new_york_lease"],
)
_MANHATTAN = _city(
    "new york", _GENERAL, ["commercial_manhattan", "commercial_ny"],
    ["residential_new_york_sale", "residential_new_york_lease"],
)
_MIAMI = _city(
    "miami", ["commercial_combined_2"], ["commercial_miami_sale"],
    ["aggregator_miami_sale", "aggregator_miami_lease"],
    ["residential_miami_sale", "residential_miami_lease"],
)
_MIAMI_BEACH = _city(
    "miami beach", ["commercial_combined_2"],
    ["commercial_miami_beach", "commercial_miami_sale", "commercial_miami_beach_lease"],
    ["aggregator_miami_sale", "aggregator_miami_lease"],
    ["residential_miami_beach_sale", "residential_miami_beach_lease"],
)
_PHILADELPHIA = _city(
    "philadelphia", _GENERAL, ["commercial_philadelphia_sale", "commercial_philadelphia"],
    ["residential_philadelphia_sale", "residential_philadelphia_lease"],
)
_PHOENIX = _city(
    "phoenix", _GENERAL, ["commercial_phoenix"],
    ["residential_phoenix_sale", "residential_phoenix_lease"],
)
_SAN_ANTONIO = _city(
    "san antonio", _GENERAL, ["commercial_san_antonio_sale", "commercial_san_antonio_lease"],
    ["residential_san_antonio_sale", "residential_san_antonio_lease"],
)
_LAS_VEGAS = _city(
    "las vegas", _GENERAL, ["aggregator_las_vegas_sale", "aggregator_las_vegas_lease"],
    ["residential_las_vegas_sale", "residential_las_vegas_lease"],
)
_AUSTIN = _city(
    "austin", _GENERAL, ["commercial_austin_sale", "commercial_austin_lease"],
)
_SAN_FRANCISCO = _city(
    "san francisco", _GENERAL, ["commercial_sf_sale", "commercial_sf_lease"],
)


_CITY_ENTRIES: Dict[str, dict] = {
    "chicago": _CHICAGO,
    "houston": _HOUSTON,
    "los angeles": _LOS_ANGELES,
    "la": _LOS_ANGELES,
    "l.a.": _LOS_ANGELES,
    "new york": _NEW_YORK,
    "new york city": _NEW_YORK,
    "nyc": _NEW_YORK,
    "manhattan": _MANHATTAN,
    "brooklyn": _NEW_YORK,
    "miami": _MIAMI,
    "miami beach": _MIAMI_BEACH,
    "south beach": _MIAMI_BEACH,
    "philadelphia": _PHILADELPHIA,
    "philly": _PHILADELPHIA,
    "phoenix": _PHOENIX,
    "san antonio": _SAN_ANTONIO,
    "las vegas": _LAS_VEGAS,
    "vegas": _LAS_VEGAS,
    "austin": _AUSTIN,
    "san francisco": _SAN_FRANCISCO,
    "san fran": _SAN_FRANCISCO,
    "sf": _SAN_FRANCISCO,
}

# Longest key first: "miami beach" must win over "miami", "new york city"
# over "new york". Ties are broken alphabetically so the order is total.
_KEYS_BY_LENGTH: Tuple[str, ...] = tuple(
    sorted(_CITY_ENTRIES.keys(), key=lambda k: (-len(k), k))
)


STATE_ABBREVIATIONS: Dict[str, str] = {
    "al": "alabama", "ak": "alaska", "az": "arizona", "ar": "arkansas",
    "ca": "california", "co": "colorado", "ct": "connecticut", "de": "delaware",
    "fl": "florida", "ga": "georgia", "hi": "hawaii", "id": "idaho",
    "il": "illinois", "in": "indiana", "ia": "iowa", "ks": "kansas",
    "ky": "kentucky", "la": "louisiana", "me": "maine", "md": "maryland",
    "ma": "massachusetts", "mi": "michigan", "mn": "minnesota", "ms": "mississippi",
    "mo": "missouri", "mt": "montana", "ne": "nebraska", "nv": "nevada",
    "nh": "new hampshire", "nj": "new jersey", "nm": "new mexico", "ny": "new york",
    "nc": "north carolina", "nd": "north dakota", "oh": "ohio", "ok": "oklahoma",
    "or": "oregon", "pa": "pennsylvania", "ri": "rhode island", "sc": "south carolina",
    "sd": "south dakota", "tn": "tennessee", "tx": "texas", "ut": "utah",
    "vt": "vermont", "va": "virginia", "wa": "washington", "wv": "west virginia",
    "wi": "wisconsin", "wy": "wyoming", "dc": "district of columbia",
}

_STATE_NAMES = tuple(
    sorted(
        set(STATE_ABBREVIATIONS.keys()) | set(STATE_ABBREVIATIONS.values()),
        key=lambda s: (-len(s), s),
    )
)
_STATE_SUFFIX_RE = re.compile(
    r"^(?P<rest>.*?\S)\s*(?:,\s*|\s+)(?:" + "|".join(re.escape(s) for s in _STATE_NAMES) + r")\.?$"
)
_COMMA_STATE_RE = re.compile(
    r"^(?P<rest>.*?\S)\s*,\s*(?:" + "|".join(re.escape(s) for s in _STATE_NAMES) + r")\.?(?:\s+\d{5}(?:-\d{4})?)?$"
)
_WHITESPACE_RE = re.compile(r"\s+")

# Bare shorthand queries that should filter as the full city name.
LOCATION_ALIASES: Dict[str, str] = {
    "la": "los angeles",
    "l.a.": "los angeles",
    "nyc": "new york",
    "new york city": "new york",
    "philly": "philadelphia",
    "vegas": "las vegas",
    "sf": "san francisco",
    "san fran": "san francisco",
}


def normalize_location_query(query: Optional[str]) -> str:
    """Lowercase, trim, URL-decode and drop a trailing state suffix.

    "Miami%20Beach,%20FL" -> "miami beach"; "new york, new york" -> "new york";
    a bare state ("texas") is kept as is.
    """

    if not query:
        return ""
    text = str(query).strip().lower()
    text = unquote_plus(text)
    text = _WHITESPACE_RE.sub(" ", text).strip().strip(",").strip()
    if text in _STATE_NAMES:
        return text
    match = _COMMA_STATE_RE.match(text) or _STATE_SUFFIX_RE.match(text)
    if match:
        text = match.group("rest").strip().rstrip(",").strip()
    return text


def search_location(query: Optional[str]) -> str:
    """Normalized query with bare shorthand (sf, nyc, vegas...) expanded."""

    normalized = normalize_location_query(query)
    return LOCATION_ALIASES.get(normalized, normalized)


def _word_contains(text: str, key: str) -> bool:
    return re.search(r"(?<![a-z0-9])" + re.escape(key) + r"(?![a-z0-9])", text) is not None


def match_city_key(query: Optional[str]) -> Optional[str]:
    """Return the catalog key a location query routes to, or None."""

    normalized = normalize_location_query(query)
    if not normalized:
        return None
    if normalized in _CITY_ENTRIES:
        return normalized
    for key in _KEYS_BY_LENGTH:
        if _word_contains(normalized, key):
            return key
    return None


def canonical_city(query: Optional[str]) -> Optional[str]:
    key = match_city_key(query)
    if key is None:
        return None
    return _CITY_ENTRIES[key]["city"]


def get_source(source_id: str) -> SourceRef:
    entry = _SOURCE_ENTRIES.get(source_id)
    if entry is None:
        raise KeyError(f"Unknown dataset source: {source_id}")
    return SourceRef(
        id=source_id,
        path=entry["path"],
        kind=entry["kind"],
        listing_tags=entry["listing_tags"],
    )


def all_sources() -> List[SourceRef]:
    return [get_source(source_id) for source_id in sorted(_SOURCE_ENTRIES)]


def _allowed(source: SourceRef, listing_category: Optional[ListingCategory]) -> bool:
    if listing_category is ListingCategory.SALE:
        return "sale" in source.listing_tags
    if listing_category is ListingCategory.LEASE:
        return "lease" in source.listing_tags
    return True


def resolve(
    location_query: Optional[str],
    listing_category: Optional[ListingCategory] = None,
) -> List[SourceRef]:
    """Map a free-text location to the ordered dataset sources to consult.

    Same input always yields the same list in the same order. Same-named
    cities in different states are not told apart.
    """

    key = match_city_key(location_query)
    source_ids = _CITY_ENTRIES[key]["sources"] if key else DEFAULT_SOURCES
    sources = [get_source(source_id) for source_id in source_ids]
    narrowed = [s for s in sources if _allowed(s, listing_category)]
    if not narrowed:
        return [get_source(source_id) for source_id in DEFAULT_SOURCES]
    return narrowed
