from typing import Iterable, List, Set

from listing_aggregator.normalize import normalize_address, normalize_text
from listing_aggregator.schema import Property


def dedup_key(prop: Property) -> str:
    """Stable identity of a listing: its source id, else its street/city/state.

    A made-up id only stands in when the record has no address either.
    """

    prop_id = (prop.id or "").strip()
    address = prop.address
    if prop_id and (not prop.synthetic_id or address.is_empty()):
        return prop_id
    street = normalize_address(address.street)
    city = normalize_text(address.city)
    state = normalize_text(address.state)
    return f"addr:{street}|{city}|{state}"


def dedup(pool: Iterable[Property]) -> List[Property]:
    """Drop repeats; the first occurrence in pool order is the one kept."""

    seen: Set[str] = set()
    kept: List[Property] = []
    for prop in pool:
        key = dedup_key(prop)
        if key in seen:
            continue
        seen.add(key)
        kept.append(prop)
    return kept
