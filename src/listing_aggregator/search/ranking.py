from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from listing_aggregator.catalog import search_location
from listing_aggregator.normalize import normalize_text
from listing_aggregator.schema import Property

from .filters import matches_property_type


# (city match, has images, image count, type match, completeness, price,
# position), most significant first. Every tier is "higher is better" except
# the ingestion position, which breaks ties ascending.
SortKey = Tuple[int, int, int, int, int, float, int]


@dataclass(frozen=True)
class RankingContext:
    location_query: Optional[str] = None
    property_type: Optional[str] = None


def city_match(prop: Property, location_query: Optional[str]) -> int:
    """2 for an exact city match, 1 when one contains the other, else 0."""

    query = search_location(location_query)
    city = normalize_text(prop.address.city)
    if not query or not city:
        return 0
    if city == query:
        return 2
    if query in city or city in query:
        return 1
    return 0


def sort_key(prop: Property, context: RankingContext) -> SortKey:
    image_count = len(prop.images)
    type_match = 0
    if context.property_type and matches_property_type(prop, context.property_type):
        type_match = 1
    # Negated so a plain ascending sort puts the best record first.
    return (
        -city_match(prop, context.location_query),
        -(1 if image_count > 0 else 0),
        -image_count,
        -type_match,
        -prop.completeness_score,
        -prop.price_amount,
        prop.position,
    )


def rank(filtered: Iterable[Property], context: Optional[RankingContext] = None) -> List[Property]:
    context = context or RankingContext()
    return sorted(filtered, key=lambda prop: sort_key(prop, context))
