from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from listing_aggregator.catalog import search_location
from listing_aggregator.errors import InvalidFilterInput
from listing_aggregator.normalize import normalize_text, parse_digits
from listing_aggregator.schema import ListingCategory, Property


logger = logging.getLogger("listings.filters")


@dataclass(frozen=True)
class NumericRange:
    min: Optional[float] = None
    max: Optional[float] = None

    def is_active(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class FilterSpec:
    listing_category: Optional[ListingCategory] = None
    location_query: Optional[str] = None
    property_type: Optional[str] = None
    price_range: Optional[NumericRange] = None
    size_range: Optional[NumericRange] = None


def _bound(value: Any, label: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidFilterInput(f"{label} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").lstrip("$")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError as exc:
            raise InvalidFilterInput(f"{label} must be a number, got {value!r}") from exc
    if number != number or number < 0:
        raise InvalidFilterInput(f"{label} must be a non-negative number")
    return number


def parse_range(low: Any, high: Any, label: str) -> Optional[NumericRange]:
    """Strict range parse; raises InvalidFilterInput on bad bounds."""

    min_value = _bound(low, f"min {label}")
    max_value = _bound(high, f"max {label}")
    if min_value is not None and max_value is not None and min_value > max_value:
        raise InvalidFilterInput(f"min {label} is greater than max {label}")
    rng = NumericRange(min_value, max_value)
    return rng if rng.is_active() else None


def _lenient_range(low: Any, high: Any, label: str) -> Optional[NumericRange]:
    try:
        return parse_range(low, high, label)
    except InvalidFilterInput as exc:
        logger.warning("ignoring %s filter: %s", label, exc)
        return None


def _lenient_category(value: Any) -> Optional[ListingCategory]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return ListingCategory.parse(value)
    except ValueError:
        logger.warning("ignoring listing category filter: unknown value %r", value)
        return None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_filter_spec(
    listing_category: Any = None,
    location_query: Any = None,
    property_type: Any = None,
    min_price: Any = None,
    max_price: Any = None,
    min_size: Any = None,
    max_size: Any = None,
) -> FilterSpec:
    """Build a FilterSpec from loose user input.

    Invalid constraints are dropped with a warning rather than failing the query.
    """

    return FilterSpec(
        listing_category=_lenient_category(listing_category),
        location_query=_opt_str(location_query),
        property_type=_opt_str(property_type),
        price_range=_lenient_range(min_price, max_price, "price"),
        size_range=_lenient_range(min_size, max_size, "size"),
    )


def matches_listing_category(prop: Property, category: ListingCategory) -> bool:
    return prop.listing_category is category


def matches_location(prop: Property, location_query: str) -> bool:
    query = search_location(location_query)
    if not query:
        return True
    address = prop.address
    city = normalize_text(address.city)
    if city and (city == query or query in city or city in query):
        return True
    for value in (address.street, address.zip, address.state, prop.description):
        if query in normalize_text(value):
            return True
    return False


def matches_property_type(prop: Property, property_type: str) -> bool:
    wanted = normalize_text(property_type)
    if not wanted:
        return True
    actual = normalize_text(prop.property_type) or normalize_text(prop.property_type_detailed)
    return wanted in actual


def price_value(prop: Property) -> float:
    # Missing price counts as 0, so a max-price filter keeps unpriced listings.
    return prop.price_amount


def size_value(prop: Property) -> int:
    return parse_digits(prop.size.square_feet)


def matches_price(prop: Property, price_range: NumericRange) -> bool:
    return price_range.contains(price_value(prop))


def matches_size(prop: Property, size_range: NumericRange) -> bool:
    return size_range.contains(size_value(prop))


def active_predicates(spec: FilterSpec) -> Dict[str, Callable[[Property], bool]]:
    predicates: Dict[str, Callable[[Property], bool]] = {}
    if spec.listing_category is not None:
        category = spec.listing_category
        predicates["listing_category"] = lambda p: matches_listing_category(p, category)
    if spec.location_query and search_location(spec.location_query):
        location = spec.location_query
        predicates["location"] = lambda p: matches_location(p, location)
    if spec.property_type:
        property_type = spec.property_type
        predicates["property_type"] = lambda p: matches_property_type(p, property_type)
    if spec.price_range is not None and spec.price_range.is_active():
        price_range = spec.price_range
        predicates["price"] = lambda p: matches_price(p, price_range)
    if spec.size_range is not None and spec.size_range.is_active():
        size_range = spec.size_range
        predicates["size"] = lambda p: matches_size(p, size_range)
    return predicates


def filter_properties(pool: Iterable[Property], spec: FilterSpec) -> List[Property]:
    """Keep the properties that satisfy every active predicate, in pool order."""

    predicates = list(active_predicates(spec).values())
    return [prop for prop in pool if all(check(prop) for check in predicates)]
