"""Filtering, ranking and pagination over a normalized pool."""

from .filters import FilterSpec, NumericRange, build_filter_spec, filter_properties, parse_range
from .paginate import DEFAULT_PAGE_SIZE, Page, paginate
from .ranking import RankingContext, city_match, rank, sort_key

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "FilterSpec",
    "NumericRange",
    "Page",
    "RankingContext",
    "build_filter_spec",
    "city_match",
    "filter_properties",
    "paginate",
    "parse_range",
    "rank",
    "sort_key",
]
