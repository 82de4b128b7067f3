from __future__ import annotations

import re
from typing import Any, Callable, List, Optional, Tuple

from listing_aggregator.schema import ListingCategory


Rule = Tuple[str, Callable[[str], bool], ListingCategory]


def _word(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)
    return lambda text: compiled.search(text) is not None


# Order matters: first match wins. "Auction - For Sale" is an auction,
# "Sale-Leaseback" reads as a lease.
LISTING_CATEGORY_RULES: List[Rule] = [
    ("auction", _word(r"auction"), ListingCategory.AUCTION),
    ("lease", _word(r"lease|rent"), ListingCategory.LEASE),
    ("sale", _word(r"sale"), ListingCategory.SALE),
]


def classify_listing_category(text: Any, is_auction: Optional[bool] = None) -> ListingCategory:
    """Map a free-text listing type ("For Sale", "For Lease", ...) to a category."""

    if is_auction is True:
        return ListingCategory.AUCTION
    if text is None:
        return ListingCategory.UNKNOWN
    lowered = str(text).strip().lower()
    if not lowered:
        return ListingCategory.UNKNOWN
    for _name, matches, category in LISTING_CATEGORY_RULES:
        if matches(lowered):
            return category
    return ListingCategory.UNKNOWN


def category_from_tags(tags) -> ListingCategory:
    """Category for sources whose listing type is fixed by the catalog entry."""

    if tags == frozenset({"sale"}):
        return ListingCategory.SALE
    if tags == frozenset({"lease"}):
        return ListingCategory.LEASE
    return ListingCategory.UNKNOWN
