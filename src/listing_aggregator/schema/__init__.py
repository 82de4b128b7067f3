from .records import (  # noqa: F401
    Address,
    Coordinates,
    ListingCategory,
    Price,
    Property,
    PropertyCategory,
    SizeMetrics,
)

__all__ = [
    "Address",
    "Coordinates",
    "ListingCategory",
    "Price",
    "Property",
    "PropertyCategory",
    "SizeMetrics",
]
