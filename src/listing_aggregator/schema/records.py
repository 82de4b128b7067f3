from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ListingCategory(str, Enum):
    SALE = "sale"
    LEASE = "lease"
    AUCTION = "auction"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "ListingCategory":
        """Strict parse of a category name ("sale", "Lease", ...).

        Raises ValueError for anything that is not one of the four names.
        """

        if isinstance(value, ListingCategory):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"Unknown listing category: {value!r}")


class PropertyCategory(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


@dataclass(frozen=True)
class Address:
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None

    def is_empty(self) -> bool:
        return not any((self.street, self.city, self.state, self.zip))


@dataclass(frozen=True)
class Price:
    amount: Optional[float] = None
    currency: Optional[str] = None
    display: Optional[str] = None

    def __post_init__(self) -> None:
        if self.amount is None:
            return
        if not math.isfinite(self.amount):
            raise ValueError("price amount must be a finite number")
        if self.amount < 0:
            raise ValueError("price amount must be >= 0")

    def is_empty(self) -> bool:
        return self.amount is None and not self.display

    def for_display(self) -> Optional[str]:
        if self.display:
            return self.display
        if self.amount is None:
            return None
        return f"${self.amount:,.0f}"


@dataclass(frozen=True)
class SizeMetrics:
    square_feet: Optional[str] = None
    lot_size: Optional[str] = None
    building_size: Optional[str] = None
    unit_count: Optional[int] = None


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Property:
    """Canonical, source-agnostic listing.

    Built once by the normalizer and never mutated afterwards. `raw_payload` is
    carried for detail views only and takes no part in equality. `synthetic_id`
    marks an id made up from the source and position because the record had none.
    """

    id: str
    source_dataset: str
    listing_category: ListingCategory
    property_category: PropertyCategory
    property_type: str = ""
    property_type_detailed: Optional[str] = None
    address: Address = field(default_factory=Address)
    price: Optional[Price] = None
    size: SizeMetrics = field(default_factory=SizeMetrics)
    images: Tuple[str, ...] = ()
    cap_rate: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    description: str = ""
    listing_url: Optional[str] = None
    broker_company: Optional[str] = None
    data_points: Tuple[str, ...] = ()
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    year_built: Optional[int] = None
    position: int = 0
    synthetic_id: bool = False
    completeness_score: int = 0
    raw_payload: Any = field(default=None, compare=False, repr=False)

    @property
    def price_amount(self) -> float:
        if self.price is None or self.price.amount is None:
            return 0.0
        return float(self.price.amount)

    def to_dict(self, include_raw: bool = False) -> Dict[str, Any]:
        payload = asdict(self)
        payload.pop("raw_payload", None)
        payload["listing_category"] = self.listing_category.value
        payload["property_category"] = self.property_category.value
        payload["images"] = list(self.images)
        payload["data_points"] = list(self.data_points)
        if include_raw:
            payload["raw_payload"] = self.raw_payload
        return payload
