from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field


# Bounds stay loose on the way in: a bad value drops that constraint instead of
# failing the whole request.
Bound = Optional[Union[float, str]]


class NumericRangeIn(BaseModel):
    min: Bound = None
    max: Bound = None


class SearchRequestIn(BaseModel):
    location_query: Optional[str] = None
    listing_category: Optional[str] = None
    property_type: Optional[str] = None
    price_range: NumericRangeIn = Field(default_factory=NumericRangeIn)
    size_range: NumericRangeIn = Field(default_factory=NumericRangeIn)
    page: int = 1


class AddressOut(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None


class PriceOut(BaseModel):
    amount: Optional[float] = None
    currency: Optional[str] = None
    display: Optional[str] = None


class SizeOut(BaseModel):
    square_feet: Optional[str] = None
    lot_size: Optional[str] = None
    building_size: Optional[str] = None
    unit_count: Optional[int] = None


class CoordinatesOut(BaseModel):
    latitude: float
    longitude: float


class PropertyOut(BaseModel):
    id: str
    source_dataset: str
    listing_category: str
    property_category: str
    property_type: str = ""
    property_type_detailed: Optional[str] = None
    address: AddressOut = Field(default_factory=AddressOut)
    price: Optional[PriceOut] = None
    size: SizeOut = Field(default_factory=SizeOut)
    images: List[str] = Field(default_factory=list)
    cap_rate: Optional[str] = None
    coordinates: Optional[CoordinatesOut] = None
    description: str = ""
    listing_url: Optional[str] = None
    broker_company: Optional[str] = None
    data_points: List[str] = Field(default_factory=list)
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    year_built: Optional[int] = None
    position: int = 0
    synthetic_id: bool = False
    completeness_score: int = 0


class SourceStatus(BaseModel):
    source: str
    kind: str
    provider: Optional[str] = None
    status: str
    items_found: int = 0
    dropped_records: int = 0
    elapsed_ms: int = 0
    error: Optional[str] = None


class SearchResponseOut(BaseModel):
    total_count: int
    page: int
    page_size: int
    total_pages: int
    page_items: List[PropertyOut] = Field(default_factory=list)
    sources: List[SourceStatus] = Field(default_factory=list)
    dropped_records: int = 0


class SourceRefOut(BaseModel):
    id: str
    path: str
    kind: str
    listing_tags: List[str] = Field(default_factory=list)


class ResolveResponseOut(BaseModel):
    location: Optional[str] = None
    normalized: str = ""
    city: Optional[str] = None
    sources: List[SourceRefOut] = Field(default_factory=list)
