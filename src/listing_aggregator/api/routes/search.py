from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from listing_aggregator.api.schemas import (
    ResolveResponseOut,
    SearchRequestIn,
    SearchResponseOut,
)
from listing_aggregator.catalog import canonical_city, normalize_location_query, resolve
from listing_aggregator.pipeline import SearchRequest, SearchService
from listing_aggregator.search import build_filter_spec


router = APIRouter(tags=["search"])


def get_search_service() -> SearchService:
    return SearchService()


def _to_request(payload: SearchRequestIn) -> SearchRequest:
    return SearchRequest(
        location_query=payload.location_query,
        listing_category=payload.listing_category,
        property_type=payload.property_type,
        min_price=payload.price_range.min,
        max_price=payload.price_range.max,
        min_size=payload.size_range.min,
        max_size=payload.size_range.max,
        page=payload.page,
    )


@router.post("/search", response_model=SearchResponseOut)
async def search(
    payload: SearchRequestIn,
    service: SearchService = Depends(get_search_service),
) -> dict:
    response = await service.asearch(_to_request(payload))
    return response.to_dict()


@router.get("/search", response_model=SearchResponseOut)
async def search_get(
    location: Optional[str] = None,
    listing_type: Optional[str] = None,
    property_type: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
    min_sqft: Optional[str] = None,
    max_sqft: Optional[str] = None,
    page: int = 1,
    service: SearchService = Depends(get_search_service),
) -> dict:
    request = SearchRequest(
        location_query=location,
        listing_category=listing_type,
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        min_size=min_sqft,
        max_size=max_sqft,
        page=page,
    )
    response = await service.asearch(request)
    return response.to_dict()


@router.get("/sources/resolve", response_model=ResolveResponseOut)
def resolve_sources(location: str = "", listing_type: Optional[str] = None) -> dict:
    spec = build_filter_spec(listing_category=listing_type)
    sources = resolve(location, spec.listing_category)
    return {
        "location": location or None,
        "normalized": normalize_location_query(location),
        "city": canonical_city(location),
        "sources": [source.to_dict() for source in sources],
    }
