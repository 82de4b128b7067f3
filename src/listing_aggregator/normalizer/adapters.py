"""One adapter per dataset shape.

Adapters read a raw mapping and return the keyword arguments for `Property`
(minus the bits the dispatcher fills in). They raise `MalformedRecord` when a
record carries nothing that identifies a listing.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from listing_aggregator.errors import MalformedRecord
from listing_aggregator.normalize import clean_text, parse_digits
from listing_aggregator.schema import ListingCategory, Price

from .categories import classify_listing_category
from .fields import (
    as_mapping,
    extract_address,
    extract_coordinates,
    extract_images,
    extract_price,
    extract_size,
    first_non_null,
    text_list,
)


def _opt_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return None
    return clean_text(value) or None


def _opt_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _opt_int(value: Any) -> Optional[int]:
    number = _opt_float(value)
    return int(number) if number is not None else None


def _require_identity(raw_id: Any, fields: Dict[str, Any]) -> None:
    address = fields["address"]
    if (
        _opt_text(raw_id) is None
        and address.is_empty()
        and fields["price"] is None
        and not fields["property_type"]
    ):
        raise MalformedRecord("record has no id, address, price or type")


def _aggregator_images(raw: Mapping[str, Any]):
    media = raw.get("media")
    media_urls = []
    if isinstance(media, list):
        for item in media:
            if isinstance(item, Mapping) and str(item.get("type") or "Image").lower() == "image":
                media_urls.append(item)
    return extract_images(media_urls, raw.get("thumbnailUrl"), raw.get("images"))


def _types(raw: Mapping[str, Any]):
    types = text_list(raw.get("types"))
    if not types:
        single = _opt_text(first_non_null(raw.get("type"), raw.get("propertyType")))
        types = (single,) if single else ()
    primary = types[0] if types else ""
    detailed = ", ".join(types[1:]) or _opt_text(raw.get("subtype"))
    return primary, detailed


def adapt_commercial_export(raw: Mapping[str, Any], default_category: ListingCategory) -> Dict[str, Any]:
    price_field = raw.get("price")
    numeric_price = price_field if isinstance(price_field, (int, float)) else None
    text_price = price_field if isinstance(price_field, str) else None
    category = classify_listing_category(raw.get("listingType"), raw.get("isAuction"))
    if category is ListingCategory.UNKNOWN:
        category = default_category
    coords = as_mapping(raw.get("coordinates"))
    fields = {
        "address": extract_address(street=raw.get("address"), flat=raw),
        "listing_category": category,
        "property_type": _opt_text(raw.get("propertyType")) or "",
        "property_type_detailed": _opt_text(
            first_non_null(raw.get("propertyTypeDetailed"), raw.get("subType"))
        ),
        "price": extract_price(
            numeric=(raw.get("priceNumeric"), numeric_price),
            text=(text_price, raw.get("priceText")),
            currency=raw.get("priceCurrency"),
        ),
        "size": extract_size(
            square_feet=(raw.get("squareFootage"), raw.get("buildingSize")),
            lot_size=raw.get("lotSize"),
            building_size=raw.get("buildingSize"),
            unit_count=raw.get("numberOfUnits"),
        ),
        "images": extract_images(
            raw.get("images"), raw.get("primaryImage"), raw.get("imageUrl"), raw.get("thumbnailUrl")
        ),
        "cap_rate": _opt_text(raw.get("capRate")),
        "coordinates": extract_coordinates(
            (raw.get("latitude"), raw.get("longitude")),
            (raw.get("lat"), first_non_null(raw.get("lng"), raw.get("lon"))),
            (coords.get("latitude"), coords.get("longitude")),
        ),
        "description": clean_text(raw.get("description")),
        "listing_url": _opt_text(first_non_null(raw.get("listingUrl"), raw.get("url"))),
        "broker_company": _opt_text(raw.get("brokerCompany")),
        "data_points": text_list(raw.get("dataPoints")),
    }
    raw_id = first_non_null(raw.get("propertyId"), raw.get("id"))
    _require_identity(raw_id, fields)
    fields["id"] = _opt_text(raw_id)
    return fields


def adapt_aggregator_sale(raw: Mapping[str, Any], default_category: ListingCategory) -> Dict[str, Any]:
    locations = raw.get("locations")
    location = locations[0] if isinstance(locations, list) and locations else raw.get("location")
    loc = as_mapping(location)
    primary, detailed = _types(raw)
    category = ListingCategory.AUCTION if raw.get("isAuction") is True else default_category
    fields = {
        "address": extract_address(location=loc, flat=raw),
        "listing_category": category,
        "property_type": primary,
        "property_type_detailed": detailed,
        "price": extract_price(numeric=(raw.get("askingPrice"),), text=(raw.get("priceText"),)),
        "size": extract_size(
            square_feet=(raw.get("squareFootage"), raw.get("buildingSize")),
            lot_size=first_non_null(raw.get("lotSize"), raw.get("lotSizeAcres")),
            unit_count=raw.get("numberOfUnits"),
        ),
        "images": _aggregator_images(raw),
        "cap_rate": _opt_text(raw.get("capRate")),
        "coordinates": extract_coordinates((loc.get("latitude"), loc.get("longitude"))),
        "description": clean_text(first_non_null(raw.get("description"), raw.get("name"))),
        "listing_url": _opt_text(raw.get("url")),
        "broker_company": _opt_text(raw.get("brokerageName")),
    }
    raw_id = _opt_text(raw.get("id"))
    _require_identity(raw_id, fields)
    fields["id"] = f"agg-sale-{raw_id}" if raw_id else None
    return fields


def _fmt_amount(value: float) -> str:
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def _range_display(low: Optional[float], high: Optional[float], suffix: str) -> Optional[str]:
    if low is None and high is None:
        return None
    if low is None or high is None or low == high:
        value = low if low is not None else high
        return f"${_fmt_amount(value)}{suffix}"
    return f"${_fmt_amount(low)} - ${_fmt_amount(high)}{suffix}"


def _lease_price(raw: Mapping[str, Any]) -> Optional[Price]:
    yearly_min = _opt_float(raw.get("rateYearlyMin"))
    yearly_max = _opt_float(raw.get("rateYearlyMax"))
    if yearly_min is not None and yearly_min < 0:
        yearly_min = None
    if yearly_max is not None and yearly_max < 0:
        yearly_max = None
    if yearly_min is not None or yearly_max is not None:
        amount = yearly_min if yearly_min is not None else yearly_max
        return Price(amount=amount, display=_range_display(yearly_min, yearly_max, "/SF/yr"))
    monthly = raw.get("rateMonthly")
    if _opt_text(monthly):
        price = extract_price(text=(monthly,))
        if price is not None:
            return price
    rent_min = _opt_float(raw.get("rentMin"))
    rent_max = _opt_float(raw.get("rentMax"))
    if rent_min is not None and rent_min < 0:
        rent_min = None
    if rent_max is not None and rent_max < 0:
        rent_max = None
    if rent_min is not None or rent_max is not None:
        amount = rent_min if rent_min is not None else rent_max
        return Price(amount=amount, display=_range_display(rent_min, rent_max, "/mo"))
    return None


def _sqft_range(raw: Mapping[str, Any]):
    low = parse_digits(raw.get("rentableSqftMin")) or None
    high = parse_digits(raw.get("rentableSqftMax")) or None
    if low is None and high is None:
        return None, None
    primary = low if low is not None else high
    if low is not None and high is not None and low != high:
        return str(primary), f"{low:,} - {high:,}"
    return str(primary), None


def adapt_aggregator_lease(raw: Mapping[str, Any], default_category: ListingCategory) -> Dict[str, Any]:
    loc = as_mapping(raw.get("location"))
    if not loc:
        locations = raw.get("locations")
        loc = as_mapping(locations[0]) if isinstance(locations, list) and locations else {}
    primary, detailed = _types(raw)
    square_feet, building_size = _sqft_range(raw)
    fields = {
        "address": extract_address(location=loc, flat=raw),
        "listing_category": default_category
        if default_category is not ListingCategory.UNKNOWN
        else ListingCategory.LEASE,
        "property_type": primary,
        "property_type_detailed": detailed,
        "price": _lease_price(raw),
        "size": extract_size(
            square_feet=(square_feet, raw.get("squareFootage")),
            building_size=building_size,
            unit_count=raw.get("numberOfSuites"),
        ),
        "images": _aggregator_images(raw),
        "coordinates": extract_coordinates((loc.get("latitude"), loc.get("longitude"))),
        "description": clean_text(first_non_null(raw.get("description"), raw.get("name"))),
        "listing_url": _opt_text(raw.get("url")),
        "broker_company": _opt_text(raw.get("brokerageName")),
    }
    raw_id = _opt_text(raw.get("id"))
    _require_identity(raw_id, fields)
    fields["id"] = f"agg-lease-{raw_id}" if raw_id else None
    return fields


def adapt_residential(raw: Mapping[str, Any], default_category: ListingCategory) -> Dict[str, Any]:
    category = default_category
    if category is ListingCategory.UNKNOWN:
        category = classify_listing_category(first_non_null(raw.get("status"), raw.get("homeStatus")))
    price_field = raw.get("price")
    price = extract_price(
        numeric=(
            raw.get("listPrice"),
            price_field if isinstance(price_field, (int, float)) else None,
            raw.get("unformattedPrice"),
        ),
        text=(price_field if isinstance(price_field, str) else None,),
        history=first_non_null(raw.get("priceHistory"), raw.get("history")),
        display=raw.get("price_display"),
    )
    if price is None:
        price = extract_price(numeric=(raw.get("lastSoldPrice"),))
    coords = as_mapping(raw.get("coordinates"))
    fields = {
        "address": extract_address(street=raw.get("address"), flat=raw),
        "listing_category": category,
        "property_type": _opt_text(
            first_non_null(raw.get("property_type"), raw.get("propertyType"), raw.get("homeType"))
        )
        or "",
        "price": price,
        "size": extract_size(
            square_feet=(raw.get("sqft"), raw.get("livingArea")),
            lot_size=first_non_null(raw.get("lot_sqft"), raw.get("lotAreaValue")),
        ),
        "images": extract_images(raw.get("photos"), raw.get("images"), raw.get("imgSrc")),
        "coordinates": extract_coordinates(
            (coords.get("latitude"), coords.get("longitude")),
            (raw.get("latitude"), raw.get("longitude")),
        ),
        "description": clean_text(first_non_null(raw.get("listingDescription"), raw.get("description"))),
        "listing_url": _opt_text(first_non_null(raw.get("url"), raw.get("detailUrl"))),
        "broker_company": _opt_text(raw.get("brokerName")),
        "bedrooms": _opt_float(first_non_null(raw.get("beds"), raw.get("bedrooms"))),
        "bathrooms": _opt_float(first_non_null(raw.get("baths"), raw.get("bathrooms"))),
        "year_built": _opt_int(first_non_null(raw.get("year_built"), raw.get("yearBuilt"))),
    }
    raw_id = first_non_null(raw.get("zpid"), raw.get("id"))
    _require_identity(raw_id, fields)
    fields["id"] = _opt_text(raw_id)
    return fields
