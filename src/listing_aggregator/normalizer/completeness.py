from __future__ import annotations

import re
from typing import Optional, Sequence


# Marketing text some exports glue onto the street line, e.g.
# "100 Main St 52,030 SF Office Available" or "9 Elm Ave 47 Unit Multifamily".
_ADDRESS_NOISE = (
    re.compile(r"\s+\d[\d,.]*\s*(?:sf|sq\.?\s*ft\.?)\b.*$", re.IGNORECASE),
    re.compile(r"\s+\d+\s+units?\b.*$", re.IGNORECASE),
    re.compile(r"\s+\d[\d,.]*\s*(?:ac|acres?)\b.*$", re.IGNORECASE),
)

WEIGHTS = {
    "has_image": 30,
    "more_than_3_images": 10,
    "more_than_10_images": 10,
    "price": 15,
    "street": 10,
    "city": 3,
    "state": 2,
    "property_type": 5,
    "square_feet": 5,
    "description": 5,
    "data_points": 5,
}


def clean_address(street: Optional[str]) -> str:
    if not street:
        return ""
    text = str(street).strip()
    for pattern in _ADDRESS_NOISE:
        text = pattern.sub("", text)
    return text.strip()


def completeness_score(
    *,
    image_count: int,
    has_price: bool,
    street: Optional[str],
    city: Optional[str],
    state: Optional[str],
    property_type: Optional[str],
    square_feet: Optional[str],
    description: Optional[str],
    data_points: Sequence[str] = (),
) -> int:
    score = 0
    if image_count > 0:
        score += WEIGHTS["has_image"]
    if image_count > 3:
        score += WEIGHTS["more_than_3_images"]
    if image_count > 10:
        score += WEIGHTS["more_than_10_images"]
    if has_price:
        score += WEIGHTS["price"]
    if len(clean_address(street)) > 10:
        score += WEIGHTS["street"]
    if city:
        score += WEIGHTS["city"]
    if state:
        score += WEIGHTS["state"]
    if property_type:
        score += WEIGHTS["property_type"]
    if square_feet:
        score += WEIGHTS["square_feet"]
    if description and len(description.strip()) > 20:
        score += WEIGHTS["description"]
    if data_points:
        score += WEIGHTS["data_points"]
    return score
