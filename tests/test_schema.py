import dataclasses

import pytest

from listing_aggregator.normalize import normalize_address, parse_digits
from listing_aggregator.schema import (
    Address,
    ListingCategory,
    Price,
    Property,
    PropertyCategory,
)


def test_price_rejects_negative_amount():
    with pytest.raises(ValueError):
        Price(amount=-1)
    assert Price(amount=0).for_display() == "$0"
    assert Price(amount=1250000.0, display="$1.25M").for_display() == "$1.25M"


def test_listing_category_parse_is_strict():
    assert ListingCategory.parse("Lease") is ListingCategory.LEASE
    assert ListingCategory.parse(ListingCategory.SALE) is ListingCategory.SALE
    with pytest.raises(ValueError):
        ListingCategory.parse("rental")


def test_property_is_frozen_and_raw_payload_ignored_in_equality():
    base = dict(
        id="x",
        source_dataset="s",
        listing_category=ListingCategory.SALE,
        property_category=PropertyCategory.COMMERCIAL,
        address=Address(city="Miami"),
    )
    a = Property(raw_payload={"v": 1}, **base)
    b = Property(raw_payload={"v": 2}, **base)
    assert a == b
    with pytest.raises(dataclasses.FrozenInstanceError):
        a.id = "y"
    payload = a.to_dict()
    assert payload["listing_category"] == "sale"
    assert payload["address"]["city"] == "Miami"
    assert "raw_payload" not in payload
    assert a.to_dict(include_raw=True)["raw_payload"] == {"v": 1}


def test_parse_digits_and_address_normalization():
    assert parse_digits("12,500 SF") == 12500
    assert parse_digits("n/a") == 0
    assert parse_digits(None) == 0
    assert parse_digits(1500.7) == 1500
    assert normalize_address("  100 Biscayne Blvd., Suite #4 ") == "100 biscayne blvd suite 4"


@pytest.mark.parametrize("amount", [float("nan"), float("inf")])
def test_price_rejects_non_finite_amount(amount):
    with pytest.raises(ValueError):
        Price(amount=amount)
