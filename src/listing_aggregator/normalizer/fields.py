"""Per-field fallback chains shared by the source adapters.

Every extractor takes already-selected candidates in priority order and keeps
the first one that yields a usable value. Nothing here raises on odd input.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from listing_aggregator.normalize import clean_text, parse_digits
from listing_aggregator.schema import Address, Coordinates, Price, SizeMetrics


_MONEY_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
_IMAGE_KEYS = ("url", "imageUrl", "href", "src")


def first_non_null(*candidates: Any) -> Any:
    """Return the first candidate that is not None and not blank."""

    for value in candidates:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return None
    text = clean_text(value)
    return text or None


def _state_text(value: Any) -> Optional[str]:
    # Some exports nest the state as {"code": "FL", "name": "Florida"}.
    if isinstance(value, Mapping):
        return _text(first_non_null(value.get("code"), value.get("name")))
    return _text(value)


def extract_address(
    street: Any = None,
    location: Any = None,
    flat: Any = None,
) -> Address:
    """Build an Address from a string, a nested location object and flat fields.

    Each subfield is resolved independently; the first source that has it wins.
    """

    loc = as_mapping(location)
    top = as_mapping(flat)
    street_text = _text(street) if not isinstance(street, Mapping) else None
    nested_street = as_mapping(street)
    return Address(
        street=_text(
            first_non_null(
                street_text,
                nested_street.get("street"),
                nested_street.get("streetAddress"),
                loc.get("address"),
                loc.get("street"),
                loc.get("streetAddress"),
                top.get("address") if not isinstance(top.get("address"), Mapping) else None,
                top.get("streetAddress"),
            )
        ),
        city=_text(
            first_non_null(
                nested_street.get("locality"),
                nested_street.get("city"),
                loc.get("city"),
                top.get("city"),
            )
        ),
        state=_state_text(
            first_non_null(
                nested_street.get("region"),
                nested_street.get("state"),
                loc.get("state"),
                loc.get("stateCode"),
                top.get("state"),
            )
        ),
        zip=_text(
            first_non_null(
                nested_street.get("postalCode"),
                nested_street.get("zipcode"),
                loc.get("zip"),
                loc.get("zipCode"),
                loc.get("postalCode"),
                top.get("zip"),
                top.get("zipcode"),
                top.get("zipCode"),
            )
        ),
        country=_text(first_non_null(loc.get("country"), top.get("country"))),
    )


def parse_money(value: Any) -> Optional[float]:
    """Numeric amount of a price field; None when missing, unparseable or negative."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            amount = float(value)
        except OverflowError:
            return None
        return amount if math.isfinite(amount) and amount >= 0 else None
    text = str(value).strip()
    if not text or text.startswith("-"):
        return None
    match = _MONEY_RE.search(text)
    if not match:
        return None
    digits = match.group(0).replace(",", "")
    try:
        amount = float(digits)
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


def _history_timestamp(event: Mapping[str, Any]) -> Tuple[int, str]:
    stamp = first_non_null(event.get("time"), event.get("date"))
    if isinstance(stamp, (int, float)) and not isinstance(stamp, bool):
        return (1, f"{float(stamp):020.3f}")
    return (0, str(stamp or ""))


def price_from_history(history: Any) -> Optional[float]:
    """Price of the most recent "listed" event in a transaction history.

    Events carry a date/time when the export has one; without it the list order
    is kept and the earliest entry is taken as the most recent.
    """

    if not isinstance(history, (list, tuple)):
        return None
    listed: List[Tuple[Tuple[int, str], int, float]] = []
    for index, event in enumerate(history):
        if not isinstance(event, Mapping):
            continue
        label = str(first_non_null(event.get("event"), event.get("eventDescription"), "") or "")
        if "listed" not in label.lower():
            continue
        amount = parse_money(event.get("price"))
        if amount is None:
            continue
        listed.append((_history_timestamp(event), -index, amount))
    if not listed:
        return None
    listed.sort(key=lambda item: (item[0], item[1]))
    return listed[-1][2]


def extract_price(
    numeric: Sequence[Any] = (),
    text: Sequence[Any] = (),
    history: Any = None,
    display: Any = None,
    currency: Any = None,
) -> Optional[Price]:
    """Price from numeric fields, then text fields, then the listing history.

    Returns None when no amount can be found and there is no display string.
    """

    amount: Optional[float] = None
    for candidate in numeric:
        if candidate is None or isinstance(candidate, bool):
            continue
        parsed = parse_money(candidate)
        if parsed is not None:
            amount = parsed
            break
    if amount is None:
        for candidate in text:
            parsed = parse_money(candidate)
            if parsed is not None:
                amount = parsed
                break
    if amount is None:
        amount = price_from_history(history)
    display_text = _text(display)
    if display_text is None:
        for candidate in text:
            if isinstance(candidate, str) and _text(candidate):
                display_text = _text(candidate)
                break
    if amount is None and display_text is None:
        return None
    return Price(amount=amount, currency=_text(currency), display=display_text)


def is_absolute_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    text = value.strip().lower()
    return text.startswith("http://") or text.startswith("https://")


def _image_url(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, Mapping):
        for key in _IMAGE_KEYS:
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def extract_images(*candidates: Any) -> Tuple[str, ...]:
    """Collect absolute image URLs from lists of strings/objects or single fields.

    Candidates are tried in order; the first one that yields at least one
    usable URL wins. Non-absolute values are dropped silently.
    """

    for candidate in candidates:
        if candidate is None:
            continue
        items: Iterable[Any]
        if isinstance(candidate, (list, tuple)):
            items = candidate
        else:
            items = (candidate,)
        urls: List[str] = []
        for item in items:
            url = _image_url(item)
            if url and is_absolute_url(url) and url not in urls:
                urls.append(url)
        if urls:
            return tuple(urls)
    return ()


def _size_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return _text(value)


def extract_size(
    square_feet: Sequence[Any] = (),
    lot_size: Any = None,
    building_size: Any = None,
    unit_count: Any = None,
) -> SizeMetrics:
    units = parse_digits(unit_count) if unit_count is not None else 0
    return SizeMetrics(
        square_feet=_size_text(first_non_null(*square_feet)) if square_feet else None,
        lot_size=_size_text(lot_size),
        building_size=_size_text(building_size),
        unit_count=units or None,
    )


def _coord(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_coordinates(*pairs: Tuple[Any, Any]) -> Optional[Coordinates]:
    """First (latitude, longitude) pair that parses and lies in range."""

    for lat_raw, lon_raw in pairs:
        lat = _coord(lat_raw)
        lon = _coord(lon_raw)
        if lat is None or lon is None:
            continue
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            continue
        if lat == 0 and lon == 0:
            continue
        return Coordinates(latitude=lat, longitude=lon)
    return None


def text_list(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    out = []
    for item in value:
        text = _text(item)
        if text:
            out.append(text)
    return tuple(out)
