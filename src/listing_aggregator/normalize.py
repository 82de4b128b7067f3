import math
import re
from typing import Any, Optional


_WHITESPACE_RE = re.compile(r"\s+")
_PUNCT_RE = re.compile(r"[^\w\s]", re.UNICODE)
_NON_DIGIT_RE = re.compile(r"[^0-9]")


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def normalize_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    return clean_text(value).casefold()


def normalize_address(value: Optional[str]) -> str:
    cleaned = normalize_text(value)
    cleaned = _PUNCT_RE.sub("", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned


def parse_digits(value: Any) -> int:
    """Parse a number after stripping every non-digit; 0 when nothing is left.

    "12,500 SF" -> 12500, "1,200 - 3,400" -> 12003400 (same as the listing
    exports' own parser), None, NaN or infinity -> 0.
    """

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return max(0, int(value))
    digits = _NON_DIGIT_RE.sub("", str(value))
    if not digits:
        return 0
    return int(digits)
