from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = float(str(raw).strip())
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    if value <= 0:
        return default
    return value


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the search pipeline.

    Values come from env vars; malformed values fall back to the defaults.
    """

    data_dir: str
    base_url: Optional[str]
    source_timeout: float
    page_size: int
    max_bytes: int

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=_env_str("LISTINGS_DATA_DIR") or "./data",
            base_url=_env_str("LISTINGS_BASE_URL"),
            source_timeout=_env_float("LISTINGS_SOURCE_TIMEOUT", 10.0),
            page_size=_env_int("LISTINGS_PAGE_SIZE", 20),
            max_bytes=_env_int("LISTINGS_MAX_BYTES", 50_000_000),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def reset_settings_cache() -> None:
    """Test helper to force env re-read."""

    get_settings.cache_clear()
