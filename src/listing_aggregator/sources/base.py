from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, List, Protocol

from listing_aggregator.schema import PropertyCategory


class SourceKind(str, Enum):
    """Shape of the records a dataset source produces.

    Attached to every source in the catalog; each kind maps to exactly one
    normalizer adapter.
    """

    COMMERCIAL_EXPORT = "commercial_export"
    AGGREGATOR_SALE = "aggregator_sale"
    AGGREGATOR_LEASE = "aggregator_lease"
    RESIDENTIAL = "residential"

    @property
    def property_category(self) -> PropertyCategory:
        if self is SourceKind.RESIDENTIAL:
            return PropertyCategory.RESIDENTIAL
        return PropertyCategory.COMMERCIAL


@dataclass(frozen=True)
class SourceRef:
    id: str
    path: str
    kind: SourceKind
    # "sale", "lease" or both; used to narrow sources by listing category.
    listing_tags: FrozenSet[str] = frozenset({"sale", "lease"})

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "path": self.path,
            "kind": self.kind.value,
            "listing_tags": sorted(self.listing_tags),
        }


@dataclass(frozen=True)
class RawBatch:
    """Raw records of one source, tagged with the source's shape."""

    source: SourceRef
    records: List[Any]

    @property
    def kind(self) -> SourceKind:
        return self.source.kind


class DatasetSourceProvider(Protocol):
    """Fetches the raw record list of one dataset source.

    Implementations raise `SourceUnavailable` on any fetch or parse failure.
    """

    name: str

    async def fetch(self, source: SourceRef) -> RawBatch:
        ...
