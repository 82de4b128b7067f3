from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from listing_aggregator.catalog import resolve
from listing_aggregator.config import Settings, get_settings
from listing_aggregator.dedup import dedup
from listing_aggregator.errors import SourceUnavailable
from listing_aggregator.normalizer import normalize_batch
from listing_aggregator.schema import Property
from listing_aggregator.search import (
    FilterSpec,
    RankingContext,
    build_filter_spec,
    filter_properties,
    paginate,
    rank,
)
from listing_aggregator.sources import (
    DatasetRepository,
    DatasetSourceProvider,
    FileSourceProvider,
    HttpSourceProvider,
    RawBatch,
    SourceRef,
)


fetch_logger = logging.getLogger("listings.fetch")
logger = logging.getLogger("listings.search")


@dataclass(frozen=True)
class SearchRequest:
    location_query: Optional[str] = None
    listing_category: Optional[str] = None
    property_type: Optional[str] = None
    min_price: Any = None
    max_price: Any = None
    min_size: Any = None
    max_size: Any = None
    page: int = 1

    def filter_spec(self) -> FilterSpec:
        return build_filter_spec(
            listing_category=self.listing_category,
            location_query=self.location_query,
            property_type=self.property_type,
            min_price=self.min_price,
            max_price=self.max_price,
            min_size=self.min_size,
            max_size=self.max_size,
        )


@dataclass
class SearchResponse:
    items: List[Property]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    sources: List[Dict[str, Any]] = field(default_factory=list)
    dropped_records: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "page_items": [prop.to_dict() for prop in self.items],
            "sources": list(self.sources),
            "dropped_records": self.dropped_records,
        }


class SearchService:
    """Runs one query end to end: resolve, fetch, normalize, dedup, filter, rank, page.

    Nothing is shared between queries unless a repository is injected.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[DatasetSourceProvider] = None,
        repository: Optional[DatasetRepository] = None,
    ) -> None:
        self.settings = settings or get_settings()
        if repository is not None:
            provider = repository.provider
        self.provider = provider or self._default_provider()
        self.repository = repository
        self.last_log_entries: List[Dict[str, Any]] = []

    def _default_provider(self) -> DatasetSourceProvider:
        if self.settings.base_url:
            return HttpSourceProvider(
                self.settings.base_url,
                timeout=self.settings.source_timeout,
                max_bytes=self.settings.max_bytes,
            )
        return FileSourceProvider(self.settings.data_dir, max_bytes=self.settings.max_bytes)

    def resolve_sources(self, request: SearchRequest) -> List[SourceRef]:
        spec = request.filter_spec()
        return resolve(request.location_query, spec.listing_category)

    @staticmethod
    def _failed(entry: Dict[str, Any], reason: str, started: float) -> Dict[str, Any]:
        entry.update(
            {
                "status": "failed",
                "items_found": 0,
                "error": reason,
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            }
        )
        return entry

    async def _fetch_one(
        self, repository: DatasetRepository, source: SourceRef
    ) -> Tuple[Optional[RawBatch], Dict[str, Any]]:
        entry: Dict[str, Any] = {
            "source": source.id,
            "kind": source.kind.value,
            "provider": getattr(self.provider, "name", "custom"),
        }
        started = time.monotonic()
        try:
            try:
                batch = await asyncio.wait_for(
                    repository.load_once(source), timeout=self.settings.source_timeout
                )
            except asyncio.TimeoutError as exc:
                raise SourceUnavailable(
                    source.id, f"timed out after {self.settings.source_timeout:g}s"
                ) from exc
        except SourceUnavailable as exc:
            fetch_logger.warning("source %s unavailable: %s", source.id, exc.reason)
            return None, self._failed(entry, exc.reason, started)
        except Exception as exc:
            fetch_logger.warning(
                "source %s failed: %s", source.id, exc.__class__.__name__, exc_info=True
            )
            return None, self._failed(entry, f"unexpected error: {exc.__class__.__name__}", started)
        entry.update(
            {
                "status": "success",
                "items_found": len(batch.records),
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            }
        )
        return batch, entry

    async def fetch_all(
        self, sources: List[SourceRef], repository: Optional[DatasetRepository] = None
    ) -> Tuple[List[RawBatch], List[Dict[str, Any]]]:
        """Fetch every source concurrently; results come back in catalog order."""

        repository = repository or self.repository or DatasetRepository(self.provider)
        outcomes = await asyncio.gather(
            *(self._fetch_one(repository, source) for source in sources)
        )
        batches = [batch for batch, _ in outcomes if batch is not None]
        entries = [entry for _, entry in outcomes]
        return batches, entries

    def build_pool(self, batches: List[RawBatch]) -> Tuple[List[Property], Dict[str, int]]:
        """Normalize and merge batches in the given order, then dedup.

        Returns the pool and the number of dropped records per source.
        """

        merged: List[Property] = []
        dropped: Dict[str, int] = {}
        for batch in batches:
            properties, failures = normalize_batch(batch)
            merged.extend(properties)
            dropped[batch.source.id] = len(failures)
        pool = [replace(prop, position=index) for index, prop in enumerate(merged)]
        return dedup(pool), dropped

    async def asearch(self, request: SearchRequest) -> SearchResponse:
        spec = request.filter_spec()
        sources = resolve(request.location_query, spec.listing_category)
        try:
            batches, entries = await self.fetch_all(sources)
        finally:
            # Clients are tied to this query's event loop.
            if isinstance(self.provider, HttpSourceProvider):
                await self.provider.aclose()
        pool, dropped_by_source = self.build_pool(batches)
        dropped = sum(dropped_by_source.values())
        for entry in entries:
            if entry["status"] == "success":
                entry["dropped_records"] = dropped_by_source.get(entry["source"], 0)
        filtered = filter_properties(pool, spec)
        ranked = rank(
            filtered,
            RankingContext(location_query=spec.location_query, property_type=spec.property_type),
        )
        page = paginate(ranked, request.page, self.settings.page_size)
        self.last_log_entries = entries
        logger.info(
            "search: %d source(s), %d pooled, %d matched, %d dropped",
            len(sources),
            len(pool),
            len(filtered),
            dropped,
        )
        return SearchResponse(
            items=page.items,
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
            sources=entries,
            dropped_records=dropped,
        )

    def search(self, request: SearchRequest) -> SearchResponse:
        return asyncio.run(self.asearch(request))
