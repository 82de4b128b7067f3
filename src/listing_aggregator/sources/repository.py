from __future__ import annotations

from typing import Dict

from .base import DatasetSourceProvider, RawBatch, SourceRef


class DatasetRepository:
    """Explicit load-once accessor over a source provider.

    A repository remembers every batch it has loaded for its own lifetime.
    Failures are never remembered, so a later call retries the source. The
    search service creates one repository per query unless one is injected
    (e.g. one per process, or one per test).
    """

    def __init__(self, provider: DatasetSourceProvider) -> None:
        self.provider = provider
        self._loaded: Dict[str, RawBatch] = {}

    async def load_once(self, source: SourceRef) -> RawBatch:
        batch = self._loaded.get(source.id)
        if batch is not None:
            return batch
        batch = await self.provider.fetch(source)
        self._loaded[source.id] = batch
        return batch
