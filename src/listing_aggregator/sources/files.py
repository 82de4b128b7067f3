from __future__ import annotations

import asyncio
import unicodedata
from pathlib import Path

from listing_aggregator.errors import SourceUnavailable

from .base import RawBatch, SourceRef
from .payload import parse_records


def _is_relative_to(path: Path, base: Path) -> bool:
    try:
        path.relative_to(base)
        return True
    except ValueError:
        return False


def resolve_dataset_path(data_dir: Path, relative: str) -> Path:
    """Resolve a catalog path under `data_dir`, refusing anything outside it."""

    if not relative:
        raise ValueError("path required")
    normalized = unicodedata.normalize("NFKC", relative)
    if ".." in Path(normalized).parts:
        raise ValueError("path traversal not allowed")
    if "\u202e" in normalized or "\u202d" in normalized:
        raise ValueError("unsafe unicode in path")
    root = data_dir.resolve()
    resolved = (root / normalized).resolve()
    if not _is_relative_to(resolved, root):
        raise ValueError("path outside data dir")
    return resolved


class FileSourceProvider:
    """Reads dataset sources as JSON files below a data directory."""

    name = "file"

    def __init__(self, data_dir: str | Path, max_bytes: int = 50_000_000) -> None:
        self.data_dir = Path(data_dir)
        self.max_bytes = max_bytes

    def _read(self, source: SourceRef) -> bytes:
        try:
            path = resolve_dataset_path(self.data_dir, source.path)
        except ValueError as exc:
            raise SourceUnavailable(source.id, str(exc)) from exc
        try:
            with path.open("rb") as handle:
                return handle.read(self.max_bytes + 1)
        except OSError as exc:
            raise SourceUnavailable(source.id, f"cannot read {source.path}: {exc.strerror or exc}") from exc

    async def fetch(self, source: SourceRef) -> RawBatch:
        data = await asyncio.to_thread(self._read, source)
        records = parse_records(source.id, data, self.max_bytes)
        return RawBatch(source=source, records=records)
