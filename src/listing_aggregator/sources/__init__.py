"""Dataset source providers."""

from .base import DatasetSourceProvider, RawBatch, SourceKind, SourceRef
from .files import FileSourceProvider
from .http import HttpSourceProvider
from .repository import DatasetRepository

__all__ = [
    "DatasetRepository",
    "DatasetSourceProvider",
    "FileSourceProvider",
    "HttpSourceProvider",
    "RawBatch",
    "SourceKind",
    "SourceRef",
]
