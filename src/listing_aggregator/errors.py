from __future__ import annotations


class SourceUnavailable(RuntimeError):
    """A dataset source could not be fetched or parsed."""

    def __init__(self, source_id: str, reason: str):
        super().__init__(f"{source_id}: {reason}")
        self.source_id = source_id
        self.reason = reason


class MalformedRecord(ValueError):
    """A raw record that no adapter can turn into a Property."""


class InvalidFilterInput(ValueError):
    """A filter value that cannot be interpreted (e.g. a bad numeric range)."""
