"""Package initializer for `listing_aggregator`."""

__version__ = "0.1.0"

from .pipeline import SearchRequest, SearchResponse, SearchService  # noqa: E402

__all__ = ["SearchRequest", "SearchResponse", "SearchService", "__version__"]
