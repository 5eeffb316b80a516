"""External API clients."""

from .goodreads import (
    GoodreadsClient,
    GoodreadsError,
    GoodreadsRateLimitError,
    extract_cover_url,
)

__all__ = [
    "GoodreadsClient",
    "GoodreadsError",
    "GoodreadsRateLimitError",
    "extract_cover_url",
]
