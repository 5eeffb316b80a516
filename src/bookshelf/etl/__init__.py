"""ETL module for building books.json.

Merges the Goodreads CSV export, the RSS feed and the previous output,
and enriches missing covers.
"""

from .covers import CoverResult, books_needing_covers, enrich_covers, needs_cover
from .pipeline import FetchResult, PipelineError, make_client, run_covers, run_fetch
from .reconcile import (
    MergeStats,
    identity_key,
    merge_records,
    merge_with_stats,
    sort_by_read_date,
)

__all__ = [
    # Reconcile
    "MergeStats",
    "identity_key",
    "merge_records",
    "merge_with_stats",
    "sort_by_read_date",
    # Covers
    "CoverResult",
    "books_needing_covers",
    "enrich_covers",
    "needs_cover",
    # Pipeline
    "FetchResult",
    "PipelineError",
    "make_client",
    "run_covers",
    "run_fetch",
]
