"""Merge logic for book records.

Records from the previous books.json, the CSV export and the RSS feed are
keyed by a case-insensitive title/author identity key. Later sources
replace earlier ones wholesale:

1. previously persisted records (seed)
2. CSV export records, which may inherit the seed's cover image
3. RSS feed records, which always win

The merged list is ordered newest read date first.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..normalize import parse_read_at
from ..schemas import BookRecord

logger = logging.getLogger(__name__)

# Unknown read dates sort after every real date
UNKNOWN_READ_DATE = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class MergeStats:
    """Counts describing one merge."""

    existing: int = 0
    csv: int = 0
    feed: int = 0
    donated_images: int = 0
    total: int = 0


def identity_key(book: BookRecord) -> str:
    """Return the deduplication key for a record."""
    return book.identity_key


def read_date_key(book: BookRecord) -> datetime:
    """Sort key: parsed read date, or the earliest instant if unknown."""
    return parse_read_at(book.read_at) or UNKNOWN_READ_DATE


def sort_by_read_date(books: Iterable[BookRecord]) -> list[BookRecord]:
    """Sort records newest first; ties keep their input order."""
    return sorted(books, key=read_date_key, reverse=True)


def merge_with_stats(
    csv_books: list[BookRecord],
    feed_books: list[BookRecord],
    existing_books: Optional[list[BookRecord]] = None,
) -> tuple[list[BookRecord], MergeStats]:
    """Merge the three record sets and report what happened.

    Args:
        csv_books: Records parsed from the CSV export
        feed_books: Records parsed from the RSS feed
        existing_books: Records from the previous run's output

    Returns:
        Tuple of (merged records sorted by read date, MergeStats)
    """
    existing_books = existing_books or []
    stats = MergeStats(
        existing=len(existing_books),
        csv=len(csv_books),
        feed=len(feed_books),
    )

    book_map: dict[str, BookRecord] = {}

    for book in existing_books:
        book_map[identity_key(book)] = book

    for book in csv_books:
        key = identity_key(book)
        previous = book_map.get(key)
        if previous is not None and previous.image_url and not book.image_url:
            book = book.model_copy(update={"image_url": previous.image_url})
            stats.donated_images += 1
        book_map[key] = book

    for book in feed_books:
        book_map[identity_key(book)] = book

    merged = sort_by_read_date(book_map.values())
    stats.total = len(merged)

    logger.debug(
        "Merged %d existing, %d CSV and %d feed records into %d (%d covers kept)",
        stats.existing,
        stats.csv,
        stats.feed,
        stats.total,
        stats.donated_images,
    )
    return merged, stats


def merge_records(
    csv_books: list[BookRecord],
    feed_books: list[BookRecord],
    existing_books: Optional[list[BookRecord]] = None,
) -> list[BookRecord]:
    """Merge CSV, feed and previously persisted records.

    Returns:
        Deduplicated records sorted newest read date first
    """
    merged, _ = merge_with_stats(csv_books, feed_books, existing_books)
    return merged
