"""Pipeline runners.

``run_fetch`` loads the previous books.json, parses the CSV export,
fetches and parses the RSS feed, merges everything and persists the
result. ``run_covers`` fills in missing covers in an existing books.json.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..api.goodreads import GoodreadsClient
from ..config import Config, get_config
from ..export.json_export import load_books, load_document, write_books
from ..imports.csv_export import CsvRecordParser
from ..imports.feed import FeedRecordParser
from ..schemas import BookRecord, BooksDocument
from .covers import CoverResult, enrich_covers
from .reconcile import MergeStats, merge_with_stats

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Raised when a pipeline run cannot proceed."""

    pass


@dataclass
class FetchResult:
    """Result of a fetch run."""

    books: list[BookRecord] = field(default_factory=list)
    stats: MergeStats = field(default_factory=MergeStats)
    output_path: Optional[Path] = None
    written: bool = False

    @property
    def newest(self) -> Optional[BookRecord]:
        """Most recently read book."""
        return self.books[0] if self.books else None

    @property
    def oldest(self) -> Optional[BookRecord]:
        """Least recently read book (or one with no date)."""
        return self.books[-1] if self.books else None


def make_client(config: Config) -> GoodreadsClient:
    """Build a Goodreads client from the configured timeout, delay and User-Agent."""
    return GoodreadsClient(
        timeout=config.http_timeout,
        min_request_interval=config.cover_delay,
        user_agent=config.user_agent,
    )


def run_fetch(
    config: Optional[Config] = None,
    client: Optional[GoodreadsClient] = None,
    csv_path: Optional[Path] = None,
    output_path: Optional[Path] = None,
    feed_url: Optional[str] = None,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> FetchResult:
    """Run the merge pipeline.

    Args:
        config: Configuration (uses global if not provided)
        client: Goodreads client
        csv_path: CSV export path, overrides config
        output_path: books.json path, overrides config
        feed_url: RSS feed URL, overrides config
        dry_run: If True, don't write books.json
        now: Timestamp for lastUpdated

    Returns:
        FetchResult with merged books and counts

    Raises:
        PipelineError: If no feed URL is configured
        GoodreadsError: If the feed cannot be fetched
        DocumentError: If the existing books.json is unreadable
        ParseError: If the CSV file exists but cannot be read
    """
    config = config or get_config()
    csv_path = Path(csv_path or config.csv_path)
    output_path = Path(output_path or config.output_path)
    feed_url = feed_url or config.feed_url
    if not feed_url:
        raise PipelineError("No RSS feed URL configured (set BOOKSHELF_FEED_URL)")

    client = client or make_client(config)

    existing_books = load_books(output_path)
    if existing_books:
        logger.info("Found %d existing books in %s", len(existing_books), output_path)

    csv_books = CsvRecordParser().parse_file(csv_path)

    logger.info("Fetching Goodreads RSS feed")
    xml_text = client.fetch_feed(feed_url)
    feed_books = FeedRecordParser().parse(xml_text)

    books, stats = merge_with_stats(csv_books, feed_books, existing_books)
    result = FetchResult(books=books, stats=stats, output_path=output_path)

    if not dry_run:
        write_books(output_path, books, now=now)
        result.written = True

    return result


def run_covers(
    config: Optional[Config] = None,
    client: Optional[GoodreadsClient] = None,
    output_path: Optional[Path] = None,
    document: Optional[BooksDocument] = None,
    limit: Optional[int] = None,
    show_progress: bool = True,
    now: Optional[datetime] = None,
) -> CoverResult:
    """Fill in missing covers in books.json.

    The document is rewritten whenever at least one book was looked up,
    even if every lookup failed. A document already loaded by the caller
    is used as-is instead of re-reading output_path.

    Raises:
        PipelineError: If books.json does not exist
        DocumentError: If books.json is unreadable
    """
    config = config or get_config()
    output_path = Path(output_path or config.output_path)

    if document is None:
        document = load_document(output_path)
    if document is None:
        raise PipelineError(f"{output_path} not found")

    client = client or make_client(config)
    result = enrich_covers(document.books, client, limit=limit, show_progress=show_progress)

    if result.processed:
        write_books(output_path, result.books, now=now)

    return result
