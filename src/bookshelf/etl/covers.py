"""Cover image enrichment.

Books without an image URL but with a Goodreads book id get their cover
scraped from the book page. Failures are counted per book and never stop
the batch.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from tqdm import tqdm

from ..api.goodreads import GoodreadsClient, GoodreadsError
from ..schemas import BookRecord

logger = logging.getLogger(__name__)


@dataclass
class CoverResult:
    """Result of a cover enrichment run."""

    books: list[BookRecord] = field(default_factory=list)
    processed: int = 0
    updated: int = 0
    failed: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def summary(self) -> str:
        """Get summary string."""
        return (
            f"Processed: {self.processed}, "
            f"Updated: {self.updated}, "
            f"Failed: {self.failed}"
        )


def needs_cover(book: BookRecord) -> bool:
    """True if the book has no image URL but can be looked up."""
    return not book.image_url and bool(book.book_id)


def books_needing_covers(books: list[BookRecord]) -> list[BookRecord]:
    """Return the books that are missing a cover and have a book id."""
    return [book for book in books if needs_cover(book)]


def enrich_covers(
    books: list[BookRecord],
    client: GoodreadsClient,
    limit: Optional[int] = None,
    show_progress: bool = True,
) -> CoverResult:
    """Fill in missing cover URLs by scraping Goodreads book pages.

    Args:
        books: All books, in their persisted order
        client: Goodreads client (its rate limit spaces the requests)
        limit: Maximum number of books to look up
        show_progress: Show tqdm progress bar

    Returns:
        CoverResult whose ``books`` keeps the input order with covers filled in
    """
    result = CoverResult(books=list(books))

    indices = [i for i, book in enumerate(books) if needs_cover(book)]
    if limit is not None:
        indices = indices[:limit]

    iterator = tqdm(indices, desc="Fetching covers", disable=not show_progress)
    for index in iterator:
        book = result.books[index]
        result.processed += 1

        try:
            image_url = client.find_cover_url(book.book_id)
        except GoodreadsError as e:
            result.failed += 1
            result.failures.append((book.title, str(e)))
            logger.warning("Error fetching cover for %r: %s", book.title, e)
            continue

        if not image_url:
            result.failed += 1
            result.failures.append((book.title, "No cover found"))
            logger.info("No cover found for %r", book.title)
            continue

        result.books[index] = book.model_copy(update={"image_url": image_url})
        result.updated += 1
        logger.info("Found cover for %r: %s", book.title, image_url[:80])

    return result
