"""books.json persistence.

The document shape is ``{"books": [...], "lastUpdated": "<ISO-8601>"}``.
Writes replace the whole file atomically.
"""

import json
import logging
import os
import stat
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..schemas import BookRecord, BooksDocument

logger = logging.getLogger(__name__)


class DocumentError(Exception):
    """Raised when an existing books.json cannot be read."""

    pass


def format_timestamp(when: Optional[datetime] = None) -> str:
    """Format a UTC timestamp like ``2024-05-01T12:00:00.000Z``."""
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    when = when.astimezone(timezone.utc)
    return when.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def load_document(path: Path) -> Optional[BooksDocument]:
    """Load books.json.

    Entries that fail validation are skipped with a warning.

    Args:
        path: Path to books.json

    Returns:
        BooksDocument, or None if the file does not exist

    Raises:
        DocumentError: If the file is unreadable or not a JSON object
    """
    path = Path(path)
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DocumentError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentError(f"Expected a JSON object in {path}")

    raw_books = data.get("books") or []
    if not isinstance(raw_books, list):
        raise DocumentError(f"Expected 'books' to be a list in {path}")

    books = []
    for index, raw in enumerate(raw_books):
        try:
            books.append(BookRecord.model_validate(raw))
        except ValidationError as e:
            logger.warning("Skipping invalid book #%d in %s: %s", index, path, e)

    return BooksDocument(books=books, last_updated=str(data.get("lastUpdated") or ""))


def load_books(path: Path) -> list[BookRecord]:
    """Load the books from books.json; a missing file yields an empty list."""
    document = load_document(path)
    return document.books if document else []


def _target_mode(path: Path) -> int:
    """Permission bits for the written file: keep an existing file's, else honor the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_books(
    path: Path,
    books: list[BookRecord],
    now: Optional[datetime] = None,
) -> BooksDocument:
    """Write books.json, replacing any previous file.

    The document is written to a temporary file in the same directory and
    moved into place.

    Args:
        path: Destination path
        books: Records to persist, in order
        now: Timestamp for lastUpdated (defaults to current UTC time)

    Returns:
        The written BooksDocument
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    document = BooksDocument(books=list(books), last_updated=format_timestamp(now))

    mode = _target_mode(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(document.to_json_dict(), f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug("Wrote %d books to %s", len(document.books), path)
    return document
