"""books.json persistence."""

from .json_export import (
    DocumentError,
    format_timestamp,
    load_books,
    load_document,
    write_books,
)

__all__ = [
    "DocumentError",
    "format_timestamp",
    "load_books",
    "load_document",
    "write_books",
]
