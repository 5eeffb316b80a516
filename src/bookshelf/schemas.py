"""Pydantic schemas for book records.

Every source (CSV export, RSS feed, persisted books.json) normalizes into
the same ``BookRecord`` shape. JSON keys are camelCase because the
persisted document is read by the front-end bookshelf.
"""

import math
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalize import clamp_rating, parse_float, parse_int


def _coerce_number(v: Any, parse: Callable[[str], Any], convert: type) -> Any:
    """Coerce a raw value with ``convert``, rejecting containers and non-finite floats."""
    if isinstance(v, str):
        v = parse(v)
    if v is None:
        return convert(0)
    try:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError(f"non-finite number: {v}")
        return convert(v)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"not a number: {v!r}") from e


class BookSource(str, Enum):
    """Provenance of a book record."""

    CSV = "csv"
    RSS = "rss"


class BookRecord(BaseModel):
    """A single read book in the common schema."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Primary author")
    rating: int = Field(0, description="User rating 0-5, 0 means unrated")
    read_at: str = Field("", alias="readAt", description="Date read, empty if unknown")
    book_id: str = Field("", alias="bookId", description="Goodreads book id")
    isbn: str = ""
    image_url: str = Field("", alias="imageUrl", description="Cover image URL")
    average_rating: float = Field(0.0, alias="averageRating")
    book_published: str = Field("", alias="bookPublished", description="Publication year")
    num_pages: int = Field(0, alias="numPages")
    source: BookSource = BookSource.CSV

    @field_validator(
        "read_at", "book_id", "isbn", "image_url", "book_published", mode="before"
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """Store missing optional text as an empty string."""
        if v is None:
            return ""
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("rating", mode="before")
    @classmethod
    def clamp_rating_value(cls, v: Any) -> int:
        """Coerce to int and clamp into 0-5."""
        return clamp_rating(_coerce_number(v, parse_int, int))

    @field_validator("num_pages", mode="before")
    @classmethod
    def non_negative_pages(cls, v: Any) -> int:
        """Coerce to a non-negative int."""
        return max(0, _coerce_number(v, parse_int, int))

    @field_validator("average_rating", mode="before")
    @classmethod
    def non_negative_average(cls, v: Any) -> float:
        """Coerce to a non-negative float."""
        return max(0.0, _coerce_number(v, parse_float, float))

    @property
    def identity_key(self) -> str:
        """Case-insensitive title/author key used for deduplication."""
        return f"{self.title.lower()}_{self.author.lower()}"

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys for books.json."""
        return self.model_dump(by_alias=True, mode="json")


class BooksDocument(BaseModel):
    """The persisted books.json document."""

    model_config = ConfigDict(populate_by_name=True)

    books: list[BookRecord] = Field(default_factory=list)
    last_updated: str = Field("", alias="lastUpdated")

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys."""
        return {
            "books": [book.to_json_dict() for book in self.books],
            "lastUpdated": self.last_updated,
        }
