"""Goodreads shelf RSS feed parser.

Each ``<item>`` block is read on its own, so one malformed item only loses
its own fields. Tag values wrapped in CDATA win over plain text content.
"""

import html
import logging
import re
from functools import lru_cache
from typing import Optional

from ..normalize import parse_float, parse_int
from ..schemas import BookRecord, BookSource
from .base import RecordParser

logger = logging.getLogger(__name__)

ITEM_PATTERN = re.compile(r"<item>([\s\S]*?)</item>")

# Largest first
IMAGE_TAGS = ("book_large_image_url", "book_medium_image_url", "book_image_url")


@lru_cache(maxsize=None)
def _tag_patterns(tag_name: str) -> tuple[re.Pattern, re.Pattern]:
    """Compile the CDATA and plain patterns for a tag."""
    name = re.escape(tag_name)
    cdata = re.compile(rf"<{name}><!\[CDATA\[([\s\S]*?)\]\]></{name}>", re.IGNORECASE)
    plain = re.compile(rf"<{name}>([\s\S]*?)</{name}>", re.IGNORECASE)
    return cdata, plain


def extract_tag(content: str, tag_name: str) -> str:
    """Extract the text of a child tag from an item block.

    Args:
        content: Inner text of an item block
        tag_name: Tag to look for (case-insensitive)

    Returns:
        Trimmed tag text, or "" if the tag is absent
    """
    cdata, plain = _tag_patterns(tag_name)

    match = cdata.search(content)
    if match:
        return match.group(1).strip()

    match = plain.search(content)
    if match:
        return html.unescape(match.group(1).strip())

    return ""


def extract_items(xml_text: str) -> list[str]:
    """Return the inner text of every item block, in document order."""
    return [m.group(1) for m in ITEM_PATTERN.finditer(xml_text or "")]


class FeedRecordParser(RecordParser):
    """Parses Goodreads RSS feed XML into book records."""

    source = BookSource.RSS

    def parse(self, text: str) -> list[BookRecord]:
        """Parse every item in the feed."""
        records = []
        items = extract_items(text)

        for item in items:
            record = self.parse_item(item)
            if record is not None:
                records.append(record)

        dropped = len(items) - len(records)
        logger.info("Found %d books in RSS feed (%d items dropped)", len(records), dropped)
        return records

    def parse_item(self, content: str) -> Optional[BookRecord]:
        """Parse one item block, or None if title or author is missing."""
        title = extract_tag(content, "title")
        author = extract_tag(content, "author_name")
        if not title or not author:
            return None

        image_url = ""
        for tag in IMAGE_TAGS:
            image_url = extract_tag(content, tag)
            if image_url:
                break

        return BookRecord(
            title=title,
            author=author,
            rating=parse_int(extract_tag(content, "user_rating")),
            read_at=extract_tag(content, "user_read_at"),
            book_id=extract_tag(content, "book_id"),
            isbn=extract_tag(content, "isbn"),
            image_url=image_url,
            average_rating=parse_float(extract_tag(content, "average_rating")),
            book_published=extract_tag(content, "book_published"),
            num_pages=parse_int(extract_tag(content, "num_pages")),
            source=BookSource.RSS,
        )
