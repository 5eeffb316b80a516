"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the bookshelf pipeline,
including sample CSV exports, RSS feeds and book records.
"""

import pytest

from bookshelf.config import reset_config
from bookshelf.schemas import BookRecord, BookSource


CSV_HEADER = (
    "Book Id,Title,Author,Author l-f,Additional Authors,ISBN,ISBN13,My Rating,"
    "Average Rating,Publisher,Binding,Number of Pages,Year Published,"
    "Original Publication Year,Date Read,Date Added,Bookshelves,"
    "Bookshelves with positions,Exclusive Shelf,My Review,Spoiler,Private Notes,"
    "Read Count,Owned Copies"
)


def make_item(
    title: str = "Dune",
    author: str = "Frank Herbert",
    rating: str = "5",
    read_at: str = "",
    book_id: str = "",
    image_url: str = "",
) -> str:
    """Build one Goodreads RSS <item> block."""
    parts = [
        "<item>",
        f"<title><![CDATA[{title}]]></title>",
        f"<author_name><![CDATA[{author}]]></author_name>",
        f"<user_rating>{rating}</user_rating>",
        f"<user_read_at><![CDATA[{read_at}]]></user_read_at>",
        f"<book_id>{book_id}</book_id>",
    ]
    if image_url:
        parts.append(f"<book_large_image_url><![CDATA[{image_url}]]></book_large_image_url>")
    parts.append("</item>")
    return "\n".join(parts)


def make_feed(*items: str) -> str:
    """Wrap item blocks in an RSS document."""
    body = "\n".join(items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0"><channel><title>Read shelf</title>\n'
        f"{body}\n"
        "</channel></rss>\n"
    )


# ============================================================================
# Config Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate each test from BOOKSHELF_* environment variables."""
    for name in (
        "BOOKSHELF_FEED_URL",
        "BOOKSHELF_CSV_PATH",
        "BOOKSHELF_OUTPUT_PATH",
        "BOOKSHELF_HTTP_TIMEOUT",
        "BOOKSHELF_COVER_DELAY",
        "BOOKSHELF_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_csv_text() -> str:
    """A Goodreads export with read, to-read and malformed rows."""
    rows = [
        CSV_HEADER,
        '123,"Dune","Frank Herbert",,,,,5,4.2,,,412,1965,,1987/01/12,,,,read',
        '456,"Project Hail Mary","Andy Weir","Weir, Andy",,,,4,4.52,"Ballantine",'
        'Hardcover,496,2021,2021,2024/06/15,2024/06/01,,,read,,,,1,0',
        '789,"The Hobbit","J.R.R. Tolkien",,,,,0,4.29,,,310,1937,,,,,,to-read',
        "999,Too,Short,row",
        '321,"Book, With Comma","Some ""Quoted"" Author",,,,,3,3.9,,,200,2001,,,,,,read',
    ]
    return "\n".join(rows) + "\n"


@pytest.fixture
def sample_feed_xml() -> str:
    """An RSS feed with two valid items and one missing an author."""
    return make_feed(
        make_item(
            title="Dune",
            author="Frank Herbert",
            rating="5",
            read_at="Sat, 17 Feb 2024 00:00:00 -0800",
            book_id="44767458",
            image_url="https://images.example.com/dune-large.jpg",
        ),
        make_item(
            title="Piranesi",
            author="Susanna Clarke",
            rating="4",
            read_at="Tue, 02 Jan 2024 00:00:00 -0800",
            book_id="50202953",
        ),
        "<item><title><![CDATA[No Author]]></title></item>",
    )


@pytest.fixture
def csv_book() -> BookRecord:
    """A CSV-sourced record without a cover."""
    return BookRecord(
        title="Dune",
        author="Frank Herbert",
        rating=5,
        read_at="Mon, 12 Jan 1987 00:00:00 GMT",
        book_id="123",
        average_rating=4.2,
        book_published="1965",
        num_pages=412,
        source=BookSource.CSV,
    )


@pytest.fixture
def feed_book() -> BookRecord:
    """A feed-sourced record with a cover."""
    return BookRecord(
        title="Dune",
        author="Frank Herbert",
        rating=4,
        read_at="Sat, 17 Feb 2024 00:00:00 -0800",
        book_id="44767458",
        isbn="0441013597",
        image_url="https://images.example.com/dune-large.jpg",
        average_rating=4.27,
        book_published="1965",
        num_pages=658,
        source=BookSource.RSS,
    )


@pytest.fixture
def existing_book() -> BookRecord:
    """A previously persisted record with a scraped cover."""
    return BookRecord(
        title="dune",
        author="FRANK HERBERT",
        rating=5,
        read_at="Mon, 12 Jan 1987 00:00:00 GMT",
        book_id="123",
        image_url="https://images.example.com/dune-scraped.jpg",
        source=BookSource.CSV,
    )
