"""Goodreads library CSV export parser.

Only books on the "read" exclusive shelf are kept. Columns are read by
position, so the header row is discarded.
"""

import csv
import logging
from pathlib import Path
from typing import Optional

from ..normalize import build_date, clean_field, parse_float, parse_int
from ..schemas import BookRecord, BookSource
from .base import RecordParser

logger = logging.getLogger(__name__)


def split_csv_line(line: str) -> Optional[list[str]]:
    """Split a single CSV line into fields.

    Honors double-quoted fields, doubled-quote escapes and commas inside
    quotes. Returns None if the line cannot be tokenized.
    """
    try:
        return next(csv.reader([line]), [])
    except csv.Error:
        return None


class CsvRecordParser(RecordParser):
    """Parses Goodreads CSV exports into book records."""

    source = BookSource.CSV

    MIN_FIELDS = 19
    READ_SHELF = "read"

    # Column positions in the Goodreads export
    COL_BOOK_ID = 0
    COL_TITLE = 1
    COL_AUTHOR = 2
    COL_MY_RATING = 7
    COL_AVERAGE_RATING = 8
    COL_NUM_PAGES = 11
    COL_YEAR_PUBLISHED = 12
    COL_DATE_READ = 14
    COL_EXCLUSIVE_SHELF = 18

    def parse(self, text: str) -> list[BookRecord]:
        """Parse CSV text, skipping the header row."""
        records = []
        skipped = 0

        lines = text.split("\n")
        for raw_line in lines[1:]:
            line = raw_line.strip()
            if not line:
                continue

            record = self.parse_line(line)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        logger.info("Parsed %d read books from CSV (%d rows skipped)", len(records), skipped)
        return records

    def parse_file(self, file_path: Path) -> list[BookRecord]:
        """Parse a CSV file; a missing file yields no records."""
        file_path = Path(file_path)
        if not file_path.exists():
            logger.warning("CSV file not found, skipping CSV import: %s", file_path)
            return []
        return super().parse_file(file_path)

    def parse_line(self, line: str) -> Optional[BookRecord]:
        """Parse one data line, or None if it is malformed or not read."""
        fields = split_csv_line(line)
        if fields is None or len(fields) < self.MIN_FIELDS:
            return None

        if fields[self.COL_EXCLUSIVE_SHELF] != self.READ_SHELF:
            return None

        return BookRecord(
            title=clean_field(fields[self.COL_TITLE]),
            author=clean_field(fields[self.COL_AUTHOR]),
            rating=parse_int(fields[self.COL_MY_RATING]),
            read_at=self._parse_date_read(fields[self.COL_DATE_READ]),
            book_id=clean_field(fields[self.COL_BOOK_ID]),
            isbn="",
            image_url="",
            average_rating=parse_float(fields[self.COL_AVERAGE_RATING]),
            book_published=clean_field(fields[self.COL_YEAR_PUBLISHED]),
            num_pages=parse_int(fields[self.COL_NUM_PAGES]),
            source=BookSource.CSV,
        )

    def _parse_date_read(self, date_read: str) -> str:
        """Convert a YYYY/MM/DD date to an RFC 1123 string."""
        if not date_read:
            return ""

        parts = date_read.split("/")
        if len(parts) != 3:
            return ""

        year, month, day = parts
        return build_date(year, month, day)
