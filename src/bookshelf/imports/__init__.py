"""Record parsers for the Goodreads CSV export and RSS feed."""

from .base import ParseError, RecordParser
from .csv_export import CsvRecordParser, split_csv_line
from .feed import FeedRecordParser, extract_items, extract_tag

__all__ = [
    "ParseError",
    "RecordParser",
    "CsvRecordParser",
    "FeedRecordParser",
    "split_csv_line",
    "extract_items",
    "extract_tag",
]
