"""Base parser functionality.

Provides common infrastructure for the record parsers.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from ..schemas import BookRecord, BookSource

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised when a source file cannot be read."""

    pass


class RecordParser(ABC):
    """Base class for all book record parsers."""

    source: BookSource

    @abstractmethod
    def parse(self, text: str) -> list[BookRecord]:
        """Parse raw source text into book records.

        Malformed rows or items are skipped, never fatal.

        Args:
            text: Full source document

        Returns:
            List of BookRecord objects in document order
        """
        pass

    def parse_file(self, file_path: Path) -> list[BookRecord]:
        """Read a source file and parse it.

        Args:
            file_path: Path to source file

        Returns:
            List of BookRecord objects

        Raises:
            ParseError: If the file cannot be read or decoded
        """
        file_path = Path(file_path)
        try:
            text = file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Failed to read {file_path}: {e}") from e

        records = self.parse(text)
        logger.debug("Parsed %d %s records from %s", len(records), self.source.value, file_path)
        return records
