"""Tests for the Goodreads CSV export parser."""

import pytest

from bookshelf.imports.base import ParseError
from bookshelf.imports.csv_export import CsvRecordParser, split_csv_line
from bookshelf.schemas import BookSource

from conftest import CSV_HEADER


class TestSplitCsvLine:
    """Tests for split_csv_line."""

    def test_plain_fields(self):
        """Test simple comma separation."""
        assert split_csv_line("a,b,,c") == ["a", "b", "", "c"]

    def test_quoted_comma(self):
        """Test commas inside quotes are kept."""
        assert split_csv_line('1,"Weir, Andy",x') == ["1", "Weir, Andy", "x"]

    def test_doubled_quote_escape(self):
        """Test doubled quotes inside a quoted field."""
        assert split_csv_line('"Say ""hi""",2') == ['Say "hi"', "2"]


class TestCsvRecordParser:
    """Tests for CsvRecordParser class."""

    @pytest.fixture
    def parser(self):
        """Create parser instance."""
        return CsvRecordParser()

    def test_parse_keeps_only_read_rows(self, parser, sample_csv_text):
        """Test that to-read and short rows are dropped."""
        records = parser.parse(sample_csv_text)

        assert [r.title for r in records] == [
            "Dune",
            "Project Hail Mary",
            "Book, With Comma",
        ]

    def test_parse_example_row(self, parser):
        """Test the documented example row."""
        text = CSV_HEADER + "\n" + (
            '123,"Dune","Frank Herbert",,,,,5,4.2,,,412,1965,,1987/01/12,,,,read'
        )

        records = parser.parse(text)

        assert len(records) == 1
        dune = records[0]
        assert dune.title == "Dune"
        assert dune.author == "Frank Herbert"
        assert dune.rating == 5
        assert dune.average_rating == 4.2
        assert dune.num_pages == 412
        assert dune.book_published == "1965"
        assert dune.read_at == "Mon, 12 Jan 1987 00:00:00 GMT"
        assert dune.book_id == "123"
        assert dune.isbn == ""
        assert dune.image_url == ""
        assert dune.source == BookSource.CSV

    def test_parse_escaped_quotes(self, parser, sample_csv_text):
        """Test quoted commas and doubled quotes in fields."""
        records = parser.parse(sample_csv_text)

        book = records[2]
        assert book.title == "Book, With Comma"
        assert book.author == 'Some "Quoted" Author'
        assert book.read_at == ""

    def test_header_is_discarded(self, parser):
        """Test that the first line is never parsed as data."""
        text = '1,"Header Book","A",,,,,5,4,,,1,2000,,2020/01/01,,,,read\n'
        assert parser.parse(text) == []

    def test_short_rows_skipped(self, parser):
        """Test that rows with fewer than 19 fields are dropped."""
        text = CSV_HEADER + "\n" + "1,Title,Author,,,,,5,4,,,1,2000,,2020/01/01,,,read"
        assert parser.parse(text) == []

    def test_blank_lines_and_crlf(self, parser):
        """Test blank lines are skipped and CRLF endings handled."""
        text = (
            CSV_HEADER + "\r\n\r\n"
            + '1,"A","B",,,,,3,4,,,100,2000,,2020/01/02,,,,read\r\n'
            + "\r\n"
        )

        records = parser.parse(text)

        assert len(records) == 1
        assert records[0].read_at == "Thu, 02 Jan 2020 00:00:00 GMT"

    def test_shelf_must_match_exactly(self, parser):
        """Test that other shelves are filtered out."""
        text = CSV_HEADER + "\n" + "\n".join([
            '1,"A","B",,,,,3,4,,,100,2000,,2020/01/02,,,,currently-reading',
            '2,"C","D",,,,,3,4,,,100,2000,,2020/01/02,,,,Read',
        ])
        assert parser.parse(text) == []

    def test_bad_numbers_default_to_zero(self, parser):
        """Test unparseable numeric fields."""
        text = CSV_HEADER + "\n" + '1,"A","B",,,,,x,y,,,z,2000,,,,,,read'

        book = parser.parse(text)[0]

        assert book.rating == 0
        assert book.average_rating == 0.0
        assert book.num_pages == 0

    @pytest.mark.parametrize(
        "date_read",
        ["2020-01-02", "2020/01", "2020/13/45", "abcd/ef/gh"],
    )
    def test_bad_dates_become_empty(self, parser, date_read):
        """Test date values that do not give a calendar date."""
        text = CSV_HEADER + "\n" + f'1,"A","B",,,,,3,4,,,100,2000,,{date_read},,,,read'

        book = parser.parse(text)[0]

        assert book.read_at == ""

    def test_parse_file(self, parser, tmp_path, sample_csv_text):
        """Test parsing from a file with a BOM."""
        csv_path = tmp_path / "goodreads_library.csv"
        csv_path.write_text("\ufeff" + sample_csv_text, encoding="utf-8")

        records = parser.parse_file(csv_path)

        assert len(records) == 3

    def test_parse_missing_file(self, parser, tmp_path):
        """Test that a missing CSV yields no records."""
        assert parser.parse_file(tmp_path / "missing.csv") == []

    def test_parse_unreadable_file(self, parser, tmp_path):
        """Test that undecodable bytes raise ParseError."""
        csv_path = tmp_path / "broken.csv"
        csv_path.write_bytes(b"\xff\xfe\xfa\x00broken")

        with pytest.raises(ParseError):
            parser.parse_file(csv_path)
