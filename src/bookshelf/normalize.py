"""Field normalization helpers shared by the CSV and feed parsers.

All helpers are pure and fail soft: bad numbers become 0 and bad dates
become an empty string (or ``None`` when parsing for comparison).
"""

import math
import re
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional

# Leading-number patterns, matching how lenient parsers read "5 stars" as 5
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

MIN_RATING = 0
MAX_RATING = 5


def clean_field(value: Optional[str]) -> str:
    """Strip one wrapping quote character from each end, then whitespace."""
    if not value:
        return ""
    if value[:1] in ("'", '"'):
        value = value[1:]
    if value[-1:] in ("'", '"'):
        value = value[:-1]
    return value.strip()


def parse_int(value: Optional[str]) -> int:
    """Parse the leading integer of a string, 0 when there is none."""
    if not value:
        return 0
    match = _INT_PREFIX.match(value)
    return int(match.group(1)) if match else 0


def parse_float(value: Optional[str]) -> float:
    """Parse the leading decimal number of a string, 0.0 when there is none."""
    if not value:
        return 0.0
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return 0.0
    try:
        number = float(match.group(1))
    except (ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def clamp_rating(value: int) -> int:
    """Clamp a rating into the 0-5 range."""
    return max(MIN_RATING, min(MAX_RATING, value))


def build_date(year: str, month: str, day: str) -> str:
    """Build an RFC 1123 UTC date string from year/month/day parts.

    Args:
        year: Year digits, e.g. "1987"
        month: Month digits, e.g. "01" or "1"
        day: Day digits

    Returns:
        String like "Mon, 12 Jan 1987 00:00:00 GMT", or "" when the parts
        are not numeric or do not form a calendar date.
    """
    parts = [p.strip() for p in (year, month, day)]
    if not all(p.isdigit() for p in parts):
        return ""

    try:
        dt = datetime(int(parts[0]), int(parts[1]), int(parts[2]), tzinfo=timezone.utc)
    except ValueError:
        return ""

    return format_datetime(dt, usegmt=True)


def parse_read_at(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored read date for comparison.

    Accepts RFC 2822/1123 dates (feed values and CSV output), ISO-8601
    dates and ``YYYY/MM/DD``. Naive values are taken as UTC.

    Returns:
        Timezone-aware datetime, or None if the value is empty or unparseable
    """
    if not value or not value.strip():
        return None
    text = value.strip()

    dt = None
    try:
        dt = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        dt = None

    if dt is None:
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            dt = None

    if dt is None:
        try:
            dt = datetime.strptime(text, "%Y/%m/%d")
        except ValueError:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
