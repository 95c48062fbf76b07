"""Date normalization for statement dates.

Statement dates cross the model boundary as ``DD/MM/YYYY`` strings. Three
``/``-separated parts are always read positionally as day, month, year; any
other shape goes through a short list of generic formats.

``parse_date`` never fails: empty or unparseable input yields ``EPOCH``.
Callers that must tell "unknown" from 1 Jan 1970 either check for an empty
string first or use ``parse_date_strict``.
"""
import re
from datetime import date, datetime
from typing import Optional, Union

from .exceptions import DateParseError
from .logger import get_logger

logger = get_logger()

EPOCH = date(1970, 1, 1)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")

FALLBACK_FORMATS = [
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%Y-%m-%d %H:%M:%S",
]

DateInput = Union[str, date, datetime, None]


def parse_date_strict(value: DateInput) -> date:
    """
    Parse a statement date, raising on failure.

    Args:
        value: ``DD/MM/YYYY`` string, another recognizable date string,
            or an already-parsed date

    Returns:
        Calendar date

    Raises:
        DateParseError: If the value is empty or cannot be interpreted
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = (value or "").strip() if isinstance(value, str) else ""
    if not text:
        raise DateParseError("Empty date")

    parts = text.split("/")
    if len(parts) == 3:
        return _parse_positional(parts, text)

    return _parse_generic(text)


def parse_date(value: DateInput) -> date:
    """Parse a statement date, degrading to ``EPOCH`` instead of failing."""
    try:
        return parse_date_strict(value)
    except DateParseError as e:
        logger.warning(f"Using epoch sentinel for date {value!r}: {e}")
        return EPOCH


def is_sentinel(value: Optional[date]) -> bool:
    """True if the date is the epoch sentinel produced by ``parse_date``."""
    return value == EPOCH


def _parse_positional(parts: list, text: str) -> date:
    """
    Read day, month, year from three ``/``-separated parts.

    Only the leading digits of each part count, so trailing noise such as
    ``01/01/2024,`` or ``01/01/2024 10:30`` still reads as 1 Jan 2024.
    """
    matches = [_LEADING_DIGITS.match(part) for part in parts]
    if not all(matches):
        raise DateParseError(f"Non-numeric date parts in {text!r}")

    day, month, year = (int(m.group(1)) for m in matches)

    # Two-digit years belong to this century
    if len(matches[2].group(1)) == 2:
        year += 2000

    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseError(f"Invalid date {text!r}: {e}")


def _parse_generic(text: str) -> date:
    """Try ISO first, then the fallback formats."""
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise DateParseError(f"Unrecognized date format: {text!r}")
