from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from dateutil import parser as dtparse


# Order matters: month-first wins for ambiguous inputs such as 03/04/2024.
COMMON_DATE_FORMATS = [
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y-%m-%d",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%d %B %Y",
    "%m/%d/%y",
    "%d/%m/%y",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%d.%m.%y",
]

TIME_SUFFIXES = ("", " %H:%M", " %H:%M:%S")


def _candidate_formats() -> List[str]:
    return [fmt + suffix for fmt in COMMON_DATE_FORMATS for suffix in TIME_SUFFIXES]


CANDIDATE_FORMATS = _candidate_formats()


def _strptime(text: str, fmt: str) -> Optional[datetime]:
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        return None


def parse_flexible_date(value, preferred_format: Optional[str] = None) -> Optional[datetime]:
    """
    Tries, in order:
    - the caller's preferred strptime format
    - COMMON_DATE_FORMATS (with optional HH:MM / HH:MM:SS suffix)
    - dateutil as last resort
    Returns None when nothing matches, never raises.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if preferred_format:
        parsed = _strptime(text, preferred_format)
        if parsed is not None:
            return parsed

    for fmt in CANDIDATE_FORMATS:
        parsed = _strptime(text, fmt)
        if parsed is not None:
            return parsed

    # dateutil reads bare numbers as day-of-month; those are never dates here
    if text.replace(".", "").replace(",", "").isdigit():
        return None

    try:
        return dtparse.parse(text)
    except (dtparse.ParserError, ValueError, OverflowError):
        return None


def is_valid_date_string(value) -> bool:
    return parse_flexible_date(value) is not None


def normalize_to_iso(value) -> Optional[str]:
    parsed = parse_flexible_date(value)
    return parsed.isoformat() if parsed else None
