"""Parsing helpers for academic-calendar date cells."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

import pytz
from dateutil import parser as date_parser

from deadline_tracker import config

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

PLACEHOLDERS = {"tba", "tbd", "none", "no class", "no classes", "n/a", "--"}

_DASH = r"\s*[-–—]\s*"
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_MONTH_DAY_RE = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),\s*(\d{4})$")
_SAME_MONTH_RANGE_RE = re.compile(
    r"^([A-Za-z]+)\.?\s+(\d{1,2})" + _DASH + r"(\d{1,2}),\s*(\d{4})$"
)
_CROSS_MONTH_RANGE_RE = re.compile(
    r"^([A-Za-z]+)\.?\s+(\d{1,2})" + _DASH + r"([A-Za-z]+)\.?\s+(\d{1,2}),\s*(\d{4})$"
)
_LAST_YEAR_RE = re.compile(r"\d{4}(?!.*\d{4})")

# Fixed default so the generic fallback never fills gaps from the clock
_FALLBACK_DEFAULT = datetime(1900, 1, 1)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Normalize whitespace and strip strings."""
    if value is None:
        return None
    return " ".join(str(value).split()).strip() or None


def month_index(name: Optional[str]) -> Optional[int]:
    """Return 1-12 for a month name or abbreviation, tolerating a trailing period."""
    if not name:
        return None
    return MONTHS.get(name.strip().lower().rstrip("."))


def _safe_date(year: int, month: Optional[int], day: int) -> Optional[date]:
    if month is None:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _trim_after_year(text: str) -> str:
    match = _LAST_YEAR_RE.search(text)
    if not match or match.start() == 0:
        return text
    return text[: match.end()].strip()


def _generic_parse(text: str) -> Optional[date]:
    if not re.search(r"\b\d{4}\b", text):
        return None
    try:
        return date_parser.parse(text, default=_FALLBACK_DEFAULT).date()
    except (ValueError, OverflowError, TypeError):
        return None


def normalize(text: Optional[str]) -> Optional[date]:
    """Parse a date or date-range cell into a sortable calendar date.

    Ranges yield their first day. Returns None for anything unparseable;
    never raises and never consults the current date.
    """
    s = clean_text(text)
    if not s:
        return None
    if s.lower() in PLACEHOLDERS:
        return None

    m = _ISO_RE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    s = _trim_after_year(s)

    m = _SLASH_RE.match(s)
    if m:
        return _safe_date(int(m.group(3)), int(m.group(1)), int(m.group(2)))

    m = _MONTH_DAY_RE.match(s)
    if m:
        return _safe_date(int(m.group(3)), month_index(m.group(1)), int(m.group(2)))

    m = _SAME_MONTH_RANGE_RE.match(s)
    if m:
        return _safe_date(int(m.group(4)), month_index(m.group(1)), int(m.group(2)))

    m = _CROSS_MONTH_RANGE_RE.match(s)
    if m:
        return normalize(f"{m.group(1)} {m.group(2)}, {m.group(5)}")

    return _generic_parse(s)


def parse_range(text: Optional[str]) -> Optional[Tuple[date, date]]:
    """Return ``(start, end)`` for a date cell, with ``end`` exclusive."""
    s = clean_text(text)
    if not s or s.lower() in PLACEHOLDERS:
        return None

    if not _ISO_RE.match(s):
        s = _trim_after_year(s)

    m = _SAME_MONTH_RANGE_RE.match(s)
    if m:
        year, month = int(m.group(4)), month_index(m.group(1))
        start = _safe_date(year, month, int(m.group(2)))
        last = _safe_date(year, month, int(m.group(3)))
        if start and last and last >= start:
            return start, last + timedelta(days=1)
        return None

    m = _CROSS_MONTH_RANGE_RE.match(s)
    if m:
        year = int(m.group(5))
        start = _safe_date(year, month_index(m.group(1)), int(m.group(2)))
        last = _safe_date(year, month_index(m.group(3)), int(m.group(4)))
        if start and last and last >= start:
            return start, last + timedelta(days=1)
        return None

    start = normalize(s)
    if start is None:
        return None
    return start, start + timedelta(days=1)


def to_iso(text: Optional[str]) -> Optional[str]:
    parsed = normalize(text)
    return parsed.isoformat() if parsed else None


def today_local(tz_name: Optional[str] = None) -> date:
    """Return today's date in the configured local calendar."""
    tz_local = pytz.timezone(tz_name or config.LOCAL_TIMEZONE)
    return datetime.now(tz_local).date()


def as_date(value) -> date:
    """Drop any time-of-day component so comparisons are date-only."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_from(today: date, days: int) -> date:
    return today + timedelta(days=days)
