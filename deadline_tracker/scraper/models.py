"""Shared data models for the academic deadline tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional, Tuple

from deadline_tracker.scraper import parse_utils

REGISTRATION = "registration"
ADD_DROP = "add/drop"
FINANCIAL_AID = "financial-aid"
ACADEMIC = "academic"
OTHER = "other"

# Field names seen on loosely shaped deadline records, in lookup order
_TITLE_FIELDS = ("event", "title")
_DATE_FIELDS = ("date", "dateText", "date_text", "text")


def is_specific(category: Optional[str]) -> bool:
    return bool(category) and category != OTHER


@dataclass(slots=True, frozen=True)
class RawRow:
    """One scraped table row: a title, its date cell(s) and the table heading."""

    event_text: str
    heading_text: str
    date_cell_text: str
    more_date_cells: Tuple[str, ...] = ()
    table_index: int = 0
    source_url: Optional[str] = None
    default_category: Optional[str] = None

    @property
    def date_cells(self) -> Tuple[str, ...]:
        return (self.date_cell_text, *self.more_date_cells)


@dataclass(slots=True, frozen=True)
class DeadlineCandidate:
    """A single extracted (title, date, category) triple before deduplication."""

    event: str
    date_text: str
    date_obj: date
    category: str

    @property
    def iso_date(self) -> str:
        return self.date_obj.isoformat()


@dataclass(slots=True, frozen=True)
class DeduplicatedDeadline:
    """Served deadline shape; unique per (date, base title).

    The date text is parsed once, on construction.
    """

    event: str
    date: str
    category: str
    date_obj: Optional[date] = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "date_obj", parse_utils.normalize(self.date))

    @property
    def iso_date(self) -> Optional[str]:
        parsed = self.date_obj
        return parsed.isoformat() if parsed else None

    def as_dict(self) -> dict:
        return {"event": self.event, "date": self.date, "category": self.category}


def _first_field(record: Mapping[str, Any], names: Tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = record.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def as_candidate(item: Any) -> Optional[DeadlineCandidate]:
    """Resolve any deadline-like record into a DeadlineCandidate.

    Accepts DeadlineCandidate, DeduplicatedDeadline or a mapping with the
    loose field names produced by older scrapes and stored pins
    (``event``/``title`` for the title, ``date``/``dateText``/``text`` for the
    date). Returns None when no usable date can be found.
    """
    if isinstance(item, DeadlineCandidate):
        return item
    if isinstance(item, DeduplicatedDeadline):
        parsed = item.date_obj
        if parsed is None:
            return None
        return DeadlineCandidate(item.event, item.date, parsed, item.category)

    if isinstance(item, Mapping):
        record = item
    else:
        record = {
            name: getattr(item, name, None)
            for name in (*_TITLE_FIELDS, *_DATE_FIELDS, "category")
        }

    title = _first_field(record, _TITLE_FIELDS) or ""
    date_text = _first_field(record, _DATE_FIELDS) or title
    parsed = parse_utils.normalize(date_text)
    if parsed is None:
        return None
    category = parse_utils.clean_text(record.get("category")) or OTHER
    return DeadlineCandidate(title, date_text, parsed, category.lower())
