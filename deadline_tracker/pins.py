"""Pin keys, personal events and the merged deadline timeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from deadline_tracker import config
from deadline_tracker.scraper import parse_utils
from deadline_tracker.scraper.canvas_feed import CANVAS_SOURCE, CanvasEvent
from deadline_tracker.scraper.models import OTHER, as_candidate

SCRAPED_PREFIX = "scr|"
PERSONAL_PREFIX = "me|"
CANVAS_PREFIX = "canvas|"
PERSONAL_CATEGORY = "personal"


@dataclass(slots=True, frozen=True)
class PersonalEvent:
    """A user's own calendar entry, treated as all-day."""

    id: str
    title: str
    start: Union[date, datetime, str]
    category: str = PERSONAL_CATEGORY

    @property
    def date_obj(self) -> Optional[date]:
        if isinstance(self.start, (date, datetime)):
            return parse_utils.as_date(self.start)
        return parse_utils.normalize(str(self.start)[:10])

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PersonalEvent":
        return cls(
            id=str(record.get("id") or record.get("_id") or ""),
            title=record.get("title") or "Untitled",
            start=record.get("start") or "",
            category=(record.get("category") or PERSONAL_CATEGORY).lower(),
        )


@dataclass(slots=True, frozen=True)
class TimelineEntry:
    key: str
    source: str
    title: str
    category: str
    date_iso: str


def title_prefix(title: Optional[str]) -> str:
    return " ".join((title or "").split()).lower()[: config.PIN_TITLE_PREFIX]


def scraped_pin_key(item: Any) -> str:
    """``scr|<isoDate>|<title prefix>`` for a scraped deadline."""
    candidate = as_candidate(item)
    if candidate is None:
        return f"{SCRAPED_PREFIX}|{title_prefix(getattr(item, 'event', ''))}"
    return f"{SCRAPED_PREFIX}{candidate.iso_date}|{title_prefix(candidate.event)}"


def personal_pin_key(event: PersonalEvent) -> str:
    return f"{PERSONAL_PREFIX}{event.id}"


def canvas_pin_key(event: CanvasEvent) -> str:
    return f"{CANVAS_PREFIX}{event.uid}"


def is_scraped_key(key: str) -> bool:
    return key.startswith(SCRAPED_PREFIX)


def make_pin(
    key: str,
    event: Optional[str] = None,
    category: Optional[str] = None,
    date_iso: Optional[str] = None,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    """Stored pin record; source defaults from the key prefix."""
    if not source:
        if key.startswith(PERSONAL_PREFIX):
            source = PERSONAL_CATEGORY
        elif key.startswith(CANVAS_PREFIX):
            source = CANVAS_SOURCE
        else:
            source = "scraped"
    return {
        "key": key,
        "event": event or "",
        "category": (category or OTHER).lower(),
        "dateISO": date_iso,
        "source": source,
    }


def scraped_exclusions(pin_keys: Iterable[str]) -> Set[str]:
    """Pinned scraped keys, which recommendations should not repeat."""
    return {key for key in pin_keys if is_scraped_key(key)}


def pinned_categories(pins: Iterable[Mapping[str, Any]]) -> Set[str]:
    """Categories represented by a user's pins, ignoring plain personal events."""
    categories: Set[str] = set()
    for pin in pins:
        category = (pin.get("category") or "").strip().lower()
        key = str(pin.get("key") or "")
        if key.startswith(PERSONAL_PREFIX) or pin.get("source") == PERSONAL_CATEGORY:
            if category and category != PERSONAL_CATEGORY:
                categories.add(category)
            continue
        categories.add(category or OTHER)
    return categories


def build_timeline(
    scraped: Iterable[Any] = (),
    personal: Iterable[PersonalEvent] = (),
    canvas: Iterable[CanvasEvent] = (),
) -> Dict[str, Any]:
    """Merge scraped deadlines, personal events and Canvas items into one dated list.

    Returns ``{"all": [...], "scraped": [...], "by_category": {...}}`` with
    entries sorted by date and then title.
    """
    entries: List[TimelineEntry] = []

    for item in scraped:
        candidate = as_candidate(item)
        if candidate is None:
            continue
        entries.append(
            TimelineEntry(
                key=scraped_pin_key(candidate),
                source="scraped",
                title=candidate.event or "Untitled",
                category=(candidate.category or OTHER).lower(),
                date_iso=candidate.iso_date,
            )
        )

    for event in personal:
        event_date = event.date_obj
        if event_date is None:
            continue
        entries.append(
            TimelineEntry(
                key=personal_pin_key(event),
                source="personal",
                title=event.title or "Untitled",
                category=(event.category or PERSONAL_CATEGORY).lower(),
                date_iso=event_date.isoformat(),
            )
        )

    for item in canvas:
        entries.append(
            TimelineEntry(
                key=canvas_pin_key(item),
                source=CANVAS_SOURCE,
                title=item.title or "Untitled",
                category=item.category.lower(),
                date_iso=item.start.isoformat(),
            )
        )

    entries.sort(key=lambda e: (e.date_iso, e.title))
    by_category: Dict[str, List[TimelineEntry]] = {}
    for entry in entries:
        by_category.setdefault(entry.category, []).append(entry)

    return {
        "all": entries,
        "scraped": [e for e in entries if e.source == "scraped"],
        "by_category": by_category,
    }
