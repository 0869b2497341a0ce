"""Canvas LMS calendar feed (.ics) import."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

import requests
from ics import Calendar
from ics.grammar.parse import ParseError

from deadline_tracker import config
from deadline_tracker.scraper import parse_utils
from deadline_tracker.scraper.models import DeduplicatedDeadline

logger = logging.getLogger(__name__)

CANVAS_SOURCE = "canvas"

# e.g. "Weekly Update - Week 4 [CSS 497 A]"
_COURSE_CODE_RE = re.compile(r"\[([A-Z]{2,4}\s*\d+[A-Z]?(?:\s*[A-Z])?)\]")


class CanvasFeedError(Exception):
    """The feed could not be fetched, read or parsed."""


@dataclass(slots=True, frozen=True)
class CanvasEvent:
    uid: str
    title: str
    start: date
    course_code: Optional[str] = None
    description: str = ""
    url: Optional[str] = None

    @property
    def category(self) -> str:
        return f"Canvas ({self.course_code})" if self.course_code else "Canvas"

    def as_deadline(self) -> DeduplicatedDeadline:
        return DeduplicatedDeadline(self.title, self.start.isoformat(), self.category)


def extract_course_code(summary: Optional[str]) -> Optional[str]:
    match = _COURSE_CODE_RE.search(summary or "")
    return match.group(1).strip() if match else None


def parse_canvas_ics(ics_text: str) -> List[CanvasEvent]:
    """Parse feed text into events ordered by start date then title.

    Timed events keep the calendar date of their own timestamp (UTC for
    Canvas due dates). Events without a start are skipped.
    """
    try:
        calendar = Calendar(ics_text)
    except (ParseError, ValueError) as exc:
        raise CanvasFeedError(f"Invalid Canvas feed: {exc}") from exc

    events: List[CanvasEvent] = []
    skipped = 0
    for item in calendar.events:
        if item.begin is None:
            skipped += 1
            continue
        title = parse_utils.clean_text(item.name) or ""
        events.append(
            CanvasEvent(
                uid=item.uid or "",
                title=title,
                start=item.begin.date(),
                course_code=extract_course_code(title),
                description=item.description or "",
                url=item.url or None,
            )
        )

    events.sort(key=lambda e: (e.start, e.title))
    logger.info(f"[canvas] parsed={len(events)}, skipped={skipped}")
    return events


def load_canvas_feed(source: Union[str, Path]) -> List[CanvasEvent]:
    """Read a feed from an http(s) URL or a local file."""
    source_text = str(source)
    try:
        if source_text.startswith(("http://", "https://")):
            resp = requests.get(
                source_text,
                headers={"User-Agent": config.REQUEST_USER_AGENT},
                timeout=config.REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            ics_text = resp.text
        else:
            ics_text = Path(source_text).read_text(encoding="utf-8")
    except (requests.RequestException, OSError) as exc:
        raise CanvasFeedError(f"Could not read Canvas feed: {exc}") from exc
    return parse_canvas_ics(ics_text)
