"""iCalendar export of deduplicated deadlines as all-day events."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from pathlib import Path
from typing import Iterable, Optional

from ics import Calendar, Event
from ics.grammar.parse import ContentLine

from deadline_tracker import config
from deadline_tracker.scraper import parse_utils
from deadline_tracker.scraper.models import OTHER, DeduplicatedDeadline

logger = logging.getLogger(__name__)


def build_calendar(deadlines: Iterable[DeduplicatedDeadline]) -> Calendar:
    """One all-day event per deadline; ranges span through their last day."""
    calendar = Calendar()
    calendar.extra.append(ContentLine(name="X-WR-CALNAME", value=config.ICS_CALENDAR_NAME))

    total = 0
    skipped = 0
    for index, deadline in enumerate(deadlines):
        total += 1
        span = parse_utils.parse_range(deadline.date)
        if span is None:
            skipped += 1
            continue
        start, end = span

        event = Event()
        event.name = deadline.event
        event.begin = datetime.combine(start, time.min)
        # make_all_day() turns an inclusive last day into the exclusive DTEND
        event.end = datetime.combine(end - timedelta(days=1), time.min)
        event.make_all_day()
        event.description = f"Category: {deadline.category or OTHER}"
        event.uid = f"deadline-{index}@{config.ICS_UID_DOMAIN}"
        calendar.events.add(event)

    logger.info(f"[ICS] total={total}, valid={total - skipped}, skipped={skipped}")
    return calendar


def export_ics(deadlines: Iterable[DeduplicatedDeadline], output_path: Optional[Path] = None) -> Path:
    output_path = Path(output_path or config.ICS_OUTPUT)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    calendar = build_calendar(deadlines)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.writelines(calendar)
    return output_path
