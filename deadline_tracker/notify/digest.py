"""Reminder digest: pinned deadlines falling inside a user's lead window."""

from __future__ import annotations

import html
import logging
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Set

from deadline_tracker.scraper import parse_utils
from deadline_tracker.scraper.models import DeduplicatedDeadline, as_candidate

logger = logging.getLogger(__name__)


def normalize_title(title: Optional[str]) -> str:
    return " ".join((title or "").split()).lower()


def pin_identity(title: Optional[str], date_text: Optional[str]) -> Optional[str]:
    """``<normalized title>|<isoDate>``; ignores category and source on purpose."""
    iso = parse_utils.to_iso(date_text)
    if iso is None:
        return None
    return f"{normalize_title(title)}|{iso}"


def pinned_identities(pins: Iterable[Mapping[str, Any]]) -> Set[str]:
    """Identity set for stored pin records with ``event``/``date`` fields."""
    identities: Set[str] = set()
    for pin in pins:
        identity = pin_identity(
            pin.get("event") or pin.get("title"),
            pin.get("date") or pin.get("dateISO") or pin.get("date_iso"),
        )
        if identity:
            identities.add(identity)
    return identities


def build_digest(
    pinned_keys: Set[str],
    all_deadlines: Iterable[Any],
    lead_days: int,
    today: Optional[date] = None,
) -> List[DeduplicatedDeadline]:
    """Pinned deadlines due in ``[today, today + lead_days)``, earliest first.

    A user with no pins gets an empty digest.
    """
    if not pinned_keys:
        return []

    today = parse_utils.as_date(today) if today else parse_utils.today_local()
    end = parse_utils.days_from(today, lead_days)

    matches = []
    for item in all_deadlines:
        candidate = as_candidate(item)
        if candidate is None:
            continue
        identity = f"{normalize_title(candidate.event)}|{candidate.iso_date}"
        if identity not in pinned_keys:
            continue
        if today <= candidate.date_obj < end:
            matches.append(candidate)

    matches.sort(key=lambda c: c.date_obj)
    logger.debug(f"Digest window {today}..{end}: {len(matches)} pinned deadline(s)")
    return [DeduplicatedDeadline(c.event, c.date_text, c.category) for c in matches]


def digest_subject(count: int, lead_days: int) -> str:
    return f"Deadline Tracker: {count} pinned deadline(s) in next {lead_days} day(s)"


def _format_item(item: DeduplicatedDeadline) -> str:
    when = item.date_obj
    nice = when.strftime("%b %d, %Y") if when else item.date
    return (
        f'<li style="margin:6px 0"><strong>{html.escape(item.event)}</strong> '
        f'<em style="color:#666">({html.escape(item.category or "other")})</em><br/>'
        f"<span>{nice}</span></li>"
    )


def render_digest_html(items: List[DeduplicatedDeadline], lead_days: int) -> str:
    """HTML body for the reminder email."""
    if items:
        rows = "".join(_format_item(item) for item in items)
    else:
        rows = "<li>No pinned items found in this window.</li>"
    return (
        '<div style="font-family:system-ui,Segoe UI,Arial,sans-serif;font-size:14px;'
        'line-height:1.5;color:#111">'
        '<h2 style="margin:0 0 8px">Your upcoming pinned deadlines</h2>'
        f"<p>Here are your <strong>pinned</strong> deadlines due in the next "
        f"<strong>{lead_days}</strong> day(s):</p>"
        f'<ul style="padding-left:18px">{rows}</ul>'
        "</div>"
    )
