"""Utilities for deduplicating deadlines and merging session variants."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Set, Tuple

from deadline_tracker.scraper.models import (
    OTHER,
    DeadlineCandidate,
    DeduplicatedDeadline,
    as_candidate,
    is_specific,
)

SESSION_ORDER = ("Full", "A", "B")

_SESSION_QUALIFIER_RE = re.compile(
    r"\b(?:Summer\s*)?(?:Full[-\s]?term|A-term|B-term|Session\s*A|Session\s*B)\b",
    re.I,
)
# Suffix written by a previous merge, e.g. "(Full/A)"
_SESSION_SUFFIX_RE = re.compile(r"\s*\((?:Full|A|B)(?:/(?:Full|A|B))*\)\s*$")
_TRAILING_DASH_RE = re.compile(r"\s*[-–—]\s*$")

_FULL_RE = re.compile(r"full[-\s]?term|session\s*full", re.I)
_A_RE = re.compile(r"\ba-term\b|\bsession\s*a\b", re.I)
_B_RE = re.compile(r"\bb-term\b|\bsession\s*b\b", re.I)
# Bare markers only count when capitalized, so "a" and "full" in prose do not
_FULL_BARE_RE = re.compile(r"\bFull\b")
_A_BARE_RE = re.compile(r"\bA\b")
_B_BARE_RE = re.compile(r"\bB\b")


def normalize_base_title(title: str) -> str:
    """Strip session qualifiers so session variants share one title."""
    text = _SESSION_SUFFIX_RE.sub("", title)
    text = _SESSION_QUALIFIER_RE.sub("", text)
    text = " ".join(text.split())
    return _TRAILING_DASH_RE.sub("", text).strip()


def extract_sessions(title: str) -> Set[str]:
    """Return the session tags (Full, A, B) mentioned anywhere in the title."""
    sessions: Set[str] = set()
    if _FULL_RE.search(title) or _FULL_BARE_RE.search(title):
        sessions.add("Full")
    if _A_RE.search(title) or _A_BARE_RE.search(title):
        sessions.add("A")
    if _B_RE.search(title) or _B_BARE_RE.search(title):
        sessions.add("B")
    return sessions


def prefer_category(existing: str, incoming: str) -> str:
    """Keep the specific category when one side is 'other'; ties keep existing."""
    if existing == OTHER and is_specific(incoming):
        return incoming
    return existing


def merge_key(candidate: DeadlineCandidate) -> str:
    return f"{candidate.iso_date}::{normalize_base_title(candidate.event).lower()}"


def session_suffix(sessions: Iterable[str]) -> str:
    ordered = [tag for tag in SESSION_ORDER if tag in set(sessions)]
    if not ordered:
        return ""
    return f" ({'/'.join(ordered)})"


def dedupe(candidates: Iterable) -> List[DeduplicatedDeadline]:
    """Collapse candidates sharing a date and base title into one deadline.

    Accepts candidates or any deadline-like record (see ``as_candidate``),
    so already-deduplicated output can be fed back in unchanged.
    """
    groups: Dict[str, Tuple[DeadlineCandidate, str, str, Set[str]]] = {}

    for item in candidates:
        candidate = as_candidate(item)
        if candidate is None:
            continue
        if not candidate.event.strip() or not (candidate.category or "").strip():
            continue

        key = merge_key(candidate)
        sessions = extract_sessions(candidate.event)
        existing = groups.get(key)
        if existing is None:
            base = normalize_base_title(candidate.event)
            groups[key] = (candidate, base, candidate.category, set(sessions))
            continue

        first, base, category, merged = existing
        groups[key] = (
            first,
            base,
            prefer_category(category, candidate.category),
            merged | sessions,
        )

    return [
        DeduplicatedDeadline(
            event=base + session_suffix(sessions),
            date=first.date_text,
            category=category,
        )
        for first, base, category, sessions in groups.values()
    ]


def sort_by_date(items: Iterable) -> List:
    """Sort deadline-like records ascending by normalized date (stable)."""
    dated = []
    for item in items:
        candidate = as_candidate(item)
        if candidate is not None:
            dated.append((candidate.date_obj, item))
    dated.sort(key=lambda pair: pair[0])
    return [item for _, item in dated]
