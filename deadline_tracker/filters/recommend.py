"""Recommended-deadline selection with a tiered fallback policy.

Phases, each taken earliest-first until ``target`` items are chosen:

1. anything due within ``RECO_UPCOMING_DAYS`` days (inclusive),
2. items in the user's pinned categories within ``RECO_SHARED_DAYS`` days,
3. a category ladder (add/drop, financial aid, registration, academic)
   starting ``LADDER_START_OFFSET`` days out, one item per category per pass,
4. whatever future items remain.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence, Set

from deadline_tracker import config
from deadline_tracker.pins import scraped_pin_key
from deadline_tracker.scraper import parse_utils
from deadline_tracker.scraper.models import (
    DeadlineCandidate,
    DeduplicatedDeadline,
    as_candidate,
)

logger = logging.getLogger(__name__)


class _Selection:
    """Chosen items in pick order, deduplicated by pin key."""

    def __init__(self, target: int):
        self.target = target
        self.items: List[DeadlineCandidate] = []
        self.keys: Set[str] = set()

    @property
    def full(self) -> bool:
        return len(self.items) >= self.target

    def has(self, candidate: DeadlineCandidate) -> bool:
        return scraped_pin_key(candidate) in self.keys

    def add(self, candidate: DeadlineCandidate) -> bool:
        key = scraped_pin_key(candidate)
        if key in self.keys or self.full:
            return False
        self.keys.add(key)
        self.items.append(candidate)
        return True

    def add_all(self, candidates: Iterable[DeadlineCandidate]) -> None:
        for candidate in candidates:
            if self.full:
                break
            self.add(candidate)


def _future_pool(
    all_items: Iterable,
    exclude_keys: Set[str],
    today: date,
) -> List[DeadlineCandidate]:
    pool = []
    for item in all_items:
        candidate = as_candidate(item)
        if candidate is None or candidate.date_obj < today:
            continue
        if scraped_pin_key(candidate) in exclude_keys:
            continue
        pool.append(candidate)
    pool.sort(key=lambda c: c.date_obj)
    return pool


def _within(pool: Sequence[DeadlineCandidate], start: date, end: date,
            keep: Optional[Callable[[DeadlineCandidate], bool]] = None) -> List[DeadlineCandidate]:
    return [
        c for c in pool
        if start <= c.date_obj <= end and (keep is None or keep(c))
    ]


def _ladder_exhausted(
    pool: Sequence[DeadlineCandidate],
    selection: _Selection,
    ladder: Sequence[str],
    floor: date,
) -> bool:
    return not any(
        c.category in ladder and c.date_obj >= floor and not selection.has(c)
        for c in pool
    )


def _run_ladder(
    pool: Sequence[DeadlineCandidate],
    selection: _Selection,
    today: date,
    ladder: Sequence[str] = config.LADDER_ORDER,
) -> None:
    """Round-robin over ``ladder`` categories, widening the offset on empty passes.

    Stops when the target is reached, when no unchosen ladder item remains at
    or beyond the current offset, or after ``LADDER_MAX_PASSES`` passes.
    """
    offset = config.LADDER_START_OFFSET
    passes = 0
    while not selection.full and passes < config.LADDER_MAX_PASSES:
        floor = parse_utils.days_from(today, offset)
        if _ladder_exhausted(pool, selection, ladder, floor):
            break
        added = False
        for category in ladder:
            pick = next(
                (
                    c for c in pool
                    if c.category == category and c.date_obj >= floor and not selection.has(c)
                ),
                None,
            )
            if pick is not None and selection.add(pick):
                added = True
            if selection.full:
                break
        if not added:
            offset += 1
        passes += 1


def recommend(
    all_items: Iterable,
    pinned_categories: Optional[Set[str]] = None,
    exclude_keys: Optional[Set[str]] = None,
    target: int = config.RECO_TARGET,
    today: Optional[date] = None,
) -> List[DeduplicatedDeadline]:
    """Select up to ``target`` upcoming deadlines, returned in date order."""
    today = parse_utils.as_date(today) if today else parse_utils.today_local()
    pinned = {c.lower() for c in (pinned_categories or set())}
    pool = _future_pool(all_items, set(exclude_keys or ()), today)
    selection = _Selection(target)

    selection.add_all(_within(pool, today, parse_utils.days_from(today, config.RECO_UPCOMING_DAYS)))

    if pinned and not selection.full:
        selection.add_all(
            _within(
                pool,
                today,
                parse_utils.days_from(today, config.RECO_SHARED_DAYS),
                keep=lambda c: c.category.lower() in pinned,
            )
        )

    if not selection.full:
        _run_ladder(pool, selection, today)

    if not selection.full:
        selection.add_all(pool)

    logger.debug(f"Recommended {len(selection.items)} of {len(pool)} upcoming deadlines")
    chosen = sorted(selection.items, key=lambda c: c.date_obj)
    return [DeduplicatedDeadline(c.event, c.date_text, c.category) for c in chosen]
