"""Scrape, merge and cache the served deadline list."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from deadline_tracker import config
from deadline_tracker.io import dedupe, parse_output, save_csv
from deadline_tracker.scraper import calendar_html
from deadline_tracker.scraper.models import DeduplicatedDeadline

logger = logging.getLogger(__name__)


def scrape_deadlines(urls: Optional[Iterable[str]] = None) -> List[DeduplicatedDeadline]:
    """Scrape all sources and return merged deadlines sorted by date."""
    candidates = calendar_html.fetch_all_deadlines(urls)
    return dedupe.sort_by_date(dedupe.dedupe(candidates))


def get_deadlines(refresh: bool = False, cache_path: Optional[Path] = None) -> List[DeduplicatedDeadline]:
    """Return cached deadlines when available, otherwise scrape and cache them."""
    cache_path = Path(cache_path or config.DEADLINES_CSV)
    if not refresh and cache_path.exists():
        cached = parse_output.load_deadlines_csv(cache_path)
        if cached:
            logger.info(f"Using {len(cached)} cached deadlines from {cache_path.name}")
            return dedupe.sort_by_date(cached)

    logger.info("No cached deadlines; scraping fresh data")
    deadlines = scrape_deadlines()
    if deadlines:
        save_csv.save_deadlines_csv(deadlines, cache_path)
        logger.info(f"Cached {len(deadlines)} deadlines to {cache_path}")
    return deadlines
