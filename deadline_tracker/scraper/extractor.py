"""Turn scraped table rows into deadline candidates."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from deadline_tracker.filters.categories import categorize
from deadline_tracker.scraper import parse_utils
from deadline_tracker.scraper.models import OTHER, DeadlineCandidate, RawRow

logger = logging.getLogger(__name__)


def extract(rows: Iterable[RawRow]) -> List[DeadlineCandidate]:
    """Emit one candidate per parseable date cell.

    A row without a title inherits the last title seen in the same table,
    which is how rowspan headers come through the scraper. Rows that end up
    without a title or without a parseable date are skipped.
    """
    candidates: List[DeadlineCandidate] = []
    last_title = ""
    current_table: Optional[Tuple[Optional[str], int]] = None
    skipped = 0

    for row in rows:
        table = (row.source_url, row.table_index)
        if table != current_table:
            current_table = table
            last_title = ""

        title = parse_utils.clean_text(row.event_text)
        if title:
            last_title = title
        else:
            title = last_title
        if not title:
            skipped += 1
            continue

        category = categorize(title, row.heading_text)
        if category == OTHER and row.default_category:
            category = row.default_category

        for cell in row.date_cells:
            raw_date = parse_utils.clean_text(cell)
            parsed = parse_utils.normalize(raw_date)
            if parsed is None:
                skipped += 1
                continue
            candidates.append(
                DeadlineCandidate(
                    event=title,
                    date_text=raw_date,
                    date_obj=parsed,
                    category=category,
                )
            )

    logger.debug(f"Extracted {len(candidates)} candidates, skipped {skipped} cells/rows")
    return candidates
