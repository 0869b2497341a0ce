"""CSV output helpers for deduplicated deadlines."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from deadline_tracker import config
from deadline_tracker.scraper.models import DeduplicatedDeadline

CSV_COLUMNS = ["event", "date", "category", "iso_date"]


def prepare_rows_for_csv(deadlines: Iterable[DeduplicatedDeadline]) -> List[dict]:
    return [{**d.as_dict(), "iso_date": d.iso_date or ""} for d in deadlines]


def save_deadlines_csv(
    deadlines: Iterable[DeduplicatedDeadline],
    output_path: Optional[Path] = None,
) -> Path:
    """Save deadlines to CSV, ordered by date then title."""
    prepared_rows = prepare_rows_for_csv(deadlines)
    if not prepared_rows:
        raise RuntimeError("No deadlines to save.")

    df = pd.DataFrame(prepared_rows, columns=CSV_COLUMNS)
    df.sort_values(by=["iso_date", "event"], inplace=True, ignore_index=True, kind="stable")

    output_path = Path(output_path or config.DEADLINES_CSV)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    return output_path
