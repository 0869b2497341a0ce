"""Reader for the cached deadlines CSV."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from deadline_tracker import config
from deadline_tracker.scraper.models import OTHER, DeduplicatedDeadline

logger = logging.getLogger(__name__)


def parse_deadlines_csv(file_path: Optional[Path] = None) -> pd.DataFrame:
    """Parse the deadlines CSV into a DataFrame.

    Args:
        file_path: Path to the CSV file. Defaults to the configured cache file.

    Returns:
        DataFrame with event, date, category and iso_date columns.
    """
    file_path = Path(file_path or config.DEADLINES_CSV)
    if not file_path.exists():
        raise FileNotFoundError(f"Deadlines file not found: {file_path}")

    df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
    if "iso_date" in df.columns:
        df["iso_date"] = pd.to_datetime(df["iso_date"], errors="coerce")

    logger.info(f"Parsed {len(df)} deadlines from {file_path.name}")
    return df


def load_deadlines_csv(file_path: Optional[Path] = None) -> List[DeduplicatedDeadline]:
    df = parse_deadlines_csv(file_path)
    return [
        DeduplicatedDeadline(
            event=row["event"],
            date=row["date"],
            category=row["category"] or OTHER,
        )
        for _, row in df.iterrows()
        if row["event"]
    ]


def get_deadline_summary(df: pd.DataFrame) -> dict:
    """Summary statistics for a deadlines DataFrame."""
    summary = {
        "total_entries": len(df),
        "date_range": None,
        "categories": {},
    }

    if "iso_date" in df.columns and not df["iso_date"].isna().all():
        dates = df["iso_date"].dropna()
        summary["date_range"] = {
            "start": dates.min().strftime("%Y-%m-%d"),
            "end": dates.max().strftime("%Y-%m-%d"),
        }

    if "category" in df.columns:
        summary["categories"] = df["category"].value_counts().to_dict()

    return summary
