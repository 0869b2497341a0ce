"""Configuration constants and settings for the academic deadline tracker."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent

# ---------------------------------------------------------------------------
# Scraper settings
# ---------------------------------------------------------------------------

CALENDAR_BASE_URL = "https://www.uwb.edu/academic-calendar"

# Known-good pages from previous years; kept so older content stays visible.
STATIC_URLS = (
    f"{CALENDAR_BASE_URL}/2024-2025-calendars/application-deadlines-2024-2025",
    f"{CALENDAR_BASE_URL}/2024-2025-calendars/dates-of-instruction-2024-2025",
    f"{CALENDAR_BASE_URL}/2024-2025-calendars/grade-deadlines-2024-2025",
    f"{CALENDAR_BASE_URL}/2024-2025-calendars/registration-deadlines-2024-2025",
    f"{CALENDAR_BASE_URL}/2024-2025-calendars/tuition-fee-assessment-deadlines-2024-2025",
    f"{CALENDAR_BASE_URL}/2024-2025-calendars/u-pass-activation-dates-payment-due-dates-2024-2025",
)

# Page slugs probed for the current and upcoming academic years
CALENDAR_SLUGS = (
    "application-deadlines",
    "dates-of-instruction",
    "grade-deadlines",
    "registration-deadlines",
    "tuition-fee-assessment-deadlines",
    "u-pass-activation-dates-payment-due-dates",
)

# Academic years roll over in July (month index 7)
ACADEMIC_YEAR_START_MONTH = 7
DISCOVERY_YEARS_AHEAD = 2

REQUEST_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36"
)
REQUEST_TIMEOUT = 20
SCRAPE_MAX_WORKERS = 6

# Table heading context
HEADING_TAGS = ("h1", "h2", "h3", "h4", "p")

# ---------------------------------------------------------------------------
# Calendar semantics
# ---------------------------------------------------------------------------

# Local calendar used to decide what "today" is
LOCAL_TIMEZONE = os.getenv("DEADLINE_TRACKER_TZ", "America/Los_Angeles")

PIN_TITLE_PREFIX = 80

# Recommendation policy
RECO_TARGET = 7
RECO_UPCOMING_DAYS = 4
RECO_SHARED_DAYS = 21
LADDER_ORDER = ("add/drop", "financial-aid", "registration", "academic")
LADDER_START_OFFSET = 7
# One year of widening; the ladder never looks further than this.
LADDER_MAX_PASSES = 365

# Reminder preferences
DEFAULT_LEAD_DAYS = 3
MIN_LEAD_DAYS = 0
MAX_LEAD_DAYS = 30

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

OUTPUT_DIR = Path(os.getenv("DEADLINE_TRACKER_OUTPUT_DIR", str(PROJECT_ROOT / "output")))
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

DEADLINES_CSV = OUTPUT_DIR / "deadlines.csv"
ICS_OUTPUT = OUTPUT_DIR / "deadlines.ics"
USERS_FILE = Path(os.getenv("DEADLINE_TRACKER_USERS_FILE", str(OUTPUT_DIR / "users.json")))

ICS_CALENDAR_NAME = "Academic Deadlines"
ICS_UID_DOMAIN = "deadline-tracker.local"

# Canvas calendar feed (URL or file); a user's stored "canvas_ics" takes precedence
CANVAS_ICS_SOURCE = os.getenv("DEADLINE_TRACKER_CANVAS_ICS") or None


class Config:
    """Mail settings for the reminder digest."""

    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    EMAIL_USER: Optional[str] = os.getenv("EMAIL_USER")
    EMAIL_PASS: Optional[str] = os.getenv("EMAIL_PASS")
    MAIL_FROM: Optional[str] = os.getenv("MAIL_FROM")
    SMTP_TIMEOUT: int = 30

    @classmethod
    def sender(cls) -> Optional[str]:
        return cls.MAIL_FROM or cls.EMAIL_USER

    @classmethod
    def validate(cls):
        """Validate that mail credentials are present."""
        if not cls.EMAIL_USER or not cls.EMAIL_PASS:
            raise ConfigError(
                "EMAIL_USER and EMAIL_PASS environment variables are required. "
                "Please set them before sending reminders."
            )


class ConfigError(Exception):
    """Raised when required configuration is missing."""


class MailerError(Exception):
    """Raised when a reminder email cannot be delivered."""

    def __init__(self, message: str, recipient: Optional[str] = None):
        super().__init__(message)
        self.recipient = recipient
