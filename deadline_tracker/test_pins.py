"""Tests for pin keys and the merged timeline."""

from __future__ import annotations

from datetime import date, datetime

from deadline_tracker import pins
from deadline_tracker.scraper.models import DeadlineCandidate, DeduplicatedDeadline


def test_scraped_pin_key_collapses_case_and_whitespace():
    a = DeadlineCandidate("Census  Day", "June 1, 2025", date(2025, 6, 1), "registration")
    b = DeduplicatedDeadline("census day", "2025-06-01", "other")
    assert pins.scraped_pin_key(a) == "scr|2025-06-01|census day"
    assert pins.scraped_pin_key(a) == pins.scraped_pin_key(b)


def test_scraped_pin_key_uses_eighty_character_prefix():
    long_a = DeduplicatedDeadline("x" * 80 + " first", "2025-06-01", "other")
    long_b = DeduplicatedDeadline("X" * 80 + " second", "2025-06-01", "other")
    assert pins.scraped_pin_key(long_a) == pins.scraped_pin_key(long_b)


def test_personal_pin_key():
    event = pins.PersonalEvent(id="abc123", title="Dentist", start=datetime(2025, 6, 2, 9, 30))
    assert pins.personal_pin_key(event) == "me|abc123"
    assert event.date_obj == date(2025, 6, 2)


def test_pinned_categories_skip_plain_personal():
    stored = [
        {"key": "scr|2025-06-01|census day", "category": "Registration"},
        {"key": "me|1", "category": "personal", "source": "personal"},
        {"key": "me|2", "category": "financial-aid", "source": "personal"},
    ]
    assert pins.pinned_categories(stored) == {"registration", "financial-aid"}


def test_scraped_exclusions():
    assert pins.scraped_exclusions(["scr|a", "me|1", "scr|b"]) == {"scr|a", "scr|b"}


def test_build_timeline_merges_and_sorts():
    scraped = [
        DeduplicatedDeadline("Tuition due", "June 3, 2025", "financial-aid"),
        DeduplicatedDeadline("Census Day", "June 1, 2025", "registration"),
        {"event": "Broken", "date": "TBA"},
    ]
    personal = [pins.PersonalEvent.from_record({"_id": "7", "title": "Study group", "start": "2025-06-01T18:00:00"})]
    timeline = pins.build_timeline(scraped, personal)

    assert [(e.date_iso, e.title) for e in timeline["all"]] == [
        ("2025-06-01", "Census Day"),
        ("2025-06-01", "Study group"),
        ("2025-06-03", "Tuition due"),
    ]
    assert [e.key for e in timeline["scraped"]] == [
        "scr|2025-06-01|census day",
        "scr|2025-06-03|tuition due",
    ]
    assert set(timeline["by_category"]) == {"registration", "personal", "financial-aid"}
    assert timeline["all"][1].key == "me|7"
