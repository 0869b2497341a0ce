"""Tests for the Canvas calendar feed import."""

from __future__ import annotations

from datetime import date

import pytest

from deadline_tracker import pins
from deadline_tracker.scraper.canvas_feed import (
    CanvasEvent,
    CanvasFeedError,
    extract_course_code,
    load_canvas_feed,
    parse_canvas_ics,
)

FEED = "\r\n".join([
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//Instructure//Canvas//EN",
    "BEGIN:VEVENT",
    "UID:event-assignment-101",
    "DTSTAMP:20250901T000000Z",
    "DTSTART:20251010T065900Z",
    "DTEND:20251010T065900Z",
    "SUMMARY:Project proposal [CSS 497 A]",
    "URL:https://canvas.uw.edu/courses/1/assignments/101",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "UID:event-calendar-7",
    "DTSTAMP:20250901T000000Z",
    "DTSTART;VALUE=DATE:20251003",
    "SUMMARY:Weekly Update - Week 1",
    "END:VEVENT",
    "END:VCALENDAR",
])


def test_extract_course_code():
    assert extract_course_code("Weekly Update - Week 4 [CSS 497 A]") == "CSS 497 A"
    assert extract_course_code("Quiz 2 [BIS300]") == "BIS300"
    assert extract_course_code("Office hours") is None
    assert extract_course_code(None) is None


def test_parse_canvas_ics_orders_by_date():
    events = parse_canvas_ics(FEED)

    assert [(e.uid, e.start) for e in events] == [
        ("event-calendar-7", date(2025, 10, 3)),
        ("event-assignment-101", date(2025, 10, 10)),
    ]
    assert events[0].category == "Canvas"
    assert events[1].course_code == "CSS 497 A"
    assert events[1].category == "Canvas (CSS 497 A)"
    assert events[1].url == "https://canvas.uw.edu/courses/1/assignments/101"


def test_canvas_event_as_served_deadline():
    event = CanvasEvent("u1", "Essay [ENG 101]", date(2025, 11, 2), "ENG 101")
    deadline = event.as_deadline()
    assert deadline.event == "Essay [ENG 101]"
    assert deadline.iso_date == "2025-11-02"
    assert deadline.category == "Canvas (ENG 101)"


def test_canvas_events_join_the_timeline():
    canvas = [CanvasEvent("u1", "Essay [ENG 101]", date(2025, 11, 2), "ENG 101")]
    timeline = pins.build_timeline([], [], canvas)

    entry = timeline["all"][0]
    assert entry.key == "canvas|u1"
    assert entry.source == "canvas"
    assert entry.category == "canvas (eng 101)"
    assert timeline["scraped"] == []
    assert pins.make_pin(entry.key)["source"] == "canvas"


def test_load_canvas_feed_from_file(tmp_path):
    path = tmp_path / "canvas.ics"
    path.write_text(FEED, encoding="utf-8")
    assert len(load_canvas_feed(path)) == 2

    with pytest.raises(CanvasFeedError):
        load_canvas_feed(tmp_path / "missing.ics")
