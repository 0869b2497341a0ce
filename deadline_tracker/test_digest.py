"""Tests for the reminder digest and reminder service."""

from __future__ import annotations

import json
from datetime import date

import pytest

from deadline_tracker.notify import digest
from deadline_tracker.notify.reminders import JsonUserStore, ReminderService, clamp_lead_days
from deadline_tracker.scraper.models import DeduplicatedDeadline

TODAY = date(2025, 5, 28)
CENSUS = DeduplicatedDeadline("Census Day", "June 1, 2025", "registration")


def test_pinned_item_inside_window_is_included():
    result = digest.build_digest({"census day|2025-06-01"}, [CENSUS], 5, today=TODAY)
    assert result == [CENSUS]
    assert digest.build_digest({"census day|2025-06-01"}, [CENSUS], 3, today=TODAY) == []


def test_lead_days_upper_bound_is_exclusive():
    # Census Day is 4 days out from TODAY
    pinned = {"census day|2025-06-01"}
    assert digest.build_digest(pinned, [CENSUS], 5, today=TODAY) == [CENSUS]
    assert digest.build_digest(pinned, [CENSUS], 4, today=TODAY) == []


def test_three_days_out_boundary():
    item = DeduplicatedDeadline("Census Day", "2025-05-31", "registration")
    pinned = {"census day|2025-05-31"}
    assert digest.build_digest(pinned, [item], 4, today=TODAY) == [item]
    assert digest.build_digest(pinned, [item], 3, today=TODAY) == []


def test_no_pins_means_no_digest():
    assert digest.build_digest(set(), [CENSUS], 30, today=TODAY) == []


def test_unpinned_and_past_items_are_dropped():
    past = DeduplicatedDeadline("Census Day", "May 1, 2025", "registration")
    other = DeduplicatedDeadline("Grades due", "May 30, 2025", "academic")
    pinned = {"census day|2025-05-01", "census day|2025-06-01"}
    assert digest.build_digest(pinned, [past, other, CENSUS], 10, today=TODAY) == [CENSUS]


def test_identity_ignores_case_whitespace_and_category():
    assert digest.pin_identity("  Census   DAY ", "Jun 1, 2025") == "census day|2025-06-01"
    identities = digest.pinned_identities([
        {"event": "Census Day", "date": "2025-06-01", "category": "other"},
        {"event": "Bad pin", "date": "someday"},
    ])
    assert identities == {"census day|2025-06-01"}


def test_digest_sorted_by_date():
    later = DeduplicatedDeadline("Tuition due", "June 3, 2025", "financial-aid")
    pinned = {"census day|2025-06-01", "tuition due|2025-06-03"}
    result = digest.build_digest(pinned, [later, CENSUS], 7, today=TODAY)
    assert [d.event for d in result] == ["Census Day", "Tuition due"]


def test_render_digest_html_escapes_titles():
    body = digest.render_digest_html([DeduplicatedDeadline("Fees <due>", "June 1, 2025", "financial-aid")], 3)
    assert "Fees &lt;due&gt;" in body
    assert "Jun 01, 2025" in body
    assert digest.digest_subject(1, 3).endswith("1 pinned deadline(s) in next 3 day(s)")


@pytest.mark.parametrize("raw, expected", [(5, 5), (-2, 0), (45, 30), ("7", 7), (None, 3)])
def test_clamp_lead_days(raw, expected):
    assert clamp_lead_days(raw) == expected


def _store(tmp_path, users):
    path = tmp_path / "users.json"
    path.write_text(json.dumps(users), encoding="utf-8")
    return JsonUserStore(path)


def test_reminder_service_sends_pinned_digest(tmp_path, monkeypatch):
    store = _store(tmp_path, {
        "Student@UW.edu": {
            "lead_time_days": 99,
            "pins": [{"key": "scr|2025-06-01|census day", "event": "Census Day", "date": "2025-06-01"}],
        },
        "nopins@uw.edu": {"lead_time_days": 5, "pins": []},
    })
    monkeypatch.setattr(digest.parse_utils, "today_local", lambda tz_name=None: TODAY)
    sent = []
    service = ReminderService(store, lambda: [CENSUS], sender=lambda *args: sent.append(args))

    assert store.lead_days("student@uw.edu") == 30
    result = service.send_for_user("student@uw.edu")
    assert result["count"] == 1 and result["sent"] is True
    assert sent[0][0] == "student@uw.edu"
    assert "Census Day" in sent[0][2]

    preview = service.preview_for_user("nopins@uw.edu")
    assert preview["count"] == 0
    assert service.send_for_user("nopins@uw.edu")["sent"] is False
    assert len(sent) == 1


def test_toggle_pin_round_trip(tmp_path):
    store = JsonUserStore(tmp_path / "users.json")
    pin = {"key": "scr|2025-06-01|census day", "event": "Census Day", "date": "2025-06-01"}
    assert store.toggle_pin("a@uw.edu", pin) == [pin]
    assert JsonUserStore(tmp_path / "users.json").pins("a@uw.edu") == [pin]
    assert store.toggle_pin("a@uw.edu", pin) == []
