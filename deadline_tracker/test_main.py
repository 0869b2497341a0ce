"""Tests for the CLI entry points and mail message assembly."""

from __future__ import annotations

import json

import pytest

from deadline_tracker import main, pipeline
from deadline_tracker.config import ConfigError, MailerError
from deadline_tracker.notify import mailer
from deadline_tracker.notify.reminders import JsonUserStore
from deadline_tracker.scraper.models import DeduplicatedDeadline
from deadline_tracker.test_canvas_feed import FEED


def test_parse_args_defaults():
    args = main.parse_args([])
    assert args.mode == "list"
    assert args.target == 7
    assert args.lead_days is None


def test_list_mode_prints_cached_deadlines(monkeypatch, capsys, tmp_path):
    deadlines = [DeduplicatedDeadline("Census Day (Full/A)", "June 1, 2025", "registration")]
    monkeypatch.setattr(pipeline, "get_deadlines", lambda refresh=False: deadlines)
    main.main(["--mode", "list", "--users-file", str(tmp_path / "users.json")])
    out = capsys.readouterr().out
    assert "1 deadlines:" in out
    assert "2025-06-01  [registration]  Census Day (Full/A)" in out


def test_digest_mode_requires_email(tmp_path):
    with pytest.raises(SystemExit):
        main.main(["--mode", "digest", "--users-file", str(tmp_path / "users.json")])


def test_build_message_headers():
    msg = mailer.build_message("me@uw.edu", "you@uw.edu", "Subject line", "<p>hi</p>")
    assert msg["To"] == "you@uw.edu"
    assert msg["Subject"] == "Subject line"


def test_send_without_credentials_raises():
    class NoCredentials:
        EMAIL_USER = None
        EMAIL_PASS = None

        @classmethod
        def validate(cls):
            raise ConfigError("missing")

    with pytest.raises(MailerError) as info:
        mailer.send_html_email("you@uw.edu", "s", "<p>hi</p>", config=NoCredentials)
    assert info.value.recipient == "you@uw.edu"


def test_pin_mode_toggles_stored_pin(capsys, tmp_path):
    users = tmp_path / "users.json"
    argv = ["--mode", "pin", "--users-file", str(users), "--email", "A@uw.edu",
            "--event", "Census Day", "--date", "June 1, 2025", "--category", "Registration"]

    main.main(argv)
    store = JsonUserStore(users)
    assert store.pins("a@uw.edu") == [{
        "key": "scr|2025-06-01|census day",
        "event": "Census Day",
        "category": "registration",
        "dateISO": "2025-06-01",
        "source": "scraped",
    }]
    assert "Pinned scr|2025-06-01|census day" in capsys.readouterr().out

    main.main(argv)
    assert JsonUserStore(users).pins("a@uw.edu") == []
    assert "Unpinned" in capsys.readouterr().out


def test_timeline_mode_merges_all_sources(monkeypatch, capsys, tmp_path):
    users = tmp_path / "users.json"
    users.write_text(json.dumps({
        "a@uw.edu": {"events": [{"id": "7", "title": "Dentist", "start": "2025-06-02T09:00:00"}]},
    }), encoding="utf-8")
    feed = tmp_path / "canvas.ics"
    feed.write_text(FEED, encoding="utf-8")
    deadlines = [DeduplicatedDeadline("Census Day", "June 1, 2025", "registration")]
    monkeypatch.setattr(pipeline, "get_deadlines", lambda refresh=False: deadlines)

    main.main(["--mode", "timeline", "--users-file", str(users), "--email", "a@uw.edu",
               "--canvas-ics", str(feed)])
    out = capsys.readouterr().out
    assert "Timeline (4 entries):" in out
    assert "2025-06-01  [registration]  Census Day  (scraped)" in out
    assert "2025-06-02  [personal]  Dentist  (personal)" in out
    assert "2025-10-10  [canvas (css 497 a)]  Project proposal [CSS 497 A]  (canvas)" in out


def test_list_mode_appends_canvas_items(monkeypatch, capsys, tmp_path):
    feed = tmp_path / "canvas.ics"
    feed.write_text(FEED, encoding="utf-8")
    monkeypatch.setattr(pipeline, "get_deadlines", lambda refresh=False: [])

    main.main(["--mode", "list", "--users-file", str(tmp_path / "users.json"),
               "--canvas-ics", str(feed)])
    out = capsys.readouterr().out
    assert "2 deadlines:" in out
    assert "2025-10-10  [Canvas (CSS 497 A)]  Project proposal [CSS 497 A]" in out


def test_unreadable_canvas_feed_exits(tmp_path):
    with pytest.raises(SystemExit):
        main.main(["--mode", "list", "--users-file", str(tmp_path / "users.json"),
                   "--canvas-ics", str(tmp_path / "missing.ics")])
