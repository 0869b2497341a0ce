"""CLI orchestrator for the academic deadline tracker."""

from __future__ import annotations

import argparse
import logging
from collections import Counter
from typing import Iterable, List

from deadline_tracker import config, pins, pipeline
from deadline_tracker.config import ConfigError, MailerError
from deadline_tracker.filters import recommend
from deadline_tracker.io import ics_export, parse_output, save_csv
from deadline_tracker.notify.reminders import JsonUserStore, ReminderService
from deadline_tracker.scraper import canvas_feed, parse_utils
from deadline_tracker.scraper.canvas_feed import CanvasEvent, CanvasFeedError
from deadline_tracker.scraper.models import DeduplicatedDeadline

MODES = ("scrape", "list", "timeline", "pin", "recommend", "digest", "send", "ics", "parse")


def print_deadlines(deadlines: List[DeduplicatedDeadline]) -> None:
    for d in deadlines:
        print(f"  {d.iso_date or '????-??-??'}  [{d.category}]  {d.event}")


def load_canvas_events(store: JsonUserStore, email: str | None, source: str | None) -> List[CanvasEvent]:
    source = source or (store.canvas_feed(email) if email else None) or config.CANVAS_ICS_SOURCE
    if not source:
        return []
    return canvas_feed.load_canvas_feed(source)


def run_scrape_mode() -> None:
    deadlines = pipeline.scrape_deadlines()
    if not deadlines:
        raise SystemExit("No deadlines collected.")

    output_path = save_csv.save_deadlines_csv(deadlines)
    print(f"Saved {len(deadlines)} deadlines to {output_path}")
    print("Category distribution:", Counter(d.category for d in deadlines))


def run_timeline_mode(store: JsonUserStore, email: str | None, canvas_source: str | None) -> None:
    personal = store.personal_events(email) if email else []
    canvas = load_canvas_events(store, email, canvas_source)
    timeline = pins.build_timeline(pipeline.get_deadlines(), personal, canvas)

    print(f"Timeline ({len(timeline['all'])} entries):")
    for entry in timeline["all"]:
        print(f"  {entry.date_iso}  [{entry.category}]  {entry.title}  ({entry.source})")
    print("Category distribution:", Counter({k: len(v) for k, v in timeline["by_category"].items()}))


def run_pin_mode(store: JsonUserStore, args: argparse.Namespace) -> None:
    if not args.email:
        raise SystemExit("--email is required for pin mode.")
    key = args.key
    if not key:
        if not (args.event and args.date):
            raise SystemExit("pin mode needs --key, or --event and --date.")
        key = pins.scraped_pin_key({"event": args.event, "date": args.date})

    pin = pins.make_pin(key, args.event, args.category, parse_utils.to_iso(args.date))
    already = any(p.get("key") == key for p in store.pins(args.email))
    user_pins = store.toggle_pin(args.email, pin)
    print(f"{'Unpinned' if already else 'Pinned'} {key}")
    print(f"{args.email}: {len(user_pins)} pin(s)")
    for p in user_pins:
        print(f"  {p.get('dateISO') or '????-??-??'}  [{p.get('category')}]  {p.get('event') or p.get('key')}")


def run_recommend_mode(store: JsonUserStore, email: str | None, target: int) -> None:
    deadlines = pipeline.get_deadlines()
    user_pins = store.pins(email) if email else []
    pin_keys = [str(p.get("key") or "") for p in user_pins]
    items = recommend.recommend(
        deadlines,
        pinned_categories=pins.pinned_categories(user_pins),
        exclude_keys=pins.scraped_exclusions(pin_keys),
        target=target,
    )
    if not items:
        print("Nothing to recommend right now.")
        return
    print(f"Recommended ({len(items)}):")
    print_deadlines(items)


def run_digest_mode(service: ReminderService, email: str) -> None:
    preview = service.preview_for_user(email)
    print(f"{preview['email']}: {preview['count']} pinned deadline(s) in next "
          f"{preview['lead_time_days']} day(s)")
    print_deadlines(preview["items"])


def run_send_mode(service: ReminderService, store: JsonUserStore, email: str | None,
                  lead_days: int | None) -> None:
    recipients = [email] if email else store.emails()
    if not recipients:
        raise SystemExit("No users to remind.")
    sent = 0
    failed = 0
    for recipient in recipients:
        try:
            result = service.send_for_user(recipient, lead_days)
        except MailerError as e:
            failed += 1
            print(f"Failed: {recipient} ({e})")
            continue
        if result["sent"]:
            sent += 1
            print(f"Sent {result['count']} deadline(s) to {recipient}")
        else:
            print(f"Skipped {recipient}: nothing due")
    print(f"\nReminder Summary:\n  Sent: {sent}\n  Failed: {failed}")


def run_parse_output_mode() -> None:
    """Summarise the cached deadlines file."""
    print("=" * 60)
    print("Parsing Output Files")
    print("=" * 60)
    try:
        df = parse_output.parse_deadlines_csv()
    except FileNotFoundError as e:
        raise SystemExit(str(e))
    summary = parse_output.get_deadline_summary(df)
    print(f"  Total Entries: {summary['total_entries']}")
    if summary["date_range"]:
        print(f"  Date Range: {summary['date_range']['start']} to {summary['date_range']['end']}")
    if summary["categories"]:
        print(f"  Categories ({len(summary['categories'])}):")
        for cat, count in sorted(summary["categories"].items(), key=lambda x: x[1], reverse=True):
            print(f"    - {cat}: {count}")


def run(args: argparse.Namespace) -> None:
    store = JsonUserStore(args.users_file)
    service = ReminderService(store, pipeline.get_deadlines)

    if args.mode == "scrape":
        run_scrape_mode()
        return

    if args.mode == "list":
        deadlines = pipeline.get_deadlines(refresh=args.refresh)
        canvas = load_canvas_events(store, args.email, args.canvas_ics)
        deadlines = deadlines + [event.as_deadline() for event in canvas]
        print(f"{len(deadlines)} deadlines:")
        print_deadlines(deadlines)
        return

    if args.mode == "timeline":
        run_timeline_mode(store, args.email, args.canvas_ics)
        return

    if args.mode == "pin":
        run_pin_mode(store, args)
        return

    if args.mode == "recommend":
        run_recommend_mode(store, args.email, args.target)
        return

    if args.mode == "digest":
        if not args.email:
            raise SystemExit("--email is required for digest mode.")
        run_digest_mode(service, args.email)
        return

    if args.mode == "send":
        run_send_mode(service, store, args.email, args.lead_days)
        return

    if args.mode == "ics":
        output_path = ics_export.export_ics(pipeline.get_deadlines(), args.output)
        print(f"Wrote calendar to {output_path}")
        return

    if args.mode == "parse":
        run_parse_output_mode()
        return

    raise SystemExit(f"Unsupported mode: {args.mode}")


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--mode", choices=MODES, default="list", help="Action to run.")
    parser.add_argument("--email", help="User email for timeline/pin/recommend/digest/send.")
    parser.add_argument("--users-file", default=None, help="JSON user store path.")
    parser.add_argument("--lead-days", type=int, default=None,
                        help="Override the stored reminder lead time.")
    parser.add_argument("--target", type=int, default=config.RECO_TARGET,
                        help="Number of recommendations.")
    parser.add_argument("--key", help="Pin key to toggle in pin mode.")
    parser.add_argument("--event", help="Deadline title for pin mode.")
    parser.add_argument("--date", help="Deadline date for pin mode.")
    parser.add_argument("--category", help="Pin category for pin mode.")
    parser.add_argument("--canvas-ics", default=None,
                        help="Canvas calendar feed URL or .ics file for list/timeline.")
    parser.add_argument("--output", default=None, help="Output path for ics mode.")
    parser.add_argument("--refresh", action="store_true", help="Ignore the cached CSV.")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except (ConfigError, CanvasFeedError) as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    main()
