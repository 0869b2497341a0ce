"""Per-user reminder previews and sends."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from deadline_tracker import config
from deadline_tracker.config import ConfigError
from deadline_tracker.notify import digest, mailer
from deadline_tracker.pins import PersonalEvent

logger = logging.getLogger(__name__)


def clamp_lead_days(value: Any) -> int:
    try:
        lead = int(value)
    except (TypeError, ValueError):
        return config.DEFAULT_LEAD_DAYS
    return max(config.MIN_LEAD_DAYS, min(config.MAX_LEAD_DAYS, lead))


class JsonUserStore:
    """Pins, personal events and lead-time preferences kept in one JSON file.

    File layout: ``{email: {"lead_time_days": int, "pins": [...], "events": [...]}}``.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or config.USERS_FILE)
        self._users: Optional[Dict[str, Dict[str, Any]]] = None

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._users is None:
            if not self.path.exists():
                logger.info(f"User store {self.path} not found; starting empty")
                self._users = {}
            else:
                try:
                    data = json.loads(self.path.read_text(encoding="utf-8"))
                except json.JSONDecodeError as exc:
                    raise ConfigError(f"User store {self.path} is not valid JSON: {exc}") from exc
                self._users = {str(k).lower(): v for k, v in data.items()}
        return self._users

    def _user(self, email: str) -> Dict[str, Any]:
        return self._load().get(email.lower(), {})

    def emails(self) -> List[str]:
        return sorted(self._load())

    def lead_days(self, email: str) -> int:
        return clamp_lead_days(self._user(email).get("lead_time_days", config.DEFAULT_LEAD_DAYS))

    def pins(self, email: str) -> List[Dict[str, Any]]:
        return list(self._user(email).get("pins", []))

    def personal_events(self, email: str) -> List[PersonalEvent]:
        return [PersonalEvent.from_record(e) for e in self._user(email).get("events", [])]

    def canvas_feed(self, email: str) -> Optional[str]:
        return self._user(email).get("canvas_ics") or None

    def toggle_pin(self, email: str, pin: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Add the pin, or remove it when its key is already pinned."""
        users = self._load()
        user = users.setdefault(email.lower(), {})
        pins = user.setdefault("pins", [])
        remaining = [p for p in pins if p.get("key") != pin.get("key")]
        if len(remaining) == len(pins):
            remaining.append(pin)
        user["pins"] = sorted(
            remaining,
            key=lambda p: (p.get("dateISO") or p.get("date") or "", p.get("event") or ""),
        )
        self.save()
        return user["pins"]

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._load(), indent=2, ensure_ascii=False), encoding="utf-8")


class ReminderService:
    """Builds and sends pinned-deadline digests for stored users."""

    def __init__(
        self,
        store: JsonUserStore,
        deadlines_provider: Callable[[], Iterable[Any]],
        sender: Callable[[str, str, str], None] = mailer.send_html_email,
    ):
        self.store = store
        self.deadlines_provider = deadlines_provider
        self.sender = sender

    def _digest(self, email: str, lead_days: int):
        identities = digest.pinned_identities(self.store.pins(email))
        if not identities:
            return []
        return digest.build_digest(identities, self.deadlines_provider(), lead_days)

    def preview_for_user(self, email: str) -> Dict[str, Any]:
        lead = self.store.lead_days(email)
        items = self._digest(email, lead)
        return {"email": email, "lead_time_days": lead, "count": len(items), "items": items}

    def send_for_user(self, email: str, lead_days: Optional[int] = None) -> Dict[str, Any]:
        lead = self.store.lead_days(email) if lead_days is None else lead_days
        items = self._digest(email, lead)
        if not items:
            logger.info(f"No pinned deadlines for {email} in the next {lead} day(s); nothing sent")
            return {"ok": True, "email": email, "lead_time_days": lead, "count": 0, "sent": False}

        self.sender(
            email,
            digest.digest_subject(len(items), lead),
            digest.render_digest_html(items, lead),
        )
        return {"ok": True, "email": email, "lead_time_days": lead, "count": len(items), "sent": True}
