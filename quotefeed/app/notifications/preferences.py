"""Daily notification opt-in flag and scheduling rules."""
from __future__ import annotations

import logging
import random
from datetime import datetime, time, timedelta
from typing import Optional, Tuple

from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

NOTIFICATIONS_ENABLED_KEY = "notificationsEnabled"

NOT_AUTHORIZED_TEXT = "Notifications not authorized"
DISABLED_TEXT = "Get notified about new content"
ENABLED_TEXT = "Notifications are enabled"

DAILY_WINDOW_START = time(hour=6, minute=30)
DAILY_WINDOW_MINUTES = 60

DAILY_MESSAGES: Tuple[str, ...] = (
    "Start your day with wisdom from the Bhagavad Gita",
    "A new day brings new opportunities for spiritual growth",
    "Find peace and wisdom in today's teachings",
    "Let the ancient wisdom guide your path today",
    "Embrace the divine knowledge within you",
    "Today is perfect for spiritual reflection",
    "Discover inner peace through sacred wisdom",
    "Let the Gita illuminate your journey",
)


def next_trigger_time(now: datetime, rng: Optional[random.Random] = None) -> datetime:
    """Pick a time in the 06:30-07:30 window, rolling to tomorrow if already past."""

    generator = rng or random.Random()
    offset = generator.randint(0, DAILY_WINDOW_MINUTES)
    window_start = datetime.combine(now.date(), DAILY_WINDOW_START, tzinfo=now.tzinfo)
    candidate = window_start + timedelta(minutes=offset)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def pick_message(rng: Optional[random.Random] = None) -> str:
    generator = rng or random.Random()
    return generator.choice(DAILY_MESSAGES)


class NotificationPreferences:
    """Persisted boolean opt-in; a missing key means the user never chose."""

    def __init__(self, storage: KeyValueStore, *, key: str = NOTIFICATIONS_ENABLED_KEY) -> None:
        self._storage = storage
        self._key = key
        self._has_choice = False
        self._enabled = False
        self._authorized = False
        self._load()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def has_user_made_choice(self) -> bool:
        return self._has_choice

    @property
    def authorized(self) -> bool:
        return self._authorized

    @property
    def should_schedule(self) -> bool:
        return self._authorized and self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        self._has_choice = True
        try:
            self._storage.set(self._key, b"1" if self._enabled else b"0")
        except Exception:
            logger.warning("Failed to persist notification preference", exc_info=True)

    def reset_choice(self) -> None:
        self._enabled = False
        self._has_choice = False
        try:
            self._storage.remove(self._key)
        except Exception:
            logger.warning("Failed to clear notification preference", exc_info=True)

    def apply_authorization(self, authorized: bool) -> bool:
        """Reconcile the flag with the OS permission; return whether to schedule."""

        self._authorized = bool(authorized)
        if self._enabled and not authorized:
            self.set_enabled(False)
        elif authorized and not self._enabled and not self._has_choice:
            self.set_enabled(True)
        return self.should_schedule

    def status_text(self) -> str:
        if not self._authorized:
            return NOT_AUTHORIZED_TEXT
        if not self._enabled:
            return DISABLED_TEXT
        return ENABLED_TEXT

    def _load(self) -> None:
        try:
            data = self._storage.get(self._key)
        except Exception:
            logger.warning("Failed to read notification preference", exc_info=True)
            return
        if data is None:
            return
        self._has_choice = True
        self._enabled = data.strip().lower() in {b"1", b"true", b"yes", b"on"}
