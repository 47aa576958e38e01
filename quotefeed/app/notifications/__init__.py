"""Daily inspiration notification preferences."""

from .preferences import (
    DAILY_MESSAGES,
    NOTIFICATIONS_ENABLED_KEY,
    NotificationPreferences,
    next_trigger_time,
    pick_message,
)

__all__ = [
    "DAILY_MESSAGES",
    "NOTIFICATIONS_ENABLED_KEY",
    "NotificationPreferences",
    "next_trigger_time",
    "pick_message",
]
