"""Request dependencies resolving the services registered on ``app.state``."""
from __future__ import annotations

from typing import Any

from fastapi import Request

from ..favorites import FavoritesStore
from ..notifications import NotificationPreferences
from ..services.monetization import MonetizationServices


def _require_state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"Application state has not been configured yet: {name}")
    return value


def get_monetization_services(request: Request) -> MonetizationServices:
    return _require_state(request, "monetization")


def get_favorites_store(request: Request) -> FavoritesStore:
    return _require_state(request, "favorites")


def get_notification_preferences(request: Request) -> NotificationPreferences:
    return _require_state(request, "notification_preferences")
