"""Routes for the daily notification preference."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..notifications import NotificationPreferences, next_trigger_time, pick_message
from ..schemas.notifications import (
    NotificationPreferencesResponse,
    NotificationPreferencesUpdate,
)
from .dependencies import get_notification_preferences

router = APIRouter(prefix="/api/users/me", tags=["notification-preferences"])


def _build_response(preferences: NotificationPreferences, now: datetime) -> NotificationPreferencesResponse:
    should_schedule = preferences.should_schedule
    return NotificationPreferencesResponse(
        enabled=preferences.enabled,
        authorized=preferences.authorized,
        has_user_made_choice=preferences.has_user_made_choice,
        should_schedule=should_schedule,
        status_text=preferences.status_text(),
        next_trigger_at=next_trigger_time(now) if should_schedule else None,
        message=pick_message() if should_schedule else None,
    )


@router.get("/notification_prefs", response_model=NotificationPreferencesResponse)
def get_notification_preferences_route(
    *,
    authorized: Optional[bool] = Query(default=None),
    preferences: NotificationPreferences = Depends(get_notification_preferences),
) -> NotificationPreferencesResponse:
    """Return the stored preference reconciled with the reported OS permission."""

    if authorized is not None:
        preferences.apply_authorization(authorized)
    return _build_response(preferences, datetime.now(timezone.utc))


@router.put("/notification_prefs", response_model=NotificationPreferencesResponse)
def update_notification_preferences(
    payload: NotificationPreferencesUpdate,
    *,
    preferences: NotificationPreferences = Depends(get_notification_preferences),
) -> NotificationPreferencesResponse:
    """Update the opt-in flag; ``reset`` forgets the user's choice."""

    if payload.reset:
        preferences.reset_choice()
    if payload.enabled is not None:
        preferences.set_enabled(payload.enabled)
    if payload.authorized is not None:
        preferences.apply_authorization(payload.authorized)
    return _build_response(preferences, datetime.now(timezone.utc))


__all__ = [
    "router",
    "get_notification_preferences_route",
    "update_notification_preferences",
]
