from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationPreferencesResponse(BaseModel):
    enabled: bool
    authorized: bool
    has_user_made_choice: bool = Field(alias="hasUserMadeChoice")
    should_schedule: bool = Field(alias="shouldSchedule")
    status_text: str = Field(alias="statusText")
    next_trigger_at: Optional[datetime] = Field(default=None, alias="nextTriggerAt")
    message: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class NotificationPreferencesUpdate(BaseModel):
    enabled: Optional[bool] = None
    authorized: Optional[bool] = None
    reset: bool = False

    model_config = ConfigDict(populate_by_name=True)
