"""Quote model shared by the feed and the favorites list."""
from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Quote(BaseModel):
    """A quote shown in the feed; ``id`` is stable across sessions."""

    id: str = Field(default_factory=lambda: uuid4().hex, min_length=1)
    title: str
    description: str
    author: str

    model_config = ConfigDict(frozen=True)
