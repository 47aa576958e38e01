from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..favorites import Quote


class FavoriteListResponse(BaseModel):
    items: List[Quote]
    count: int

    model_config = ConfigDict(populate_by_name=True)


class FavoriteToggleResponse(BaseModel):
    quote_id: str = Field(alias="quoteId")
    is_favorite: bool = Field(alias="isFavorite")

    model_config = ConfigDict(populate_by_name=True)
