"""Persisted like/unlike set of quotes."""
from __future__ import annotations

import logging
from typing import List, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from ..storage import KeyValueStore
from .models import Quote

logger = logging.getLogger(__name__)

FAVORITES_KEY = "FavoriteQuotes"

_QUOTE_LIST = TypeAdapter(List[Quote])


class FavoritesStore:
    """Ordered favorites keyed by quote id.

    Every mutation rewrites the whole list to storage before returning. Storage
    errors are logged and swallowed; the in-memory list stays authoritative for
    the running session.
    """

    def __init__(self, storage: KeyValueStore, *, key: str = FAVORITES_KEY) -> None:
        self._storage = storage
        self._key = key
        self._favorites: List[Quote] = []
        self._load()

    @property
    def favorites(self) -> Tuple[Quote, ...]:
        return tuple(self._favorites)

    def __len__(self) -> int:
        return len(self._favorites)

    def contains(self, item: Union[Quote, str]) -> bool:
        quote_id = _quote_id(item)
        return any(quote.id == quote_id for quote in self._favorites)

    def add(self, item: Quote) -> None:
        if self.contains(item):
            return
        self._favorites.append(item)
        self._save()

    def remove(self, item: Union[Quote, str]) -> None:
        quote_id = _quote_id(item)
        self._favorites = [quote for quote in self._favorites if quote.id != quote_id]
        self._save()

    def remove_by_id(self, quote_id: str) -> bool:
        """Remove a favorite by id, returning whether anything was removed."""

        existed = self.contains(quote_id)
        self.remove(quote_id)
        return existed

    def toggle(self, item: Quote) -> bool:
        """Flip the favorite state of ``item`` and return the new state."""

        if self.contains(item):
            self.remove(item)
            return False
        self.add(item)
        return True

    def _save(self) -> None:
        try:
            if self._favorites:
                self._storage.set(self._key, _QUOTE_LIST.dump_json(self._favorites))
            else:
                self._storage.remove(self._key)
        except Exception:
            logger.warning("Failed to persist %s favorites", len(self._favorites), exc_info=True)

    def _load(self) -> None:
        try:
            data = self._storage.get(self._key)
        except Exception:
            logger.warning("Failed to read favorites from storage", exc_info=True)
            return
        if not data:
            return
        try:
            self._favorites = _QUOTE_LIST.validate_json(data)
        except ValidationError:
            logger.warning("Discarding undecodable favorites payload (%s bytes)", len(data))


def _quote_id(item: Union[Quote, str]) -> str:
    return item if isinstance(item, str) else item.id
