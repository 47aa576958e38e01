"""Favorites domain: quotes the user liked."""

from .models import Quote
from .service import FAVORITES_KEY, FavoritesStore

__all__ = ["FAVORITES_KEY", "FavoritesStore", "Quote"]
