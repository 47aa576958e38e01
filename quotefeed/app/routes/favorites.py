"""Routes for the persisted favorites list."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..favorites import FavoritesStore, Quote
from ..schemas.favorites import FavoriteListResponse, FavoriteToggleResponse
from .dependencies import get_favorites_store

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


def _list_response(store: FavoritesStore) -> FavoriteListResponse:
    items = list(store.favorites)
    return FavoriteListResponse(items=items, count=len(items))


@router.get("", response_model=FavoriteListResponse)
def list_favorites(
    *,
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteListResponse:
    return _list_response(store)


@router.post("", response_model=FavoriteListResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: Quote,
    *,
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteListResponse:
    store.add(payload)
    return _list_response(store)


@router.post("/toggle", response_model=FavoriteToggleResponse)
def toggle_favorite(
    payload: Quote,
    *,
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteToggleResponse:
    is_favorite = store.toggle(payload)
    return FavoriteToggleResponse(quote_id=payload.id, is_favorite=is_favorite)


@router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_favorite(
    quote_id: str,
    *,
    store: FavoritesStore = Depends(get_favorites_store),
) -> Response:
    if not store.remove_by_id(quote_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
