"""On-device implementations of the cart and saved-item repositories.

Each list is stored as one JSON array under a fixed key.  Anything that
does not decode into that shape is treated as corrupt: the key is
deleted and the shopper starts with an empty list.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TypeVar

import structlog

from fairbag.domain.exceptions import MalformedStoredDataError, PersistenceUnavailableError
from fairbag.domain.model.cart import CartItem
from fairbag.domain.model.saved_for_later import SavedForLaterItem
from fairbag.domain.repository.backends import KeyValueStore
from fairbag.domain.repository.cart_repository import CartRepository, SavedItemsRepository
from fairbag.infrastructure.persistence.serialization import (
    cart_item_from_raw,
    cart_item_to_raw,
    saved_item_from_raw,
    saved_item_to_raw,
)

logger = structlog.get_logger(__name__)

CART_STORAGE_KEY = "@fairbag/cart"
SAVED_FOR_LATER_STORAGE_KEY = "@fairbag/saved_for_later"

T = TypeVar("T")


def _load_list(store: KeyValueStore, key: str, decode: Callable[[dict], T]) -> list[T]:
    try:
        text = store.get(key)
    except PersistenceUnavailableError as exc:
        logger.warning("local_cache_unreadable", key=key, error=str(exc))
        return []
    if text is None:
        return []
    try:
        try:
            raw = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise MalformedStoredDataError(f"Not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise MalformedStoredDataError(f"Expected a list, got {type(raw).__name__}")
        return [decode(entry) for entry in raw]
    except MalformedStoredDataError as exc:
        logger.warning("local_cache_corrupt", key=key, error=str(exc))
        store.remove(key)
        return []


class LocalCartRepository(CartRepository):

    def __init__(self, store: KeyValueStore, key: str = CART_STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> list[CartItem]:
        return _load_list(self._store, self._key, cart_item_from_raw)

    def save(self, items: list[CartItem]) -> None:
        self._store.set(self._key, json.dumps([cart_item_to_raw(i) for i in items]))


class LocalSavedItemsRepository(SavedItemsRepository):

    def __init__(self, store: KeyValueStore, key: str = SAVED_FOR_LATER_STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> list[SavedForLaterItem]:
        return _load_list(self._store, self._key, saved_item_from_raw)

    def save(self, items: list[SavedForLaterItem]) -> None:
        self._store.set(self._key, json.dumps([saved_item_to_raw(s) for s in items]))
