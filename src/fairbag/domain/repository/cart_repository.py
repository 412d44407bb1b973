"""Abstract repositories for the cart and the saved-for-later list.

One implementation talks to the on-device cache, another to the remote
store.  Which one a session gets is decided once, when it is built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fairbag.domain.model.cart import CartItem
from fairbag.domain.model.saved_for_later import SavedForLaterItem


class CartRepository(ABC):

    @abstractmethod
    def load(self) -> list[CartItem]:
        """Return the stored cart, or an empty list if nothing usable is stored."""

    @abstractmethod
    def save(self, items: list[CartItem]) -> None:
        """Replace the stored cart with ``items`` (idempotent)."""


class SavedItemsRepository(ABC):

    @abstractmethod
    def load(self) -> list[SavedForLaterItem]:
        """Return the stored saved-for-later items."""

    @abstractmethod
    def save(self, items: list[SavedForLaterItem]) -> None:
        """Replace the stored saved-for-later items with ``items``."""
