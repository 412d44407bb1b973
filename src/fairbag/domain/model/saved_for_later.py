"""Saved-for-later list — items parked outside the cart.

Unlike the cart, a saved item's identity ignores the vendor: the key is
(product id, canonical customizations).  The vendor fields are kept only
as a hint for putting the item back into the cart.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from fairbag.domain.model.cart import CartItem
from fairbag.domain.model.value_objects import Customization, canonical_customizations


@dataclass(frozen=True)
class SavedItemKey:
    product_id: str
    customizations: str

    @staticmethod
    def of(
        product_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None,
    ) -> SavedItemKey:
        return SavedItemKey(product_id, canonical_customizations(customizations))


@dataclass(frozen=True)
class SavedForLaterItem:
    item: CartItem
    saved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> SavedItemKey:
        return SavedItemKey.of(self.item.product.id, self.item.customizations)

    @property
    def quantity(self) -> int:
        return self.item.quantity


@dataclass
class SavedForLaterList:
    """Aggregate root for a shopper's saved items, newest first."""

    items: list[SavedForLaterItem] = field(default_factory=list)

    def save(self, item: CartItem, now: datetime | None = None) -> SavedForLaterItem:
        """Park a cart item; an existing entry with the same key absorbs its quantity."""
        now = now or datetime.now(timezone.utc)
        key = SavedItemKey.of(item.product.id, item.customizations)
        for i, existing in enumerate(self.items):
            if existing.key == key:
                merged = SavedForLaterItem(
                    item=replace(existing.item, quantity=existing.quantity + item.quantity),
                    saved_at=now,
                )
                del self.items[i]
                self.items.insert(0, merged)
                return merged
        saved = SavedForLaterItem(item=item, saved_at=now)
        self.items.insert(0, saved)
        return saved

    def take(
        self,
        product_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> SavedForLaterItem | None:
        """Remove and return the entry with exactly this key, if any."""
        key = SavedItemKey.of(product_id, customizations)
        for i, existing in enumerate(self.items):
            if existing.key == key:
                return self.items.pop(i)
        return None

    def remove(
        self,
        product_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> bool:
        return self.take(product_id, customizations) is not None

    def clear(self) -> None:
        self.items = []

    def replace_items(self, items: list[SavedForLaterItem]) -> None:
        self.items = sorted(items, key=lambda s: s.saved_at, reverse=True)

    @property
    def item_count(self) -> int:
        return sum(s.quantity for s in self.items)
