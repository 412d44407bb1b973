"""Application service: the shopper's saved-for-later list.

Same persistence shape as ``CartService``: synchronous in-memory change,
then a queued save of the whole list.
"""

from __future__ import annotations

import structlog

from fairbag.application.cart_service import CartService
from fairbag.application.save_queue import SaveQueue
from fairbag.domain.model.cart import CartItem
from fairbag.domain.model.catalog import Vendor
from fairbag.domain.model.saved_for_later import SavedForLaterItem, SavedForLaterList
from fairbag.domain.model.value_objects import Customization
from fairbag.domain.repository.cart_repository import SavedItemsRepository

logger = structlog.get_logger(__name__)


class SavedForLaterService:

    def __init__(
        self,
        repository: SavedItemsRepository,
        save_queue: SaveQueue,
        cart: CartService,
        save_key: str = "saved_for_later",
    ) -> None:
        self._repository = repository
        self._save_queue = save_queue
        self._cart = cart
        self._save_key = save_key
        self._saved = SavedForLaterList()
        self._is_loaded = False

    def load(self) -> None:
        self._saved.replace_items(self._repository.load())
        self._is_loaded = True
        logger.info("saved_items_loaded", item_count=len(self._saved.items))

    @property
    def saved_items(self) -> list[SavedForLaterItem]:
        return list(self._saved.items)

    def save_for_later(
        self,
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> SavedForLaterItem | None:
        """Move one exact cart variant into the saved list.

        Returns None (and changes nothing) when the cart has no such item.
        """
        item = self._cart.take_item(product_id, vendor_id, customizations)
        if item is None:
            logger.debug("save_for_later_missing_item", product_id=product_id, vendor_id=vendor_id)
            return None
        saved = self._saved.save(item)
        self._schedule_save()
        return saved

    def move_to_cart(
        self,
        product_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
        vendor: Vendor | None = None,
    ) -> CartItem | None:
        """Put a saved item back in the cart.

        ``vendor`` should be the vendor's current catalog record; without it
        the vendor id and name stored with the saved item are reused.
        """
        saved = self._saved.take(product_id, customizations)
        if saved is None:
            return None
        item = saved.item
        vendor = vendor or Vendor(id=item.vendor_id, name=item.vendor_name)
        self._schedule_save()
        return self._cart.add_item(
            item.product,
            vendor,
            item.quantity,
            item.customizations,
            item.requires_proof,
        )

    def remove_item(
        self,
        product_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> bool:
        removed = self._saved.remove(product_id, customizations)
        if removed:
            self._schedule_save()
        return removed

    def clear_all(self) -> None:
        self._saved.clear()
        self._schedule_save()

    def get_saved_item_count(self) -> int:
        return self._saved.item_count

    def _schedule_save(self) -> None:
        if not self._is_loaded:
            return
        snapshot = list(self._saved.items)
        self._save_queue.submit(self._save_key, lambda: self._repository.save(snapshot))
