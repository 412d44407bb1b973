"""Application service: the shopper's cart session.

Wraps the Cart aggregate with persistence.  Every mutator updates the
in-memory cart synchronously, then hands a snapshot to the save queue;
the caller never waits for, or sees a failure from, the write.

The repository (local cache or remote store) is fixed when the service
is built.  Signing in or out means building a new service, which loads
from the newly active backend; nothing is migrated between the two.
"""

from __future__ import annotations

import structlog

from fairbag.application.save_queue import SaveQueue
from fairbag.domain.model.cart import Cart, CartItem, VendorCartGroup
from fairbag.domain.model.catalog import Product, Vendor
from fairbag.domain.model.value_objects import Customization, Money
from fairbag.domain.repository.cart_repository import CartRepository

logger = structlog.get_logger(__name__)


class CartService:

    def __init__(
        self,
        repository: CartRepository,
        save_queue: SaveQueue,
        save_key: str = "cart",
    ) -> None:
        self._repository = repository
        self._save_queue = save_queue
        self._save_key = save_key
        self._cart = Cart()
        self._is_loaded = False

    # --- Lifecycle ------------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory cart with whatever the active backend holds."""
        self._cart.replace_items(self._repository.load())
        self._is_loaded = True
        logger.info("cart_loaded", item_count=len(self._cart.items))

    @property
    def is_loaded(self) -> bool:
        return self._is_loaded

    # --- Mutators -------------------------------------------------------------

    def add_item(
        self,
        product: Product,
        vendor: Vendor,
        quantity: int = 1,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
        requires_proof: bool = False,
    ) -> CartItem:
        item = self._cart.add_item(product, vendor, quantity, customizations, requires_proof)
        logger.debug(
            "cart_item_added", product_id=product.id, vendor_id=vendor.id, quantity=item.quantity
        )
        self._schedule_save()
        return item

    def update_quantity(
        self,
        product_id: str,
        vendor_id: str,
        quantity: int,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> None:
        self._cart.update_quantity(product_id, vendor_id, quantity, customizations)
        self._schedule_save()

    def remove_item(
        self,
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> list[CartItem]:
        removed = self._cart.remove_item(product_id, vendor_id, customizations)
        self._schedule_save()
        return removed

    def take_item(
        self,
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> CartItem | None:
        """Remove exactly one variant and return it (None if absent)."""
        item = self._cart.find_item(product_id, vendor_id, customizations)
        if item is None:
            return None
        self._cart.remove_item(product_id, vendor_id, item.customizations)
        self._schedule_save()
        return item

    def clear_cart(self) -> None:
        self._cart.clear()
        self._schedule_save()

    def clear_vendor_cart(self, vendor_id: str) -> None:
        self._cart.clear_vendor(vendor_id)
        logger.info("vendor_cart_cleared", vendor_id=vendor_id)
        self._schedule_save()

    def set_customer_zip(self, zip_code: str | None) -> None:
        self._cart.customer_zip = zip_code or None

    # --- Queries --------------------------------------------------------------

    @property
    def items(self) -> list[CartItem]:
        return list(self._cart.items)

    @property
    def customer_zip(self) -> str | None:
        return self._cart.customer_zip

    def grouped_by_vendor(self) -> list[VendorCartGroup]:
        return self._cart.grouped_by_vendor()

    def group_for(self, vendor_id: str) -> VendorCartGroup | None:
        return self._cart.group_for(vendor_id)

    def get_cart_total(self) -> Money:
        return self._cart.total

    def get_vendor_total(self, vendor_id: str) -> Money:
        return self._cart.vendor_total(vendor_id)

    def get_cart_item_count(self) -> int:
        return self._cart.item_count

    # --- Persistence ----------------------------------------------------------

    def _schedule_save(self) -> None:
        # Saving before the first load would overwrite the stored cart.
        if not self._is_loaded:
            logger.debug("cart_save_skipped_not_loaded")
            return
        snapshot = list(self._cart.items)
        self._save_queue.submit(self._save_key, lambda: self._repository.save(snapshot))
