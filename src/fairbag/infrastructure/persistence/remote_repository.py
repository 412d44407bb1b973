"""Remote-store implementations of the cart and saved-item repositories.

The cart is stored as one row per (customer, vendor); saved items as one
row per (customer, item key).  ``save`` makes the remote rows match the
in-memory list exactly, deleting rows that no longer have items.

A failed remote write never loses the shopper's list: it is written to
the local fallback repository instead and a warning is logged.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from fairbag.domain.exceptions import MalformedStoredDataError, PersistenceUnavailableError
from fairbag.domain.model.cart import CartItem
from fairbag.domain.model.saved_for_later import SavedForLaterItem
from fairbag.domain.repository.backends import RemoteStore
from fairbag.domain.repository.cart_repository import CartRepository, SavedItemsRepository
from fairbag.infrastructure.persistence.serialization import (
    cart_item_from_raw,
    cart_item_to_raw,
    saved_item_from_raw,
    saved_item_to_raw,
)

logger = structlog.get_logger(__name__)

CUSTOMERS_TABLE = "customers"
CARTS_TABLE = "customer_carts"
SAVED_TABLE = "customer_saved_for_later"


def has_remote_profile(remote: RemoteStore, user_id: str) -> bool:
    """True when the customer already has a profile row in the remote store."""
    try:
        return bool(remote.select(CUSTOMERS_TABLE, {"id": user_id}))
    except PersistenceUnavailableError as exc:
        logger.warning("remote_profile_lookup_failed", user_id=user_id, error=str(exc))
        return False


class RemoteCartRepository(CartRepository):

    def __init__(
        self,
        remote: RemoteStore,
        customer_id: str,
        fallback: CartRepository,
    ) -> None:
        self._remote = remote
        self._customer_id = customer_id
        self._fallback = fallback

    # --- CartRepository interface ---------------------------------------------

    def load(self) -> list[CartItem]:
        try:
            rows = self._remote.select(
                CARTS_TABLE,
                {"customer_id": self._customer_id},
                order_by="updated_at",
                descending=True,
            )
        except PersistenceUnavailableError as exc:
            logger.warning("remote_cart_load_failed", user_id=self._customer_id, error=str(exc))
            return self._fallback.load()

        items: list[CartItem] = []
        for row in rows:
            vendor_id = row.get("vendor_id")
            if not vendor_id:
                logger.warning("remote_cart_row_skipped", user_id=self._customer_id, reason="missing vendor_id")
                continue
            for raw in row.get("items") or []:
                try:
                    items.append(
                        cart_item_from_raw(raw, vendor_id=vendor_id, vendor_name=row.get("vendor_name", ""))
                    )
                except MalformedStoredDataError as exc:
                    logger.warning("remote_cart_item_skipped", vendor_id=vendor_id, error=str(exc))
        logger.info("remote_cart_loaded", user_id=self._customer_id, item_count=len(items))
        return items

    def save(self, items: list[CartItem]) -> None:
        rows = self._to_rows(items)
        try:
            stored = self._remote.select(CARTS_TABLE, {"customer_id": self._customer_id})
            for vendor_id in {r.get("vendor_id") for r in stored} - {None} - rows.keys():
                self._remote.delete(
                    CARTS_TABLE, {"customer_id": self._customer_id, "vendor_id": vendor_id}
                )
            for row in rows.values():
                self._remote.upsert(CARTS_TABLE, row, on_conflict=("customer_id", "vendor_id"))
        except PersistenceUnavailableError as exc:
            logger.warning("remote_cart_save_failed", user_id=self._customer_id, error=str(exc))
            self._fallback.save(items)
            return
        logger.debug("remote_cart_saved", user_id=self._customer_id, vendor_count=len(rows))

    # --- Serialization --------------------------------------------------------

    def _to_rows(self, items: list[CartItem]) -> dict[str, dict]:
        now = datetime.now(timezone.utc).isoformat()
        rows: dict[str, dict] = {}
        for item in items:
            row = rows.setdefault(
                item.vendor_id,
                {
                    "customer_id": self._customer_id,
                    "vendor_id": item.vendor_id,
                    "vendor_name": item.vendor_name,
                    "items": [],
                    "updated_at": now,
                },
            )
            row["items"].append(cart_item_to_raw(item))
        return rows


class RemoteSavedItemsRepository(SavedItemsRepository):

    def __init__(
        self,
        remote: RemoteStore,
        customer_id: str,
        fallback: SavedItemsRepository,
    ) -> None:
        self._remote = remote
        self._customer_id = customer_id
        self._fallback = fallback

    # --- SavedItemsRepository interface ---------------------------------------

    def load(self) -> list[SavedForLaterItem]:
        try:
            rows = self._remote.select(
                SAVED_TABLE,
                {"customer_id": self._customer_id},
                order_by="saved_at",
                descending=True,
            )
        except PersistenceUnavailableError as exc:
            logger.warning("remote_saved_load_failed", user_id=self._customer_id, error=str(exc))
            return self._fallback.load()

        saved: list[SavedForLaterItem] = []
        for row in rows:
            try:
                saved.append(saved_item_from_raw(row))
            except MalformedStoredDataError as exc:
                logger.warning("remote_saved_item_skipped", item_key=row.get("item_key"), error=str(exc))
        return saved

    def save(self, items: list[SavedForLaterItem]) -> None:
        rows = {self._item_key(s): self._to_row(s) for s in items}
        try:
            stored = self._remote.select(SAVED_TABLE, {"customer_id": self._customer_id})
            for item_key in {r.get("item_key") for r in stored} - {None} - rows.keys():
                self._remote.delete(
                    SAVED_TABLE, {"customer_id": self._customer_id, "item_key": item_key}
                )
            for row in rows.values():
                self._remote.upsert(SAVED_TABLE, row, on_conflict=("customer_id", "item_key"))
        except PersistenceUnavailableError as exc:
            logger.warning("remote_saved_save_failed", user_id=self._customer_id, error=str(exc))
            self._fallback.save(items)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _item_key(saved: SavedForLaterItem) -> str:
        return f"{saved.key.product_id}|{saved.key.customizations}"

    def _to_row(self, saved: SavedForLaterItem) -> dict:
        row = saved_item_to_raw(saved)
        row["customer_id"] = self._customer_id
        row["item_key"] = self._item_key(saved)
        return row
