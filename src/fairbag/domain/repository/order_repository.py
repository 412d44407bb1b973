"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fairbag.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> Order:
        """Insert a new order, assigning its ``id`` and ``order_number``.

        Raises PersistenceUnavailableError if the write fails; nothing is
        stored in that case.
        """

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist changes to an existing order (last write wins)."""

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> list[Order]:
        """Return a customer's orders, newest first."""

    @abstractmethod
    def list_for_vendor(self, vendor_id: str) -> list[Order]:
        """Return a vendor's orders, newest first."""
