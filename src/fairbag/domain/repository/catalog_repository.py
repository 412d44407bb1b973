"""Abstract repository for catalog reference data.

Defined in the domain layer so the domain never depends on
infrastructure. The catalog is owned by another system; this port is
read-only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fairbag.domain.model.catalog import Product, Vendor


class CatalogRepository(ABC):

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_vendor(self, vendor_id: str) -> Vendor | None:
        """Return a vendor (with its shipping settings), or None if not found."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Return every product in the catalog."""
