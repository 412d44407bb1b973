"""JSON-file-backed implementation of CatalogRepository.

Reads ``products.json`` and ``vendors.json`` exported from the catalog.
Read-only: the catalog is maintained elsewhere.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from fairbag.domain.model.catalog import Product, ShippingSettings, Vendor
from fairbag.domain.repository.catalog_repository import CatalogRepository
from fairbag.infrastructure.persistence.serialization import product_from_raw


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, products_path: Path, vendors_path: Path) -> None:
        self._products_path = products_path
        self._vendors_path = vendors_path
        for path in (products_path, vendors_path):
            self._ensure_file(path)

    # --- CatalogRepository interface ------------------------------------------

    def get_product(self, product_id: str) -> Product | None:
        return self._load_products().get(product_id)

    def get_vendor(self, vendor_id: str) -> Vendor | None:
        for raw in self._load_raw(self._vendors_path):
            if raw["id"] == vendor_id:
                return self._to_vendor(raw)
        return None

    def list_products(self) -> list[Product]:
        return list(self._load_products().values())

    # --- Serialization helpers ------------------------------------------------

    def _load_products(self) -> dict[str, Product]:
        return {raw["id"]: product_from_raw(raw) for raw in self._load_raw(self._products_path)}

    @staticmethod
    def _to_vendor(raw: dict) -> Vendor:
        shipping = raw.get("shipping") or {}
        radius = shipping.get("pickup_radius_miles")
        return Vendor(
            id=raw["id"],
            name=raw["name"],
            zip_code=raw.get("zip_code"),
            shipping=ShippingSettings(
                flat_per_item=_decimal_or_none(shipping.get("flat_per_item")),
                flat_per_order=_decimal_or_none(shipping.get("flat_per_order")),
                free_shipping_over=_decimal_or_none(shipping.get("free_shipping_over")),
                allow_local_pickup=bool(shipping.get("allow_local_pickup", False)),
                pickup_radius_miles=float(radius) if radius is not None else None,
                pickup_public_label=shipping.get("pickup_public_label"),
                pickup_notes=shipping.get("pickup_notes"),
                pickup_instructions=shipping.get("pickup_instructions"),
                origin_zip=shipping.get("origin_zip"),
            ),
        )

    # --- File helpers ---------------------------------------------------------

    @staticmethod
    def _load_raw(path: Path) -> list[dict]:
        return json.loads(path.read_text(encoding="utf-8"))

    @staticmethod
    def _ensure_file(path: Path) -> None:
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("[]", encoding="utf-8")


def _decimal_or_none(value: str | float | int | None) -> Decimal | None:
    if value is None or value == "":
        return None
    return Decimal(str(value))
