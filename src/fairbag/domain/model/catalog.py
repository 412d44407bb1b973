"""Catalog reference data: products, vendors and vendor shipping settings.

These records are owned by the external catalog. The cart and order code
reads them but never mutates them, so everything here is frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from fairbag.domain.exceptions import ValidationError
from fairbag.domain.model.value_objects import Money


@dataclass(frozen=True)
class Product:
    """A product listed by a vendor.

    The price here is the *live* price. Orders capture a snapshot at
    creation time, so later price changes never reach existing orders.
    """

    id: str
    name: str
    price: Money
    image: str = ""
    vendor_id: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Product id is required")


@dataclass(frozen=True)
class ShippingSettings:
    """Vendor-configured shipping and local pickup rules.

    Unset (``None``) rates are treated as "not offered", not as zero.
    """

    flat_per_item: Decimal | None = None
    flat_per_order: Decimal | None = None
    free_shipping_over: Decimal | None = None
    allow_local_pickup: bool = False
    pickup_radius_miles: float | None = None
    pickup_public_label: str | None = None
    pickup_notes: str | None = None
    pickup_instructions: str | None = None
    origin_zip: str | None = None


@dataclass(frozen=True)
class Vendor:
    id: str
    name: str
    zip_code: str | None = None
    shipping: ShippingSettings = field(default_factory=ShippingSettings)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Vendor id is required")

    @property
    def pickup_origin_zip(self) -> str | None:
        """ZIP used for pickup distance: the configured origin, else the shop ZIP."""
        return self.shipping.origin_zip or self.zip_code
