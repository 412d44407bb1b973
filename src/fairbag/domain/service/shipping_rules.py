"""Shipping cost and local pickup eligibility.

Both functions are pure.  They feed checkout copy that must always
render, so bad input yields the permissive default instead of an error.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from fairbag.domain.model.catalog import ShippingSettings
from fairbag.domain.service.geo import distance_between_zips

logger = structlog.get_logger(__name__)

DEFAULT_PICKUP_RADIUS_MILES = 75.0
_ZERO = Decimal("0")


def pickup_eligible(
    vendor_zip: str | None,
    customer_zip: str | None,
    max_miles: float = DEFAULT_PICKUP_RADIUS_MILES,
) -> bool:
    """True unless both ZIPs resolve and are farther apart than ``max_miles``.

    A missing or unmapped ZIP never blocks checkout.
    """
    if not vendor_zip or not customer_zip:
        return True
    distance = distance_between_zips(vendor_zip, customer_zip)
    if distance is None:
        return True
    return distance <= max_miles


def qualifies_for_free_shipping(settings: ShippingSettings, subtotal: Decimal) -> bool:
    threshold = settings.free_shipping_over
    return bool(threshold) and subtotal >= threshold


def compute_shipping(
    settings: ShippingSettings,
    item_count: int,
    subtotal: Decimal,
    pickup_enabled: bool,
) -> Decimal:
    """Shipping charge for one vendor's slice of the cart.

    Pickup is free; so is anything over the free-shipping threshold.
    When both per-item and per-order rates are set the lower one applies.
    """
    if pickup_enabled:
        return _ZERO
    if qualifies_for_free_shipping(settings, subtotal):
        return _ZERO

    per_item = (settings.flat_per_item or _ZERO) * max(item_count, 0)
    per_order = settings.flat_per_order or _ZERO

    if per_item > 0 and per_order > 0:
        return min(per_item, per_order)
    if per_item > 0:
        return per_item
    if per_order > 0:
        return per_order
    return _ZERO
