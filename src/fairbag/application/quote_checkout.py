"""Application service: price one vendor's checkout before ordering.

Combines the vendor's shipping settings with the shopper's ZIP to decide
whether local pickup is on offer and what shipping will cost.
"""

from __future__ import annotations

from fairbag.application.dto import CheckoutQuote
from fairbag.domain.exceptions import ValidationError
from fairbag.domain.model.cart import VendorCartGroup
from fairbag.domain.model.catalog import Vendor
from fairbag.domain.model.value_objects import Money
from fairbag.domain.service.geo import distance_between_zips, format_distance
from fairbag.domain.service.shipping_rules import (
    DEFAULT_PICKUP_RADIUS_MILES,
    compute_shipping,
    pickup_eligible,
    qualifies_for_free_shipping,
)


class QuoteCheckoutHandler:

    def __init__(self, default_pickup_radius: float = DEFAULT_PICKUP_RADIUS_MILES) -> None:
        self._default_pickup_radius = default_pickup_radius

    def handle(
        self,
        group: VendorCartGroup,
        vendor: Vendor,
        customer_zip: str | None,
        pickup_selected: bool = False,
    ) -> CheckoutQuote:
        settings = vendor.shipping
        origin_zip = vendor.pickup_origin_zip
        radius = settings.pickup_radius_miles or self._default_pickup_radius

        pickup_available = settings.allow_local_pickup and pickup_eligible(
            origin_zip, customer_zip, radius
        )
        if pickup_selected and not pickup_available:
            raise ValidationError(f"{vendor.name} does not offer local pickup to this address")

        subtotal = group.total.rounded()
        shipping = Money(
            compute_shipping(settings, group.item_count, subtotal.amount, pickup_selected)
        ).rounded()

        distance = None
        if origin_zip and customer_zip:
            miles = distance_between_zips(origin_zip, customer_zip)
            if miles is not None:
                distance = format_distance(miles)

        return CheckoutQuote(
            vendor_name=group.vendor_name,
            item_count=group.item_count,
            subtotal=str(subtotal),
            distance=distance,
            pickup_available=pickup_available,
            pickup_selected=pickup_selected,
            free_shipping=qualifies_for_free_shipping(settings, subtotal.amount),
            shipping=str(shipping),
            total=str(subtotal + shipping),
        )
