"""Application service: Add Shipping Info use case.

Marks the order shipped and derives a public tracking link from the
carrier name.  Unknown carriers are accepted, just without a link.
"""

from __future__ import annotations

from fairbag.application.order_transition import OrderTransitionHandler
from fairbag.domain.service.tracking import tracking_url


class AddShippingInfoHandler(OrderTransitionHandler):

    def handle(
        self,
        order_id: str,
        provider: str,
        tracking_number: str,
        estimated_delivery: str | None = None,
        notes: str | None = None,
        auto_tracking: bool = False,
    ) -> bool:
        url = tracking_url(provider, tracking_number)
        return self._apply(
            order_id,
            "order_shipped",
            lambda order: order.add_shipping_info(
                provider=provider,
                tracking_number=tracking_number,
                tracking_url=url,
                estimated_delivery=estimated_delivery,
                notes=notes,
                auto_tracking=auto_tracking,
            ),
        )
