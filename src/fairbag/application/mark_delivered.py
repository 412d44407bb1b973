"""Application service: Mark Delivered use case."""

from __future__ import annotations

from fairbag.application.order_transition import OrderTransitionHandler
from fairbag.domain.exceptions import ValidationError
from fairbag.domain.model.order import DeliveryConfirmer


class MarkDeliveredHandler(OrderTransitionHandler):

    def handle(self, order_id: str, confirmed_by: DeliveryConfirmer) -> bool:
        if confirmed_by == DeliveryConfirmer.SYSTEM:
            raise ValidationError("Delivery is confirmed by the vendor or the customer")
        return self._apply(
            order_id,
            "order_delivered",
            lambda order: order.mark_delivered(confirmed_by),
        )
