"""Application service: Cancel Order use case.

Cancellation only touches the order-level status; the fulfillment status
is left where it was.  Orders already delivered or picked up cannot be
cancelled.
"""

from __future__ import annotations

from fairbag.application.order_transition import OrderTransitionHandler


class CancelOrderHandler(OrderTransitionHandler):

    def handle(self, order_id: str) -> bool:
        return self._apply(order_id, "order_cancelled", lambda order: order.cancel())
