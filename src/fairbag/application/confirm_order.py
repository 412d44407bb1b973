"""Application service: Confirm Order use case.

The vendor confirms that the customer's external payment arrived.
"""

from __future__ import annotations

from fairbag.application.order_transition import OrderTransitionHandler


class ConfirmOrderHandler(OrderTransitionHandler):

    def handle(
        self,
        order_id: str,
        notes: str | None = None,
        transaction_id: str | None = None,
    ) -> bool:
        """Move the order to ``completed``.

        Confirming an already completed order changes nothing; confirming
        a cancelled one raises InvalidTransitionError.
        """
        return self._apply(
            order_id,
            "order_confirmed",
            lambda order: order.confirm(notes=notes, transaction_id=transaction_id),
        )
