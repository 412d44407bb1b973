"""Application service: apply a carrier status report to an order."""

from __future__ import annotations

import structlog

from fairbag.application.order_transition import OrderTransitionHandler
from fairbag.domain.service.tracking import map_carrier_status

logger = structlog.get_logger(__name__)


class UpdateTrackingStatusHandler(OrderTransitionHandler):

    def handle(self, order_id: str, carrier_status: str) -> bool:
        """Advance the fulfillment status from a carrier code.

        Codes that carry no progress (``notfound``, ``expired``, ...) and
        reports that would move the order backwards are ignored.
        """
        new_status = map_carrier_status(carrier_status)
        if new_status is None:
            logger.info("carrier_status_ignored", order_id=order_id, carrier_status=carrier_status)
        return self._apply(
            order_id,
            "tracking_status_updated",
            lambda order: new_status is not None and order.apply_carrier_status(new_status),
        )
