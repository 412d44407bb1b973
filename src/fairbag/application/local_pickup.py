"""Application services for the local pickup branch of fulfillment.

pending -> pickup_ready -> picked_up.  The hand-over is completed either
by the vendor checking the buyer's confirmation code, or by the vendor
confirming it manually.
"""

from __future__ import annotations

import structlog

from fairbag.application.dto import PickupVerificationResult
from fairbag.application.order_transition import OrderTransitionHandler
from fairbag.domain.exceptions import (
    PersistenceUnavailableError,
    PickupVerificationError,
    ValidationError,
)
from fairbag.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class MarkPickupReadyHandler(OrderTransitionHandler):

    def handle(self, order_id: str) -> bool:
        return self._apply(order_id, "order_pickup_ready", lambda order: order.mark_pickup_ready())


class MarkPickedUpHandler(OrderTransitionHandler):

    def handle(self, order_id: str) -> bool:
        return self._apply(order_id, "order_picked_up", lambda order: order.mark_picked_up())


class VerifyPickupCodeHandler:
    """Check a buyer's code and complete the pickup.

    Every outcome, including a storage failure, comes back as a
    PickupVerificationResult so the vendor always sees a message.
    """

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str, code: str, verifier_id: str) -> PickupVerificationResult:
        try:
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                return PickupVerificationResult(False, "Order not found")
            try:
                order.verify_pickup_code(code, verifier_id)
            except (PickupVerificationError, ValidationError) as exc:
                logger.info("pickup_code_rejected", order_id=order_id, reason=str(exc))
                return PickupVerificationResult(False, str(exc))
            self._order_repo.save(order)
        except PersistenceUnavailableError:
            logger.warning("pickup_code_verification_failed", order_id=order_id, exc_info=True)
            return PickupVerificationResult(False, "Failed to verify pickup code")

        logger.info("pickup_code_verified", order_id=order_id, verifier_id=verifier_id)
        return PickupVerificationResult(True, "Pickup confirmed successfully")
