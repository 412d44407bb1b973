"""Shared plumbing for use cases that move an existing order along.

Each transition is an independent load / change / save by id with no
locking, so concurrent updates to one order are last-write-wins.

Outcome policy:

- missing identity, unknown order id, or an illegal transition raise
  a DomainException
- a storage failure returns False and leaves the stored order as it was
- a change that turns out to be a no-op returns True without writing
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from fairbag.domain.exceptions import (
    EntityNotFoundError,
    NotAuthenticatedError,
    PersistenceUnavailableError,
)
from fairbag.domain.model.identity import Identity, IdentityProvider
from fairbag.domain.model.order import Order
from fairbag.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

# Returns False when the order was already in the requested state.
OrderChange = Callable[[Order], "bool | None"]


class OrderTransitionHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        identity_provider: IdentityProvider,
    ) -> None:
        self._order_repo = order_repo
        self._identity_provider = identity_provider

    def _require_identity(self) -> Identity:
        identity = self._identity_provider.current()
        if not identity.is_authenticated:
            raise NotAuthenticatedError("Sign in to update orders")
        return identity

    def _load(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order

    def _apply(self, order_id: str, event: str, change: OrderChange) -> bool:
        identity = self._require_identity()
        try:
            order = self._load(order_id)
            if change(order) is False:
                logger.info(f"{event}_unchanged", order_id=order_id)
                return True
            self._order_repo.save(order)
        except PersistenceUnavailableError:
            logger.warning(f"{event}_failed", order_id=order_id, exc_info=True)
            return False
        logger.info(
            event,
            order_id=order_id,
            user_id=identity.user_id,
            status=order.status.value,
            shipping_status=order.shipping_status.value,
        )
        return True
