"""Application service: Create Order use case.

Orchestrates the flow between the shopper's cart and the order store.
The order is written first; the vendor's slice of the cart is cleared
only once that write has succeeded.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from fairbag.application.cart_service import CartService
from fairbag.application.dto import OrderDTO, to_order_dto
from fairbag.domain.exceptions import NotAuthenticatedError, ValidationError
from fairbag.domain.model.cart import VendorCartGroup
from fairbag.domain.model.identity import IdentityProvider
from fairbag.domain.model.order import DEFAULT_TAX_RATE, Order, PaymentMethod
from fairbag.domain.repository.order_repository import OrderRepository
from fairbag.domain.service.pickup_codes import generate_pickup_code

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart: CartService,
        identity_provider: IdentityProvider,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
    ) -> None:
        self._order_repo = order_repo
        self._cart = cart
        self._identity_provider = identity_provider
        self._tax_rate = tax_rate

    def handle(
        self,
        group: VendorCartGroup,
        payment_method: PaymentMethod,
        payment_url: str | None = None,
        local_pickup: bool = False,
    ) -> OrderDTO:
        """Check out one vendor's slice of the cart.

        Steps:
        1. Require a signed-in customer.
        2. Snapshot the group's items and prices into a new Order.
        3. Persist it (PersistenceUnavailableError propagates, cart untouched).
        4. Clear that vendor's slice of the cart.
        """
        customer = self._identity_provider.current()
        if not customer.is_authenticated:
            raise NotAuthenticatedError("Sign in to place an order")
        if group.is_empty:
            raise ValidationError(f"Cart has no items from {group.vendor_name}")

        order = Order.create(
            customer=customer,
            group=group,
            payment_method=payment_method,
            payment_url=payment_url,
            tax_rate=self._tax_rate,
            pickup_code=generate_pickup_code() if local_pickup else None,
        )
        self._order_repo.add(order)

        self._cart.clear_vendor_cart(group.vendor_id)
        logger.info(
            "order_created",
            order_id=order.id,
            order_number=order.order_number,
            vendor_id=order.vendor_id,
            user_id=customer.user_id,
            total=str(order.total),
        )
        return to_order_dto(order)
