"""Order aggregate — one vendor's checkout, frozen at creation time.

An order carries two independent status axes:

- ``status`` (order level): awaiting_vendor_confirmation -> completed,
  or -> cancelled.
- ``shipping_status`` (fulfillment): pending -> shipped -> in_transit ->
  out_for_delivery -> delivered, or the pickup branch
  pending -> pickup_ready -> picked_up.

The tables below are the single source of truth for which moves are
legal on each axis and which combinations of the two may coexist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from fairbag.domain.exceptions import (
    AlreadyPickedUpError,
    InvalidPickupCodeError,
    InvalidTransitionError,
    NotLocalPickupError,
    ValidationError,
)
from fairbag.domain.model.cart import VendorCartGroup
from fairbag.domain.model.identity import Identity
from fairbag.domain.model.value_objects import (
    Customization,
    Money,
    Quantity,
    customization_total,
)


class OrderStatus(Enum):
    AWAITING_VENDOR_CONFIRMATION = "awaiting_vendor_confirmation"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ShippingStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    PICKUP_READY = "pickup_ready"
    PICKED_UP = "picked_up"


class DeliveryConfirmer(Enum):
    SYSTEM = "System"
    VENDOR = "Vendor"
    CUSTOMER = "Customer"


class PaymentMethod(Enum):
    EXTERNAL_PAYPAL = "external_paypal"
    EXTERNAL_VENMO = "external_venmo"
    EXTERNAL_CASHAPP = "external_cashapp"
    EXTERNAL_WEBSITE = "external_website"
    MESSAGE_VENDOR = "message_vendor"


# ---------------------------------------------------------------------------
# Guard tables
# ---------------------------------------------------------------------------
SHIPPED_FAMILY = frozenset(
    {ShippingStatus.SHIPPED, ShippingStatus.IN_TRANSIT, ShippingStatus.OUT_FOR_DELIVERY}
)

SHIPPING_TRANSITIONS: dict[ShippingStatus, frozenset[ShippingStatus]] = {
    ShippingStatus.PENDING: frozenset(
        {ShippingStatus.SHIPPED, ShippingStatus.PICKUP_READY, ShippingStatus.PICKED_UP}
    ),
    # shipped -> shipped lets a vendor correct a mistyped tracking number
    ShippingStatus.SHIPPED: frozenset(
        {
            ShippingStatus.SHIPPED,
            ShippingStatus.IN_TRANSIT,
            ShippingStatus.OUT_FOR_DELIVERY,
            ShippingStatus.DELIVERED,
        }
    ),
    ShippingStatus.IN_TRANSIT: frozenset(
        {ShippingStatus.OUT_FOR_DELIVERY, ShippingStatus.DELIVERED}
    ),
    ShippingStatus.OUT_FOR_DELIVERY: frozenset({ShippingStatus.DELIVERED}),
    ShippingStatus.PICKUP_READY: frozenset({ShippingStatus.PICKED_UP}),
    ShippingStatus.DELIVERED: frozenset(),
    ShippingStatus.PICKED_UP: frozenset(),
}

ALLOWED_COMBINATIONS: dict[OrderStatus, frozenset[ShippingStatus]] = {
    OrderStatus.AWAITING_VENDOR_CONFIRMATION: frozenset(ShippingStatus),
    OrderStatus.COMPLETED: frozenset(ShippingStatus),
    OrderStatus.CANCELLED: frozenset(ShippingStatus)
    - {ShippingStatus.DELIVERED, ShippingStatus.PICKED_UP},
}

DEFAULT_TAX_RATE = Decimal("0.08")
AUTO_TRACKING_PROVIDER = "TrackingMore"


@dataclass(frozen=True)
class OrderItem:
    """Price snapshot of one cart line at order-creation time.

    ``unit_price`` is the product's base price; customization deltas are
    kept alongside and folded into ``line_total``.
    """

    product_id: str
    product_name: str
    product_image: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    customizations: tuple[Customization, ...] = ()

    @property
    def line_total(self) -> Money:
        return self.unit_price.adjusted(customization_total(self.customizations)) * self.quantity.value


@dataclass
class Order:
    """Aggregate root for one vendor's order.

    Use ``Order.create()`` for new orders.  The ``__init__`` is kept plain
    so repositories can reconstitute stored orders without re-validating.
    """

    id: str | None
    order_number: str | None
    customer_id: str
    customer_name: str
    customer_email: str | None
    vendor_id: str
    vendor_name: str
    items: list[OrderItem]
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    payment_method: PaymentMethod
    payment_url: str | None = None
    status: OrderStatus = OrderStatus.AWAITING_VENDOR_CONFIRMATION
    shipping_status: ShippingStatus = ShippingStatus.PENDING
    external_transaction_id: str | None = None
    confirmed_by_vendor: bool = False
    confirmed_at: datetime | None = None
    vendor_notes: str | None = None
    shipping_provider: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    shipped_at: datetime | None = None
    estimated_delivery_date: str | None = None
    delivery_notes: str | None = None
    auto_status_updates_enabled: bool = False
    tracking_provider_api: str | None = None
    delivered_at: datetime | None = None
    delivery_confirmed_by: DeliveryConfirmer | None = None
    is_local_pickup: bool = False
    pickup_confirmation_code: str | None = None
    pickup_code_generated_at: datetime | None = None
    pickup_code_verified_at: datetime | None = None
    pickup_code_verified_by: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer: Identity,
        group: VendorCartGroup,
        payment_method: PaymentMethod,
        payment_url: str | None = None,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        pickup_code: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Snapshot a vendor's cart slice into a new order.

        Shipping is always zero at creation; amounts are rounded to cents
        and ``total == subtotal + tax + shipping``.
        """
        if not customer.is_authenticated:
            raise ValidationError("Orders need an authenticated customer")
        if group.is_empty:
            raise ValidationError("Order must contain at least one item")

        now = now or datetime.now(timezone.utc)
        items = [
            OrderItem(
                product_id=item.product.id,
                product_name=item.product.name,
                product_image=item.product.image,
                quantity=Quantity(item.quantity),
                unit_price=item.product.price,  # <-- price snapshot
                customizations=item.customizations,
            )
            for item in group.items
        ]
        raw_subtotal = group.total
        subtotal = raw_subtotal.rounded()
        tax = raw_subtotal.percent(tax_rate).rounded()
        shipping = Money.zero()

        return Order(
            id=None,
            order_number=None,
            customer_id=customer.user_id,  # type: ignore[arg-type]
            customer_name=customer.display_name,
            customer_email=customer.email,
            vendor_id=group.vendor_id,
            vendor_name=group.vendor_name,
            items=items,
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=subtotal + tax + shipping,
            payment_method=payment_method,
            payment_url=payment_url or None,
            is_local_pickup=pickup_code is not None,
            pickup_confirmation_code=pickup_code,
            pickup_code_generated_at=now if pickup_code is not None else None,
            created_at=now,
            updated_at=now,
        )

    # --- Order status axis ----------------------------------------------------

    def confirm(
        self,
        notes: str | None = None,
        transaction_id: str | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Vendor confirms payment was received.

        Returns False (and changes nothing) when already completed.
        """
        if self.status == OrderStatus.COMPLETED:
            return False
        if self.status == OrderStatus.CANCELLED:
            raise InvalidTransitionError("Cannot confirm a cancelled order")
        now = self._now(now)
        self.status = OrderStatus.COMPLETED
        self.confirmed_by_vendor = True
        self.confirmed_at = now
        self.vendor_notes = notes or None
        self.external_transaction_id = transaction_id or None
        return True

    def cancel(self, now: datetime | None = None) -> None:
        if self.status == OrderStatus.CANCELLED:
            raise InvalidTransitionError("Order is already cancelled")
        if self.shipping_status not in ALLOWED_COMBINATIONS[OrderStatus.CANCELLED]:
            raise InvalidTransitionError(
                f"Cannot cancel an order that is {self.shipping_status.value}"
            )
        self._now(now)
        self.status = OrderStatus.CANCELLED

    # --- Fulfillment axis -----------------------------------------------------

    def add_shipping_info(
        self,
        provider: str,
        tracking_number: str,
        tracking_url: str | None,
        estimated_delivery: str | None = None,
        notes: str | None = None,
        auto_tracking: bool = False,
        now: datetime | None = None,
    ) -> None:
        if not provider or not provider.strip():
            raise ValidationError("Shipping provider is required")
        if not tracking_number or not tracking_number.strip():
            raise ValidationError("Tracking number is required")
        self._advance(ShippingStatus.SHIPPED)
        now = self._now(now)
        self.shipping_provider = provider.strip()
        self.tracking_number = tracking_number.strip()
        self.tracking_url = tracking_url
        self.shipped_at = now
        self.estimated_delivery_date = estimated_delivery or None
        self.delivery_notes = notes or None
        self.auto_status_updates_enabled = auto_tracking
        self.tracking_provider_api = AUTO_TRACKING_PROVIDER if auto_tracking else None

    def apply_carrier_status(self, new_status: ShippingStatus, now: datetime | None = None) -> bool:
        """Move forward to a status reported by the carrier.

        Stale or backwards reports are ignored (returns False).
        """
        if new_status not in SHIPPED_FAMILY | {ShippingStatus.DELIVERED}:
            return False
        if self.status == OrderStatus.CANCELLED:
            return False
        if new_status == self.shipping_status:
            return False
        if new_status not in SHIPPING_TRANSITIONS[self.shipping_status]:
            return False
        self._advance(new_status)
        now = self._now(now)
        if new_status == ShippingStatus.DELIVERED:
            self.delivered_at = now
            self.delivery_confirmed_by = DeliveryConfirmer.SYSTEM
        return True

    def mark_delivered(
        self,
        confirmed_by: DeliveryConfirmer,
        now: datetime | None = None,
    ) -> None:
        """Record delivery; only orders already handed to a carrier qualify."""
        if self.shipping_status not in SHIPPED_FAMILY:
            raise InvalidTransitionError(
                f"Cannot mark as delivered: order is {self.shipping_status.value}, "
                f"expected one of shipped, in_transit, out_for_delivery"
            )
        self._advance(ShippingStatus.DELIVERED)
        now = self._now(now)
        self.delivered_at = now
        self.delivery_confirmed_by = confirmed_by

    def mark_pickup_ready(self, now: datetime | None = None) -> None:
        if not self.is_local_pickup:
            raise NotLocalPickupError("This is not a local pickup order")
        self._advance(ShippingStatus.PICKUP_READY)
        self._now(now)

    def mark_picked_up(self, now: datetime | None = None) -> None:
        """Vendor confirms the hand-over without checking a code."""
        if self.shipping_status == ShippingStatus.PICKED_UP:
            raise AlreadyPickedUpError("Order already picked up")
        self._advance(ShippingStatus.PICKED_UP)
        now = self._now(now)
        self.delivered_at = now
        self.delivery_confirmed_by = DeliveryConfirmer.VENDOR

    def verify_pickup_code(
        self,
        code: str,
        verifier_id: str,
        now: datetime | None = None,
    ) -> None:
        """Complete a local pickup when the buyer's code matches exactly.

        Checks run in a fixed order: pickup order?  already collected?
        code matches?  Nothing changes unless every check passes.
        """
        if not self.is_local_pickup:
            raise NotLocalPickupError("This is not a local pickup order")
        if self.shipping_status == ShippingStatus.PICKED_UP:
            raise AlreadyPickedUpError("Order already picked up")
        if self.pickup_confirmation_code is None or self.pickup_confirmation_code != code:
            raise InvalidPickupCodeError("Invalid pickup code")
        now = now or datetime.now(timezone.utc)
        self.mark_picked_up(now)
        self.pickup_code_verified_at = now
        self.pickup_code_verified_by = verifier_id

    # --- Internal helpers -----------------------------------------------------

    def _advance(self, target: ShippingStatus) -> None:
        if self.status == OrderStatus.CANCELLED:
            raise InvalidTransitionError("Cannot update fulfillment of a cancelled order")
        if target not in SHIPPING_TRANSITIONS[self.shipping_status]:
            raise InvalidTransitionError(
                f"Cannot move order from {self.shipping_status.value} to {target.value}"
            )
        if target not in ALLOWED_COMBINATIONS[self.status]:
            raise InvalidTransitionError(
                f"A {self.status.value} order cannot be {target.value}"
            )
        self.shipping_status = target

    def _now(self, now: datetime | None) -> datetime:
        now = now or datetime.now(timezone.utc)
        self.updated_at = now
        return now
