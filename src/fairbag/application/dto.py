"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from fairbag.domain.model.order import Order


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single order line as displayed to the user."""

    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    options: str  # "Size: L, Gift wrap: yes" or ""
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    order_number: str
    customer_name: str
    vendor_name: str
    status: str
    shipping_status: str
    payment_method: str
    items: list[OrderItemDTO]
    subtotal: str
    tax: str
    shipping: str
    total: str
    tracking_url: str | None
    is_local_pickup: bool
    pickup_code: str | None
    created_at: str


@dataclass(frozen=True)
class PickupVerificationResult:
    success: bool
    message: str


@dataclass(frozen=True)
class CheckoutQuote:
    """Output: what one vendor's checkout will cost before the order exists."""

    vendor_name: str
    item_count: int
    subtotal: str
    distance: str | None  # "12.5 miles away", None when a ZIP is unknown
    pickup_available: bool
    pickup_selected: bool
    free_shipping: bool
    shipping: str
    total: str


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id or "",
        order_number=order.order_number or "",
        customer_name=order.customer_name,
        vendor_name=order.vendor_name,
        status=order.status.value,
        shipping_status=order.shipping_status.value,
        payment_method=order.payment_method.value,
        items=[
            OrderItemDTO(
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                options=", ".join(f"{c.label}: {_format_value(c.value)}" for c in item.customizations),
                line_total=str(item.line_total.rounded()),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        tax=str(order.tax),
        shipping=str(order.shipping),
        total=str(order.total),
        tracking_url=order.tracking_url,
        is_local_pickup=order.is_local_pickup,
        pickup_code=order.pickup_confirmation_code,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def _format_value(value: str | bool) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    return value
