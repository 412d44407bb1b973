"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from fairbag.application.add_shipping_info import AddShippingInfoHandler
from fairbag.application.cancel_order import CancelOrderHandler
from fairbag.application.confirm_order import ConfirmOrderHandler
from fairbag.application.create_order import CreateOrderHandler
from fairbag.application.dto import OrderDTO
from fairbag.application.local_pickup import (
    MarkPickedUpHandler,
    MarkPickupReadyHandler,
    VerifyPickupCodeHandler,
)
from fairbag.application.mark_delivered import MarkDeliveredHandler
from fairbag.application.order_transition import OrderTransitionHandler
from fairbag.application.show_order import ListOrdersHandler, ShowOrderHandler
from fairbag.application.update_tracking_status import UpdateTrackingStatusHandler
from fairbag.domain.exceptions import DomainException, NotAuthenticatedError
from fairbag.domain.model.order import DeliveryConfirmer, PaymentMethod
from fairbag.infrastructure.cli.state import CliState, pass_state

_PAYMENT_METHODS = [m.value for m in PaymentMethod]


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (id={dto.id})")
    click.echo(f"Status:   {dto.status} / {dto.shipping_status}")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Vendor:   {dto.vendor_name}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.tracking_url:
        click.echo(f"Tracking: {dto.tracking_url}")
    if dto.is_local_pickup:
        click.echo(f"Pickup code: {dto.pickup_code}")
    click.echo()

    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<24} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
        if item.options:
            click.echo(f"    ({item.options})")
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Subtotal':<31} {dto.subtotal:>20}")
    click.echo(f"  {'Tax':<31} {dto.tax:>20}")
    click.echo(f"  {'Shipping':<31} {dto.shipping:>20}")
    click.echo(f"  {'Order Total':<31} {dto.total:>20}")


def _run_transition(state: CliState, handler_cls: type[OrderTransitionHandler], order_id: str, *args, **kwargs) -> None:
    handler = handler_cls(order_repo=state.orders(), identity_provider=state.identity_provider)
    try:
        ok = handler.handle(order_id, *args, **kwargs)  # type: ignore[attr-defined]
    except DomainException as exc:
        raise click.ClickException(str(exc))
    if not ok:
        raise click.ClickException(f"Could not update order #{order_id}; please try again.")


@click.command("create")
@click.option("--vendor", "vendor_id", required=True, help="Check out this vendor's cart items.")
@click.option("--payment", "payment_method", required=True, type=click.Choice(_PAYMENT_METHODS))
@click.option("--payment-url", default=None, help="External payment link.")
@click.option("--pickup", is_flag=True, default=False, help="Collect in person instead of shipping.")
@pass_state
def order_create(
    state: CliState, vendor_id: str, payment_method: str, payment_url: str | None, pickup: bool
) -> None:
    """Place an order for one vendor's items in the cart."""
    cart = state.session.cart
    group = cart.group_for(vendor_id)
    if group is None:
        raise click.ClickException(f"Your cart has no items from vendor {vendor_id}.")

    handler = CreateOrderHandler(
        order_repo=state.orders(),
        cart=cart,
        identity_provider=state.identity_provider,
        tax_rate=state.settings.tax_rate,
    )

    try:
        dto = handler.handle(group, PaymentMethod(payment_method), payment_url, local_pickup=pickup)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} created  (status={dto.status})")
    click.echo()
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@pass_state
def order_show(state: CliState, order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=state.orders())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--vendor", "vendor_id", default=None, help="List a vendor's incoming orders instead.")
@pass_state
def order_list(state: CliState, vendor_id: str | None) -> None:
    """List your orders, newest first."""
    handler = ListOrdersHandler(order_repo=state.orders())
    try:
        if vendor_id:
            orders = handler.for_vendor(vendor_id)
        else:
            identity = state.identity_provider.current()
            if not identity.is_authenticated:
                raise NotAuthenticatedError("Sign in to see your orders")
            orders = handler.for_customer(identity.user_id)  # type: ignore[arg-type]
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"  {'Order':<22} {'Vendor':<20} {'Status':<29} {'Shipping':<17} {'Total':>10}")
    click.echo(f"  {'-'*102}")
    for dto in orders:
        click.echo(
            f"  {dto.order_number:<22} {dto.vendor_name:<20} {dto.status:<29} "
            f"{dto.shipping_status:<17} {dto.total:>10}"
        )


@click.command("confirm")
@click.option("--id", "order_id", required=True, help="Order ID to confirm.")
@click.option("--notes", default=None, help="Note to the customer.")
@click.option("--transaction-id", default=None, help="External payment reference.")
@pass_state
def order_confirm(state: CliState, order_id: str, notes: str | None, transaction_id: str | None) -> None:
    """Confirm that payment for an order was received."""
    _run_transition(state, ConfirmOrderHandler, order_id, notes=notes, transaction_id=transaction_id)
    click.echo(f"Order #{order_id} confirmed.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@pass_state
def order_cancel(state: CliState, order_id: str) -> None:
    """Cancel an order."""
    _run_transition(state, CancelOrderHandler, order_id)
    click.echo(f"Order #{order_id} cancelled.")


@click.command("ship")
@click.option("--id", "order_id", required=True, help="Order ID to ship.")
@click.option("--carrier", required=True, help="Carrier name, e.g. USPS, UPS, FedEx, DHL.")
@click.option("--tracking", "tracking_number", required=True, help="Tracking number.")
@click.option("--eta", default=None, help="Estimated delivery date.")
@click.option("--notes", default=None, help="Delivery notes.")
@click.option("--auto-tracking", is_flag=True, default=False, help="Follow carrier status updates.")
@pass_state
def order_ship(
    state: CliState,
    order_id: str,
    carrier: str,
    tracking_number: str,
    eta: str | None,
    notes: str | None,
    auto_tracking: bool,
) -> None:
    """Record shipping details and mark the order shipped."""
    _run_transition(
        state,
        AddShippingInfoHandler,
        order_id,
        provider=carrier,
        tracking_number=tracking_number,
        estimated_delivery=eta,
        notes=notes,
        auto_tracking=auto_tracking,
    )
    click.echo(f"Order #{order_id} shipped via {carrier}.")


@click.command("track")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", "carrier_status", required=True, help="Carrier status code, e.g. transit.")
@pass_state
def order_track(state: CliState, order_id: str, carrier_status: str) -> None:
    """Apply a carrier status update."""
    _run_transition(state, UpdateTrackingStatusHandler, order_id, carrier_status)
    click.echo(f"Order #{order_id} tracking updated ({carrier_status}).")


@click.command("deliver")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option(
    "--by",
    "confirmed_by",
    type=click.Choice(["vendor", "customer"]),
    default="vendor",
    show_default=True,
)
@pass_state
def order_deliver(state: CliState, order_id: str, confirmed_by: str) -> None:
    """Mark a shipped order as delivered."""
    _run_transition(state, MarkDeliveredHandler, order_id, DeliveryConfirmer(confirmed_by.capitalize()))
    click.echo(f"Order #{order_id} delivered.")


@click.command("pickup-ready")
@click.option("--id", "order_id", required=True, help="Order ID.")
@pass_state
def order_pickup_ready(state: CliState, order_id: str) -> None:
    """Tell the customer a pickup order is ready."""
    _run_transition(state, MarkPickupReadyHandler, order_id)
    click.echo(f"Order #{order_id} is ready for pickup.")


@click.command("picked-up")
@click.option("--id", "order_id", required=True, help="Order ID.")
@pass_state
def order_picked_up(state: CliState, order_id: str) -> None:
    """Confirm a pickup without checking the code."""
    _run_transition(state, MarkPickedUpHandler, order_id)
    click.echo(f"Order #{order_id} picked up.")


@click.command("verify-pickup")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--code", required=True, help="Code shown by the customer.")
@pass_state
def order_verify_pickup(state: CliState, order_id: str, code: str) -> None:
    """Check a customer's pickup code and complete the pickup."""
    identity = state.identity_provider.current()
    if not identity.is_authenticated:
        raise click.ClickException("Sign in to verify pickups")

    handler = VerifyPickupCodeHandler(order_repo=state.orders())
    result = handler.handle(order_id, code, verifier_id=identity.user_id)  # type: ignore[arg-type]
    if not result.success:
        raise click.ClickException(result.message)
    click.echo(result.message)
