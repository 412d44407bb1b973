"""Unit tests for the Order aggregate and its business rules."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fairbag.domain.exceptions import (
    AlreadyPickedUpError,
    InvalidPickupCodeError,
    InvalidTransitionError,
    NotLocalPickupError,
    ValidationError,
)
from fairbag.domain.model.cart import Cart, VendorCartGroup
from fairbag.domain.model.identity import Identity
from fairbag.domain.model.order import (
    ALLOWED_COMBINATIONS,
    SHIPPING_TRANSITIONS,
    DeliveryConfirmer,
    Order,
    OrderStatus,
    PaymentMethod,
    ShippingStatus,
)
from fairbag.domain.model.value_objects import Customization, Money
from tests.fakes import ALICE, make_product, make_vendor

T0 = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def _group(lines=(("10.00", 1), ("15.00", 2)), customizations=None) -> VendorCartGroup:
    """Vendor v1's slice of a cart holding one product per (price, qty) pair."""
    cart = Cart()
    vendor = make_vendor("v1", "Clay & Co")
    for n, (price, qty) in enumerate(lines):
        cart.add_item(make_product(f"p{n}", price), vendor, qty, customizations)
    return cart.group_for("v1")


def _make_order(pickup_code: str | None = None, **kwargs) -> Order:
    return Order.create(
        customer=ALICE,
        group=_group(**kwargs),
        payment_method=PaymentMethod.EXTERNAL_PAYPAL,
        pickup_code=pickup_code,
        now=T0,
    )


def _shipped(order: Order) -> Order:
    order.add_shipping_info("USPS", "9400 1000", tracking_url=None)
    return order


class TestOrderCreation:

    def test_totals_scenario(self):
        order = _make_order()
        assert order.subtotal == Money.of("40.00")
        assert order.tax == Money.of("3.20")
        assert order.shipping == Money.of("0")
        assert order.total == Money.of("43.20")

    def test_initial_states(self):
        order = _make_order()
        assert order.status == OrderStatus.AWAITING_VENDOR_CONFIRMATION
        assert order.shipping_status == ShippingStatus.PENDING
        assert order.id is None  # assigned by repository
        assert order.order_number is None

    def test_tax_rounded_to_cents(self):
        order = _make_order(lines=(("10.05", 1),))
        assert order.tax == Money.of("0.80")
        assert order.total == Money.of("10.85")

    def test_customization_deltas_in_subtotal(self):
        wrap = Customization("gift_wrap", "Gift wrap", True, Decimal("2.50"))
        order = _make_order(lines=(("10.00", 2),), customizations=[wrap])
        assert order.items[0].unit_price == Money.of("10.00")
        assert order.items[0].line_total == Money.of("25.00")
        assert order.subtotal == Money.of("25.00")

    def test_customer_snapshot(self):
        order = _make_order()
        assert order.customer_id == "user-alice"
        assert order.customer_name == "alice"
        assert order.customer_email == "alice@example.com"

    def test_anonymous_customer_rejected(self):
        with pytest.raises(ValidationError, match="authenticated"):
            Order.create(Identity.anonymous(), _group(), PaymentMethod.MESSAGE_VENDOR)

    def test_empty_group_rejected(self):
        empty = VendorCartGroup("v1", "Clay & Co", ())
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create(ALICE, empty, PaymentMethod.MESSAGE_VENDOR)

    def test_pickup_code_marks_local_pickup(self):
        order = _make_order(pickup_code="123456")
        assert order.is_local_pickup is True
        assert order.pickup_code_generated_at == T0

    def test_prices_frozen_at_creation(self):
        order = _make_order()
        assert [i.unit_price for i in order.items] == [Money.of("10.00"), Money.of("15.00")]


class TestConfirmAndCancel:

    def test_confirm(self):
        order = _make_order()
        assert order.confirm(notes="Thanks!", transaction_id="PP-1", now=T0) is True
        assert order.status == OrderStatus.COMPLETED
        assert order.confirmed_by_vendor is True
        assert order.confirmed_at == T0
        assert order.external_transaction_id == "PP-1"

    def test_reconfirm_is_a_noop(self):
        order = _make_order()
        order.confirm(notes="first", now=T0)
        assert order.confirm(notes="second") is False
        assert order.vendor_notes == "first"
        assert order.confirmed_at == T0

    def test_confirm_cancelled_rejected(self):
        order = _make_order()
        order.cancel()
        with pytest.raises(InvalidTransitionError, match="cancelled"):
            order.confirm()

    def test_cancel_completed(self):
        order = _make_order()
        order.confirm()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    def test_cancel_keeps_shipping_status(self):
        order = _shipped(_make_order())
        order.cancel()
        assert order.shipping_status == ShippingStatus.SHIPPED

    def test_cancel_twice_rejected(self):
        order = _make_order()
        order.cancel()
        with pytest.raises(InvalidTransitionError, match="already cancelled"):
            order.cancel()

    def test_cancel_delivered_rejected(self):
        order = _shipped(_make_order())
        order.mark_delivered(DeliveryConfirmer.CUSTOMER)
        with pytest.raises(InvalidTransitionError):
            order.cancel()


class TestShipping:

    def test_add_shipping_info(self):
        order = _make_order()
        order.add_shipping_info(
            " UPS ", " 1Z999 ", "https://track/1Z999", estimated_delivery="2024-05-04",
            auto_tracking=True, now=T0,
        )
        assert order.shipping_status == ShippingStatus.SHIPPED
        assert order.shipping_provider == "UPS"
        assert order.tracking_number == "1Z999"
        assert order.shipped_at == T0
        assert order.tracking_provider_api == "TrackingMore"

    def test_tracking_correction_while_shipped(self):
        order = _shipped(_make_order())
        order.add_shipping_info("USPS", "9400 2000", tracking_url=None)
        assert order.tracking_number == "9400 2000"

    def test_blank_tracking_number_rejected(self):
        with pytest.raises(ValidationError, match="Tracking number"):
            _make_order().add_shipping_info("USPS", "  ", tracking_url=None)

    def test_cannot_ship_cancelled(self):
        order = _make_order()
        order.cancel()
        with pytest.raises(InvalidTransitionError, match="cancelled"):
            _shipped(order)

    def test_mark_delivered_requires_shipment(self):
        with pytest.raises(InvalidTransitionError, match="Cannot mark as delivered: order is pending"):
            _make_order().mark_delivered(DeliveryConfirmer.VENDOR)

    def test_mark_delivered(self):
        order = _shipped(_make_order())
        order.mark_delivered(DeliveryConfirmer.CUSTOMER, now=T0)
        assert order.shipping_status == ShippingStatus.DELIVERED
        assert order.delivered_at == T0
        assert order.delivery_confirmed_by == DeliveryConfirmer.CUSTOMER


class TestCarrierStatus:

    def test_moves_forward(self):
        order = _shipped(_make_order())
        assert order.apply_carrier_status(ShippingStatus.IN_TRANSIT) is True
        assert order.apply_carrier_status(ShippingStatus.OUT_FOR_DELIVERY) is True
        assert order.apply_carrier_status(ShippingStatus.DELIVERED) is True
        assert order.delivery_confirmed_by == DeliveryConfirmer.SYSTEM

    def test_ignores_backwards_and_repeated(self):
        order = _shipped(_make_order())
        order.apply_carrier_status(ShippingStatus.OUT_FOR_DELIVERY)
        assert order.apply_carrier_status(ShippingStatus.IN_TRANSIT) is False
        assert order.apply_carrier_status(ShippingStatus.OUT_FOR_DELIVERY) is False
        assert order.shipping_status == ShippingStatus.OUT_FOR_DELIVERY

    def test_ignored_before_shipping(self):
        order = _make_order()
        assert order.apply_carrier_status(ShippingStatus.IN_TRANSIT) is False
        assert order.shipping_status == ShippingStatus.PENDING


class TestLocalPickup:

    def test_pickup_ready_then_picked_up(self):
        order = _make_order(pickup_code="123456")
        order.mark_pickup_ready()
        order.mark_picked_up(now=T0)
        assert order.shipping_status == ShippingStatus.PICKED_UP
        assert order.delivery_confirmed_by == DeliveryConfirmer.VENDOR

    def test_pickup_ready_needs_pickup_order(self):
        with pytest.raises(NotLocalPickupError):
            _make_order().mark_pickup_ready()

    def test_verify_correct_code(self):
        order = _make_order(pickup_code="042917")
        order.verify_pickup_code("042917", "vendor-1", now=T0)
        assert order.shipping_status == ShippingStatus.PICKED_UP
        assert order.pickup_code_verified_at == T0
        assert order.pickup_code_verified_by == "vendor-1"
        assert order.delivered_at == T0
        assert order.delivery_confirmed_by == DeliveryConfirmer.VENDOR

    def test_verify_is_exact_match(self):
        order = _make_order(pickup_code="042917")
        with pytest.raises(InvalidPickupCodeError):
            order.verify_pickup_code("42917", "vendor-1")
        with pytest.raises(InvalidPickupCodeError):
            order.verify_pickup_code(" 042917", "vendor-1")
        assert order.shipping_status == ShippingStatus.PENDING

    def test_verify_not_pickup_order(self):
        with pytest.raises(NotLocalPickupError, match="not a local pickup"):
            _make_order().verify_pickup_code("123456", "vendor-1")

    def test_verify_already_picked_up_changes_nothing(self):
        order = _make_order(pickup_code="123456")
        order.verify_pickup_code("123456", "vendor-1", now=T0)
        with pytest.raises(AlreadyPickedUpError):
            order.verify_pickup_code("123456", "vendor-2")
        assert order.pickup_code_verified_by == "vendor-1"
        assert order.pickup_code_verified_at == T0

    def test_cancelled_pickup_cannot_be_collected(self):
        order = _make_order(pickup_code="123456")
        order.cancel()
        with pytest.raises(InvalidTransitionError):
            order.verify_pickup_code("123456", "vendor-1")


class TestGuardTables:

    def test_terminal_states_have_no_exits(self):
        assert SHIPPING_TRANSITIONS[ShippingStatus.DELIVERED] == frozenset()
        assert SHIPPING_TRANSITIONS[ShippingStatus.PICKED_UP] == frozenset()

    def test_every_status_has_an_entry(self):
        assert set(SHIPPING_TRANSITIONS) == set(ShippingStatus)
        assert set(ALLOWED_COMBINATIONS) == set(OrderStatus)

    def test_cancelled_excludes_completed_fulfillment(self):
        allowed = ALLOWED_COMBINATIONS[OrderStatus.CANCELLED]
        assert ShippingStatus.DELIVERED not in allowed
        assert ShippingStatus.PICKED_UP not in allowed

    def test_pickup_branch_not_reachable_from_shipped(self):
        assert ShippingStatus.PICKUP_READY not in SHIPPING_TRANSITIONS[ShippingStatus.SHIPPED]
