"""Integration tests for the order status use cases."""

import pytest

from fairbag.application.add_shipping_info import AddShippingInfoHandler
from fairbag.application.cancel_order import CancelOrderHandler
from fairbag.application.confirm_order import ConfirmOrderHandler
from fairbag.application.local_pickup import (
    MarkPickedUpHandler,
    MarkPickupReadyHandler,
    VerifyPickupCodeHandler,
)
from fairbag.application.mark_delivered import MarkDeliveredHandler
from fairbag.application.show_order import ListOrdersHandler, ShowOrderHandler
from fairbag.application.update_tracking_status import UpdateTrackingStatusHandler
from fairbag.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    NotAuthenticatedError,
    ValidationError,
)
from fairbag.domain.model.cart import Cart
from fairbag.domain.model.identity import Identity
from fairbag.domain.model.order import (
    DeliveryConfirmer,
    Order,
    OrderStatus,
    PaymentMethod,
    ShippingStatus,
)
from tests.fakes import ALICE, FakeIdentityProvider, FakeOrderRepository, make_product, make_vendor

VENDOR = Identity(user_id="vendor-clay", email="shop@clay.example")


def _setup(pickup_code: str | None = None):
    """Store one order and return (repo, order_id, identity provider)."""
    cart = Cart()
    cart.add_item(make_product("mug", "10.00"), make_vendor(), 2)
    order = Order.create(ALICE, cart.group_for("v1"), PaymentMethod.EXTERNAL_CASHAPP, pickup_code=pickup_code)
    repo = FakeOrderRepository()
    repo.add(order)
    return repo, order.id, FakeIdentityProvider(VENDOR)


def _handler(cls, repo, provider):
    return cls(order_repo=repo, identity_provider=provider)


class TestConfirmOrder:

    def test_confirm(self):
        repo, order_id, provider = _setup()
        assert _handler(ConfirmOrderHandler, repo, provider).handle(order_id, notes="paid", transaction_id="CA-9")
        stored = repo.get_by_id(order_id)
        assert stored.status == OrderStatus.COMPLETED
        assert stored.external_transaction_id == "CA-9"

    def test_reconfirm_succeeds_without_change(self):
        repo, order_id, provider = _setup()
        handler = _handler(ConfirmOrderHandler, repo, provider)
        handler.handle(order_id, notes="first")
        assert handler.handle(order_id, notes="second") is True
        assert repo.get_by_id(order_id).vendor_notes == "first"

    def test_unknown_order(self):
        repo, _, provider = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            _handler(ConfirmOrderHandler, repo, provider).handle("missing")

    def test_requires_identity(self):
        repo, order_id, _ = _setup()
        handler = _handler(ConfirmOrderHandler, repo, FakeIdentityProvider())
        with pytest.raises(NotAuthenticatedError):
            handler.handle(order_id)

    def test_storage_failure_returns_false(self):
        repo, order_id, provider = _setup()
        repo.fail_writes = True
        assert _handler(ConfirmOrderHandler, repo, provider).handle(order_id) is False
        repo.fail_writes = False
        assert repo.get_by_id(order_id).status == OrderStatus.AWAITING_VENDOR_CONFIRMATION

    def test_unreadable_store_returns_false(self):
        repo, order_id, provider = _setup()
        repo.fail_reads = True
        assert _handler(ConfirmOrderHandler, repo, provider).handle(order_id) is False


class TestCancelOrder:

    def test_cancel(self):
        repo, order_id, provider = _setup()
        assert _handler(CancelOrderHandler, repo, provider).handle(order_id)
        assert repo.get_by_id(order_id).status == OrderStatus.CANCELLED

    def test_confirm_after_cancel_rejected(self):
        repo, order_id, provider = _setup()
        _handler(CancelOrderHandler, repo, provider).handle(order_id)
        with pytest.raises(InvalidTransitionError):
            _handler(ConfirmOrderHandler, repo, provider).handle(order_id)


class TestShippingFlow:

    def test_add_shipping_info_builds_tracking_url(self):
        repo, order_id, provider = _setup()
        _handler(AddShippingInfoHandler, repo, provider).handle(order_id, "UPS", "1Z 999")
        stored = repo.get_by_id(order_id)
        assert stored.shipping_status == ShippingStatus.SHIPPED
        assert stored.tracking_url == "https://www.ups.com/track?tracknum=1Z999"

    def test_unknown_carrier_ships_without_url(self):
        repo, order_id, provider = _setup()
        assert _handler(AddShippingInfoHandler, repo, provider).handle(order_id, "Bike courier", "42")
        assert repo.get_by_id(order_id).tracking_url is None

    def test_carrier_updates_then_delivery(self):
        repo, order_id, provider = _setup()
        _handler(AddShippingInfoHandler, repo, provider).handle(order_id, "USPS", "9400")
        track = _handler(UpdateTrackingStatusHandler, repo, provider)
        assert track.handle(order_id, "transit")
        assert track.handle(order_id, "notfound")
        assert repo.get_by_id(order_id).shipping_status == ShippingStatus.IN_TRANSIT

        _handler(MarkDeliveredHandler, repo, provider).handle(order_id, DeliveryConfirmer.CUSTOMER)
        stored = repo.get_by_id(order_id)
        assert stored.shipping_status == ShippingStatus.DELIVERED
        assert stored.delivery_confirmed_by == DeliveryConfirmer.CUSTOMER

    def test_delivered_before_shipping_rejected(self):
        repo, order_id, provider = _setup()
        with pytest.raises(InvalidTransitionError):
            _handler(MarkDeliveredHandler, repo, provider).handle(order_id, DeliveryConfirmer.VENDOR)

    def test_system_cannot_be_named_as_confirmer(self):
        repo, order_id, provider = _setup()
        with pytest.raises(ValidationError):
            _handler(MarkDeliveredHandler, repo, provider).handle(order_id, DeliveryConfirmer.SYSTEM)


class TestPickupFlow:

    def test_ready_then_picked_up(self):
        repo, order_id, provider = _setup(pickup_code="123456")
        assert _handler(MarkPickupReadyHandler, repo, provider).handle(order_id)
        assert _handler(MarkPickedUpHandler, repo, provider).handle(order_id)
        assert repo.get_by_id(order_id).shipping_status == ShippingStatus.PICKED_UP


class TestVerifyPickupCode:

    def test_correct_code(self):
        repo, order_id, _ = _setup(pickup_code="654321")
        result = VerifyPickupCodeHandler(repo).handle(order_id, "654321", "vendor-clay")
        assert result.success is True
        assert result.message == "Pickup confirmed successfully"
        stored = repo.get_by_id(order_id)
        assert stored.shipping_status == ShippingStatus.PICKED_UP
        assert stored.pickup_code_verified_by == "vendor-clay"

    def test_not_a_pickup_order(self):
        repo, order_id, _ = _setup()
        result = VerifyPickupCodeHandler(repo).handle(order_id, "654321", "vendor-clay")
        assert result.success is False
        assert "not a local pickup" in result.message

    def test_already_picked_up_does_not_mutate(self):
        repo, order_id, _ = _setup(pickup_code="654321")
        handler = VerifyPickupCodeHandler(repo)
        handler.handle(order_id, "654321", "vendor-clay")
        first = repo.get_by_id(order_id)

        result = handler.handle(order_id, "654321", "someone-else")
        assert result.success is False
        assert "already picked up" in result.message
        assert repo.get_by_id(order_id) == first

    def test_wrong_code(self):
        repo, order_id, _ = _setup(pickup_code="654321")
        result = VerifyPickupCodeHandler(repo).handle(order_id, "000000", "vendor-clay")
        assert result.success is False
        assert result.message == "Invalid pickup code"
        assert repo.get_by_id(order_id).shipping_status == ShippingStatus.PENDING

    def test_unknown_order(self):
        repo, _, _ = _setup()
        result = VerifyPickupCodeHandler(repo).handle("missing", "1", "vendor-clay")
        assert result.success is False
        assert result.message == "Order not found"

    def test_storage_failure(self):
        repo, order_id, _ = _setup(pickup_code="654321")
        repo.fail_writes = True
        result = VerifyPickupCodeHandler(repo).handle(order_id, "654321", "vendor-clay")
        assert result.success is False
        assert result.message == "Failed to verify pickup code"


class TestQueries:

    def test_show_order(self):
        repo, order_id, _ = _setup()
        dto = ShowOrderHandler(repo).handle(order_id)
        assert dto.total == "$21.60"
        assert dto.items[0].line_total == "$20.00"

    def test_show_missing(self):
        repo, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(repo).handle("missing")

    def test_list_for_customer_and_vendor(self):
        repo, order_id, _ = _setup()
        handler = ListOrdersHandler(repo)
        assert [d.id for d in handler.for_customer("user-alice")] == [order_id]
        assert [d.id for d in handler.for_vendor("v1")] == [order_id]
        assert handler.for_vendor("v2") == []
