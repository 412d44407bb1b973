"""RemoteStore-backed implementation of OrderRepository."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from decimal import Decimal

import structlog

from fairbag.domain.model.order import (
    DeliveryConfirmer,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    ShippingStatus,
)
from fairbag.domain.model.value_objects import Customization, Money, Quantity
from fairbag.domain.repository.backends import RemoteStore
from fairbag.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

ORDERS_TABLE = "orders"

_TIMESTAMP_FIELDS = (
    "confirmed_at",
    "shipped_at",
    "delivered_at",
    "pickup_code_generated_at",
    "pickup_code_verified_at",
)


class RemoteOrderRepository(OrderRepository):

    def __init__(self, remote: RemoteStore) -> None:
        self._remote = remote

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> Order:
        order_number = order.order_number or self._next_order_number(order.created_at)
        raw = self._to_raw(order)
        raw.pop("id")
        raw["order_number"] = order_number

        stored = self._remote.insert(ORDERS_TABLE, raw)

        order.id = stored["id"]
        order.order_number = stored.get("order_number", order_number)
        logger.info(
            "order_inserted",
            order_id=order.id,
            order_number=order.order_number,
            vendor_id=order.vendor_id,
        )
        return order

    def get_by_id(self, order_id: str) -> Order | None:
        rows = self._remote.select(ORDERS_TABLE, {"id": order_id})
        if not rows:
            return None
        return self._to_domain(rows[0])

    def save(self, order: Order) -> None:
        self._remote.upsert(ORDERS_TABLE, self._to_raw(order), on_conflict=("id",))

    def list_for_customer(self, customer_id: str) -> list[Order]:
        rows = self._remote.select(
            ORDERS_TABLE, {"customer_id": customer_id}, order_by="created_at", descending=True
        )
        return [self._to_domain(raw) for raw in rows]

    def list_for_vendor(self, vendor_id: str) -> list[Order]:
        rows = self._remote.select(
            ORDERS_TABLE, {"vendor_id": vendor_id}, order_by="created_at", descending=True
        )
        return [self._to_domain(raw) for raw in rows]

    # --- Helpers --------------------------------------------------------------

    @staticmethod
    def _next_order_number(created_at: datetime) -> str:
        return f"ORD-{created_at:%Y%m%d}-{secrets.token_hex(3).upper()}"

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        raw = {
            "id": order.id,
            "order_number": order.order_number,
            "customer_id": order.customer_id,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "vendor_id": order.vendor_id,
            "vendor_name": order.vendor_name,
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "product_image": item.product_image,
                    "quantity": item.quantity.value,
                    "price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                    "customizations": [c.to_dict() for c in item.customizations],
                }
                for item in order.items
            ],
            "subtotal": str(order.subtotal.amount),
            "tax": str(order.tax.amount),
            "shipping": str(order.shipping.amount),
            "total": str(order.total.amount),
            "payment_method": order.payment_method.value,
            "payment_url": order.payment_url,
            "external_transaction_id": order.external_transaction_id,
            "status": order.status.value,
            "confirmed_by_vendor": order.confirmed_by_vendor,
            "vendor_notes": order.vendor_notes,
            "shipping_status": order.shipping_status.value,
            "shipping_provider": order.shipping_provider,
            "tracking_number": order.tracking_number,
            "tracking_url": order.tracking_url,
            "estimated_delivery_date": order.estimated_delivery_date,
            "delivery_notes": order.delivery_notes,
            "auto_status_updates_enabled": order.auto_status_updates_enabled,
            "tracking_provider_api": order.tracking_provider_api,
            "delivery_confirmed_by": (
                order.delivery_confirmed_by.value if order.delivery_confirmed_by else None
            ),
            "is_local_pickup": order.is_local_pickup,
            "pickup_confirmation_code": order.pickup_confirmation_code,
            "pickup_code_verified_by": order.pickup_code_verified_by,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }
        for name in _TIMESTAMP_FIELDS:
            value = getattr(order, name)
            raw[name] = value.isoformat() if value else None
        return raw

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                product_image=i.get("product_image", ""),
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["price"]), i.get("currency", "USD")),
                customizations=tuple(
                    Customization.from_dict(c) for c in i.get("customizations") or []
                ),
            )
            for i in raw["items"]
        ]
        timestamps = {name: _parse_timestamp(raw.get(name)) for name in _TIMESTAMP_FIELDS}
        confirmer = raw.get("delivery_confirmed_by")
        return Order(
            id=raw["id"],
            order_number=raw.get("order_number"),
            customer_id=raw["customer_id"],
            customer_name=raw["customer_name"],
            customer_email=raw.get("customer_email"),
            vendor_id=raw["vendor_id"],
            vendor_name=raw["vendor_name"],
            items=items,
            subtotal=Money(Decimal(raw["subtotal"])),
            tax=Money(Decimal(raw["tax"])),
            shipping=Money(Decimal(raw["shipping"])),
            total=Money(Decimal(raw["total"])),
            payment_method=PaymentMethod(raw["payment_method"]),
            payment_url=raw.get("payment_url"),
            status=OrderStatus(raw["status"]),
            shipping_status=ShippingStatus(raw.get("shipping_status", "pending")),
            external_transaction_id=raw.get("external_transaction_id"),
            confirmed_by_vendor=raw.get("confirmed_by_vendor", False),
            vendor_notes=raw.get("vendor_notes"),
            shipping_provider=raw.get("shipping_provider"),
            tracking_number=raw.get("tracking_number"),
            tracking_url=raw.get("tracking_url"),
            estimated_delivery_date=raw.get("estimated_delivery_date"),
            delivery_notes=raw.get("delivery_notes"),
            auto_status_updates_enabled=raw.get("auto_status_updates_enabled", False),
            tracking_provider_api=raw.get("tracking_provider_api"),
            delivery_confirmed_by=DeliveryConfirmer(confirmer) if confirmer else None,
            is_local_pickup=raw.get("is_local_pickup", False),
            pickup_confirmation_code=raw.get("pickup_confirmation_code"),
            pickup_code_verified_by=raw.get("pickup_code_verified_by"),
            created_at=_parse_timestamp(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=_parse_timestamp(raw.get("updated_at") or raw["created_at"]),  # type: ignore[arg-type]
            **timestamps,
        )


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
