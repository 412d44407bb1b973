"""Raw-dict mapping for cart and saved items, shared by every backend.

Amounts are stored as strings so Decimal precision survives JSON.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from fairbag.domain.exceptions import MalformedStoredDataError, ValidationError
from fairbag.domain.model.cart import CartItem
from fairbag.domain.model.catalog import Product
from fairbag.domain.model.saved_for_later import SavedForLaterItem
from fairbag.domain.model.value_objects import Customization, Money


def product_to_raw(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "price": str(product.price.amount),
        "currency": product.price.currency,
        "image": product.image,
        "vendor_id": product.vendor_id,
    }


def product_from_raw(raw: dict) -> Product:
    return Product(
        id=raw["id"],
        name=raw["name"],
        price=Money(Decimal(str(raw["price"])), raw.get("currency", "USD")),
        image=raw.get("image", ""),
        vendor_id=raw.get("vendor_id"),
    )


def cart_item_to_raw(item: CartItem) -> dict:
    return {
        "product": product_to_raw(item.product),
        "quantity": item.quantity,
        "customizations": [c.to_dict() for c in item.customizations],
        "requires_proof": item.requires_proof,
        "vendor_id": item.vendor_id,
        "vendor_name": item.vendor_name,
    }


def cart_item_from_raw(
    raw: dict,
    vendor_id: str | None = None,
    vendor_name: str | None = None,
) -> CartItem:
    """Rebuild a CartItem; vendor fields may come from the enclosing row."""
    try:
        return CartItem(
            product=product_from_raw(raw["product"]),
            quantity=raw["quantity"],
            vendor_id=vendor_id if vendor_id is not None else raw["vendor_id"],
            vendor_name=vendor_name if vendor_name is not None else raw.get("vendor_name", ""),
            customizations=tuple(
                Customization.from_dict(c) for c in raw.get("customizations") or []
            ),
            requires_proof=bool(raw.get("requires_proof", False)),
        )
    except (KeyError, TypeError, AttributeError, InvalidOperation, ValidationError) as exc:
        raise MalformedStoredDataError(f"Unreadable cart item: {exc}") from exc


def saved_item_to_raw(saved: SavedForLaterItem) -> dict:
    raw = cart_item_to_raw(saved.item)
    raw["saved_at"] = saved.saved_at.isoformat()
    return raw


def saved_item_from_raw(raw: dict) -> SavedForLaterItem:
    item = cart_item_from_raw(
        raw,
        vendor_id=raw.get("vendor_id") or "",
        vendor_name=raw.get("vendor_name") or "",
    )
    try:
        saved_at = datetime.fromisoformat(raw["saved_at"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedStoredDataError(f"Unreadable saved_at: {exc}") from exc
    if saved_at.tzinfo is None:
        saved_at = saved_at.replace(tzinfo=timezone.utc)
    return SavedForLaterItem(item=item, saved_at=saved_at)
