"""Cart aggregate — a flat list of items spanning many vendors.

The cart is stored flat but shoppers check out one vendor at a time, so
it is always *viewed* grouped by vendor.  Groups are derived from
``items`` on every call and are never cached.

Invariants:
- no two items share the same identity key (product, vendor, options)
- every item quantity is >= 1
- the sum of the vendor group totals equals the cart total
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from fairbag.domain.exceptions import ValidationError
from fairbag.domain.model.catalog import Product, Vendor
from fairbag.domain.model.value_objects import (
    Customization,
    Money,
    canonical_customizations,
    customization_total,
)


@dataclass(frozen=True)
class CartItemKey:
    product_id: str
    vendor_id: str
    customizations: str  # canonical JSON, see canonical_customizations()

    @staticmethod
    def of(
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None,
    ) -> CartItemKey:
        return CartItemKey(product_id, vendor_id, canonical_customizations(customizations))


@dataclass(frozen=True)
class CartItem:
    product: Product
    quantity: int
    vendor_id: str
    vendor_name: str
    customizations: tuple[Customization, ...] = ()
    requires_proof: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValidationError(f"Cart quantity must be at least 1, got {self.quantity!r}")
        if not isinstance(self.customizations, tuple):
            object.__setattr__(self, "customizations", tuple(self.customizations or ()))

    @property
    def key(self) -> CartItemKey:
        return CartItemKey.of(self.product.id, self.vendor_id, self.customizations)

    @property
    def unit_price(self) -> Money:
        """Base price plus every customization delta."""
        return self.product.price.adjusted(customization_total(self.customizations))

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    def matches(
        self,
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
        *,
        any_variant: bool = False,
    ) -> bool:
        if self.product.id != product_id or self.vendor_id != vendor_id:
            return False
        if any_variant:
            return True
        return self.key.customizations == canonical_customizations(customizations)


@dataclass(frozen=True)
class VendorCartGroup:
    """One vendor's slice of the cart, with its own total."""

    vendor_id: str
    vendor_name: str
    items: tuple[CartItem, ...]

    @property
    def total(self) -> Money:
        return sum_line_totals(self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


def sum_line_totals(items: list[CartItem] | tuple[CartItem, ...]) -> Money:
    result = Money(Decimal("0.00"))
    for item in items:
        result = result + item.line_total
    return result


@dataclass
class Cart:
    """Aggregate root for a shopper's cart.

    Mutators change ``items`` synchronously; persisting the result is the
    caller's job (see ``CartService``).
    """

    items: list[CartItem] = field(default_factory=list)
    customer_zip: str | None = None

    # --- Mutators -------------------------------------------------------------

    def add_item(
        self,
        product: Product,
        vendor: Vendor,
        quantity: int = 1,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
        requires_proof: bool = False,
    ) -> CartItem:
        """Add ``quantity`` units, merging into an existing item with the same key.

        There is no upper bound on the quantity.  Returns the resulting item.
        """
        candidate = CartItem(
            product=product,
            quantity=quantity,
            vendor_id=vendor.id,
            vendor_name=vendor.name,
            customizations=tuple(customizations or ()),
            requires_proof=requires_proof,
        )
        for i, item in enumerate(self.items):
            if item.key == candidate.key:
                merged = replace(
                    item,
                    quantity=item.quantity + quantity,
                    requires_proof=item.requires_proof or requires_proof,
                )
                self.items[i] = merged
                return merged
        self.items.append(candidate)
        return candidate

    def update_quantity(
        self,
        product_id: str,
        vendor_id: str,
        quantity: int,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> None:
        """Set the quantity of matching items; ``quantity <= 0`` removes them.

        Without ``customizations`` every variant of the product is updated.
        """
        if quantity <= 0:
            self.remove_item(product_id, vendor_id, customizations)
            return
        any_variant = customizations is None
        self.items = [
            replace(item, quantity=quantity)
            if item.matches(product_id, vendor_id, customizations, any_variant=any_variant)
            else item
            for item in self.items
        ]

    def remove_item(
        self,
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> list[CartItem]:
        """Remove matching items and return them.

        Without ``customizations`` every variant of the product from that
        vendor is removed; with them, only the exact variant.
        """
        any_variant = customizations is None
        removed = [
            item
            for item in self.items
            if item.matches(product_id, vendor_id, customizations, any_variant=any_variant)
        ]
        if removed:
            self.items = [item for item in self.items if item not in removed]
        return removed

    def clear(self) -> None:
        self.items = []

    def clear_vendor(self, vendor_id: str) -> None:
        self.items = [item for item in self.items if item.vendor_id != vendor_id]

    def replace_items(self, items: list[CartItem]) -> None:
        """Swap in items loaded from storage, re-merging any duplicate keys."""
        merged: dict[CartItemKey, CartItem] = {}
        for item in items:
            existing = merged.get(item.key)
            if existing is None:
                merged[item.key] = item
            else:
                merged[item.key] = replace(existing, quantity=existing.quantity + item.quantity)
        self.items = list(merged.values())

    # --- Queries --------------------------------------------------------------

    def grouped_by_vendor(self) -> list[VendorCartGroup]:
        """Vendor groups in the order each vendor first appears in the cart."""
        buckets: dict[str, list[CartItem]] = {}
        names: dict[str, str] = {}
        for item in self.items:
            buckets.setdefault(item.vendor_id, []).append(item)
            names.setdefault(item.vendor_id, item.vendor_name)
        return [
            VendorCartGroup(vendor_id=vid, vendor_name=names[vid], items=tuple(items))
            for vid, items in buckets.items()
        ]

    def group_for(self, vendor_id: str) -> VendorCartGroup | None:
        for group in self.grouped_by_vendor():
            if group.vendor_id == vendor_id:
                return group
        return None

    def find_item(
        self,
        product_id: str,
        vendor_id: str,
        customizations: list[Customization] | tuple[Customization, ...] | None = None,
    ) -> CartItem | None:
        for item in self.items:
            if item.matches(product_id, vendor_id, customizations):
                return item
        return None

    @property
    def total(self) -> Money:
        return sum_line_totals(self.items)

    def vendor_total(self, vendor_id: str) -> Money:
        return sum_line_totals([i for i in self.items if i.vendor_id == vendor_id])

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
