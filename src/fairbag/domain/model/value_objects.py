"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from fairbag.domain.exceptions import ValidationError

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """A non-negative amount in one currency.

    Cart and order arithmetic stays unrounded; call ``rounded()`` at the
    points where an amount is shown or stored on an order.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    def __add__(self, other: Money) -> Money:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot add {other.currency} to {self.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, quantity: int) -> Money:
        if not isinstance(quantity, int):
            raise TypeError(f"Money can only be multiplied by a quantity, got {type(quantity).__name__}")
        return Money(self.amount * quantity, self.currency)

    def percent(self, rate: Decimal) -> Money:
        """Return ``rate`` (e.g. ``Decimal("0.08")``) of this amount, unrounded."""
        return Money(self.amount * rate, self.currency)

    def adjusted(self, delta: Decimal) -> Money:
        """Apply a signed customization delta to a unit price.

        A discount larger than the price floors at zero.
        """
        return Money(max(self.amount + delta, Decimal("0")), self.currency)

    def rounded(self) -> Money:
        """Round half-up to whole cents."""
        return Money(self.amount.quantize(CENTS, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0.00"))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __add__(self, other: Quantity) -> Quantity:
        return Quantity(self.value + other.value)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Customization:
    """One selected product option, e.g. an engraving or a size choice.

    ``price_delta`` is signed: options may add to or discount the base price.
    """

    code: str
    label: str
    value: str | bool
    price_delta: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        if not self.code:
            raise ValidationError("Customization code is required")
        if not isinstance(self.price_delta, Decimal):
            object.__setattr__(self, "price_delta", _to_decimal(self.price_delta))

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "label": self.label,
            "value": self.value,
            "price_delta": str(self.price_delta),
        }

    @staticmethod
    def from_dict(raw: dict) -> Customization:
        return Customization(
            code=raw["code"],
            label=raw.get("label", raw["code"]),
            value=raw.get("value", ""),
            price_delta=_to_decimal(raw.get("price_delta", "0")),
        )


def canonical_customizations(
    customizations: list[Customization] | tuple[Customization, ...] | None,
) -> str:
    """Serialize a customization list independently of its input order.

    ``None`` and an empty list produce the same key.
    """
    ordered = sorted(customizations or (), key=lambda c: (c.code, str(c.value)))
    return json.dumps([c.to_dict() for c in ordered], sort_keys=True)


def customization_total(
    customizations: list[Customization] | tuple[Customization, ...] | None,
) -> Decimal:
    return sum((c.price_delta for c in customizations or ()), Decimal("0"))


def _to_decimal(value: str | float | int | Decimal) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid price delta: {value!r}") from exc
