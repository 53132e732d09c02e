"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from storefront.domain.exceptions import InvalidQuantityError, ValidationError

DEFAULT_CURRENCY = "NGN"

_CENTS = Decimal("0.01")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def scale(self, rate: Decimal) -> Money:
        """Multiply by a rate (e.g. a tax rate), rounded half-up to cents."""
        result = (self.amount * Decimal(rate)).quantize(_CENTS, rounding=ROUND_HALF_UP)
        return Money(result, self.currency)

    def clamped_sub(self, other: Money) -> Money:
        """Subtract, flooring at zero instead of raising."""
        self._assert_same_currency(other)
        return Money(max(Decimal("0"), self.amount - other.amount), self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:,.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidQuantityError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise InvalidQuantityError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog data copied at cart-add or order-create time.

    Later catalog edits never reach a snapshot.
    """

    product_id: str
    name: str
    price: Money
    sku: str | None = None

    def with_price(self, price: Money) -> ProductSnapshot:
        return ProductSnapshot(self.product_id, self.name, price, self.sku)


# ---------------------------------------------------------------------------
# Order owner: a registered customer or a guest, never both
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegisteredCustomer:
    customer_id: str

    def __post_init__(self) -> None:
        if not self.customer_id or not self.customer_id.strip():
            raise ValidationError("Customer ID is required")

    def __str__(self) -> str:
        return f"customer:{self.customer_id}"


@dataclass(frozen=True)
class GuestCustomer:
    email: str

    def __post_init__(self) -> None:
        normalised = (self.email or "").strip().lower()
        if not _EMAIL_PATTERN.match(normalised):
            raise ValidationError(f"Invalid guest email: {self.email!r}")
        # frozen dataclass: bypass __setattr__ to store the normalised form
        object.__setattr__(self, "email", normalised)

    def __str__(self) -> str:
        return f"guest:{self.email}"


Owner = RegisteredCustomer | GuestCustomer


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    PICKUP = "pickup"


@dataclass(frozen=True)
class ShippingAddress:
    first_name: str
    last_name: str
    email: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "Nigeria"

    def __post_init__(self) -> None:
        for name in (
            "first_name", "last_name", "email", "phone",
            "street", "city", "state", "zip_code",
        ):
            value = getattr(self, name)
            if not value or not str(value).strip():
                raise ValidationError(f"Shipping address {name} is required")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
