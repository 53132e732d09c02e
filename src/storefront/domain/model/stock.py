"""StockLevel — on-hand quantity and reservations for a single product.

The status shown to shoppers (in stock, low stock, ...) is derived from the
numbers on every read and can never drift from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.domain.exceptions import (
    ConsistencyViolation,
    InsufficientStockError,
    InvalidQuantityError,
    ValidationError,
)

DEFAULT_LOW_STOCK_THRESHOLD = 5


class StockStatus(Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    DISCONTINUED = "discontinued"


def _require_positive(quantity: int, action: str) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(f"{action} quantity must be an integer")
    if quantity <= 0:
        raise InvalidQuantityError(f"{action} quantity must be positive")


@dataclass
class StockLevel:
    """Stock numbers for one product.

    Invariants:
    - ``0 <= reserved <= quantity``
    - ``available_quantity`` is always >= 0
    """

    quantity: int
    reserved: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    discontinued: bool = False

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        if self.reserved < 0:
            raise ValidationError("Reserved stock cannot be negative")
        if self.low_stock_threshold < 0:
            raise ValidationError("Low stock threshold cannot be negative")
        if self.reserved > self.quantity:
            raise ValidationError(
                f"Reserved stock ({self.reserved}) exceeds quantity ({self.quantity})"
            )

    @property
    def available_quantity(self) -> int:
        return self.quantity - self.reserved

    @property
    def status(self) -> StockStatus:
        if self.discontinued:
            return StockStatus.DISCONTINUED
        if self.quantity <= 0:
            return StockStatus.OUT_OF_STOCK
        if self.quantity <= self.low_stock_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    def reserve(self, quantity: int) -> None:
        """Hold *quantity* units for an order that is not yet confirmed."""
        _require_positive(quantity, "Reservation")
        if quantity > self.available_quantity:
            raise InsufficientStockError(
                f"Insufficient stock (need {quantity}, have "
                f"{self.available_quantity} available)"
            )
        self.reserved += quantity

    def release(self, quantity: int) -> int:
        """Drop up to *quantity* reserved units. Returns how many were released."""
        _require_positive(quantity, "Release")
        released = min(quantity, self.reserved)
        self.reserved -= released
        return released

    def commit(self, quantity: int) -> None:
        """Turn a reservation into a permanent deduction of on-hand stock."""
        _require_positive(quantity, "Commit")
        if quantity > self.quantity:
            raise ConsistencyViolation(
                f"Cannot commit {quantity} units, only {self.quantity} on hand"
            )
        self.quantity -= quantity
        self.reserved = max(0, self.reserved - quantity)

    def restock(self, quantity: int) -> None:
        """Return units to on-hand stock (e.g. a cancelled confirmed order)."""
        _require_positive(quantity, "Restock")
        self.quantity += quantity

    def set_quantity(self, quantity: int) -> None:
        """Set on-hand stock after a stock count; cannot drop below reservations."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidQuantityError("Stock quantity must be a non-negative integer")
        if quantity < self.reserved:
            raise ValidationError(
                f"Cannot set stock to {quantity} — {self.reserved} units are reserved"
            )
        self.quantity = quantity

    def discontinue(self) -> None:
        self.discontinued = True
