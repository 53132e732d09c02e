"""Cart — the shopper's client-held collection of products.

The cart is never authoritative for price or availability: every line
carries a snapshot taken when it was added, and the checkout validator
re-reads the stock ledger before an order is built.  Persistence is the
job of a ``CartStore``; this module only knows how to turn a cart into a
plain payload and back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Iterable

from storefront.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
    ProductUnavailableError,
)
from storefront.domain.model.pricing import PricingPolicy
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money, ProductSnapshot

logger = logging.getLogger(__name__)


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(
            f"Quantity must be an integer, got {type(quantity).__name__}"
        )
    if quantity < 1:
        raise InvalidQuantityError("Quantity must be at least 1")


@dataclass(frozen=True)
class CartLine:
    snapshot: ProductSnapshot
    quantity: int
    added_at: datetime
    available_quantity: int = 0  # as seen when the line was last touched

    def __post_init__(self) -> None:
        _check_quantity(self.quantity)

    @property
    def product_id(self) -> str:
        return self.snapshot.product_id

    @property
    def line_total(self) -> Money:
        return self.snapshot.price * self.quantity

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class CartSummary:
    item_count: int
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money

    @property
    def has_items(self) -> bool:
        return self.item_count > 0


class Cart:
    """At most one line per product; repeated adds merge into that line."""

    def __init__(self, lines: Iterable[CartLine] = ()) -> None:
        self._lines: dict[str, CartLine] = {}
        for line in lines:
            existing = self._lines.get(line.product_id)
            if existing is not None:
                line = existing.with_quantity(existing.quantity + line.quantity)
            self._lines[line.product_id] = line

    # --- Queries --------------------------------------------------------------

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get(self, product_id: str) -> CartLine | None:
        return self._lines.get(product_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def summary(self, policy: PricingPolicy | None = None) -> CartSummary:
        """Recomputed from the current lines on every call."""
        policy = policy or PricingPolicy()
        subtotal = Money.zero(policy.currency)
        item_count = 0
        for line in self._lines.values():
            subtotal = subtotal + line.line_total
            item_count += line.quantity
        tax = policy.tax_for(subtotal)
        shipping = policy.shipping_for(subtotal) if item_count else Money.zero(policy.currency)
        return CartSummary(
            item_count=item_count,
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=subtotal + tax + shipping,
        )

    # --- Mutations ------------------------------------------------------------

    def add(self, product: Product, quantity: int = 1, now: datetime | None = None) -> CartLine:
        """Add *quantity* units of *product*, merging with an existing line."""
        _check_quantity(quantity)
        if not product.is_available:
            raise ProductUnavailableError(f"{product.name} is currently out of stock")

        existing = self._lines.get(product.id)
        current = existing.quantity if existing is not None else 0
        requested_total = current + quantity
        if requested_total > product.available_quantity:
            raise InsufficientStockError(
                f"Only {product.available_quantity} of {product.name} available in stock",
                product_id=product.id,
            )

        if existing is not None:
            line = replace(
                existing,
                quantity=requested_total,
                available_quantity=product.available_quantity,
            )
        else:
            line = CartLine(
                snapshot=product.snapshot(),
                quantity=quantity,
                added_at=now or datetime.now(timezone.utc),
                available_quantity=product.available_quantity,
            )
        self._lines[product.id] = line
        return line

    def remove(self, product_id: str) -> bool:
        return self._lines.pop(product_id, None) is not None

    def set_quantity(
        self, product_id: str, quantity: int, available_quantity: int
    ) -> CartLine | None:
        """Set a line's quantity; below 1 removes the line.

        *available_quantity* must come from the stock ledger, not from the
        line's own snapshot.  Asking for more than that fails instead of
        clamping.
        """
        line = self._lines.get(product_id)
        if line is None:
            raise EntityNotFoundError(f"Product '{product_id}' is not in the cart")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantityError("Quantity must be an integer")
        if quantity < 1:
            self.remove(product_id)
            return None
        if quantity > available_quantity:
            raise InsufficientStockError(
                f"Only {available_quantity} of {line.snapshot.name} available in stock",
                product_id=product_id,
            )
        updated = replace(line, quantity=quantity, available_quantity=available_quantity)
        self._lines[product_id] = updated
        return updated

    def replace_lines(self, lines: Iterable[CartLine]) -> None:
        self._lines = Cart(lines)._lines

    def clear(self) -> None:
        self._lines.clear()

    # --- Serialization --------------------------------------------------------

    def to_payload(self) -> list[dict[str, Any]]:
        return [
            {
                "product": {
                    "id": line.snapshot.product_id,
                    "name": line.snapshot.name,
                    "price": str(line.snapshot.price.amount),
                    "currency": line.snapshot.price.currency,
                    "sku": line.snapshot.sku,
                },
                "quantity": line.quantity,
                "added_at": line.added_at.isoformat(),
                "available_quantity": line.available_quantity,
            }
            for line in self._lines.values()
        ]

    @classmethod
    def from_payload(cls, payload: Any) -> Cart:
        """Rebuild a cart, discarding anything that is not a list of lines."""
        if not isinstance(payload, list):
            logger.warning(
                "Discarding cart payload of type %s", type(payload).__name__
            )
            return cls()

        lines: list[CartLine] = []
        for raw in payload:
            try:
                lines.append(_line_from_raw(raw))
            except (KeyError, TypeError, ValueError, DomainException) as exc:
                logger.warning("Dropping malformed cart line %r: %s", raw, exc)
        return cls(lines)


def _line_from_raw(raw: dict[str, Any]) -> CartLine:
    product = raw["product"]
    snapshot = ProductSnapshot(
        product_id=str(product["id"]),
        name=str(product["name"]),
        price=Money.of(product["price"], product.get("currency", DEFAULT_CURRENCY)),
        sku=product.get("sku"),
    )
    return CartLine(
        snapshot=snapshot,
        quantity=raw["quantity"],
        added_at=datetime.fromisoformat(raw["added_at"]),
        available_quantity=int(raw.get("available_quantity", 0)),
    )
