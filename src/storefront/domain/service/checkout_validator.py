"""Domain service: Checkout Validator.

Cross-checks cart lines against the stock ledger right before checkout.
Lines that can no longer be bought are blocking; lines whose quantity or
price drifted are fixed up and reported so the shopper can see what
changed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from storefront.domain.model.cart import CartLine
from storefront.domain.model.value_objects import Money
from storefront.domain.service.stock_ledger import StockLedger, StockRequest


class IssueType(Enum):
    UNAVAILABLE = "unavailable"
    OUT_OF_STOCK = "out_of_stock"
    QUANTITY_ADJUSTED = "quantity_adjusted"
    PRICE_CHANGED = "price_changed"

    @property
    def is_blocking(self) -> bool:
        return self in (IssueType.UNAVAILABLE, IssueType.OUT_OF_STOCK)


@dataclass(frozen=True)
class CheckoutIssue:
    type: IssueType
    product_id: str
    product_name: str
    message: str
    original_quantity: int | None = None
    adjusted_quantity: int | None = None
    old_price: Money | None = None
    new_price: Money | None = None

    @property
    def is_blocking(self) -> bool:
        return self.type.is_blocking


@dataclass(frozen=True)
class CartValidation:
    issues: tuple[CheckoutIssue, ...]
    reconciled_lines: tuple[CartLine, ...]

    @property
    def valid(self) -> bool:
        return not self.blocking_issues

    @property
    def blocking_issues(self) -> list[CheckoutIssue]:
        return [issue for issue in self.issues if issue.is_blocking]

    @property
    def advisory_issues(self) -> list[CheckoutIssue]:
        return [issue for issue in self.issues if not issue.is_blocking]


class CheckoutValidator:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def validate(self, lines: Sequence[CartLine]) -> CartValidation:
        """Classify every line and return the reconciled cart.

        Blocked lines are left out of ``reconciled_lines``.
        """
        checks = self._ledger.check_availability(
            StockRequest(line.product_id, line.quantity) for line in lines
        )
        by_id = {check.product_id: check for check in checks}

        issues: list[CheckoutIssue] = []
        reconciled: list[CartLine] = []

        for line in lines:
            name = line.snapshot.name
            check = by_id.get(line.product_id)

            if check is None or not check.available:
                issues.append(CheckoutIssue(
                    IssueType.UNAVAILABLE, line.product_id, name,
                    "Product no longer available",
                ))
                continue

            if check.available_quantity <= 0:
                issues.append(CheckoutIssue(
                    IssueType.OUT_OF_STOCK, line.product_id, name,
                    "Product is out of stock",
                ))
                continue

            updated = replace(line, available_quantity=check.available_quantity)

            if line.quantity > check.available_quantity:
                updated = replace(updated, quantity=check.available_quantity)
                issues.append(CheckoutIssue(
                    IssueType.QUANTITY_ADJUSTED, line.product_id, name,
                    f"Quantity adjusted from {line.quantity} to {check.available_quantity}",
                    original_quantity=line.quantity,
                    adjusted_quantity=check.available_quantity,
                ))

            live_price = check.current_price
            if live_price is not None and live_price != line.snapshot.price:
                updated = replace(updated, snapshot=line.snapshot.with_price(live_price))
                issues.append(CheckoutIssue(
                    IssueType.PRICE_CHANGED, line.product_id, name,
                    f"Price updated from {line.snapshot.price} to {live_price}",
                    old_price=line.snapshot.price,
                    new_price=live_price,
                ))

            reconciled.append(updated)

        return CartValidation(issues=tuple(issues), reconciled_lines=tuple(reconciled))
