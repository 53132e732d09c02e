"""Application service: Checkout use case.

Turns the saved cart into an order:

1. Validate the cart against the stock ledger and save the reconciled
   lines (advisory fixes applied, blocked lines dropped).
2. Stop if anything blocking was found and hand the issues back.
3. Otherwise create the order (which reserves stock) and empty the cart.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import OrderDTO, OrderItemSpec
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Owner, ShippingAddress, ShippingMethod
from storefront.domain.repository.cart_store import CartStore
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.checkout_validator import CheckoutIssue, CheckoutValidator
from storefront.domain.service.stock_ledger import StockLedger


@dataclass(frozen=True)
class CheckoutResult:
    issues: list[CheckoutIssue] = field(default_factory=list)
    order: OrderDTO | None = None

    @property
    def success(self) -> bool:
        return self.order is not None


class CheckoutHandler:

    def __init__(
        self,
        cart_store: CartStore,
        product_repo: ProductRepository,
        create_order: CreateOrderHandler,
    ) -> None:
        self._cart_store = cart_store
        self._product_repo = product_repo
        self._create_order = create_order

    def handle(
        self,
        owner: Owner,
        shipping_address: ShippingAddress,
        shipping_method: ShippingMethod = ShippingMethod.STANDARD,
        customer_note: str | None = None,
        actor: str | None = None,
    ) -> CheckoutResult:
        cart = self._cart_store.load()
        if cart.is_empty:
            raise ValidationError("Cart is empty")

        validation = CheckoutValidator(StockLedger(self._product_repo)).validate(cart.lines)
        cart.replace_lines(validation.reconciled_lines)
        self._cart_store.save(cart)

        if not validation.valid:
            return CheckoutResult(issues=list(validation.issues))

        order = self._create_order.handle(
            owner=owner,
            item_specs=[OrderItemSpec(line.product_id, line.quantity) for line in cart.lines],
            shipping_address=shipping_address,
            shipping_method=shipping_method,
            customer_note=customer_note,
            actor=actor,
        )

        cart.clear()
        self._cart_store.save(cart)
        return CheckoutResult(issues=list(validation.issues), order=order)
