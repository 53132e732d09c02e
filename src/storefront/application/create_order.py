"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain model.
Stock is reserved for every line *before* the order is persisted; if
anything fails after that, the reservations are released again.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from storefront.domain.exceptions import (
    DuplicateOrderNumberError,
    EntityNotFoundError,
    ProductUnavailableError,
    ValidationError,
)
from storefront.domain.model.order import (
    DEFAULT_ORDER_NUMBER_PREFIX,
    Order,
    OrderLineItem,
    format_order_number,
    utcnow,
)
from storefront.domain.model.pricing import PricingPolicy
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import (
    Money,
    Owner,
    Quantity,
    ShippingAddress,
    ShippingMethod,
)
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.order_stock_service import OrderStockService
from storefront.domain.service.stock_ledger import StockLedger, StockRequest

logger = logging.getLogger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        pricing: PricingPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
        order_number_prefix: str = DEFAULT_ORDER_NUMBER_PREFIX,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._pricing = pricing or PricingPolicy()
        self._clock = clock
        self._prefix = order_number_prefix

    def handle(
        self,
        owner: Owner,
        item_specs: list[OrderItemSpec],
        shipping_address: ShippingAddress,
        shipping_method: ShippingMethod = ShippingMethod.STANDARD,
        discount: Money | None = None,
        customer_note: str | None = None,
        actor: str | None = None,
    ) -> OrderDTO:
        """Create a new customer order.

        Steps:
        1. Merge and validate the requested quantities.
        2. Make sure every product is still in the catalog.
        3. Reserve stock line by line (released again on first failure).
        4. Build OrderLineItems from the reserved products (snapshot).
        5. Let the Order aggregate compute totals, then persist it under a
           fresh order number.
        """
        requests = self._merge_specs(item_specs)
        for request in requests:
            self._require_sellable(request.product_id)

        stock = OrderStockService(StockLedger(self._product_repo))
        products = stock.reserve_lines(requests)

        try:
            order = self._persist_new_order(
                owner=owner,
                lines=self._build_lines(requests, products),
                shipping_address=shipping_address,
                shipping_method=shipping_method,
                discount=discount,
                customer_note=customer_note,
                actor=actor,
            )
        except Exception:
            logger.warning("Order creation failed after reservation; releasing stock")
            stock.compensate(requests)
            raise

        logger.info(
            "Created order %s for %s (total %s)",
            order.order_number, order.owner, order.total_amount,
        )
        return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _merge_specs(item_specs: list[OrderItemSpec]) -> list[StockRequest]:
        if not item_specs:
            raise ValidationError("Order must contain at least one item")
        merged: dict[str, int] = {}
        for spec in item_specs:
            Quantity(spec.quantity)
            merged[spec.product_id] = merged.get(spec.product_id, 0) + spec.quantity
        return [StockRequest(pid, qty) for pid, qty in merged.items()]

    def _require_sellable(self, product_id: str) -> None:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        if not product.is_sellable:
            raise ProductUnavailableError(f"{product.name} is no longer available")

    @staticmethod
    def _build_lines(
        requests: list[StockRequest], products: list[Product]
    ) -> list[OrderLineItem]:
        return [
            OrderLineItem(
                product_id=product.id,
                product_name=product.name,
                quantity=Quantity(request.quantity),
                unit_price=product.price,  # <-- price snapshot
                sku=product.sku,
            )
            for request, product in zip(requests, products)
        ]

    def _persist_new_order(
        self,
        owner: Owner,
        lines: list[OrderLineItem],
        shipping_address: ShippingAddress,
        shipping_method: ShippingMethod,
        discount: Money | None,
        customer_note: str | None,
        actor: str | None,
    ) -> Order:
        subtotal = Money.zero(lines[0].unit_price.currency)
        for line in lines:
            subtotal = subtotal + line.line_total

        for _ in range(MAX_ORDER_NUMBER_ATTEMPTS):
            now = self._clock()
            day = now.date()
            number = format_order_number(day, self._order_repo.next_sequence(day), self._prefix)
            order = Order.create(
                order_number=number,
                owner=owner,
                items=lines,
                shipping_address=shipping_address,
                shipping_method=shipping_method,
                shipping_cost=self._pricing.shipping_for(subtotal, shipping_method),
                tax=self._pricing.tax_for(subtotal),
                discount_amount=discount,
                customer_note=customer_note,
                actor=actor,
                now=now,
            )
            try:
                self._order_repo.add(order)
            except DuplicateOrderNumberError:
                logger.warning("Order number %s already taken, drawing another", number)
                continue
            return order

        raise DuplicateOrderNumberError(
            f"Could not allocate an order number after {MAX_ORDER_NUMBER_ATTEMPTS} attempts"
        )
