"""Application service: Process Refund use case.

Refunds accumulate on the order.  A refund that covers everything still
outstanding marks both payment and order as refunded.  A pending order
gets its reservations released; a confirmed or processing order has its
committed units restocked.  Once shipped, stock is left alone.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.order_access import load_order, store_order
from storefront.domain.model.order import utcnow
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.order_stock_service import OrderStockService
from storefront.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class ProcessRefundHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._clock = clock

    def handle(
        self,
        order_id: int,
        amount: str | int | Money,
        reason: str,
        actor: str | None = None,
    ) -> OrderDTO:
        order = load_order(self._order_repo, order_id)
        if not isinstance(amount, Money):
            amount = Money.of(amount, order.total_amount.currency)
        previous = order.status
        expected_version = order.version

        record = order.apply_refund(amount, reason, actor, self._clock())
        store_order(self._order_repo, order, expected_version)

        OrderStockService(StockLedger(self._product_repo)).apply_transition(order, previous)
        logger.info(
            "Refunded %s on order %s (payment now %s)",
            record.amount, order.order_number, order.payment_status.value,
        )
        return order_to_dto(order)
