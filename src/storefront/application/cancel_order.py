"""Application service: Cancel Order use case.

Only pending and confirmed orders can be cancelled.  A pending order
still holds reservations, which are released; a confirmed order has
already had its stock committed, so those units are put back on hand.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.order_access import load_order, store_order
from storefront.domain.model.order import utcnow
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.order_stock_service import OrderStockService
from storefront.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class CancelOrderHandler:

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
        reason: str | None = None,
        actor: str | None = None,
    ) -> OrderDTO:
        order = load_order(self._order_repo, order_id)
        previous = order.status
        expected_version = order.version

        order.cancel(reason, actor, self._clock())
        store_order(self._order_repo, order, expected_version)

        # Stock follows only once the cancellation is on record.
        OrderStockService(StockLedger(self._product_repo)).apply_transition(order, previous)
        logger.info("Cancelled order %s (was %s)", order.order_number, previous.value)
        return order_to_dto(order)
