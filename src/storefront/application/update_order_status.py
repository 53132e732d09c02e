"""Application service: Update Order Status use case.

Moves an order along the status graph on behalf of staff.  Confirming
commits the reserved stock, cancelling releases or restocks it, and a
move to ``refunded`` is treated as a return of a delivered order.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.order_access import load_order, store_order
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import RETURN_WINDOW_DAYS, OrderStatus, utcnow
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.order_stock_service import OrderStockService
from storefront.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def parse_status(value: str | OrderStatus) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown order status '{value}' (expected one of: {valid})") from exc


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        clock: Callable[[], datetime] = utcnow,
        return_window_days: int = RETURN_WINDOW_DAYS,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._clock = clock
        self._return_window_days = return_window_days

    def handle(
        self,
        order_id: int,
        new_status: str | OrderStatus,
        note: str | None = None,
        actor: str | None = None,
        tracking_number: str | None = None,
    ) -> OrderDTO:
        target = parse_status(new_status)
        order = load_order(self._order_repo, order_id)
        previous = order.status
        expected_version = order.version

        order.advance_to(
            target,
            actor=actor,
            note=note,
            now=self._clock(),
            tracking_number=tracking_number,
            window_days=self._return_window_days,
        )
        store_order(self._order_repo, order, expected_version)

        OrderStockService(StockLedger(self._product_repo)).apply_transition(order, previous)
        logger.info(
            "Order %s moved %s -> %s by %s",
            order.order_number, previous.value, order.status.value, actor or "system",
        )
        return order_to_dto(order)
