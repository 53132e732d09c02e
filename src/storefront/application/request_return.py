"""Application service: Request Return use case.

A delivered order can be returned within the return window; whatever
was paid and not yet refunded is refunded in full.  Returned pieces are
not put back into stock automatically.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.order_access import load_order, store_order
from storefront.domain.model.order import RETURN_WINDOW_DAYS, utcnow
from storefront.domain.repository.order_repository import OrderRepository


class RequestReturnHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        clock: Callable[[], datetime] = utcnow,
        return_window_days: int = RETURN_WINDOW_DAYS,
    ) -> None:
        self._order_repo = order_repo
        self._clock = clock
        self._return_window_days = return_window_days

    def handle(self, order_id: int, reason: str, actor: str | None = None) -> OrderDTO:
        order = load_order(self._order_repo, order_id)
        expected_version = order.version
        order.mark_returned(reason, actor, self._clock(), self._return_window_days)
        store_order(self._order_repo, order, expected_version)
        return order_to_dto(order)
