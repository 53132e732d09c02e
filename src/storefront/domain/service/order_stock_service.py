"""Domain service: stock side of the order lifecycle.

Coordinates the cross-aggregate work of reserving, committing, releasing
and restocking inventory for an order.  There is no multi-document
transaction underneath, so reserving a multi-line order is a saga:
lines are reserved one at a time and, on the first failure, every line
already reserved for this order is released again before the error is
re-raised.
"""

from __future__ import annotations

import logging
from typing import Sequence

from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.model.product import Product
from storefront.domain.service.stock_ledger import StockLedger, StockRequest

logger = logging.getLogger(__name__)


class OrderStockService:

    def __init__(self, ledger: StockLedger) -> None:
        self._ledger = ledger

    def reserve_lines(self, requests: Sequence[StockRequest]) -> list[Product]:
        """Reserve every request, all-or-nothing.

        Returns the products as they stood right after their reservation,
        in request order.  Any exception (insufficient stock, unknown
        product, write conflict) releases what was already held.
        """
        reserved: list[Product] = []
        try:
            for request in requests:
                reserved.append(self._ledger.reserve(request.product_id, request.quantity))
        except Exception:
            self.compensate(requests[: len(reserved)])
            raise
        return reserved

    def release_requests(self, requests: Sequence[StockRequest]) -> None:
        for request in requests:
            self._ledger.release(request.product_id, request.quantity)

    def release_for_order(self, order: Order) -> None:
        """Release the reservations held by a pending order."""
        self.release_requests(_requests_for(order))

    def commit_for_order(self, order: Order) -> None:
        """Permanently deduct every line of a just-confirmed order."""
        for request in _requests_for(order):
            self._ledger.commit(request.product_id, request.quantity)

    def restock_for_order(self, order: Order) -> None:
        """Put back the committed units of an order that will not ship."""
        for request in _requests_for(order):
            self._ledger.restock(request.product_id, request.quantity)

    def apply_transition(self, order: Order, previous: OrderStatus) -> None:
        """Apply the stock consequence of an order moving out of *previous*.

        Call only after the new order status has been persisted, so that
        only the writer that won the transition touches stock.
        """
        if previous == order.status:
            return
        if previous == OrderStatus.PENDING:
            if order.status == OrderStatus.CONFIRMED:
                self.commit_for_order(order)
            elif order.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
                self.release_for_order(order)
        elif previous in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING) and order.status in (
            OrderStatus.CANCELLED, OrderStatus.REFUNDED
        ):
            self.restock_for_order(order)

    def compensate(self, requests: Sequence[StockRequest]) -> None:
        """Release reservations taken for an order that will not be created.

        Each line is released on its own; a line that cannot be released is
        logged and skipped so the rest still go back, and the caller keeps
        raising its original error.
        """
        if requests:
            logger.warning(
                "Order not placed; releasing %d already-reserved line(s)", len(requests)
            )
        for request in requests:
            try:
                self._ledger.release(request.product_id, request.quantity)
            except Exception:
                logger.exception(
                    "Could not release %d of %s; reservation left in place",
                    request.quantity, request.product_id,
                )


def _requests_for(order: Order) -> list[StockRequest]:
    return [StockRequest(item.product_id, item.quantity.value) for item in order.items]
