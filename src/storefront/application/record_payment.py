"""Application service: Record Payment use case."""

from __future__ import annotations

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.order_access import load_order, store_order
from storefront.domain.repository.order_repository import OrderRepository


class RecordPaymentHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, succeeded: bool = True) -> OrderDTO:
        """Record a captured (or failed) payment reported by the gateway."""
        order = load_order(self._order_repo, order_id)
        expected_version = order.version
        order.record_payment(succeeded)
        store_order(self._order_repo, order, expected_version)
        return order_to_dto(order)
