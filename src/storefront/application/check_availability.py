"""Application service: Check Availability use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderItemSpec
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.stock_ledger import (
    AvailabilityCheck,
    StockLedger,
    StockRequest,
)


class CheckAvailabilityHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, items: list[OrderItemSpec]) -> list[AvailabilityCheck]:
        ledger = StockLedger(self._product_repo)
        return ledger.check_availability(
            StockRequest(item.product_id, item.quantity) for item in items
        )
