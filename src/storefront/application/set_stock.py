"""Application service: Set Stock use case."""

from __future__ import annotations

from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.stock_ledger import StockLedger


class SetStockHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        product_id: str,
        quantity: int,
        low_stock_threshold: int | None = None,
    ) -> Product:
        """Set the on-hand quantity for a product after a stock count."""
        return StockLedger(self._product_repo).set_stock(
            product_id, quantity, low_stock_threshold
        )
