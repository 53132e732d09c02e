"""Application service: Update Product use case.

Catalog edits go through the stock ledger's compare-and-set write, so a
price change never overwrites a concurrent reservation.
"""

from __future__ import annotations

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.stock_ledger import StockLedger


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._ledger = StockLedger(product_repo)

    def update_price(self, product_id: str, new_price: str) -> Product:
        """Update a product's price.

        This does NOT affect any existing orders; they captured a
        price snapshot at creation time.  Carts pick the new price up
        at checkout validation.
        """
        price = Money.of(new_price)
        return self._ledger.update_product(product_id, lambda p: p.update_price(price))

    def deactivate(self, product_id: str) -> Product:
        """Soft-delete: the product stays referenced by past orders."""
        return self._ledger.update_product(product_id, lambda p: p.deactivate())

    def activate(self, product_id: str) -> Product:
        return self._ledger.update_product(product_id, lambda p: p.activate())

    def discontinue(self, product_id: str) -> Product:
        return self._ledger.discontinue(product_id)
