"""Domain service: Stock Ledger.

The ledger is the only writer of stock numbers.  Every mutation is a
single conditional update of the product document: read it, apply the
change (which re-checks the condition, e.g. enough unreserved stock),
then write it back only if nobody else wrote in between.  A lost race
re-reads and re-evaluates, so two concurrent reservations can never both
succeed against stock that only covers one of them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from storefront.domain.exceptions import (
    ConcurrentModificationError,
    ConsistencyViolation,
    EntityNotFoundError,
    InsufficientStockError,
)
from storefront.domain.model.product import Product
from storefront.domain.model.stock import StockLevel
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 10


@dataclass(frozen=True)
class StockRequest:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class AvailabilityCheck:
    product_id: str
    available: bool  # product exists and is still sold
    available_quantity: int
    current_price: Money | None


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    # --- Queries --------------------------------------------------------------

    def check_availability(self, requests: Iterable[StockRequest]) -> list[AvailabilityCheck]:
        """Report live availability and price for each requested product."""
        checks: list[AvailabilityCheck] = []
        for request in requests:
            product = self._product_repo.get_by_id(request.product_id)
            if product is None:
                checks.append(AvailabilityCheck(request.product_id, False, 0, None))
                continue
            checks.append(
                AvailabilityCheck(
                    product_id=product.id,
                    available=product.is_sellable,
                    available_quantity=max(0, product.available_quantity),
                    current_price=product.price,
                )
            )
        return checks

    # --- Mutations ------------------------------------------------------------

    def reserve(self, product_id: str, quantity: int) -> Product:
        """Hold stock; fails with InsufficientStockError and no side effect."""

        def _reserve(product: Product) -> None:
            try:
                product.stock.reserve(quantity)
            except InsufficientStockError as exc:
                raise InsufficientStockError(
                    f"{product.name}: {exc}", product_id=product.id
                ) from exc

        product = self.update_product(product_id, _reserve)
        logger.debug("Reserved %d of %s (reserved=%d)", quantity, product_id, product.stock.reserved)
        return product

    def release(self, product_id: str, quantity: int) -> Product | None:
        """Drop a reservation, clamping at zero. Never fails on stock numbers."""
        try:
            product = self.update_product(product_id, lambda p: p.stock.release(quantity))
        except EntityNotFoundError:
            logger.warning("Cannot release %d of unknown product %s", quantity, product_id)
            return None
        logger.debug("Released %d of %s (reserved=%d)", quantity, product_id, product.stock.reserved)
        return product

    def commit(self, product_id: str, quantity: int) -> Product:
        """Convert a reservation into a permanent deduction."""
        try:
            product = self.update_product(product_id, lambda p: p.stock.commit(quantity))
        except ConsistencyViolation:
            logger.error(
                "Stock consistency violation committing %d of %s", quantity, product_id
            )
            raise
        logger.debug("Committed %d of %s (quantity=%d)", quantity, product_id, product.stock.quantity)
        return product

    def restock(self, product_id: str, quantity: int) -> Product:
        """Put previously committed units back on hand."""
        product = self.update_product(product_id, lambda p: p.stock.restock(quantity))
        logger.debug("Restocked %d of %s (quantity=%d)", quantity, product_id, product.stock.quantity)
        return product

    def set_stock(self, product_id: str, quantity: int,
                  low_stock_threshold: int | None = None) -> Product:
        """Record a stock count for a product."""

        def _set(product: Product) -> None:
            product.stock.set_quantity(quantity)
            if low_stock_threshold is not None:
                product.stock = StockLevel(
                    quantity=product.stock.quantity,
                    reserved=product.stock.reserved,
                    low_stock_threshold=low_stock_threshold,
                    discontinued=product.stock.discontinued,
                )

        return self.update_product(product_id, _set)

    def discontinue(self, product_id: str) -> Product:
        """Take a product out of sale for good; its stock numbers are kept."""
        product = self.update_product(product_id, lambda p: p.stock.discontinue())
        logger.info("Discontinued product %s", product_id)
        return product

    # --- Compare-and-set ------------------------------------------------------

    def update_product(self, product_id: str, mutate: Callable[[Product], object]) -> Product:
        """Apply *mutate* to the latest copy of a product and write it back.

        The write only lands if the product is unchanged since it was read;
        otherwise the product is re-read and *mutate* runs again, up to
        MAX_WRITE_ATTEMPTS times.  Errors raised by *mutate* propagate
        without a write.
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
            expected_version = product.version
            mutate(product)
            if self._product_repo.update(product, expected_version):
                return product
            logger.debug(
                "Write conflict on product %s (attempt %d), retrying", product_id, attempt
            )
        raise ConcurrentModificationError(
            f"Product '{product_id}' kept changing; gave up after {MAX_WRITE_ATTEMPTS} attempts"
        )
