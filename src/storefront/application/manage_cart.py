"""Application service: shopper cart use cases.

Each call loads the cart through the ``CartStore`` port, changes it and
saves it back.  Quantity checks always re-read the product; the
availability remembered on a cart line is never trusted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from storefront.application.dto import CartDTO, cart_to_dto
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import utcnow
from storefront.domain.model.pricing import PricingPolicy
from storefront.domain.model.product import Product
from storefront.domain.repository.cart_store import CartStore
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.checkout_validator import CartValidation, CheckoutValidator
from storefront.domain.service.stock_ledger import StockLedger


class ManageCartHandler:

    def __init__(
        self,
        cart_store: CartStore,
        product_repo: ProductRepository,
        pricing: PricingPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._cart_store = cart_store
        self._product_repo = product_repo
        self._pricing = pricing or PricingPolicy()
        self._clock = clock

    def show(self) -> CartDTO:
        return cart_to_dto(self._cart_store.load(), self._pricing)

    def add(self, product_id: str, quantity: int = 1) -> CartDTO:
        cart = self._cart_store.load()
        cart.add(self._product(product_id), quantity, now=self._clock())
        self._cart_store.save(cart)
        return cart_to_dto(cart, self._pricing)

    def remove(self, product_id: str) -> CartDTO:
        cart = self._cart_store.load()
        if not cart.remove(product_id):
            raise EntityNotFoundError(f"Product '{product_id}' is not in the cart")
        self._cart_store.save(cart)
        return cart_to_dto(cart, self._pricing)

    def set_quantity(self, product_id: str, quantity: int) -> CartDTO:
        cart = self._cart_store.load()
        available = self._product(product_id).available_quantity if quantity >= 1 else 0
        cart.set_quantity(product_id, quantity, available)
        self._cart_store.save(cart)
        return cart_to_dto(cart, self._pricing)

    def clear(self) -> None:
        cart = self._cart_store.load()
        cart.clear()
        self._cart_store.save(cart)

    def validate(self) -> CartValidation:
        """Reconcile the saved cart against live stock and price."""
        cart = self._cart_store.load()
        validation = CheckoutValidator(StockLedger(self._product_repo)).validate(cart.lines)
        cart.replace_lines(validation.reconciled_lines)
        self._cart_store.save(cart)
        return validation

    def _product(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product
