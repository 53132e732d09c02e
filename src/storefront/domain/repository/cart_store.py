"""Load/save port for the shopper's cart."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart


class CartStore(ABC):

    @abstractmethod
    def load(self) -> Cart:
        """Return the saved cart; an unreadable payload yields an empty cart."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist the cart, replacing whatever was saved before."""
