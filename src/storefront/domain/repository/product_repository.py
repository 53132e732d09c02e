"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory)
live elsewhere.

Writes are compare-and-set on ``Product.version``: the store is the only
arbiter of which concurrent writer wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate an unused product ID."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a detached copy of a product, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Insert a new product. Raises ValidationError if the ID is taken."""

    @abstractmethod
    def update(self, product: Product, expected_version: int) -> bool:
        """Atomically replace the stored product if its version still matches.

        On success the stored and the passed product both carry version
        ``expected_version + 1`` and True is returned.  If the stored
        version differs nothing is written and False is returned.
        """
