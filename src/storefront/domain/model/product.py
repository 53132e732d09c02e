"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, stock moves, and products are deactivated rather than
removed from the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.stock import StockLevel, StockStatus
from storefront.domain.model.value_objects import Money, ProductSnapshot

CATEGORIES = (
    "rings",
    "necklaces",
    "earrings",
    "bracelets",
    "pendants",
    "anklets",
    "sets",
    "watches",
)


@dataclass
class Product:
    """A product in the catalog together with its stock record.

    ``version`` is bumped by the repository on every successful write and
    is what compare-and-set updates are checked against.
    """

    id: str
    name: str
    price: Money
    stock: StockLevel = field(default_factory=lambda: StockLevel(quantity=0))
    category: str = "rings"
    sku: str | None = None
    original_price: Money | None = None
    is_active: bool = True
    version: int = 0

    # --- Derived views --------------------------------------------------------

    @property
    def stock_status(self) -> StockStatus:
        return self.stock.status

    @property
    def available_quantity(self) -> int:
        return self.stock.available_quantity

    @property
    def is_available(self) -> bool:
        return (
            self.is_active
            and self.stock.status == StockStatus.IN_STOCK
            and self.stock.available_quantity > 0
        )

    @property
    def is_sellable(self) -> bool:
        """Still in the catalog, regardless of how much stock is left."""
        return self.is_active and not self.stock.discontinued

    @property
    def discount_percentage(self) -> int:
        if self.original_price is None or self.original_price <= self.price:
            return 0
        ratio = (self.original_price.amount - self.price.amount) / self.original_price.amount
        return int((ratio * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=self.id, name=self.name, price=self.price, sku=self.sku
        )

    # --- Catalog mutations ----------------------------------------------------

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def deactivate(self) -> None:
        self.is_active = False

    def activate(self) -> None:
        self.is_active = True
