"""Application service: Add Product use case."""

from __future__ import annotations

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import CATEGORIES, Product
from storefront.domain.model.stock import DEFAULT_LOW_STOCK_THRESHOLD, StockLevel
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        quantity: int = 0,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        category: str = "rings",
        sku: str | None = None,
        original_price: str | None = None,
    ) -> Product:
        """Add a new product to the catalog with its opening stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        if category not in CATEGORIES:
            raise ValidationError(
                f"Unknown category '{category}' (expected one of: {', '.join(CATEGORIES)})"
            )

        existing = self._product_repo.get_by_name(name)
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        product_id = self._product_repo.next_id()
        product = Product(
            id=product_id,
            name=name.strip(),
            price=Money.of(price),
            stock=StockLevel(quantity=quantity, low_stock_threshold=low_stock_threshold),
            category=category,
            sku=(sku or _generate_sku(category, product_id)).strip().upper(),
            original_price=Money.of(original_price) if original_price else None,
        )
        if product.price.is_zero:
            raise ValidationError("Product price must be greater than zero")
        self._product_repo.add(product)
        return product


def _generate_sku(category: str, product_id: str) -> str:
    return f"{category[:3].upper()}{int(product_id):06d}"
