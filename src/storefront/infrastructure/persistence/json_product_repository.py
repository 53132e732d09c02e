"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.stock import DEFAULT_LOW_STOCK_THRESHOLD, StockLevel
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, default=[])

    # --- ProductRepository interface ------------------------------------------

    def next_id(self) -> str:
        records = self._file.read()
        if not records:
            return "1"
        return str(max(int(raw["id"]) for raw in records) + 1)

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._file.read():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def get_by_name(self, name: str) -> Product | None:
        for raw in self._file.read():
            if raw["name"].lower() == name.strip().lower():
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._file.read()]

    def add(self, product: Product) -> None:
        with self._file.update() as records:
            if any(raw["id"] == product.id for raw in records):
                raise ValidationError(f"Product with ID '{product.id}' already exists")
            records.append(self._to_raw(product))

    def update(self, product: Product, expected_version: int) -> bool:
        with self._file.update() as records:
            for i, raw in enumerate(records):
                if raw["id"] != product.id:
                    continue
                if raw.get("version", 0) != expected_version:
                    return False
                product.version = expected_version + 1
                records[i] = self._to_raw(product)
                return True
        return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "original_price": (
                str(product.original_price.amount) if product.original_price else None
            ),
            "category": product.category,
            "sku": product.sku,
            "is_active": product.is_active,
            "stock": {
                "quantity": product.stock.quantity,
                "reserved": product.stock.reserved,
                "low_stock_threshold": product.stock.low_stock_threshold,
                "discontinued": product.stock.discontinued,
                # derived; stored for readers of the raw file only
                "status": product.stock.status.value,
            },
            "version": product.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        currency = raw.get("currency", DEFAULT_CURRENCY)
        stock = raw.get("stock", {})
        original = raw.get("original_price")
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), currency),
            stock=StockLevel(
                quantity=stock.get("quantity", 0),
                reserved=stock.get("reserved", 0),
                low_stock_threshold=stock.get("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD),
                discontinued=stock.get("discontinued", False),
            ),
            category=raw.get("category", "rings"),
            sku=raw.get("sku"),
            original_price=Money(Decimal(original), currency) if original else None,
            is_active=raw.get("is_active", True),
            version=raw.get("version", 0),
        )
