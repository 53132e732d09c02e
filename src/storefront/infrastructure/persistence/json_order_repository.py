"""JSON-file-backed implementation of OrderRepository.

Orders live in one file; the per-day order counters live in a second
file holding one counter document per calendar day.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from storefront.domain.exceptions import DuplicateOrderNumberError
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentStatus,
    RefundRecord,
    StatusChange,
)
from storefront.domain.model.value_objects import (
    GuestCustomer,
    Money,
    Owner,
    Quantity,
    RegisteredCustomer,
    ShippingAddress,
    ShippingMethod,
)
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path, sequence_path: Path) -> None:
        self._file = JsonFile(file_path, default=[])
        self._sequences = JsonFile(sequence_path, default={})

    # --- OrderRepository interface --------------------------------------------

    def next_sequence(self, day: date) -> int:
        key = day.strftime("%Y%m%d")
        with self._sequences.update() as counters:
            counters[key] = counters.get(key, 0) + 1
            return counters[key]

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.read():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_number(self, order_number: str) -> Order | None:
        for raw in self._file.read():
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._file.read()]

    def add(self, order: Order) -> None:
        with self._file.update() as orders:
            if any(raw["order_number"] == order.order_number for raw in orders):
                raise DuplicateOrderNumberError(
                    f"Order number {order.order_number} already exists"
                )
            order.id = max((raw["id"] for raw in orders), default=0) + 1
            orders.append(self._to_raw(order))

    def update(self, order: Order, expected_version: int) -> bool:
        with self._file.update() as orders:
            for i, raw in enumerate(orders):
                if raw["id"] != order.id:
                    continue
                if raw.get("version", 0) != expected_version:
                    return False
                order.version = expected_version + 1
                orders[i] = self._to_raw(order)
                return True
        return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        address = order.shipping_address
        return {
            "id": order.id,
            "order_number": order.order_number,
            "owner": _owner_to_raw(order.owner),
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "currency": order.total_amount.currency,
            "subtotal": str(order.subtotal.amount),
            "shipping_cost": str(order.shipping_cost.amount),
            "tax": str(order.tax.amount),
            "discount_amount": str(order.discount_amount.amount),
            "total_amount": str(order.total_amount.amount),
            "shipping_method": order.shipping_method.value,
            "shipping_address": {
                "first_name": address.first_name,
                "last_name": address.last_name,
                "email": address.email,
                "phone": address.phone,
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "zip_code": address.zip_code,
                "country": address.country,
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "sku": item.sku,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                }
                for item in order.items
            ],
            "status_history": [
                {
                    "status": change.status.value,
                    "timestamp": change.timestamp.isoformat(),
                    "actor": change.actor,
                    "note": change.note,
                }
                for change in order.status_history
            ],
            "refunds": [
                {
                    "amount": str(record.amount.amount),
                    "reason": record.reason,
                    "processed_at": record.processed_at.isoformat(),
                    "processed_by": record.processed_by,
                }
                for record in order.refunds
            ],
            "created_at": order.created_at.isoformat(),
            "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
            "tracking_number": order.tracking_number,
            "customer_note": order.customer_note,
            "version": order.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw["currency"]

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=money(i["unit_price"]),
                sku=i.get("sku"),
            )
            for i in raw["items"]
        ]
        history = [
            StatusChange(
                status=OrderStatus(h["status"]),
                timestamp=datetime.fromisoformat(h["timestamp"]),
                actor=h.get("actor"),
                note=h.get("note"),
            )
            for h in raw["status_history"]
        ]
        refunds = [
            RefundRecord(
                amount=money(r["amount"]),
                reason=r["reason"],
                processed_at=datetime.fromisoformat(r["processed_at"]),
                processed_by=r.get("processed_by"),
            )
            for r in raw.get("refunds", [])
        ]
        delivered_at = raw.get("delivered_at")
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            owner=_owner_from_raw(raw["owner"]),
            items=items,
            shipping_address=ShippingAddress(**raw["shipping_address"]),
            subtotal=money(raw["subtotal"]),
            total_amount=money(raw["total_amount"]),
            shipping_method=ShippingMethod(raw["shipping_method"]),
            shipping_cost=money(raw["shipping_cost"]),
            tax=money(raw["tax"]),
            discount_amount=money(raw["discount_amount"]),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            status_history=history,
            refunds=refunds,
            created_at=datetime.fromisoformat(raw["created_at"]),
            delivered_at=datetime.fromisoformat(delivered_at) if delivered_at else None,
            tracking_number=raw.get("tracking_number"),
            customer_note=raw.get("customer_note"),
            version=raw.get("version", 0),
        )


def _owner_to_raw(owner: Owner) -> dict:
    if isinstance(owner, GuestCustomer):
        return {"type": "guest", "email": owner.email}
    return {"type": "registered", "customer_id": owner.customer_id}


def _owner_from_raw(raw: dict) -> Owner:
    if raw["type"] == "guest":
        return GuestCustomer(raw["email"])
    return RegisteredCustomer(raw["customer_id"])
