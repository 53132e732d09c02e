"""Load/store helpers shared by the order command handlers.

Order commands are serialised per order with optimistic concurrency:
the write is rejected if anyone else wrote the order since it was read,
so a stale transition never reaches the status history.
"""

from __future__ import annotations

from storefront.domain.exceptions import ConcurrentModificationError, EntityNotFoundError
from storefront.domain.model.order import Order
from storefront.domain.repository.order_repository import OrderRepository


def load_order(order_repo: OrderRepository, order_id: int) -> Order:
    order = order_repo.get_by_id(order_id)
    if order is None:
        raise EntityNotFoundError(f"Order #{order_id} not found")
    return order


def store_order(order_repo: OrderRepository, order: Order, expected_version: int) -> None:
    if not order_repo.update(order, expected_version):
        raise ConcurrentModificationError(
            f"Order {order.order_number} was modified concurrently; reload and retry"
        )
