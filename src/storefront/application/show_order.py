"""Application service: Show Order use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.order_access import load_order
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        return order_to_dto(load_order(self._order_repo, order_id))

    def handle_by_number(self, order_number: str) -> OrderDTO:
        order = self._order_repo.get_by_number(order_number.strip().upper())
        if order is None:
            raise EntityNotFoundError(f"Order {order_number} not found")
        return order_to_dto(order)

    def list_all(self) -> list[OrderDTO]:
        return [order_to_dto(order) for order in self._order_repo.list_all()]
