"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from storefront.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def next_sequence(self, day: date) -> int:
        """Atomically increment and return the order counter for *day*.

        Concurrent callers never receive the same value for the same day.
        """

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return a detached copy of an order, or None if not found."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its order number, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, oldest first."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order and assign its ID.

        Raises DuplicateOrderNumberError if the order number is taken.
        """

    @abstractmethod
    def update(self, order: Order, expected_version: int) -> bool:
        """Atomically replace the stored order if its version still matches.

        Same contract as ``ProductRepository.update``.
        """
