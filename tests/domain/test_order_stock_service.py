"""Unit tests for OrderStockService (reservation saga and transitions)."""

from datetime import datetime, timezone

import pytest

import logging

from storefront.domain.exceptions import InsufficientStockError
from storefront.domain.model.order import Order, OrderLineItem, OrderStatus
from storefront.domain.model.product import Product
from storefront.domain.model.stock import StockLevel
from storefront.domain.model.value_objects import (
    Money,
    Quantity,
    RegisteredCustomer,
    ShippingAddress,
)
from storefront.domain.service.order_stock_service import OrderStockService
from storefront.domain.service.stock_ledger import StockLedger, StockRequest
from tests.fakes import FakeProductRepository

ADDRESS = ShippingAddress(
    "Ada", "Obi", "ada@example.com", "08000000000",
    "1 Marina", "Lagos", "Lagos", "100001",
)


def _setup() -> tuple[OrderStockService, FakeProductRepository]:
    repo = FakeProductRepository([
        Product(id="1", name="Ring", price=Money.of("1000"), stock=StockLevel(quantity=10)),
        Product(id="2", name="Necklace", price=Money.of("2000"), stock=StockLevel(quantity=10)),
        Product(id="3", name="Earrings", price=Money.of("3000"), stock=StockLevel(quantity=1)),
    ])
    return OrderStockService(StockLedger(repo)), repo


def _order(*lines: tuple[str, int]) -> Order:
    return Order.create(
        order_number="TA20261019-001",
        owner=RegisteredCustomer("42"),
        items=[
            OrderLineItem(pid, f"Piece {pid}", Quantity(qty), Money.of("1000"))
            for pid, qty in lines
        ],
        shipping_address=ADDRESS,
        now=datetime(2026, 10, 19, tzinfo=timezone.utc),
    )


def _reserved(repo: FakeProductRepository) -> dict[str, int]:
    return {p.id: p.stock.reserved for p in repo.list_all()}


class _StuckReleaseRepository(FakeProductRepository):
    """Rejects every write that lowers the reservation of the stuck products."""

    def __init__(self, products, stuck: set[str]) -> None:
        super().__init__(products)
        self._stuck = stuck

    def update(self, product, expected_version):
        current = self.get_by_id(product.id)
        if (
            product.id in self._stuck
            and current is not None
            and product.stock.reserved < current.stock.reserved
        ):
            return False
        return super().update(product, expected_version)


class TestReserveLines:

    def test_all_lines_reserved(self):
        service, repo = _setup()
        products = service.reserve_lines([StockRequest("1", 2), StockRequest("2", 3)])
        assert [p.id for p in products] == ["1", "2"]
        assert _reserved(repo) == {"1": 2, "2": 3, "3": 0}

    def test_failure_releases_earlier_lines(self):
        service, repo = _setup()
        with pytest.raises(InsufficientStockError, match="Earrings") as exc_info:
            service.reserve_lines([
                StockRequest("1", 2),
                StockRequest("2", 3),
                StockRequest("3", 5),
            ])
        assert exc_info.value.product_id == "3"
        assert _reserved(repo) == {"1": 0, "2": 0, "3": 0}

    def test_unknown_product_also_compensates(self):
        service, repo = _setup()
        with pytest.raises(Exception):
            service.reserve_lines([StockRequest("1", 2), StockRequest("404", 1)])
        assert _reserved(repo)["1"] == 0


class TestApplyTransition:

    def test_confirm_commits(self):
        service, repo = _setup()
        service.reserve_lines([StockRequest("1", 2)])
        order = _order(("1", 2))
        order.confirm()
        service.apply_transition(order, OrderStatus.PENDING)
        ring = repo.get_by_id("1")
        assert (ring.stock.quantity, ring.stock.reserved) == (8, 0)

    def test_cancel_pending_releases(self):
        service, repo = _setup()
        service.reserve_lines([StockRequest("1", 2)])
        order = _order(("1", 2))
        order.cancel()
        service.apply_transition(order, OrderStatus.PENDING)
        ring = repo.get_by_id("1")
        assert (ring.stock.quantity, ring.stock.reserved) == (10, 0)

    def test_cancel_confirmed_restocks(self):
        service, repo = _setup()
        service.reserve_lines([StockRequest("1", 2)])
        order = _order(("1", 2))
        order.confirm()
        service.apply_transition(order, OrderStatus.PENDING)
        order.cancel()
        service.apply_transition(order, OrderStatus.CONFIRMED)
        assert repo.get_by_id("1").stock.quantity == 10

    def test_later_transitions_leave_stock_alone(self):
        service, repo = _setup()
        order = _order(("1", 2))
        order.confirm()
        order.start_processing()
        service.apply_transition(order, OrderStatus.CONFIRMED)
        assert repo.get_by_id("1").version == 0

    def test_refund_of_confirmed_order_restocks(self):
        service, repo = _setup()
        service.reserve_lines([StockRequest("1", 3)])
        order = _order(("1", 3))
        order.confirm()
        service.apply_transition(order, OrderStatus.PENDING)
        order.status = OrderStatus.REFUNDED
        service.apply_transition(order, OrderStatus.CONFIRMED)
        ring = repo.get_by_id("1")
        assert (ring.stock.quantity, ring.stock.reserved) == (10, 0)

    def test_refund_of_processing_order_restocks(self):
        service, repo = _setup()
        service.reserve_lines([StockRequest("1", 3)])
        order = _order(("1", 3))
        order.confirm()
        service.apply_transition(order, OrderStatus.PENDING)
        order.start_processing()
        order.status = OrderStatus.REFUNDED
        service.apply_transition(order, OrderStatus.PROCESSING)
        assert repo.get_by_id("1").stock.quantity == 10

    def test_refund_after_delivery_leaves_stock_alone(self):
        service, repo = _setup()
        order = _order(("1", 3))
        order.status = OrderStatus.REFUNDED
        service.apply_transition(order, OrderStatus.DELIVERED)
        assert repo.get_by_id("1").version == 0


class TestCompensate:

    def _setup(self) -> tuple[OrderStockService, _StuckReleaseRepository]:
        repo = _StuckReleaseRepository(
            [
                Product(id="1", name="Ring", price=Money.of("1000"), stock=StockLevel(quantity=10)),
                Product(id="2", name="Necklace", price=Money.of("2000"), stock=StockLevel(quantity=10)),
                Product(id="3", name="Earrings", price=Money.of("3000"), stock=StockLevel(quantity=1)),
            ],
            stuck={"1"},
        )
        return OrderStockService(StockLedger(repo)), repo

    def test_original_error_survives_a_failed_release(self, caplog):
        service, repo = self._setup()
        with caplog.at_level(logging.ERROR):
            with pytest.raises(InsufficientStockError, match="Earrings"):
                service.reserve_lines([
                    StockRequest("1", 4),
                    StockRequest("2", 3),
                    StockRequest("3", 5),
                ])
        assert _reserved(repo) == {"1": 4, "2": 0, "3": 0}
        assert "Could not release 4 of 1" in caplog.text

    def test_every_line_is_attempted(self):
        service, repo = self._setup()
        service.reserve_lines([StockRequest("1", 2), StockRequest("2", 2)])
        service.compensate([StockRequest("1", 2), StockRequest("2", 2)])
        assert _reserved(repo) == {"1": 2, "2": 0, "3": 0}
