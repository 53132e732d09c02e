"""Integration tests for payment, refund and return use cases."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import OrderItemSpec
from storefront.application.process_refund import ProcessRefundHandler
from storefront.application.record_payment import RecordPaymentHandler
from storefront.application.request_return import RequestReturnHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import (
    EntityNotFoundError,
    RefundExceedsTotalError,
    ReturnWindowExpiredError,
    ValidationError,
)
from storefront.domain.model.product import Product
from storefront.domain.model.stock import StockLevel
from storefront.domain.model.value_objects import (
    Money,
    RegisteredCustomer,
    ShippingAddress,
    ShippingMethod,
)
from tests.fakes import FakeOrderRepository, FakeProductRepository

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
ADDRESS = ShippingAddress(
    "Ada", "Obi", "ada@example.com", "08000000000",
    "1 Marina", "Lagos", "Lagos", "100001",
)


class _Clock:

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _setup(paid: bool = True):
    """One pickup order for 1 ring at 5,000 (total 5,375 with tax)."""
    clock = _Clock(NOW)
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([
        Product(id="1", name="Gold Ring", price=Money.of("5000"), stock=StockLevel(quantity=10)),
    ])
    dto = CreateOrderHandler(order_repo, product_repo, clock=clock).handle(
        RegisteredCustomer("42"), [OrderItemSpec("1", 1)], ADDRESS,
        shipping_method=ShippingMethod.PICKUP,
        discount=Money.of("375"),
    )
    if paid:
        RecordPaymentHandler(order_repo).handle(dto.id)
    refund = ProcessRefundHandler(order_repo, product_repo, clock=clock)
    return refund, dto.id, order_repo, product_repo, clock


def _deliver(order_repo, product_repo, clock, order_id: int) -> None:
    update = UpdateOrderStatusHandler(order_repo, product_repo, clock=clock)
    for status in ("confirmed", "processing", "shipped", "delivered"):
        update.handle(order_id, status)


class TestRecordPayment:

    def test_marks_order_paid(self):
        _, order_id, order_repo, _, _ = _setup(paid=False)
        dto = RecordPaymentHandler(order_repo).handle(order_id)
        assert dto.payment_status == "paid"

    def test_failed_payment(self):
        _, order_id, order_repo, _, _ = _setup(paid=False)
        dto = RecordPaymentHandler(order_repo).handle(order_id, succeeded=False)
        assert dto.payment_status == "failed"


class TestProcessRefund:

    def test_partial_then_full_refund(self):
        refund, order_id, _, _, _ = _setup()

        dto = refund.handle(order_id, "3000", "scratched clasp", actor="staff")
        assert dto.total == "NGN 5,000.00"
        assert dto.payment_status == "partially_refunded"
        assert dto.status == "pending"
        assert dto.refunded == "NGN 3,000.00"

        dto = refund.handle(order_id, "2000", "customer unhappy", actor="staff")
        assert dto.payment_status == "refunded"
        assert dto.status == "refunded"
        assert [(r.amount, r.processed_by) for r in dto.refunds] == [
            ("NGN 3,000.00", "staff"),
            ("NGN 2,000.00", "staff"),
        ]

        with pytest.raises(RefundExceedsTotalError):
            refund.handle(order_id, "1", "one more")

    def test_full_refund_of_pending_order_releases_stock(self):
        refund, order_id, _, product_repo, _ = _setup()
        assert product_repo.get_by_id("1").stock.reserved == 1
        refund.handle(order_id, "5000", "cancelled by phone")
        assert product_repo.get_by_id("1").stock.reserved == 0

    def test_full_refund_of_confirmed_order_restocks(self):
        refund, order_id, order_repo, product_repo, clock = _setup()
        UpdateOrderStatusHandler(order_repo, product_repo, clock=clock).handle(order_id, "confirmed")
        assert product_repo.get_by_id("1").stock.quantity == 9

        dto = refund.handle(order_id, "5000", "changed mind before dispatch")

        assert dto.status == "refunded"
        ring = product_repo.get_by_id("1")
        assert (ring.stock.quantity, ring.stock.reserved) == (10, 0)

    def test_full_refund_of_processing_order_restocks(self):
        refund, order_id, order_repo, product_repo, clock = _setup()
        update = UpdateOrderStatusHandler(order_repo, product_repo, clock=clock)
        update.handle(order_id, "confirmed")
        update.handle(order_id, "processing")

        refund.handle(order_id, "5000", "out of engraving stock")

        assert product_repo.get_by_id("1").stock.quantity == 10

    def test_partial_refund_of_confirmed_order_keeps_stock_committed(self):
        refund, order_id, order_repo, product_repo, clock = _setup()
        UpdateOrderStatusHandler(order_repo, product_repo, clock=clock).handle(order_id, "confirmed")
        refund.handle(order_id, "1000", "goodwill")
        assert product_repo.get_by_id("1").stock.quantity == 9

    def test_full_refund_of_delivered_order_keeps_stock_committed(self):
        refund, order_id, order_repo, product_repo, clock = _setup()
        _deliver(order_repo, product_repo, clock, order_id)
        refund.handle(order_id, "5000", "lost in transit")
        assert product_repo.get_by_id("1").stock.quantity == 9

    def test_accepts_money(self):
        refund, order_id, _, _, _ = _setup()
        dto = refund.handle(order_id, Money.of("100"), "goodwill")
        assert dto.refunded == "NGN 100.00"

    def test_unpaid_order_cannot_be_refunded(self):
        refund, order_id, order_repo, _, _ = _setup(paid=False)
        with pytest.raises(RefundExceedsTotalError):
            refund.handle(order_id, "100", "goodwill")
        assert order_repo.get_by_id(order_id).refunds == []

    def test_zero_amount_rejected(self):
        refund, order_id, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            refund.handle(order_id, "0", "nothing")

    def test_garbage_amount_rejected(self):
        refund, order_id, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="Invalid money amount"):
            refund.handle(order_id, "lots", "nothing")

    def test_unknown_order(self):
        refund, _, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            refund.handle(404, "10", "nothing")


class TestRequestReturn:

    def test_return_within_window_refunds_everything(self):
        _, order_id, order_repo, product_repo, clock = _setup()
        _deliver(order_repo, product_repo, clock, order_id)

        clock.now = NOW + timedelta(days=10)
        dto = RequestReturnHandler(order_repo, clock=clock).handle(order_id, "wrong size")
        assert dto.status == "refunded"
        assert dto.payment_status == "refunded"
        assert dto.refunded == dto.total
        # returned pieces are inspected before going back on sale
        assert product_repo.get_by_id("1").stock.quantity == 9

    def test_return_after_window_fails(self):
        _, order_id, order_repo, product_repo, clock = _setup()
        _deliver(order_repo, product_repo, clock, order_id)

        clock.now = NOW + timedelta(days=31)
        with pytest.raises(ReturnWindowExpiredError):
            RequestReturnHandler(order_repo, clock=clock).handle(order_id, "wrong size")
        assert order_repo.get_by_id(order_id).status.value == "delivered"

    def test_configurable_window(self):
        _, order_id, order_repo, product_repo, clock = _setup()
        _deliver(order_repo, product_repo, clock, order_id)

        clock.now = NOW + timedelta(days=10)
        handler = RequestReturnHandler(order_repo, clock=clock, return_window_days=7)
        with pytest.raises(ReturnWindowExpiredError):
            handler.handle(order_id, "wrong size")


class TestShowOrder:

    def test_by_id_and_number(self):
        _, order_id, order_repo, _, _ = _setup()
        handler = ShowOrderHandler(order_repo)
        by_id = handler.handle(order_id)
        by_number = handler.handle_by_number(by_id.order_number.lower())
        assert by_id == by_number

    def test_missing_number(self):
        _, _, order_repo, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(order_repo).handle_by_number("TA20000101-001")

    def test_list_all(self):
        _, _, order_repo, _, _ = _setup()
        assert len(ShowOrderHandler(order_repo).list_all()) == 1
