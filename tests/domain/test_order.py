"""Unit tests for the Order aggregate and its business rules."""

from datetime import date, datetime, timedelta, timezone

import pytest

from storefront.domain.exceptions import (
    InvalidTransitionError,
    RefundExceedsTotalError,
    ReturnWindowExpiredError,
    ValidationError,
)
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentStatus,
    allowed_transitions,
    format_order_number,
)
from storefront.domain.model.value_objects import (
    GuestCustomer,
    Money,
    Quantity,
    RegisteredCustomer,
    ShippingAddress,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
ADDRESS = ShippingAddress(
    "Ada", "Obi", "ada@example.com", "08000000000",
    "1 Marina", "Lagos", "Lagos", "100001",
)


def _make_item(product_id: str = "1", qty: int = 1, price: str = "1000") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id=product_id,
        product_name=f"Piece {product_id}",
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _make_order(items=None, **kwargs) -> Order:
    return Order.create(
        order_number="TA20261019-001",
        owner=kwargs.pop("owner", RegisteredCustomer("42")),
        items=items or [_make_item(qty=5)],
        shipping_address=ADDRESS,
        now=kwargs.pop("now", NOW),
        **kwargs,
    )


def _delivered_order(**kwargs) -> Order:
    order = _make_order(**kwargs)
    order.confirm(now=NOW)
    order.start_processing(now=NOW)
    order.ship(now=NOW, tracking_number="TRK1")
    order.deliver(now=NOW)
    return order


class TestOrderCreation:

    def test_happy_path(self):
        order = _make_order(items=[_make_item(qty=2, price="1000")])
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.subtotal == Money.of("2000")
        assert order.total_amount == Money.of("2000")
        assert order.id is None  # assigned by repository

    def test_total_includes_shipping_and_tax_minus_discount(self):
        order = _make_order(
            items=[_make_item("1", 3, "1000"), _make_item("2", 1, "500")],
            shipping_cost=Money.of("2500"),
            tax=Money.of("262.50"),
            discount_amount=Money.of("1000"),
        )
        assert order.subtotal == Money.of("3500")
        assert order.total_amount == Money.of("5262.50")

    def test_total_never_negative(self):
        order = _make_order(discount_amount=Money.of("999999"))
        assert order.total_amount == Money.zero()

    def test_initial_history_entry(self):
        order = _make_order(actor="ada")
        assert len(order.status_history) == 1
        first = order.status_history[0]
        assert (first.status, first.timestamp, first.actor) == (OrderStatus.PENDING, NOW, "ada")

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("TA20261019-001", RegisteredCustomer("42"), [], ADDRESS)

    def test_duplicate_products_rejected(self):
        with pytest.raises(ValidationError, match="only once"):
            _make_order(items=[_make_item("1"), _make_item("1")])

    def test_51_items_rejected(self):
        items = [_make_item(str(i)) for i in range(51)]
        with pytest.raises(ValidationError, match="Maximum 50 items"):
            _make_order(items=items)

    def test_guest_order(self):
        order = _make_order(owner=GuestCustomer("Guest@Example.com"))
        assert order.is_guest_order
        assert order.customer_email == "guest@example.com"


class TestOrderNumber:

    def test_format(self):
        assert format_order_number(date(2026, 10, 19), 7) == "TA20261019-007"

    def test_custom_prefix(self):
        assert format_order_number(date(2026, 1, 2), 123, "XX") == "XX20260102-123"

    def test_sequence_starts_at_one(self):
        with pytest.raises(ValidationError):
            format_order_number(date(2026, 10, 19), 0)


class TestOrderLineItem:

    def test_line_total_calculation(self):
        assert _make_item(qty=3, price="1500").line_total == Money.of("4500")


class TestStatusGraph:

    def test_full_happy_path_appends_history(self):
        order = _delivered_order()
        assert order.status == OrderStatus.DELIVERED
        assert [c.status for c in order.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ]
        assert order.tracking_number == "TRK1"
        assert order.delivered_at == NOW

    def test_pending_cannot_jump_to_delivered(self):
        order = _make_order()
        with pytest.raises(InvalidTransitionError):
            order.deliver()
        assert order.status == OrderStatus.PENDING
        assert len(order.status_history) == 1

    def test_no_path_reaches_delivered_without_shipping(self):
        for status in OrderStatus:
            if OrderStatus.DELIVERED in allowed_transitions(status):
                assert status == OrderStatus.SHIPPED

    def test_terminal_states(self):
        assert not allowed_transitions(OrderStatus.CANCELLED)
        assert not allowed_transitions(OrderStatus.REFUNDED)

    def test_advance_to_dispatches(self):
        order = _make_order()
        order.advance_to(OrderStatus.CONFIRMED, actor="staff", note="checked")
        assert order.status == OrderStatus.CONFIRMED
        assert order.status_history[-1].note == "checked"

    def test_advance_to_pending_rejected(self):
        order = _make_order()
        with pytest.raises(InvalidTransitionError):
            order.advance_to(OrderStatus.PENDING)


class TestCancellation:

    def test_cancel_pending(self):
        order = _make_order()
        assert order.can_be_cancelled
        order.cancel("changed my mind", actor="ada")
        assert order.status == OrderStatus.CANCELLED
        assert order.status_history[-1].note == "changed my mind"

    def test_cancel_confirmed(self):
        order = _make_order()
        order.confirm()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    def test_shipped_order_cannot_be_cancelled(self):
        order = _make_order()
        order.confirm()
        order.start_processing()
        order.ship()
        history_before = list(order.status_history)

        assert not order.can_be_cancelled
        with pytest.raises(InvalidTransitionError, match="cannot be cancelled"):
            order.cancel()
        assert order.status == OrderStatus.SHIPPED
        assert order.status_history == history_before


class TestReturns:

    def test_within_window(self):
        order = _delivered_order()
        assert order.can_be_returned(NOW + timedelta(days=30))
        assert not order.can_be_returned(NOW + timedelta(days=31))

    def test_only_delivered_orders(self):
        assert not _make_order().can_be_returned(NOW)
        with pytest.raises(InvalidTransitionError, match="Only delivered"):
            _make_order().mark_returned("too big", now=NOW)

    def test_expired_window(self):
        order = _delivered_order()
        with pytest.raises(ReturnWindowExpiredError):
            order.mark_returned("too big", now=NOW + timedelta(days=45))
        assert order.status == OrderStatus.DELIVERED

    def test_return_refunds_outstanding_amount(self):
        order = _delivered_order()
        order.record_payment(succeeded=True)
        record = order.mark_returned("wrong size", actor="staff", now=NOW + timedelta(days=3))
        assert record.amount == order.total_amount
        assert order.status == OrderStatus.REFUNDED
        assert order.payment_status == PaymentStatus.REFUNDED

    def test_return_of_unpaid_order(self):
        order = _delivered_order()
        assert order.mark_returned("wrong size", now=NOW) is None
        assert order.status == OrderStatus.REFUNDED
        assert order.refunds == []


class TestPayment:

    def test_record_success(self):
        order = _make_order()
        order.record_payment(succeeded=True)
        assert order.payment_status == PaymentStatus.PAID

    def test_failed_payment_can_be_retried(self):
        order = _make_order()
        order.record_payment(succeeded=False)
        assert order.payment_status == PaymentStatus.FAILED
        order.record_payment(succeeded=True)
        assert order.payment_status == PaymentStatus.PAID

    def test_cannot_pay_twice(self):
        order = _make_order()
        order.record_payment(succeeded=True)
        with pytest.raises(ValidationError, match="already paid"):
            order.record_payment(succeeded=True)


class TestRefunds:

    def _paid_order(self) -> Order:
        order = _make_order(items=[_make_item(qty=5, price="1000")])
        order.record_payment(succeeded=True)
        return order

    def test_partial_then_full_refund(self):
        order = self._paid_order()
        assert order.total_amount == Money.of("5000")

        order.apply_refund(Money.of("3000"), "scratched clasp", now=NOW)
        assert order.payment_status == PaymentStatus.PARTIALLY_REFUNDED
        assert order.status == OrderStatus.PENDING

        order.apply_refund(Money.of("2000"), "customer unhappy", now=NOW)
        assert order.refunded_amount == Money.of("5000")
        assert order.payment_status == PaymentStatus.REFUNDED
        assert order.status == OrderStatus.REFUNDED
        assert order.status_history[-1].status == OrderStatus.REFUNDED

        with pytest.raises(RefundExceedsTotalError):
            order.apply_refund(Money.of("1"), "one more")
        assert order.refunded_amount == Money.of("5000")

    def test_refund_more_than_total(self):
        order = self._paid_order()
        with pytest.raises(RefundExceedsTotalError):
            order.apply_refund(Money.of("5000.01"), "too much")
        assert order.refunds == []

    def test_zero_refund_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            self._paid_order().apply_refund(Money.zero(), "nothing")

    def test_reason_required(self):
        with pytest.raises(ValidationError, match="reason is required"):
            self._paid_order().apply_refund(Money.of("10"), "  ")

    def test_unpaid_order_has_nothing_to_refund(self):
        order = _make_order()
        assert order.refundable_amount == Money.zero()
        with pytest.raises(RefundExceedsTotalError):
            order.apply_refund(Money.of("10"), "goodwill")

    def test_full_refund_keeps_cancelled_status(self):
        order = self._paid_order()
        order.cancel("out of stock")
        order.apply_refund(order.total_amount, "cancelled order")
        assert order.status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.REFUNDED

    def test_totals_never_change_after_refunds(self):
        order = self._paid_order()
        order.apply_refund(Money.of("1000"), "partial")
        assert order.total_amount == Money.of("5000")
        assert order.refundable_amount == Money.of("4000")
