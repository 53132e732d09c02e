"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items, its status
history and its refund records.  All lifecycle invariants are enforced
here; stock side effects of a transition are coordinated by the
application handlers through ``OrderStockService``.

Status graph::

    pending --confirm--> confirmed --process--> processing --ship--> shipped
    shipped --deliver--> delivered --return--> refunded
    pending|confirmed --cancel--> cancelled

A refund that covers the whole paid amount also moves the order to
``refunded``; a partial refund only changes the payment status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from storefront.domain.exceptions import (
    InvalidTransitionError,
    RefundExceedsTotalError,
    ReturnWindowExpiredError,
    ValidationError,
)
from storefront.domain.model.value_objects import (
    GuestCustomer,
    Money,
    Owner,
    Quantity,
    ShippingAddress,
    ShippingMethod,
)


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


_ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

_REFUNDABLE_PAYMENT = (PaymentStatus.PAID, PaymentStatus.PARTIALLY_REFUNDED)

# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
RETURN_WINDOW_DAYS = 30
MAX_LINE_ITEMS = 50
DEFAULT_ORDER_NUMBER_PREFIX = "TA"


def allowed_transitions(status: OrderStatus) -> frozenset[OrderStatus]:
    return _ALLOWED_TRANSITIONS[status]


def format_order_number(
    day: date, sequence: int, prefix: str = DEFAULT_ORDER_NUMBER_PREFIX
) -> str:
    """``TA20261019-007`` for the 7th order of 19 October 2026."""
    if sequence < 1:
        raise ValidationError("Order sequence must start at 1")
    return f"{prefix}{day:%Y%m%d}-{sequence:03d}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the product snapshot at order-creation time.

    ``unit_price`` is locked when the order is built and never changes,
    whatever happens to the catalog afterwards.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    sku: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    status: OrderStatus
    timestamp: datetime
    actor: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class RefundRecord:
    amount: Money
    reason: str
    processed_at: datetime
    processed_by: str | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules and computes the totals once.  The ``__init__`` is
    intentionally simple so the repository can reconstitute persisted
    orders without recomputing anything.
    """

    id: int | None
    order_number: str
    owner: Owner
    items: list[OrderLineItem]
    shipping_address: ShippingAddress
    subtotal: Money
    total_amount: Money
    shipping_method: ShippingMethod = ShippingMethod.STANDARD
    shipping_cost: Money = Money.zero()
    tax: Money = Money.zero()
    discount_amount: Money = Money.zero()
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status_history: list[StatusChange] = field(default_factory=list)
    refunds: list[RefundRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    delivered_at: datetime | None = None
    tracking_number: str | None = None
    customer_note: str | None = None
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        owner: Owner,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        shipping_method: ShippingMethod = ShippingMethod.STANDARD,
        shipping_cost: Money | None = None,
        tax: Money | None = None,
        discount_amount: Money | None = None,
        customer_note: str | None = None,
        actor: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not order_number or not order_number.strip():
            raise ValidationError("Order number is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        product_ids = [item.product_id for item in items]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear only once per order")

        currency = items[0].unit_price.currency
        subtotal = Money.zero(currency)
        for item in items:
            subtotal = subtotal + item.line_total

        if shipping_cost is None:
            shipping_cost = Money.zero(currency)
        if tax is None:
            tax = Money.zero(currency)
        if discount_amount is None:
            discount_amount = Money.zero(currency)
        total = (subtotal + shipping_cost + tax).clamped_sub(discount_amount)

        created_at = now or utcnow()
        return Order(
            id=None,
            order_number=order_number,
            owner=owner,
            items=list(items),
            shipping_address=shipping_address,
            subtotal=subtotal,
            total_amount=total,
            shipping_method=shipping_method,
            shipping_cost=shipping_cost,
            tax=tax,
            discount_amount=discount_amount,
            status_history=[
                StatusChange(OrderStatus.PENDING, created_at, actor, "Order placed")
            ],
            created_at=created_at,
            customer_note=customer_note,
        )

    # --- Predicates -----------------------------------------------------------

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in (OrderStatus.PENDING, OrderStatus.CONFIRMED)

    def can_be_returned(
        self, now: datetime | None = None, window_days: int = RETURN_WINDOW_DAYS
    ) -> bool:
        if self.status != OrderStatus.DELIVERED:
            return False
        delivered = self.delivered_at or self.created_at
        return (now or utcnow()) - delivered <= timedelta(days=window_days)

    @property
    def holds_reservation(self) -> bool:
        """Stock for this order is reserved but not yet committed."""
        return self.status == OrderStatus.PENDING

    @property
    def is_guest_order(self) -> bool:
        return isinstance(self.owner, GuestCustomer)

    @property
    def customer_email(self) -> str:
        if isinstance(self.owner, GuestCustomer):
            return self.owner.email
        return self.shipping_address.email

    # --- Refund bookkeeping ---------------------------------------------------

    @property
    def refunded_amount(self) -> Money:
        result = Money.zero(self.total_amount.currency)
        for record in self.refunds:
            result = result + record.amount
        return result

    @property
    def refundable_amount(self) -> Money:
        if self.payment_status not in _REFUNDABLE_PAYMENT:
            return Money.zero(self.total_amount.currency)
        return self.total_amount.clamped_sub(self.refunded_amount)

    # --- State transitions ----------------------------------------------------

    def confirm(self, actor: str | None = None, note: str | None = None,
                now: datetime | None = None) -> None:
        """Transition PENDING -> CONFIRMED.

        Committing the reserved stock is done by the caller once the new
        status has been persisted.
        """
        self._transition(OrderStatus.CONFIRMED, actor, note, now)

    def start_processing(self, actor: str | None = None, note: str | None = None,
                         now: datetime | None = None) -> None:
        self._transition(OrderStatus.PROCESSING, actor, note, now)

    def ship(self, actor: str | None = None, note: str | None = None,
             now: datetime | None = None, tracking_number: str | None = None) -> None:
        self._transition(OrderStatus.SHIPPED, actor, note, now)
        if tracking_number:
            self.tracking_number = tracking_number

    def deliver(self, actor: str | None = None, note: str | None = None,
                now: datetime | None = None) -> None:
        now = now or utcnow()
        self._transition(OrderStatus.DELIVERED, actor, note, now)
        self.delivered_at = now

    def cancel(self, reason: str | None = None, actor: str | None = None,
               now: datetime | None = None) -> None:
        """Transition PENDING|CONFIRMED -> CANCELLED."""
        if not self.can_be_cancelled:
            raise InvalidTransitionError(
                f"Order {self.order_number} cannot be cancelled in "
                f"{self.status.value} status"
            )
        self._transition(OrderStatus.CANCELLED, actor, reason, now)

    def mark_returned(
        self,
        reason: str,
        actor: str | None = None,
        now: datetime | None = None,
        window_days: int = RETURN_WINDOW_DAYS,
    ) -> RefundRecord | None:
        """Accept a return of a delivered order and refund what is outstanding.

        Returns the refund record, or None when nothing had been paid.
        """
        now = now or utcnow()
        if self.status != OrderStatus.DELIVERED:
            raise InvalidTransitionError(
                f"Only delivered orders can be returned; order "
                f"{self.order_number} is {self.status.value}"
            )
        if not self.can_be_returned(now, window_days):
            raise ReturnWindowExpiredError(
                f"Return window of {window_days} days for order "
                f"{self.order_number} has expired"
            )
        outstanding = self.refundable_amount
        if outstanding.is_zero:
            self._transition(OrderStatus.REFUNDED, actor, f"Returned: {reason}", now)
            return None
        return self.apply_refund(outstanding, reason, actor, now)

    def advance_to(
        self,
        target: OrderStatus,
        actor: str | None = None,
        note: str | None = None,
        now: datetime | None = None,
        tracking_number: str | None = None,
        window_days: int = RETURN_WINDOW_DAYS,
    ) -> None:
        """Dispatch a requested target status to the matching transition."""
        if target == OrderStatus.CONFIRMED:
            self.confirm(actor, note, now)
        elif target == OrderStatus.PROCESSING:
            self.start_processing(actor, note, now)
        elif target == OrderStatus.SHIPPED:
            self.ship(actor, note, now, tracking_number)
        elif target == OrderStatus.DELIVERED:
            self.deliver(actor, note, now)
        elif target == OrderStatus.CANCELLED:
            self.cancel(note, actor, now)
        elif target == OrderStatus.REFUNDED:
            self.mark_returned(note or "Returned", actor, now, window_days)
        else:
            raise InvalidTransitionError(
                f"Cannot move order {self.order_number} to {target.value}"
            )

    # --- Payment and refunds --------------------------------------------------

    def record_payment(self, succeeded: bool) -> None:
        """Record the outcome of a payment attempt."""
        if self.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            raise ValidationError(
                f"Cannot record payment on a {self.status.value} order"
            )
        if self.payment_status not in (PaymentStatus.PENDING, PaymentStatus.FAILED):
            raise ValidationError(
                f"Payment already {self.payment_status.value} for order "
                f"{self.order_number}"
            )
        self.payment_status = PaymentStatus.PAID if succeeded else PaymentStatus.FAILED

    def apply_refund(
        self,
        amount: Money,
        reason: str,
        actor: str | None = None,
        now: datetime | None = None,
    ) -> RefundRecord:
        """Refund part or all of the captured payment.

        Refunds accumulate; once they reach ``total_amount`` the payment
        and the order are both marked refunded.
        """
        if amount.is_zero:
            raise ValidationError("Refund amount must be positive")
        if not reason or not reason.strip():
            raise ValidationError("Refund reason is required")

        refundable = self.refundable_amount
        if amount > refundable:
            raise RefundExceedsTotalError(
                f"Refund of {amount} exceeds refundable amount {refundable} "
                f"for order {self.order_number}"
            )

        now = now or utcnow()
        record = RefundRecord(amount, reason.strip(), now, actor)
        self.refunds.append(record)

        if self.refunded_amount >= self.total_amount:
            self.payment_status = PaymentStatus.REFUNDED
            if self.status not in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
                self.status = OrderStatus.REFUNDED
                self.status_history.append(
                    StatusChange(OrderStatus.REFUNDED, now, actor, f"Refunded: {record.reason}")
                )
        else:
            self.payment_status = PaymentStatus.PARTIALLY_REFUNDED
        return record

    # --- Internal helpers -----------------------------------------------------

    def _transition(
        self,
        target: OrderStatus,
        actor: str | None,
        note: str | None,
        now: datetime | None,
    ) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move order {self.order_number} from "
                f"{self.status.value} to {target.value}"
            )
        self.status = target
        self.status_history.append(StatusChange(target, now or utcnow(), actor, note))
