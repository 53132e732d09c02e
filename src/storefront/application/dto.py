"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.cart import Cart
from storefront.domain.model.order import Order
from storefront.domain.model.pricing import PricingPolicy

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product ID + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "NGN 1,200.00"
    line_total: str


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    timestamp: str
    actor: str | None
    note: str | None


@dataclass(frozen=True)
class RefundDTO:
    amount: str
    reason: str
    processed_at: str
    processed_by: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    owner: str
    status: str
    payment_status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    shipping_cost: str
    tax: str
    discount: str
    total: str
    refunded: str
    shipping_method: str
    tracking_number: str | None
    created_at: str
    history: list[StatusChangeDTO]
    refunds: list[RefundDTO]


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    lines: list[CartLineDTO]
    item_count: int
    subtotal: str
    tax: str
    shipping: str
    total: str


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        owner=str(order.owner),
        status=order.status.value,
        payment_status=order.payment_status.value,
        items=[
            OrderLineItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        shipping_cost=str(order.shipping_cost),
        tax=str(order.tax),
        discount=str(order.discount_amount),
        total=str(order.total_amount),
        refunded=str(order.refunded_amount),
        shipping_method=order.shipping_method.value,
        tracking_number=order.tracking_number,
        created_at=order.created_at.strftime(_TIMESTAMP_FORMAT),
        history=[
            StatusChangeDTO(
                status=change.status.value,
                timestamp=change.timestamp.strftime(_TIMESTAMP_FORMAT),
                actor=change.actor,
                note=change.note,
            )
            for change in order.status_history
        ],
        refunds=[
            RefundDTO(
                amount=str(record.amount),
                reason=record.reason,
                processed_at=record.processed_at.strftime(_TIMESTAMP_FORMAT),
                processed_by=record.processed_by,
            )
            for record in order.refunds
        ],
    )


def cart_to_dto(cart: Cart, policy: PricingPolicy) -> CartDTO:
    summary = cart.summary(policy)
    return CartDTO(
        lines=[
            CartLineDTO(
                product_id=line.product_id,
                product_name=line.snapshot.name,
                quantity=line.quantity,
                unit_price=str(line.snapshot.price),
                line_total=str(line.line_total),
            )
            for line in cart.lines
        ],
        item_count=summary.item_count,
        subtotal=str(summary.subtotal),
        tax=str(summary.tax),
        shipping=str(summary.shipping),
        total=str(summary.total),
    )
