"""CLI commands for the Order aggregate."""

from __future__ import annotations

import functools

import click

from storefront.application.dto import OrderDTO
from storefront.application.record_payment import RecordPaymentHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.order import OrderStatus
from storefront.domain.model.value_objects import (
    GuestCustomer,
    Owner,
    RegisteredCustomer,
    ShippingAddress,
    ShippingMethod,
)
from storefront.infrastructure.bootstrap import (
    cancel_order_handler,
    checkout_handler,
    order_repository,
    process_refund_handler,
    request_return_handler,
    update_order_status_handler,
)


def _address_options(command):
    """Attach the shipping address options to a command."""
    options = [
        click.option("--first-name", required=True),
        click.option("--last-name", required=True),
        click.option("--email", required=True, help="Contact email for delivery."),
        click.option("--phone", required=True),
        click.option("--street", required=True),
        click.option("--city", required=True),
        click.option("--state", required=True),
        click.option("--zip", "zip_code", required=True),
        click.option("--country", default="Nigeria", show_default=True),
    ]
    return functools.reduce(lambda cmd, option: option(cmd), reversed(options), command)


def _owner(customer_id: str | None, guest_email: str | None) -> Owner:
    if bool(customer_id) == bool(guest_email):
        raise click.UsageError("Give exactly one of --customer-id or --guest-email.")
    if customer_id:
        return RegisteredCustomer(customer_id)
    return GuestCustomer(guest_email)


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (#{dto.id}, status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Owner:    {dto.owner}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Shipping: {dto.shipping_method}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    click.echo()

    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>16} {'Total':>16}")
    click.echo(f"  {'-'*64}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<24} {item.quantity:>5} {item.unit_price:>16} {item.line_total:>16}"
        )
    click.echo(f"  {'-'*64}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>33}")
    click.echo(f"  {'Shipping':<30} {dto.shipping_cost:>33}")
    click.echo(f"  {'Tax':<30} {dto.tax:>33}")
    click.echo(f"  {'Discount':<30} {dto.discount:>33}")
    click.echo(f"  {'Order Total':<30} {dto.total:>33}")
    if dto.refunds:
        click.echo(f"  {'Refunded':<30} {dto.refunded:>33}")

    click.echo()
    click.echo("History:")
    for change in dto.history:
        who = f" by {change.actor}" if change.actor else ""
        note = f" ({change.note})" if change.note else ""
        click.echo(f"  {change.timestamp}  {change.status}{who}{note}")


@click.command("checkout")
@click.option("--customer-id", default=None, help="Registered customer ID.")
@click.option("--guest-email", default=None, help="Email for a guest order.")
@_address_options
@click.option(
    "--method",
    default=ShippingMethod.STANDARD.value,
    show_default=True,
    type=click.Choice([m.value for m in ShippingMethod]),
    help="Shipping method.",
)
@click.option("--note", default=None, help="Note from the customer.")
def order_checkout(
    customer_id: str | None,
    guest_email: str | None,
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    street: str,
    city: str,
    state: str,
    zip_code: str,
    country: str,
    method: str,
    note: str | None,
) -> None:
    """Place an order for everything in the cart."""
    try:
        owner = _owner(customer_id, guest_email)
        address = ShippingAddress(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            street=street,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country,
        )
        result = checkout_handler().handle(
            owner=owner,
            shipping_address=address,
            shipping_method=ShippingMethod(method),
            customer_note=note,
            actor=str(owner),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for issue in result.issues:
        marker = "!" if issue.type.is_blocking else "~"
        click.echo(f"{marker} {issue.message}")

    if not result.success:
        raise click.ClickException("Checkout stopped; the cart has been updated.")

    click.echo(f"Order {result.order.order_number} placed  (total {result.order.total})")


@click.command("show")
@click.option("--id", "order_id", default=None, type=int, help="Order ID to display.")
@click.option("--number", "order_number", default=None, help="Order number to display.")
def order_show(order_id: int | None, order_number: str | None) -> None:
    """Show details of an existing order."""
    if (order_id is None) == (order_number is None):
        raise click.UsageError("Give exactly one of --id or --number.")

    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id) if order_id is not None else handler.handle_by_number(order_number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
def order_list() -> None:
    """List all orders."""
    orders = ShowOrderHandler(order_repo=order_repository()).list_all()

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Number':<16} {'Owner':<32} {'Status':<12} {'Total':>16}")
    click.echo("-" * 86)
    for dto in orders:
        click.echo(
            f"{dto.id:<6} {dto.order_number:<16} {dto.owner:<32} {dto.status:<12} {dto.total:>16}"
        )


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Target status.",
)
@click.option("--tracking", default=None, help="Tracking number (when shipping).")
@click.option("--note", default=None, help="Note for the status history.")
@click.option("--actor", default="staff", show_default=True, help="Who made the change.")
def order_status(
    order_id: int,
    new_status: str,
    tracking: str | None,
    note: str | None,
    actor: str,
) -> None:
    """Move an order to a new status."""
    try:
        dto = update_order_status_handler().handle(
            order_id, new_status, note=note, actor=actor, tracking_number=tracking
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default=None, help="Why the order is cancelled.")
@click.option("--actor", default="staff", show_default=True, help="Who cancelled it.")
def order_cancel(order_id: int, reason: str | None, actor: str) -> None:
    """Cancel an order (releases or restocks its items)."""
    try:
        dto = cancel_order_handler().handle(order_id, reason=reason, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled.")


@click.command("return")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to return.")
@click.option("--reason", required=True, help="Why the items are returned.")
@click.option("--actor", default="staff", show_default=True, help="Who recorded the return.")
def order_return(order_id: int, reason: str, actor: str) -> None:
    """Return a delivered order and refund what was paid."""
    try:
        dto = request_return_handler().handle(order_id, reason, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} returned  (refunded {dto.refunded})")


@click.command("refund")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to refund.")
@click.option("--amount", required=True, help="Amount to refund (e.g. 15000).")
@click.option("--reason", required=True, help="Reason for the refund.")
@click.option("--actor", default="staff", show_default=True, help="Who processed the refund.")
def order_refund(order_id: int, amount: str, reason: str, actor: str) -> None:
    """Refund part or all of an order's payment."""
    try:
        dto = process_refund_handler().handle(order_id, amount, reason, actor=actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Refunded {amount} on order {dto.order_number}  "
        f"(refunded {dto.refunded} of {dto.total}, payment={dto.payment_status})"
    )


@click.command("pay")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--failed", is_flag=True, default=False, help="Record a failed payment instead.")
def order_pay(order_id: int, failed: bool) -> None:
    """Record the payment gateway's result for an order."""
    handler = RecordPaymentHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id, succeeded=not failed)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} payment is now {dto.payment_status}.")
