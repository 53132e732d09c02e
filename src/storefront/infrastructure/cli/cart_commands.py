"""CLI commands for the shopping cart."""

from __future__ import annotations

import click

from storefront.application.dto import CartDTO
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import cart_handler


def _display_cart(dto: CartDTO) -> None:
    if not dto.lines:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'ID':<6} {'Product':<24} {'Qty':>5} {'Price':>16} {'Total':>16}")
    click.echo(f"  {'-'*71}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_id:<6} {line.product_name:<24} {line.quantity:>5} "
            f"{line.unit_price:>16} {line.line_total:>16}"
        )
    click.echo(f"  {'-'*71}")
    click.echo(f"  {'Items':<30} {dto.item_count:>40}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>40}")
    click.echo(f"  {'Tax':<30} {dto.tax:>40}")
    click.echo(f"  {'Shipping':<30} {dto.shipping:>40}")
    click.echo(f"  {'Total':<30} {dto.total:>40}")


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
def cart_add(product_id: str, quantity: int) -> None:
    """Add a product to the cart."""
    try:
        dto = cart_handler().add(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("remove")
@click.option("--id", "product_id", required=True, help="Product ID.")
def cart_remove(product_id: str) -> None:
    """Remove a product from the cart."""
    try:
        dto = cart_handler().remove(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("set")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New quantity (0 removes the line).")
def cart_set(product_id: str, quantity: int) -> None:
    """Change the quantity of a cart line."""
    try:
        dto = cart_handler().set_quantity(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("show")
def cart_show() -> None:
    """Show the cart and its totals."""
    _display_cart(cart_handler().show())


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    cart_handler().clear()
    click.echo("Cart cleared.")


@click.command("validate")
def cart_validate() -> None:
    """Check the cart against current stock and prices."""
    handler = cart_handler()
    validation = handler.validate()

    if not validation.issues:
        click.echo("Cart is ready for checkout.")
        return

    for issue in validation.issues:
        marker = "!" if issue.type.is_blocking else "~"
        click.echo(f"{marker} {issue.message}")
    _display_cart(handler.show())
