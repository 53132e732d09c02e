"""CLI commands for stock levels."""

from __future__ import annotations

import click

from storefront.application.set_stock import SetStockHandler
from storefront.application.show_inventory import ShowInventoryHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import product_repository


@click.command("set")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units on hand.")
@click.option("--threshold", default=None, type=int, help="New low stock threshold.")
def stock_set(product_id: str, quantity: int, threshold: int | None) -> None:
    """Record a stock count for a product."""
    handler = SetStockHandler(product_repo=product_repository())

    try:
        product = handler.handle(product_id, quantity, low_stock_threshold=threshold)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Stock for '{product.name}' set to {quantity} ({product.stock_status.value})"
    )


@click.command("show")
def stock_show() -> None:
    """Show current stock levels."""
    handler = ShowInventoryHandler(product_repo=product_repository())
    lines = handler.handle()

    if not lines:
        click.echo("No products found.")
        return

    click.echo(
        f"{'Product':<24} {'On hand':>8} {'Reserved':>10} {'Available':>10} {'Status':>14}"
    )
    click.echo("-" * 70)
    for line in lines:
        status = line.status if line.active else "inactive"
        click.echo(
            f"{line.product_name:<24} {line.quantity:>8} {line.reserved:>10} "
            f"{line.available:>10} {status:>14}"
        )
