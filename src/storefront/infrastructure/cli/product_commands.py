"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from storefront.application.add_product import AddProductHandler
from storefront.application.update_product import UpdateProductHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.product import CATEGORIES
from storefront.infrastructure.bootstrap import product_repository


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 150000).")
@click.option("--quantity", default=0, show_default=True, type=int, help="Opening stock.")
@click.option("--threshold", default=5, show_default=True, type=int, help="Low stock threshold.")
@click.option("--category", default="rings", show_default=True, type=click.Choice(CATEGORIES))
@click.option("--sku", default=None, help="SKU (generated if omitted).")
@click.option("--original-price", default=None, help="Price before discount.")
def product_add(
    name: str,
    price: str,
    quantity: int,
    threshold: int,
    category: str,
    sku: str | None,
    original_price: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(
            name=name,
            price=price,
            quantity=quantity,
            low_stock_threshold=threshold,
            category=category,
            sku=sku,
            original_price=original_price,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    repo = product_repository()
    products = repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'SKU':<12} {'Price':>16} {'Status':>14}")
    click.echo("-" * 76)
    for p in products:
        status = p.stock_status.value if p.is_active else "inactive"
        click.echo(
            f"{p.id:<6} {p.name:<24} {p.sku or '':<12} {str(p.price):>16} {status:>14}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New price (e.g. 175000).")
def product_update(product_id: str, price: str) -> None:
    """Update a product's price."""
    handler = UpdateProductHandler(product_repo=product_repository())

    try:
        product = handler.update_price(product_id=product_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} price updated to {product.price}")


@click.command("deactivate")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_deactivate(product_id: str) -> None:
    """Take a product off sale (kept for existing orders)."""
    handler = UpdateProductHandler(product_repo=product_repository())

    try:
        handler.deactivate(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} deactivated.")


@click.command("discontinue")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_discontinue(product_id: str) -> None:
    """Stop selling a product for good (stock numbers are kept)."""
    handler = UpdateProductHandler(product_repo=product_repository())

    try:
        handler.discontinue(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} discontinued.")
