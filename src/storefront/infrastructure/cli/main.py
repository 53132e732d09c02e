import logging

import click

from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_set,
    cart_show,
    cart_validate,
)
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_checkout,
    order_list,
    order_pay,
    order_refund,
    order_return,
    order_show,
    order_status,
)
from storefront.infrastructure.cli.product_commands import (
    product_add,
    product_deactivate,
    product_discontinue,
    product_list,
    product_update,
)
from storefront.infrastructure.cli.stock_commands import stock_set, stock_show
from storefront.infrastructure.config import get_settings


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override STOREFRONT_LOG_LEVEL.",
)
def cli(log_level: str | None) -> None:
    """Storefront — jewelry catalog, cart and orders"""
    logging.basicConfig(
        level=(log_level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def stock() -> None:
    """Manage stock levels."""


@cli.group()
def cart() -> None:
    """Manage the shopping cart."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_checkout)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_refund)
order.add_command(order_return)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_deactivate)
product.add_command(product_discontinue)
product.add_command(product_list)
product.add_command(product_update)
stock.add_command(stock_set)
stock.add_command(stock_show)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_set)
cart.add_command(cart_show)
cart.add_command(cart_validate)
