"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.checkout import CheckoutHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.manage_cart import ManageCartHandler
from storefront.application.process_refund import ProcessRefundHandler
from storefront.application.request_return import RequestReturnHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.infrastructure.config import get_settings
from storefront.infrastructure.persistence.json_cart_store import JsonCartStore
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(get_settings().data_dir / "products.json")


def order_repository() -> JsonOrderRepository:
    data_dir = get_settings().data_dir
    return JsonOrderRepository(
        data_dir / "orders.json", data_dir / "order_sequences.json"
    )


def cart_store() -> JsonCartStore:
    return JsonCartStore(get_settings().data_dir / "cart.json")


def create_order_handler() -> CreateOrderHandler:
    settings = get_settings()
    return CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        pricing=settings.pricing_policy(),
        order_number_prefix=settings.order_number_prefix,
    )


def checkout_handler() -> CheckoutHandler:
    return CheckoutHandler(
        cart_store=cart_store(),
        product_repo=product_repository(),
        create_order=create_order_handler(),
    )


def cart_handler() -> ManageCartHandler:
    return ManageCartHandler(
        cart_store=cart_store(),
        product_repo=product_repository(),
        pricing=get_settings().pricing_policy(),
    )


def update_order_status_handler() -> UpdateOrderStatusHandler:
    return UpdateOrderStatusHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        return_window_days=get_settings().return_window_days,
    )


def cancel_order_handler() -> CancelOrderHandler:
    return CancelOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )


def request_return_handler() -> RequestReturnHandler:
    return RequestReturnHandler(
        order_repo=order_repository(),
        return_window_days=get_settings().return_window_days,
    )


def process_refund_handler() -> ProcessRefundHandler:
    return ProcessRefundHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )
