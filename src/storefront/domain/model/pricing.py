"""Pricing rules shared by the cart summary and order creation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from storefront.domain.model.value_objects import (
    DEFAULT_CURRENCY,
    Money,
    ShippingMethod,
)

DEFAULT_TAX_RATE = Decimal("0.075")


def _default_shipping_fees() -> dict[ShippingMethod, Money]:
    return {
        ShippingMethod.STANDARD: Money.of("2500"),
        ShippingMethod.EXPRESS: Money.of("5000"),
        ShippingMethod.OVERNIGHT: Money.of("7500"),
        ShippingMethod.PICKUP: Money.zero(),
    }


@dataclass(frozen=True)
class PricingPolicy:
    """Tax rate and shipping fees.

    Shipping is free once the subtotal is strictly above
    ``free_shipping_threshold``; pickup is always free.
    """

    tax_rate: Decimal = DEFAULT_TAX_RATE
    free_shipping_threshold: Money = Money.of("50000")
    shipping_fees: dict[ShippingMethod, Money] = field(default_factory=_default_shipping_fees)
    currency: str = DEFAULT_CURRENCY

    def tax_for(self, subtotal: Money) -> Money:
        return subtotal.scale(self.tax_rate)

    def shipping_for(
        self,
        subtotal: Money,
        method: ShippingMethod = ShippingMethod.STANDARD,
    ) -> Money:
        if method == ShippingMethod.PICKUP or subtotal > self.free_shipping_threshold:
            return Money.zero(self.currency)
        return self.shipping_fees.get(method, self.shipping_fees[ShippingMethod.STANDARD])
