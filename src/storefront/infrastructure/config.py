"""Runtime settings, read from ``STOREFRONT_*`` environment variables or a ``.env`` file."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.domain.model.pricing import PricingPolicy
from storefront.domain.model.value_objects import Money, ShippingMethod

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    data_dir: Path = _DEFAULT_DATA_DIR

    # Pricing
    currency: str = "NGN"
    tax_rate: Decimal = Decimal("0.075")
    free_shipping_threshold: Decimal = Decimal("50000")
    standard_shipping_fee: Decimal = Decimal("2500")
    express_shipping_fee: Decimal = Decimal("5000")
    overnight_shipping_fee: Decimal = Decimal("7500")

    # Orders
    return_window_days: int = 30
    order_number_prefix: str = "TA"

    # Logging
    log_level: str = "WARNING"

    def pricing_policy(self) -> PricingPolicy:
        return PricingPolicy(
            tax_rate=self.tax_rate,
            free_shipping_threshold=Money.of(self.free_shipping_threshold, self.currency),
            shipping_fees={
                ShippingMethod.STANDARD: Money.of(self.standard_shipping_fee, self.currency),
                ShippingMethod.EXPRESS: Money.of(self.express_shipping_fee, self.currency),
                ShippingMethod.OVERNIGHT: Money.of(self.overnight_shipping_fee, self.currency),
                ShippingMethod.PICKUP: Money.zero(self.currency),
            },
            currency=self.currency,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
