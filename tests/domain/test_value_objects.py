"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import InvalidQuantityError, ValidationError
from storefront.domain.model.pricing import PricingPolicy
from storefront.domain.model.value_objects import (
    GuestCustomer,
    Money,
    ProductSnapshot,
    Quantity,
    RegisteredCustomer,
    ShippingAddress,
    ShippingMethod,
)


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "NGN"

    def test_of_factory_from_string(self):
        m = Money.of("25.99")
        assert m.amount == Decimal("25.99")

    def test_of_factory_from_int(self):
        m = Money.of(10)
        assert m.amount == Decimal("10")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition(self):
        result = Money.of("10") + Money.of("5.50")
        assert result == Money.of("15.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_clamped_subtraction_floors_at_zero(self):
        assert Money.of("5").clamped_sub(Money.of("10")) == Money.zero()
        assert Money.of("10").clamped_sub(Money.of("4")) == Money.of("6")

    def test_multiplication_by_int(self):
        result = Money.of("7.50") * 3
        assert result == Money.of("22.50")

    def test_scale_rounds_half_up_to_cents(self):
        assert Money.of("10.10").scale(Decimal("0.075")) == Money.of("0.76")
        assert Money.of("1000").scale(Decimal("0.075")) == Money.of("75.00")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "NGN") + Money(Decimal("5"), "USD")

    def test_str_formatting(self):
        assert str(Money.of("1200")) == "NGN 1,200.00"
        assert str(Money.of("9.5")) == "NGN 9.50"

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") > Money.of("5")
        assert Money.of("10") >= Money.of("10")
        assert Money.of("10") <= Money.of("10")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(InvalidQuantityError, match="must be positive"):
            Quantity(0)

    def test_bool_rejected(self):
        with pytest.raises(InvalidQuantityError, match="must be an integer"):
            Quantity(True)


# ── Owner ────────────────────────────────────────────────────────────────────


class TestOwner:

    def test_guest_email_is_normalised(self):
        assert GuestCustomer("  Ada@Example.COM ").email == "ada@example.com"

    def test_guest_email_must_look_like_an_address(self):
        with pytest.raises(ValidationError, match="Invalid guest email"):
            GuestCustomer("not-an-email")

    def test_registered_customer_needs_an_id(self):
        with pytest.raises(ValidationError, match="Customer ID"):
            RegisteredCustomer("  ")

    def test_str_tags_the_variant(self):
        assert str(RegisteredCustomer("42")) == "customer:42"
        assert str(GuestCustomer("a@b.ng")) == "guest:a@b.ng"


class TestShippingAddress:

    def test_missing_field_rejected(self):
        with pytest.raises(ValidationError, match="city"):
            ShippingAddress("Ada", "Obi", "a@b.ng", "0800", "1 Marina", "", "Lagos", "100001")

    def test_country_defaults_to_nigeria(self):
        address = ShippingAddress("Ada", "Obi", "a@b.ng", "0800", "1 Marina", "Lagos", "Lagos", "100001")
        assert address.country == "Nigeria"
        assert address.full_name == "Ada Obi"


class TestProductSnapshot:

    def test_with_price_keeps_identity(self):
        snap = ProductSnapshot("1", "Gold Ring", Money.of("1000"), "RIN000001")
        updated = snap.with_price(Money.of("1200"))
        assert updated.price == Money.of("1200")
        assert (updated.product_id, updated.name, updated.sku) == ("1", "Gold Ring", "RIN000001")
        assert snap.price == Money.of("1000")


# ── Pricing ──────────────────────────────────────────────────────────────────


class TestPricingPolicy:

    def test_tax_is_seven_and_a_half_percent(self):
        assert PricingPolicy().tax_for(Money.of("20000")) == Money.of("1500.00")

    def test_standard_shipping_below_threshold(self):
        assert PricingPolicy().shipping_for(Money.of("50000")) == Money.of("2500")

    def test_free_shipping_strictly_above_threshold(self):
        assert PricingPolicy().shipping_for(Money.of("50000.01")).is_zero

    def test_method_fees(self):
        policy = PricingPolicy()
        assert policy.shipping_for(Money.of("100"), ShippingMethod.EXPRESS) == Money.of("5000")
        assert policy.shipping_for(Money.of("100"), ShippingMethod.OVERNIGHT) == Money.of("7500")
        assert policy.shipping_for(Money.of("100"), ShippingMethod.PICKUP).is_zero
