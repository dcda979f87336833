"""Tests for the Money value object."""

from decimal import Decimal

import pytest
from ordering.shared.money import Money
from protean.exceptions import ValidationError


class TestMoneyCreation:
    def test_zero_and_positive_amounts_are_valid(self):
        assert Money.of(0, "MXN").value == Decimal("0")
        assert Money.of("19.99", "MXN").value == Decimal("19.99")

    def test_negative_amount_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Money.of("-0.01", "MXN")
        assert "Negative amounts are not allowed" in str(exc.value)

    def test_negative_amount_rejected_on_direct_construction(self):
        with pytest.raises(ValidationError):
            Money(amount="-5", currency="MXN")

    def test_non_numeric_amount_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Money.of("twenty", "MXN")
        assert "Invalid monetary amount" in str(exc.value)

    def test_unsupported_currency_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Money.of(10, "XYZ")
        assert "Unsupported currency" in str(exc.value)

    def test_amounts_are_canonical(self):
        assert Money.of("30.00", "MXN") == Money.of(30, "MXN")
        assert Money.of("30.00", "MXN").amount == "30"

    def test_default_currency_is_configured_currency(self):
        assert Money.zero().currency == "MXN"

    @pytest.mark.parametrize("amount", ["1e70", "1e-70", "123456789012345678901234567890.123456789012345678901234567890"])
    def test_very_large_and_very_precise_amounts_are_valid(self, amount):
        money = Money.of(amount, "MXN")
        assert money.value == Decimal(amount)


class TestMoneyArithmetic:
    def test_add(self):
        assert Money.of("0.10", "USD").add(Money.of("0.20", "USD")) == Money.of("0.30", "USD")

    def test_add_rejects_currency_mismatch(self):
        with pytest.raises(ValidationError) as exc:
            Money.of(1, "USD").add(Money.of(1, "MXN"))
        assert "Currency mismatch" in str(exc.value)

    def test_subtract(self):
        assert Money.of(100, "USD").subtract(Money.of(30, "USD")) == Money.of(70, "USD")

    def test_subtract_to_zero_is_allowed(self):
        assert Money.of(5, "USD").subtract(Money.of(5, "USD")).is_positive() is False

    def test_subtract_rejects_negative_result(self):
        with pytest.raises(ValidationError) as exc:
            Money.of(10, "USD").subtract(Money.of("10.01", "USD"))
        assert "negative amount" in str(exc.value)

    def test_subtract_rejects_currency_mismatch(self):
        with pytest.raises(ValidationError):
            Money.of(10, "USD").subtract(Money.of(1, "EUR"))

    def test_multiply_by_integer(self):
        assert Money.of(20, "USD").multiply(7) == Money.of(140, "USD")

    def test_multiply_rejects_fractional_factor(self):
        with pytest.raises(ValidationError):
            Money.of(20, "USD").multiply(1.5)

    def test_percentage_of(self):
        assert Money.of(100, "USD").percentage_of(30) == Money.of(30, "USD")
        assert Money.of(40, "USD").percentage_of("12.5") == Money.of(5, "USD")

    def test_operations_do_not_mutate(self):
        price = Money.of(20, "USD")
        price.add(Money.of(5, "USD"))
        price.multiply(3)
        assert price == Money.of(20, "USD")


class TestMoneyComparison:
    def test_is_positive(self):
        assert Money.of("0.01", "USD").is_positive()
        assert not Money.zero("USD").is_positive()

    def test_is_greater_than(self):
        assert Money.of("30.01", "USD").is_greater_than(Money.of(30, "USD"))
        assert not Money.of(30, "USD").is_greater_than(Money.of("30.00", "USD"))

    def test_is_greater_than_rejects_currency_mismatch(self):
        with pytest.raises(ValidationError):
            Money.of(1, "USD").is_greater_than(Money.of(1, "MXN"))

    def test_str(self):
        assert str(Money.of("50.00", "MXN")) == "50 MXN"
