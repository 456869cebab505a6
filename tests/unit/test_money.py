"""
Unit tests for Money and decimal handling.

Verifies:
- Exact arithmetic, no float
- Half-up display rounding
- Currency mismatch protection
- The "absence is zero" lift
"""

from decimal import Decimal

import pytest

from billing_kernel.db.types import round_money, validate_currency
from billing_kernel.domain.values import Currency, Money
from billing_kernel.exceptions import CurrencyMismatchError


class TestRoundMoney:
    def test_half_up(self):
        assert round_money(Decimal("0.005")) == Decimal("0.01")
        assert round_money(Decimal("2.345")) == Decimal("2.35")

    def test_negative_half_up_rounds_away_from_zero(self):
        assert round_money(Decimal("-2.345")) == Decimal("-2.35")

    def test_custom_places(self):
        assert round_money(Decimal("1.23456"), 4) == Decimal("1.2346")


class TestCurrency:
    def test_normalizes_case(self):
        assert Currency("usd").code == "USD"

    def test_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            Currency("XXX")

    def test_validate_currency_trims(self):
        assert validate_currency(" eur ") == "EUR"


class TestMoneyConstruction:
    def test_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of(1.5, "USD")

    def test_string_is_exact(self):
        assert Money.of("0.1", "USD").amount == Decimal("0.1")

    def test_int_accepted(self):
        assert Money.of(100, "USD").amount == Decimal("100")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            Money.of("ten dollars", "USD")

    def test_from_nullable_none_is_zero(self):
        assert Money.from_nullable(None, "USD") == Money.zero("USD")

    def test_from_nullable_keeps_value(self):
        assert Money.from_nullable(Decimal("12.50"), "USD").amount == Decimal("12.50")


class TestMoneyArithmetic:
    def test_no_float_drift(self):
        total = Money.sum([Money.of("0.1", "USD")] * 3, "USD")
        assert total.amount == Decimal("0.3")

    def test_add_and_subtract(self):
        a = Money.of("100.00", "USD")
        b = Money.of("30.25", "USD")
        assert (a - b).amount == Decimal("69.75")
        assert (a + b).amount == Decimal("130.25")

    def test_currency_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "USD") + Money.of("1", "EUR")

    def test_comparison_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "USD") < Money.of("1", "EUR")

    def test_multiply_by_decimal(self):
        cut = Money.of("150.00", "USD") * Decimal("0.4")
        assert cut.amount == Decimal("60.000")

    def test_multiply_by_float_unsupported(self):
        with pytest.raises(TypeError):
            Money.of("150.00", "USD") * 0.4

    def test_floor_zero(self):
        assert Money.of("-5", "USD").floor_zero() == Money.zero("USD")
        assert Money.of("5", "USD").floor_zero().amount == Decimal("5")

    def test_round_does_not_mutate(self):
        m = Money.of("10.005", "USD")
        assert m.round().amount == Decimal("10.01")
        assert m.amount == Decimal("10.005")

    def test_sign_predicates(self):
        assert Money.of("-1", "USD").is_negative
        assert Money.of("1", "USD").is_positive
        assert Money.zero("USD").is_zero

    def test_hashable(self):
        assert len({Money.of("1.0", "USD"), Money.of("1.00", "USD")}) == 1
