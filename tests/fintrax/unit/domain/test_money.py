"""Tests for the Money value object."""

from decimal import Decimal
from fractions import Fraction

import pytest

from fintrax.domain.ledger import Money
from fintrax.domain.shared.exceptions import ErrorCode, InvalidAmountError


class TestMoneyCreation:
    def test_parses_decimal_string_into_minor_units(self):
        money = Money("12.34")

        assert money.minor_units == 1234
        assert money.scale == 2
        assert money.amount == Decimal("12.34")

    def test_accepts_int_and_decimal(self):
        assert Money(5).minor_units == 500
        assert Money(Decimal("0.10")).minor_units == 10

    def test_zero_is_allowed(self):
        assert Money("0").is_zero()

    @pytest.mark.parametrize("amount", [1.5, "abc", None, True])
    def test_rejects_floats_and_malformed_input(self, amount):
        with pytest.raises(InvalidAmountError) as exc_info:
            Money(amount)

        assert exc_info.value.code == ErrorCode.INVALID_AMOUNT

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-1.00"])
    def test_rejects_non_finite_and_negative_input(self, amount):
        with pytest.raises(InvalidAmountError):
            Money(amount)

    def test_rejects_more_decimals_than_scale(self):
        with pytest.raises(InvalidAmountError):
            Money("0.005")

    def test_custom_scale(self):
        assert Money("12", scale=0).minor_units == 12
        assert Money("1.234", scale=3).minor_units == 1234

    def test_format_keeps_scale_digits(self):
        assert Money("5").format() == "5.00"
        assert str(Money.from_minor_units(-100)) == "-1.00"


class TestMoneyArithmetic:
    def test_add_and_subtract_are_exact(self):
        assert Money("1.10") + Money("2.05") == Money("3.15")
        assert Money("0.10") + Money("0.20") == Money("0.30")

    def test_subtraction_may_go_negative(self):
        result = Money("1.00") - Money("2.50")

        assert result.is_negative()
        assert result.minor_units == -150

    def test_different_scales_cannot_be_mixed(self):
        with pytest.raises(InvalidAmountError):
            Money("1.00") + Money("1", scale=0)

    def test_multiply_rounds_half_up(self):
        assert Money.from_minor_units(5).multiply(Fraction(1, 10)).minor_units == 1
        assert Money.from_minor_units(4).multiply(Fraction(1, 10)).minor_units == 0

    def test_negative_ties_round_away_from_zero(self):
        assert Money.from_minor_units(-5).multiply(Fraction(1, 10)).minor_units == -1

    def test_divide_rounds_half_up(self):
        assert Money("10.00").divide(3) == Money("3.33")
        assert Money("0.05").divide(2) == Money("0.03")

    def test_divide_by_zero_is_rejected(self):
        with pytest.raises(InvalidAmountError):
            Money("1.00").divide(0)

    def test_multiply_rejects_float_factor(self):
        with pytest.raises(InvalidAmountError):
            Money("1.00").multiply(0.5)

    def test_sum(self):
        total = Money.sum([Money("1.00"), Money("2.50"), Money("0.25")])

        assert total == Money("3.75")
        assert Money.sum([]) == Money.zero()

    def test_comparison(self):
        assert Money("1.00") < Money("2.00")
        assert Money("2.00") >= Money("2.00")


class TestPercentage:
    def test_percentage_is_rounded_to_two_places(self):
        assert Money("1.00").percentage_of(Money("3.00")) == Decimal("33.33")
        assert Money("2.00").percentage_of(Money("3.00")) == Decimal("66.67")

    def test_zero_total_yields_zero(self):
        assert Money("0").percentage_of(Money("0")) == Decimal("0")


class TestEquality:
    def test_equal_amounts_are_equal_and_hash_alike(self):
        assert Money("1") == Money("1.00")
        assert len({Money("1"), Money("1.00")}) == 1

    def test_not_equal_to_other_types(self):
        assert Money("1.00") != Decimal("1.00")
