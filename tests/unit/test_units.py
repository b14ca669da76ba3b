"""
Unit tests for cycle_audit/units.py

Covers decimal-to-minor-unit normalization (truncation, padding, passthrough)
and the inverse scaling used for reporting.
"""

from decimal import Decimal

import pytest

from cycle_audit.exceptions import MalformedDecimal
from cycle_audit.units import (
    from_minor_units,
    gas_price_to_minor_units,
    gwei_to_price_per_unit,
    normalize,
    to_minor_units,
)


class TestNormalize:
    """Test normalize() contract."""

    @pytest.mark.parametrize("decimals", [0, 6, 18, 30])
    def test_zero(self, decimals):
        assert normalize("0", decimals) == "0"

    @pytest.mark.parametrize("value", ["", None, "   "])
    def test_empty_is_zero(self, value):
        assert normalize(value, 18) == "0"

    def test_truncates_excess_fraction(self):
        """Excess digits are dropped, never rounded up."""
        assert normalize("1.23456789", 4) == "12345"
        assert normalize("0.99999", 2) == "99"

    def test_pads_short_fraction(self):
        assert normalize("2.5", 6) == "2500000"
        assert normalize("1.", 3) == "1000"

    @pytest.mark.parametrize("decimals", [0, 6, 18])
    def test_no_fraction_passthrough(self, decimals):
        """Values without a separator are already minor units."""
        assert normalize("1000", decimals) == "1000"

    def test_zero_decimals_drops_fraction(self):
        assert normalize("42.75", 0) == "42"

    def test_leading_dot(self):
        assert normalize(".5", 2) == "50"

    def test_negative(self):
        assert normalize("-1.5", 2) == "-150"

    def test_beyond_64_bits(self):
        """Large reserves survive without precision loss."""
        value = "123456789012345678901234567890.123456789012345678"
        assert normalize(value, 18) == "123456789012345678901234567890123456789012345678"
        assert int(normalize(value, 18)) > 2**64

    def test_numeric_inputs(self):
        assert normalize(1000, 18) == "1000"
        assert normalize(Decimal("0.5"), 3) == "500"
        assert normalize(0.25, 2) == "25"

    def test_deterministic(self):
        assert normalize("3.14159", 8) == normalize("3.14159", 8)

    @pytest.mark.parametrize("value", ["abc", "1.2.3", "1e18", "1_000", "--1", ".", "-", "0x10"])
    def test_malformed(self, value):
        with pytest.raises(MalformedDecimal) as exc_info:
            normalize(value, 18)
        assert exc_info.value.value == value

    @pytest.mark.parametrize("value", ["\u0661.\u0665", "\uff11\uff10", "1.\u0968"])
    def test_non_ascii_digits_are_malformed(self, value):
        with pytest.raises(MalformedDecimal):
            normalize(value, 1)

    def test_bool_is_malformed(self):
        with pytest.raises(MalformedDecimal):
            normalize(True, 18)

    def test_negative_decimals_rejected(self):
        with pytest.raises(ValueError):
            normalize("1.0", -1)

    def test_none_decimals_uses_default(self):
        assert to_minor_units("1", None) == 1
        assert to_minor_units("1.0", None) == 10**18


class TestInverse:
    """Test minor units back to natural units."""

    def test_from_minor_units(self):
        assert from_minor_units(10**18) == Decimal("1")
        assert from_minor_units(200) == Decimal("2E-16")
        assert from_minor_units(2_500_000, 6) == Decimal("2.5")

    def test_negative(self):
        assert from_minor_units(-4_800_000_000_000_000) == Decimal("-0.0048")

    def test_round_trip_example(self):
        raw = to_minor_units("1.234567", 6)
        assert from_minor_units(raw, 6) == Decimal("1.234567")


class TestGasPrice:
    """Test gas price conversions."""

    def test_price_per_unit_to_wei(self):
        assert gas_price_to_minor_units(Decimal("0.000000032")) == 32_000_000_000
        assert gas_price_to_minor_units("0.000000032") == 32_000_000_000

    def test_whole_number_price_is_natural_units(self):
        assert gas_price_to_minor_units("1", 18) == 10**18

    def test_gwei(self):
        assert gwei_to_price_per_unit(32) == Decimal("0.000000032")
        assert gas_price_to_minor_units(gwei_to_price_per_unit("32")) == 32 * 10**9
