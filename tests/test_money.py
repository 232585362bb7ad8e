"""
Test suite for money helpers

Amounts must always end up as Decimal with cent precision, and string
amounts must be read exactly as written.
"""

import pytest
from decimal import Decimal

from bank_ledger.money import to_decimal, to_exact_money, to_money, format_money


class TestToDecimal:
    """Test strict parsing"""

    def test_plain_strings(self):
        assert to_decimal("123.45") == Decimal('123.45')
        assert to_decimal(" -50 ") == Decimal('-50')

    def test_exponent_notation(self):
        """Test exponents are honoured, not stripped"""
        assert to_decimal("1e3") == Decimal('1000')
        assert to_decimal("5E1") == Decimal('50')

    @pytest.mark.parametrize("value", ["12abc34", "$100", "1,000", "", "abc"])
    def test_rejects_anything_but_a_decimal_literal(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_rejects_non_numeric_types(self):
        with pytest.raises(ValueError):
            to_decimal(None)
        with pytest.raises(ValueError):
            to_decimal(True)

    def test_rejects_non_finite(self):
        """Test NaN and infinity are refused"""
        with pytest.raises(ValueError):
            to_decimal(Decimal('NaN'))
        with pytest.raises(ValueError):
            to_decimal("Infinity")
        with pytest.raises(ValueError):
            to_decimal(float('inf'))


class TestToMoney:
    """Test conversion and rounding"""

    def test_rounds_half_up_to_cents(self):
        """Test ROUND_HALF_UP at the third decimal"""
        assert to_money(Decimal('100.555')) == Decimal('100.56')
        assert to_money(Decimal('100.554')) == Decimal('100.55')

    def test_accepts_int_str_and_float(self):
        assert to_money(25000) == Decimal('25000.00')
        assert to_money("1500") == Decimal('1500.00')
        # Floats go through str(), so no binary noise
        assert to_money(0.1) == Decimal('0.10')


class TestToExactMoney:
    """Test cent conversion without rounding"""

    def test_whole_cents(self):
        assert to_exact_money("12.5") == Decimal('12.50')
        assert to_exact_money("1e3") == Decimal('1000.00')
        assert str(to_exact_money(7)) == "7.00"

    @pytest.mark.parametrize("value", ["0.004", "0.005", Decimal('1.001')])
    def test_sub_cent_rejected(self, value):
        with pytest.raises(ValueError, match="more than two decimal places"):
            to_exact_money(value)


def test_format_money():
    """Test display formatting"""
    assert format_money(Decimal('25000')) == "25,000.00"
    assert format_money(Decimal('-9000.5')) == "-9,000.50"
