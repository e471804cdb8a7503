from decimal import Decimal

from dashfmt.formatting import format_bytes, format_currency, format_number


def test_format_number_abbreviations():
    assert format_number(1234) == "1.2K"
    assert format_number(1234567) == "1.23M"
    assert format_number(2_500_000_000) == "2.50B"
    assert format_number(1000) == "1.0K"


def test_format_number_keeps_sign():
    assert format_number(-5000) == "-5.0K"
    assert format_number(-1234567) == "-1.23M"
    assert format_number(-12) == "-12"


def test_format_number_small_values():
    assert format_number(0) == "0"
    assert format_number(999) == "999"
    assert format_number(12.3456) == "12.346"
    assert format_number(12.5) == "12.5"
    assert format_number(7.0) == "7"


def test_format_number_absent_or_not_a_number():
    assert format_number(None) == "0"
    assert format_number("1234") == "0"
    assert format_number(True) == "0"
    assert format_number(Decimal("1500")) == "1.5K"


def test_format_number_huge_int_does_not_raise():
    assert format_number(10 ** 400).endswith("B")


def test_format_currency():
    assert format_currency(None) == "$0.00"
    assert format_currency(0) == "$0.00"
    assert format_currency(12) == "$12.00"
    assert format_currency(0.01) == "$0.01"
    assert format_currency(0.000123) == "$0.000123"


def test_format_currency_uses_two_decimal_fixed_rounding():
    assert format_currency(1.255) == f"${1.255:.2f}"
    assert format_currency(3.14159) == "$3.14"


def test_format_bytes_examples():
    assert format_bytes(0) == "0 Bytes"
    assert format_bytes(500) == "500 Bytes"
    assert format_bytes(1024) == "1 KB"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(1073741824) == "1 GB"


def test_format_bytes_decimals():
    assert format_bytes(1600, 1) == "1.6 KB"
    assert format_bytes(1600, 0) == "2 KB"
    assert format_bytes(1600, -3) == "2 KB"
    assert format_bytes(1234567, 3) == "1.177 MB"


def test_format_bytes_clamps_unit_index():
    assert format_bytes(5 * 1024 ** 9) == "5120 YB"
    assert format_bytes(0.5) == "0.5 Bytes"


def test_format_bytes_negative_and_invalid():
    assert format_bytes(-2048) == "-2 KB"
    assert format_bytes(float("nan")) == "0 Bytes"
    assert format_bytes(float("inf")) == "0 Bytes"
    assert format_bytes(None) == "0 Bytes"
