import pytest

from rpcdeck.domain.errors import ConversionError
from rpcdeck.domain.units import (
    eth_to_wei_hex,
    format_number,
    from_hex,
    to_hex,
    to_quantity,
    wei_hex_to_eth,
)


@pytest.mark.parametrize("n", [0, 1, 15, 16, 255, 4096, 10 ** 18, 2 ** 256 - 1])
def test_hex_round_trip(n):
    assert from_hex(to_hex(n)) == n


def test_to_hex_accepts_decimal_text():
    assert to_hex("10") == "0xa"
    assert to_hex(" 42 ") == "0x2a"


@pytest.mark.parametrize("bad", ["", "abc", "-1", "1.5", "0x10"])
def test_to_hex_rejects_non_integers(bad):
    with pytest.raises(ConversionError):
        to_hex(bad)


def test_to_hex_rejects_negative_int():
    with pytest.raises(ConversionError):
        to_hex(-5)


def test_from_hex_with_and_without_prefix():
    assert from_hex("0xDE0B6B3A7640000") == 10 ** 18
    assert from_hex("ff") == 255
    assert from_hex("0X1") == 1


@pytest.mark.parametrize("bad", ["", "0x", "0xZZ", "0x-5", "0x_ff", None])
def test_from_hex_rejects_garbage(bad):
    with pytest.raises(ConversionError):
        from_hex(bad)


def test_to_quantity_normalizes_both_forms():
    assert to_quantity("16") == "0x10"
    assert to_quantity("0x0010") == "0x10"


def test_wei_hex_to_eth_one_ether():
    assert wei_hex_to_eth("0xDE0B6B3A7640000") == "1.000000"


def test_wei_hex_to_eth_truncates_and_keeps_large_values_exact():
    assert wei_hex_to_eth(hex(1_234_567_890_123_456_789)) == "1.234567"
    assert wei_hex_to_eth(hex(10 ** 30)) == "1000000000000.000000"
    assert wei_hex_to_eth("0x0") == "0.000000"
    assert wei_hex_to_eth(hex(15 * 10 ** 17), places=0) == "1"


def test_eth_to_wei_hex():
    assert eth_to_wei_hex("1") == "0xde0b6b3a7640000"
    assert eth_to_wei_hex("0.5") == hex(5 * 10 ** 17)
    assert eth_to_wei_hex("1000000000000") == hex(10 ** 30)
    # sub-wei precision is dropped
    assert eth_to_wei_hex("0.0000000000000000019") == "0x1"


@pytest.mark.parametrize("bad", ["", "abc", "-1", "NaN", "Infinity"])
def test_eth_to_wei_hex_rejects_invalid(bad):
    with pytest.raises(ConversionError):
        eth_to_wei_hex(bad)


def test_format_number():
    assert format_number(1234567) == "1,234,567"
