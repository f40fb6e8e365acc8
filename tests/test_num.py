import pytest

from gptdisk.num import format_hex_le, format_int_hex_le


def test_u16_hex():
    assert format_int_hex_le(0x1234, 2) == "1234"
    assert format_int_hex_le(0x1234, 2, True) == "0x1234"
    assert format_int_hex_le(0xABC, 2) == "0abc"


def test_u32_hex():
    assert format_int_hex_le(0x1234_5678, 4) == "12345678"
    assert format_int_hex_le(0x1234_5678, 4, True) == "0x12345678"
    assert format_int_hex_le(0xABC, 4) == "00000abc"


def test_u64_hex():
    assert format_int_hex_le(0x1234_5678_9ABC_DEF0, 8) == "123456789abcdef0"
    assert format_int_hex_le(0x1234_5678_9ABC_DEF0, 8, True) == "0x123456789abcdef0"


def test_format_hex_le_reverses_bytes():
    assert format_hex_le(bytes([0x12, 0x34])) == "3412"
    assert format_hex_le(bytes([0x12, 0x34, 0x56, 0x78]), True) == "0x78563412"
    assert format_hex_le(b"", True) == "0x"


@pytest.mark.parametrize("value, size", [(0x10000, 2), (-1, 4), (1 << 64, 8)])
def test_out_of_range(value, size):
    with pytest.raises(ValueError):
        format_int_hex_le(value, size)