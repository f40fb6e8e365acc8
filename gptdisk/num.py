"""Hex formatting for little-endian integer fields."""

from __future__ import annotations

__all__ = ["format_hex_le", "format_int_hex_le"]


def format_hex_le(data: bytes, alternate: bool = False) -> str:
    """Format little-endian bytes as a zero-padded lower-case hex number.

    The bytes are written most significant first; with ``alternate`` the
    result is prefixed with ``0x``.
    """
    digits = bytes(data)[::-1].hex()
    return f"0x{digits}" if alternate else digits


def format_int_hex_le(value: int, size: int, alternate: bool = False) -> str:
    """Format ``value`` as a ``size``-byte little-endian field in hex.

    Raises ValueError if the value does not fit in ``size`` unsigned bytes.
    """
    if value < 0 or value >= 1 << (8 * size):
        raise ValueError(f"{value} does not fit in {size} unsigned bytes")
    return format_hex_le(value.to_bytes(size, "little"), alternate)