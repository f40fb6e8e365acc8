"""32-bit CRC as used by GPT headers and partition entry arrays."""

from __future__ import annotations

import zlib
from dataclasses import dataclass

from gptdisk.num import format_int_hex_le

__all__ = ["Crc32"]

_U32_MAX = 0xFFFF_FFFF


@dataclass(frozen=True, order=True)
class Crc32:
    """A CRC-32/ISO-HDLC checksum, stored on disk as four little-endian bytes."""

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _U32_MAX:
            raise ValueError(f"CRC32 value out of range: {self.value}")

    @classmethod
    def compute(cls, *args: bytes) -> Crc32:
        """Checksum the concatenation of the given byte chunks."""
        crc = 0
        for chunk in args:
            crc = zlib.crc32(chunk, crc)
        return cls(crc)

    @classmethod
    def from_bytes(cls, data: bytes) -> Crc32:
        """Read a checksum from its four little-endian bytes."""
        raw = bytes(data)
        if len(raw) != 4:
            raise ValueError(f"CRC32 must be 4 bytes, got {len(raw)}")
        return cls(int.from_bytes(raw, "little"))

    def to_bytes(self) -> bytes:
        """The four little-endian bytes of the checksum."""
        return self.value.to_bytes(4, "little")

    def __str__(self) -> str:
        return format_int_hex_le(self.value, 4, True)

    def __format__(self, spec: str) -> str:
        if spec == "":
            return str(self)
        if spec == "x":
            return format_int_hex_le(self.value, 4, False)
        if spec == "#x":
            return format_int_hex_le(self.value, 4, True)
        return format(self.value, spec)