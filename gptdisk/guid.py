"""Globally unique identifiers in the mixed-endian UEFI layout.

The format follows RFC 4122, except that the first three fields are
stored little-endian, as in the UEFI Specification and Windows.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

__all__ = [
    "GuidErrorKind",
    "GuidFromStrError",
    "Variant",
    "Guid",
    "byte_to_ascii_hex_lower",
    "parse_hex_pair",
    "guid",
]

_GUID_STR_LEN = 36
_SEPARATOR = ord("-")
_SEPARATOR_POSITIONS = (8, 13, 18, 23)
# String offsets of each hex pair, in the order of the 16 bytes produced.
_HEX_PAIR_POSITIONS = (6, 4, 2, 0, 11, 9, 16, 14, 19, 21, 24, 26, 28, 30, 32, 34)
_HEX_DIGITS = b"0123456789abcdef"


class GuidErrorKind(enum.Enum):
    """The reason a GUID string failed to parse."""

    LENGTH = "length"
    SEPARATOR = "separator"
    HEX = "hex"


class GuidFromStrError(ValueError):
    """Raised when a string is not a valid GUID."""

    def __init__(self, kind: GuidErrorKind, index: int | None = None) -> None:
        self.kind = kind
        self.index = index
        super().__init__(str(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GuidFromStrError):
            return NotImplemented
        return (self.kind, self.index) == (other.kind, other.index)

    def __hash__(self) -> int:
        return hash((self.kind, self.index))

    def __str__(self) -> str:
        if self.kind is GuidErrorKind.LENGTH:
            return "GUID string has wrong length (expected 36 bytes)"
        if self.kind is GuidErrorKind.SEPARATOR:
            return f"GUID string is missing a separator (`-`) at index {self.index}"
        return f"GUID string contains invalid ASCII hex at index {self.index}"


class Variant(enum.Enum):
    """GUID variant as defined in RFC 4122."""

    RESERVED_NCS = "reserved_ncs"
    RFC4122 = "rfc4122"
    RESERVED_MICROSOFT = "reserved_microsoft"
    RESERVED_FUTURE = "reserved_future"


def byte_to_ascii_hex_lower(byte: int) -> tuple[int, int]:
    """Return the two lower-case ASCII hex digits of ``byte`` (high, low)."""
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"byte out of range: {byte}")
    return _HEX_DIGITS[byte >> 4], _HEX_DIGITS[byte & 0xF]


def _hex_value(char: int) -> int | None:
    if ord("0") <= char <= ord("9"):
        return char - ord("0")
    if ord("a") <= char <= ord("f"):
        return char - ord("a") + 10
    if ord("A") <= char <= ord("F"):
        return char - ord("A") + 10
    return None


def parse_hex_pair(high: int, low: int) -> int | None:
    """Parse two ASCII hex characters (as byte values) into one byte.

    Returns None if either character is not a hex digit.
    """
    h = _hex_value(high)
    if h is None:
        return None
    l = _hex_value(low)
    if l is None:
        return None
    return (h << 4) | l


def _as_bytes(value: object, length: int, name: str) -> bytes:
    data = bytes(value)  # type: ignore[call-overload]
    if len(data) != length:
        raise ValueError(f"{name} must be {length} bytes, got {len(data)}")
    return data


def _as_byte(value: int, name: str) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in a byte, got {value}")
    return value


@dataclass(frozen=True, order=True)
class Guid:
    """A 16-byte GUID; the first three fields are little-endian."""

    time_low: bytes = field(default=bytes(4))
    time_mid: bytes = field(default=bytes(2))
    time_high_and_version: bytes = field(default=bytes(2))
    clock_seq_high_and_reserved: int = 0
    clock_seq_low: int = 0
    node: bytes = field(default=bytes(6))

    def __post_init__(self) -> None:
        object.__setattr__(self, "time_low", _as_bytes(self.time_low, 4, "time_low"))
        object.__setattr__(self, "time_mid", _as_bytes(self.time_mid, 2, "time_mid"))
        object.__setattr__(
            self,
            "time_high_and_version",
            _as_bytes(self.time_high_and_version, 2, "time_high_and_version"),
        )
        _as_byte(self.clock_seq_high_and_reserved, "clock_seq_high_and_reserved")
        _as_byte(self.clock_seq_low, "clock_seq_low")
        object.__setattr__(self, "node", _as_bytes(self.node, 6, "node"))

    @classmethod
    def zero(cls) -> Guid:
        """GUID with every bit cleared."""
        return cls()

    @classmethod
    def from_bytes(cls, data: bytes) -> Guid:
        """Create a GUID from 16 bytes; byte order is kept as is."""
        raw = _as_bytes(data, 16, "GUID")
        return cls(raw[0:4], raw[4:6], raw[6:8], raw[8], raw[9], raw[10:16])

    @classmethod
    def from_random_bytes(cls, random_bytes: bytes) -> Guid:
        """Create a version 4 GUID from 16 caller-supplied random bytes."""
        raw = bytearray(_as_bytes(random_bytes, 16, "GUID"))
        raw[8] = (raw[8] & 0b1011_1111) | 0b1000_0000
        raw[7] = (raw[7] & 0b0000_1111) | 0b0100_1111
        return cls.from_bytes(bytes(raw))

    @classmethod
    def parse(cls, text: str) -> Guid:
        """Parse "xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx" (hex in any case).

        Raises GuidFromStrError on malformed input.
        """
        raw = text.encode("utf-8")
        if len(raw) != _GUID_STR_LEN:
            raise GuidFromStrError(GuidErrorKind.LENGTH)
        for pos in _SEPARATOR_POSITIONS:
            if raw[pos] != _SEPARATOR:
                raise GuidFromStrError(GuidErrorKind.SEPARATOR, pos)
        out = bytearray()
        for pos in _HEX_PAIR_POSITIONS:
            value = parse_hex_pair(raw[pos], raw[pos + 1])
            if value is None:
                raise GuidFromStrError(GuidErrorKind.HEX, pos)
            out.append(value)
        return cls.from_bytes(bytes(out))

    def is_zero(self) -> bool:
        """True if all bits are zero."""
        return not any(self.to_bytes())

    def variant(self) -> Variant:
        """The GUID variant, from the top bits of clock_seq_high_and_reserved."""
        bits = (self.clock_seq_high_and_reserved & 0b1110_0000) >> 5
        if not bits & 0b100:
            return Variant.RESERVED_NCS
        if not bits & 0b010:
            return Variant.RFC4122
        if not bits & 0b001:
            return Variant.RESERVED_MICROSOFT
        return Variant.RESERVED_FUTURE

    def version(self) -> int:
        """The GUID version number (RFC 4122 section 4.1.3)."""
        return (self.time_high_and_version[1] & 0b1111_0000) >> 4

    def to_bytes(self) -> bytes:
        """The 16 raw bytes of the GUID."""
        return (
            self.time_low
            + self.time_mid
            + self.time_high_and_version
            + bytes((self.clock_seq_high_and_reserved, self.clock_seq_low))
            + self.node
        )

    def to_ascii_hex_lower(self) -> bytes:
        """The 36-byte lower-case ASCII form of the GUID."""
        b = self.to_bytes()
        groups = (
            b[3::-1],
            b[5:3:-1],
            b[7:5:-1],
            b[8:10],
            b[10:16],
        )
        return b"-".join(group.hex().encode("ascii") for group in groups)

    def __str__(self) -> str:
        return self.to_ascii_hex_lower().decode("ascii")


def guid(text: str) -> Guid:
    """Parse a GUID literal, raising GuidFromStrError if it is malformed."""
    return Guid.parse(text)