"""Command that prints the fields of a GUID given on the command line."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from gptdisk.guid import Guid, GuidFromStrError, Variant

__all__ = ["format_bytes", "format_guid", "main"]

USAGE = """usage: guid_info <guid>
the <guid> format is "xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx"
where each `x` is a hex digit (any of `0-9`, `a-f`, or `A-F`)."""

_VARIANT_NAMES = {
    Variant.RESERVED_NCS: "ReservedNcs",
    Variant.RFC4122: "Rfc4122",
    Variant.RESERVED_MICROSOFT: "ReservedMicrosoft",
    Variant.RESERVED_FUTURE: "ReservedFuture",
}


def format_bytes(data: bytes) -> str:
    """Format bytes as lower-case hex, with a space after every second byte."""
    raw = bytes(data)
    return " ".join(raw[pos : pos + 2].hex() for pos in range(0, len(raw), 2))


def format_guid(value: Guid) -> str:
    """Describe a GUID and each of its fields, one per line."""
    lines = [
        f"guid: {value}",
        f"  version: {value.version()}",
        f"  variant: {_VARIANT_NAMES[value.variant()]} ",
        f"  time_low: {format_bytes(value.time_low)}",
        f"  time_mid: {format_bytes(value.time_mid)}",
        f"  time_high_and_version: {format_bytes(value.time_high_and_version)}",
        "  clock_seq_high_and_reserved: "
        + format_bytes(bytes([value.clock_seq_high_and_reserved])),
        f"  clock_seq_low: {format_bytes(bytes([value.clock_seq_low]))}",
        f"  node: {format_bytes(value.node)}",
    ]
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the single GUID argument and print its fields."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print(USAGE)
        return 1
    try:
        value = Guid.parse(args[0])
    except GuidFromStrError as err:
        print(f"invalid input: {err}")
        return 1
    print(format_guid(value))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())