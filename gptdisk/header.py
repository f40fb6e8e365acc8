"""The GPT header found near the start and at the end of a disk."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from gptdisk.crc32 import Crc32
from gptdisk.guid import Guid
from gptdisk.num import format_int_hex_le

__all__ = ["GptHeaderSignature", "GptHeaderRevision", "GptHeader", "HEADER_SIZE"]

_HEADER_STRUCT = struct.Struct("<QIIIIQQQQ16sQIII")
HEADER_SIZE = _HEADER_STRUCT.size
_PARTITION_ENTRY_SIZE = 128


def _check_uint(value: int, bits: int, name: str) -> None:
    if not 0 <= value < 1 << bits:
        raise ValueError(f"{name} does not fit in {bits} bits: {value}")


@dataclass(frozen=True, order=True)
class GptHeaderSignature:
    """GPT header signature, a little-endian u64."""

    value: int = 0x5452_4150_2049_4645

    EFI_COMPATIBLE_PARTITION_TABLE_HEADER: ClassVar[GptHeaderSignature]

    def __post_init__(self) -> None:
        _check_uint(self.value, 64, "signature")

    def to_u64(self) -> int:
        """The signature as an integer."""
        return self.value

    def __str__(self) -> str:
        if self == GptHeaderSignature.EFI_COMPATIBLE_PARTITION_TABLE_HEADER:
            return 'Signature("EFI PART")'
        return f"Signature(Invalid: {format_int_hex_le(self.value, 8, True)})"


GptHeaderSignature.EFI_COMPATIBLE_PARTITION_TABLE_HEADER = GptHeaderSignature(
    int.from_bytes(b"EFI PART", "little")
)


@dataclass(frozen=True, order=True)
class GptHeaderRevision:
    """GPT header revision, a little-endian u32."""

    value: int = 0x0001_0000

    VERSION_1_0: ClassVar[GptHeaderRevision]

    def __post_init__(self) -> None:
        _check_uint(self.value, 32, "revision")

    def major(self) -> int:
        """The major part of the version."""
        return self.value >> 16

    def minor(self) -> int:
        """The minor part of the version."""
        return self.value & 0xFFFF

    def __str__(self) -> str:
        return format_int_hex_le(self.value, 4, True)


GptHeaderRevision.VERSION_1_0 = GptHeaderRevision(0x0001_0000)


@dataclass(order=True)
class GptHeader:
    """GPT header (92 bytes on disk)."""

    signature: GptHeaderSignature = field(default_factory=GptHeaderSignature)
    revision: GptHeaderRevision = field(default_factory=GptHeaderRevision)
    header_size: int = HEADER_SIZE
    header_crc32: Crc32 = field(default_factory=Crc32)
    reserved: int = 0
    my_lba: int = 0
    alternate_lba: int = 0
    first_usable_lba: int = 0
    last_usable_lba: int = 0
    disk_guid: Guid = field(default_factory=Guid.zero)
    partition_entry_lba: int = 0
    number_of_partition_entries: int = 0
    size_of_partition_entry: int = _PARTITION_ENTRY_SIZE
    partition_entry_array_crc32: Crc32 = field(default_factory=Crc32)

    def __post_init__(self) -> None:
        for name in (
            "header_size",
            "reserved",
            "number_of_partition_entries",
            "size_of_partition_entry",
        ):
            _check_uint(getattr(self, name), 32, name)
        for name in (
            "my_lba",
            "alternate_lba",
            "first_usable_lba",
            "last_usable_lba",
            "partition_entry_lba",
        ):
            _check_uint(getattr(self, name), 64, name)

    def is_signature_valid(self) -> bool:
        """True if the signature is "EFI PART"."""
        return self.signature == GptHeaderSignature.EFI_COMPATIBLE_PARTITION_TABLE_HEADER

    def calculate_header_crc32(self) -> Crc32:
        """Checksum the header with its CRC field taken as zero."""
        return Crc32.compute(dataclasses.replace(self, header_crc32=Crc32()).to_bytes())

    def update_header_crc32(self) -> None:
        """Set the header's CRC field to its calculated checksum."""
        self.header_crc32 = self.calculate_header_crc32()

    def to_bytes(self) -> bytes:
        """The 92-byte on-disk form of the header."""
        return _HEADER_STRUCT.pack(
            self.signature.value,
            self.revision.value,
            self.header_size,
            self.header_crc32.value,
            self.reserved,
            self.my_lba,
            self.alternate_lba,
            self.first_usable_lba,
            self.last_usable_lba,
            self.disk_guid.to_bytes(),
            self.partition_entry_lba,
            self.number_of_partition_entries,
            self.size_of_partition_entry,
            self.partition_entry_array_crc32.value,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> GptHeader:
        """Decode a header from the first 92 bytes of ``data``.

        No validation of the header contents is performed. Raises
        ValueError if fewer than 92 bytes are given.
        """
        raw = bytes(data)
        if len(raw) < HEADER_SIZE:
            raise ValueError(f"GPT header needs {HEADER_SIZE} bytes, got {len(raw)}")
        (
            signature,
            revision,
            header_size,
            header_crc32,
            reserved,
            my_lba,
            alternate_lba,
            first_usable_lba,
            last_usable_lba,
            disk_guid,
            partition_entry_lba,
            number_of_partition_entries,
            size_of_partition_entry,
            partition_entry_array_crc32,
        ) = _HEADER_STRUCT.unpack(raw[:HEADER_SIZE])
        return cls(
            signature=GptHeaderSignature(signature),
            revision=GptHeaderRevision(revision),
            header_size=header_size,
            header_crc32=Crc32(header_crc32),
            reserved=reserved,
            my_lba=my_lba,
            alternate_lba=alternate_lba,
            first_usable_lba=first_usable_lba,
            last_usable_lba=last_usable_lba,
            disk_guid=Guid.from_bytes(disk_guid),
            partition_entry_lba=partition_entry_lba,
            number_of_partition_entries=number_of_partition_entries,
            size_of_partition_entry=size_of_partition_entry,
            partition_entry_array_crc32=Crc32(partition_entry_array_crc32),
        )

    def __str__(self) -> str:
        return (
            f"GptHeader {{ signature: {self.signature}"
            f", revision: {self.revision}"
            f", header_size: {self.header_size}"
            f", header_crc32: {self.header_crc32:#x}"
            f", my_lba: {self.my_lba}"
            f", alternate_lba: {self.alternate_lba}"
            f", first_usable_lba: {self.first_usable_lba}"
            f", last_usable_lba: {self.last_usable_lba}"
            f", disk_guid: {self.disk_guid}"
            f", partition_entry_lba: {self.partition_entry_lba}"
            f", number_of_partition_entries: {self.number_of_partition_entries}"
            f", size_of_partition_entry: {self.size_of_partition_entry}"
            f", partition_entry_array_crc32: {self.partition_entry_array_crc32:#x}"
            " }"
        )