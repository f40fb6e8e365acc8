"""Legacy master boot record structures, including the protective MBR."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from gptdisk.num import format_hex_le

__all__ = ["DiskGeometry", "Chs", "MbrPartitionRecord", "MasterBootRecord"]

_U32_MAX = 0xFFFF_FFFF
_PARTITION_RECORD = struct.Struct("<B3sB3sII")
_BOOT_STRAP_CODE_LEN = 440
_NUM_PARTITIONS = 4
MBR_SIZE = 512


def _check_uint(value: int, bits: int, name: str) -> None:
    if not 0 <= value < 1 << bits:
        raise ValueError(f"{name} does not fit in {bits} bits: {value}")


def _fixed_bytes(value: bytes, length: int, name: str) -> bytes:
    data = bytes(value)
    if len(data) != length:
        raise ValueError(f"{name} must be {length} bytes, got {len(data)}")
    return data


@dataclass(frozen=True, order=True)
class DiskGeometry:
    """Legacy disk geometry used to convert between LBA and CHS."""

    heads_per_cylinder: int = 255
    sectors_per_track: int = 63

    UNKNOWN: ClassVar[DiskGeometry]

    def __str__(self) -> str:
        return f"HPC={self.heads_per_cylinder}/SPT={self.sectors_per_track}"


# The fallback values gdisk uses when the geometry is not known.
DiskGeometry.UNKNOWN = DiskGeometry(255, 63)


@dataclass(frozen=True, order=True)
class Chs:
    """Legacy cylinder/head/sector address packed into three bytes."""

    raw: bytes = bytes(3)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", _fixed_bytes(self.raw, 3, "CHS"))

    @classmethod
    def new(cls, cylinder: int, head: int, sector: int) -> Chs:
        """Pack an address; raises ValueError if cylinder exceeds 10 bits or sector 6 bits."""
        _check_uint(cylinder, 16, "cylinder")
        _check_uint(head, 8, "head")
        _check_uint(sector, 8, "sector")
        if cylinder & 0b1111_1100_0000_0000:
            raise ValueError(f"cylinder does not fit in 10 bits: {cylinder}")
        if sector & 0b1100_0000:
            raise ValueError(f"sector does not fit in 6 bits: {sector}")
        return cls(
            bytes(
                (
                    head,
                    ((cylinder & 0b11_0000_0000) >> 2) | (sector & 0b0011_1111),
                    cylinder & 0xFF,
                )
            )
        )

    @classmethod
    def from_lba(cls, lba: int, geometry: DiskGeometry) -> Chs:
        """Convert an LBA to a CHS address; raises ValueError if it cannot fit."""
        if not 0 <= lba <= _U32_MAX:
            raise ValueError(f"LBA does not fit in a u32: {lba}")
        hpc = geometry.heads_per_cylinder
        spt = geometry.sectors_per_track
        cylinder = lba // (hpc * spt)
        head = (lba // spt) % hpc
        sector = lba % spt + 1
        return cls.new(cylinder, head, sector)

    def cylinder(self) -> int:
        """The 10 cylinder bits."""
        return ((self.raw[1] & 0b1100_0000) << 2) | self.raw[2]

    def head(self) -> int:
        """The 8 head bits."""
        return self.raw[0]

    def sector(self) -> int:
        """The 6 sector bits."""
        return self.raw[1] & 0b0011_1111

    def as_tuple(self) -> tuple[int, int, int]:
        """The address as ``(cylinder, head, sector)``."""
        return self.cylinder(), self.head(), self.sector()

    def __str__(self) -> str:
        return f"CHS={self.cylinder()}/{self.head()}/{self.sector()}"


@dataclass(frozen=True, order=True)
class MbrPartitionRecord:
    """One of the four legacy MBR partition records (16 bytes on disk)."""

    boot_indicator: int = 0
    start_chs: Chs = field(default_factory=Chs)
    os_indicator: int = 0
    end_chs: Chs = field(default_factory=Chs)
    starting_lba: int = 0
    size_in_lba: int = 0

    def __post_init__(self) -> None:
        _check_uint(self.boot_indicator, 8, "boot_indicator")
        _check_uint(self.os_indicator, 8, "os_indicator")
        _check_uint(self.starting_lba, 32, "starting_lba")
        _check_uint(self.size_in_lba, 32, "size_in_lba")

    def to_bytes(self) -> bytes:
        """The 16-byte on-disk form of the record."""
        return _PARTITION_RECORD.pack(
            self.boot_indicator,
            self.start_chs.raw,
            self.os_indicator,
            self.end_chs.raw,
            self.starting_lba,
            self.size_in_lba,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> MbrPartitionRecord:
        """Decode a record from exactly 16 bytes."""
        raw = _fixed_bytes(data, _PARTITION_RECORD.size, "MBR partition record")
        boot, start, os_ind, end, start_lba, size = _PARTITION_RECORD.unpack(raw)
        return cls(boot, Chs(start), os_ind, Chs(end), start_lba, size)

    def __str__(self) -> str:
        return (
            "MbrPartitionRecord { "
            f"boot_indicator: {self.boot_indicator:#x}"
            f", start_chs: {self.start_chs}"
            f", os_indicator: {self.os_indicator:#x}"
            f", end_chs: {self.end_chs}"
            f", starting_lba: {self.starting_lba}"
            f", size_in_lba: {self.size_in_lba}"
            " }"
        )


def _default_partitions() -> tuple[MbrPartitionRecord, ...]:
    return tuple(MbrPartitionRecord() for _ in range(_NUM_PARTITIONS))


@dataclass(frozen=True, order=True)
class MasterBootRecord:
    """Legacy master boot record (512 bytes on disk)."""

    boot_strap_code: bytes = bytes(_BOOT_STRAP_CODE_LEN)
    unique_mbr_disk_signature: bytes = bytes(4)
    unknown: bytes = b"\x00\x02"
    partitions: tuple[MbrPartitionRecord, ...] = field(
        default_factory=_default_partitions
    )
    signature: bytes = bytes(2)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "boot_strap_code",
            _fixed_bytes(self.boot_strap_code, _BOOT_STRAP_CODE_LEN, "boot_strap_code"),
        )
        object.__setattr__(
            self,
            "unique_mbr_disk_signature",
            _fixed_bytes(self.unique_mbr_disk_signature, 4, "unique_mbr_disk_signature"),
        )
        object.__setattr__(self, "unknown", _fixed_bytes(self.unknown, 2, "unknown"))
        object.__setattr__(
            self, "signature", _fixed_bytes(self.signature, 2, "signature")
        )
        partitions = tuple(self.partitions)
        if len(partitions) != _NUM_PARTITIONS:
            raise ValueError(
                f"an MBR has {_NUM_PARTITIONS} partitions, got {len(partitions)}"
            )
        object.__setattr__(self, "partitions", partitions)

    def is_boot_strap_code_zero(self) -> bool:
        """True if the boot strap code is all zeros."""
        return not any(self.boot_strap_code)

    @classmethod
    def protective_mbr(cls, num_blocks: int) -> MasterBootRecord:
        """Create a protective MBR for a disk of ``num_blocks`` blocks.

        Raises ValueError if the disk has no blocks.
        """
        if num_blocks < 1:
            raise ValueError("a protective MBR needs a disk of at least one block")
        size_in_lba = min(num_blocks, _U32_MAX)
        try:
            end_chs = Chs.from_lba(num_blocks - 1, DiskGeometry.UNKNOWN)
        except ValueError:
            end_chs = Chs(b"\xff\xff\xff")
        first = MbrPartitionRecord(
            boot_indicator=0,
            start_chs=Chs(bytes((0, 2, 0))),
            os_indicator=0xEE,
            end_chs=end_chs,
            starting_lba=1,
            size_in_lba=size_in_lba - 1,
        )
        return cls(
            boot_strap_code=bytes(_BOOT_STRAP_CODE_LEN),
            unique_mbr_disk_signature=bytes(4),
            unknown=bytes(2),
            partitions=(first,) + _default_partitions()[1:],
            signature=b"\x55\xaa",
        )

    def to_bytes(self) -> bytes:
        """The 512-byte on-disk form of the MBR."""
        return b"".join(
            (
                self.boot_strap_code,
                self.unique_mbr_disk_signature,
                self.unknown,
                *(p.to_bytes() for p in self.partitions),
                self.signature,
            )
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> MasterBootRecord:
        """Decode an MBR from exactly 512 bytes."""
        raw = _fixed_bytes(data, MBR_SIZE, "MBR")
        pos = _BOOT_STRAP_CODE_LEN
        code = raw[:pos]
        disk_sig = raw[pos : pos + 4]
        unknown = raw[pos + 4 : pos + 6]
        pos += 6
        size = _PARTITION_RECORD.size
        partitions = tuple(
            MbrPartitionRecord.from_bytes(raw[pos + i * size : pos + (i + 1) * size])
            for i in range(_NUM_PARTITIONS)
        )
        pos += size * _NUM_PARTITIONS
        return cls(code, disk_sig, unknown, partitions, raw[pos : pos + 2])

    def __str__(self) -> str:
        if self.is_boot_strap_code_zero():
            code = f"[0; {len(self.boot_strap_code)}]"
        else:
            code = "<non-zero>"
        partitions = ", ".join(str(p) for p in self.partitions)
        return (
            f"MasterBootRecord {{ boot_strap_code: {code}"
            f", unique_mbr_disk_signature: 0x{format_hex_le(self.unique_mbr_disk_signature)}"
            f", unknown: {format_hex_le(self.unknown)}"
            f", partitions: [{partitions}]"
            f", signature: 0x{format_hex_le(self.signature)}"
            " }"
        )