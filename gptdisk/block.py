"""Block sizes and ranges of logical block addresses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

__all__ = ["BlockSize", "LbaRangeInclusive"]

_U32_MAX = 0xFFFF_FFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF
_MIN_BLOCK_SIZE = 512


def _check_lba(value: int, name: str) -> None:
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} does not fit in a u64: {value}")


@dataclass(frozen=True, order=True)
class BlockSize:
    """Size of a block in bytes: at least 512, and fitting in a u32."""

    num_bytes: int = _MIN_BLOCK_SIZE

    BS_512: ClassVar[BlockSize]
    BS_4096: ClassVar[BlockSize]

    def __post_init__(self) -> None:
        if not _MIN_BLOCK_SIZE <= self.num_bytes <= _U32_MAX:
            raise ValueError(f"invalid block size: {self.num_bytes}")

    @classmethod
    def from_usize(cls, num_bytes: int) -> BlockSize:
        """Create a block size, raising ValueError if it is invalid."""
        return cls(num_bytes)

    def is_multiple_of_block_size(self, value: int) -> bool:
        """True if ``value`` is an exact multiple of the block size.

        Raises ValueError if ``value`` does not fit in a u64.
        """
        if not 0 <= value <= _U64_MAX:
            raise ValueError("value does not fit in a u64")
        return value % self.num_bytes == 0

    def assert_valid_block_buffer(self, buffer: bytes) -> None:
        """Raise ValueError unless the buffer length is a multiple of the block size."""
        if not self.is_multiple_of_block_size(len(buffer)):
            raise ValueError(
                f"buffer length {len(buffer)} is not a multiple of "
                f"the block size {self.num_bytes}"
            )

    def __int__(self) -> int:
        return self.num_bytes

    def __str__(self) -> str:
        return str(self.num_bytes)


BlockSize.BS_512 = BlockSize(512)
BlockSize.BS_4096 = BlockSize(4096)


@dataclass(frozen=True, order=True)
class LbaRangeInclusive:
    """Inclusive range of logical block addresses; end is never before start."""

    start: int = 0
    end: int = 0

    def __post_init__(self) -> None:
        _check_lba(self.start, "start")
        _check_lba(self.end, "end")
        if self.end < self.start:
            raise ValueError(f"LBA range end {self.end} is before start {self.start}")

    @classmethod
    def from_byte_range(
        cls, start_byte: int, end_byte: int, block_size: BlockSize
    ) -> LbaRangeInclusive:
        """Create an LBA range from an inclusive byte range on block bounds.

        Raises ValueError if the bytes do not start at the beginning of a
        block and end at the end of a block.
        """
        _check_lba(start_byte, "start_byte")
        _check_lba(end_byte, "end_byte")
        end_byte_plus_1 = end_byte + 1
        if end_byte_plus_1 > _U64_MAX:
            raise ValueError("end byte overflows")
        size = int(block_size)
        if start_byte % size:
            raise ValueError(f"start byte {start_byte} is not on a block boundary")
        if end_byte_plus_1 % size:
            raise ValueError(f"end byte {end_byte} is not at the end of a block")
        return cls(start_byte // size, end_byte_plus_1 // size - 1)

    def to_byte_range(self, block_size: BlockSize) -> tuple[int, int]:
        """The inclusive (first, last) byte range for the given block size.

        Raises OverflowError if a byte offset does not fit in a u64.
        """
        size = int(block_size)
        start_byte = self.start * size
        end_byte = self.end * size + size - 1
        if start_byte > _U64_MAX or end_byte > _U64_MAX:
            raise OverflowError("byte range does not fit in a u64")
        return start_byte, end_byte

    def num_bytes(self, block_size: BlockSize) -> int:
        """Number of bytes covered by the range for the given block size."""
        start_byte, end_byte = self.to_byte_range(block_size)
        count = end_byte - start_byte + 1
        if count > _U64_MAX:
            raise OverflowError("byte count does not fit in a u64")
        return count

    def num_blocks(self) -> int:
        """Number of blocks in the range."""
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.start}..={self.end}"