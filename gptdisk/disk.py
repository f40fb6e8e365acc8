"""Reading and writing GPT disk structures through a BlockIo device."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

from gptdisk.block_io import BlockIo, SliceBlockIoError
from gptdisk.header import GptHeader
from gptdisk.mbr import MasterBootRecord

__all__ = ["DiskErrorKind", "DiskError", "Disk"]

_PRIMARY_HEADER_LBA = 1
_MBR_LBA = 0


class DiskErrorKind(enum.Enum):
    """The reason a Disk operation failed."""

    BUFFER_TOO_SMALL = "buffer_too_small"
    OVERFLOW = "overflow"
    BLOCK_SIZE_SMALLER_THAN_PARTITION_ENTRY = "block_size_smaller_than_partition_entry"
    IO = "io"


class DiskError(Exception):
    """Raised by Disk methods; IO failures carry the original error."""

    def __init__(self, kind: DiskErrorKind, io_error: BaseException | None = None) -> None:
        self.kind = kind
        self.io_error = io_error
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.kind is DiskErrorKind.BUFFER_TOO_SMALL:
            return "storage buffer is too small"
        if self.kind is DiskErrorKind.OVERFLOW:
            return "numeric overflow occurred"
        if self.kind is DiskErrorKind.BLOCK_SIZE_SMALLER_THAN_PARTITION_ENTRY:
            return "partition entries are larger than a single block"
        return str(self.io_error)


@contextmanager
def _io_errors() -> Iterator[None]:
    try:
        yield
    except (SliceBlockIoError, OSError) as err:
        raise DiskError(DiskErrorKind.IO, err) from err


class Disk:
    """Read and write GPT disk data on block boundaries.

    Writes are not guaranteed to be complete until ``flush`` is called.
    ``close`` (and leaving a ``with`` block) flushes too, but ignores any
    error, so call ``flush`` directly when the result matters.
    """

    def __init__(self, block_io: BlockIo) -> None:
        self.block_io = block_io

    def _block_len(self) -> int:
        return int(self.block_io.block_size)

    def _num_blocks(self) -> int:
        with _io_errors():
            return self.block_io.num_blocks()

    def _last_lba(self) -> int:
        num_blocks = self._num_blocks()
        if num_blocks < 1:
            raise DiskError(DiskErrorKind.OVERFLOW)
        return num_blocks - 1

    def _write_padded_block(self, lba: int, data: bytes) -> None:
        block_len = self._block_len()
        if len(data) > block_len:
            raise DiskError(DiskErrorKind.BUFFER_TOO_SMALL)
        with _io_errors():
            self.block_io.write_blocks(lba, data + bytes(block_len - len(data)))

    def read_primary_gpt_header(self) -> GptHeader:
        """Read the primary GPT header from the second block, unvalidated."""
        return self.read_gpt_header(_PRIMARY_HEADER_LBA)

    def read_secondary_gpt_header(self) -> GptHeader:
        """Read the secondary GPT header from the last block, unvalidated."""
        return self.read_gpt_header(self._last_lba())

    def read_gpt_header(self, lba: int) -> GptHeader:
        """Read a GPT header from the given block, unvalidated."""
        with _io_errors():
            block = self.block_io.read_blocks(lba, self._block_len())
        return GptHeader.from_bytes(block)

    def write_protective_mbr(self) -> None:
        """Write a protective MBR sized for this disk to the first block."""
        self.write_mbr(MasterBootRecord.protective_mbr(self._num_blocks()))

    def write_mbr(self, mbr: MasterBootRecord) -> None:
        """Write an MBR to the first block, zero-filling the rest of it."""
        self._write_padded_block(_MBR_LBA, mbr.to_bytes())

    def write_primary_gpt_header(self, header: GptHeader) -> None:
        """Write the primary GPT header to the second block."""
        self.write_gpt_header(_PRIMARY_HEADER_LBA, header)

    def write_secondary_gpt_header(self, header: GptHeader) -> None:
        """Write the secondary GPT header to the last block."""
        self.write_gpt_header(self._last_lba(), header)

    def write_gpt_header(self, lba: int, header: GptHeader) -> None:
        """Write a GPT header to the given block; the rest of the block is zeroed."""
        self._write_padded_block(lba, header.to_bytes())

    def flush(self) -> None:
        """Flush any pending writes to the disk."""
        with _io_errors():
            self.block_io.flush()

    def close(self) -> None:
        """Flush pending writes, ignoring any error."""
        try:
            self.flush()
        except DiskError:
            pass

    def __enter__(self) -> Disk:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()