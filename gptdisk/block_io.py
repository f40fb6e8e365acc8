"""Block-oriented access to storage: the BlockIo interface and an adapter.

``BlockIoAdapter`` gives byte-oriented storage a block size. It works
with ``bytes`` (read-only), ``bytearray`` and ``memoryview`` (writable
unless the view is read-only), and with binary file objects that can
seek, read and write.
"""

from __future__ import annotations

import abc
import enum
import io
from dataclasses import dataclass
from typing import Any

from gptdisk.block import BlockSize

__all__ = [
    "SliceBlockIoErrorKind",
    "SliceBlockIoError",
    "BlockIo",
    "BlockIoAdapter",
]

_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


class SliceBlockIoErrorKind(enum.Enum):
    """The reason a read or write on in-memory storage failed."""

    OVERFLOW = "overflow"
    READ_ONLY = "read_only"
    OUT_OF_BOUNDS = "out_of_bounds"


class SliceBlockIoError(Exception):
    """Raised by BlockIoAdapter when its storage is an in-memory buffer."""

    def __init__(
        self,
        kind: SliceBlockIoErrorKind = SliceBlockIoErrorKind.OVERFLOW,
        start_lba: int | None = None,
        length_in_bytes: int | None = None,
    ) -> None:
        self.kind = kind
        self.start_lba = start_lba
        self.length_in_bytes = length_in_bytes
        super().__init__(str(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SliceBlockIoError):
            return NotImplemented
        return (self.kind, self.start_lba, self.length_in_bytes) == (
            other.kind,
            other.start_lba,
            other.length_in_bytes,
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.start_lba, self.length_in_bytes))

    def __str__(self) -> str:
        if self.kind is SliceBlockIoErrorKind.OVERFLOW:
            return "numeric overflow occurred"
        if self.kind is SliceBlockIoErrorKind.READ_ONLY:
            return "attempted to write to a read-only byte slice"
        return (
            f"out of bounds: start_lba={self.start_lba}, "
            f"length_in_bytes={self.length_in_bytes}"
        )


class BlockIo(abc.ABC):
    """Reads and writes whole blocks of a block device.

    Implementations provide a ``block_size`` attribute that does not change.
    """

    block_size: BlockSize

    @abc.abstractmethod
    def num_blocks(self) -> int:
        """Number of whole blocks on the device; a trailing partial block is ignored."""

    @abc.abstractmethod
    def read_blocks(self, start_lba: int, length: int) -> bytes:
        """Read ``length`` bytes starting at block ``start_lba``.

        ``length`` must be a multiple of the block size.
        """

    @abc.abstractmethod
    def write_blocks(self, start_lba: int, data: bytes) -> None:
        """Write ``data`` starting at block ``start_lba``.

        The data length must be a multiple of the block size. Writes are
        not guaranteed to be complete until ``flush`` is called.
        """

    @abc.abstractmethod
    def flush(self) -> None:
        """Flush any pending writes to the device."""


def _check_lba(start_lba: int) -> None:
    if start_lba < 0:
        raise ValueError(f"LBA must not be negative: {start_lba}")


def _check_block_length(block_size: BlockSize, length: int) -> None:
    if length < 0 or not block_size.is_multiple_of_block_size(length):
        raise ValueError(
            f"buffer length {length} is not a multiple of the block size {block_size}"
        )


def _byte_range(block_size: BlockSize, start_lba: int, length: int) -> tuple[int, int]:
    _check_lba(start_lba)
    start = start_lba * int(block_size)
    end = start + length
    if end > _U64_MAX:
        raise SliceBlockIoError(SliceBlockIoErrorKind.OVERFLOW)
    return start, end


def _is_buffer(storage: Any) -> bool:
    return isinstance(storage, (bytes, bytearray, memoryview))


def _is_stream(storage: Any) -> bool:
    return all(hasattr(storage, name) for name in ("seek", "read", "write", "flush"))


def _byte_view(storage: bytes | bytearray | memoryview) -> memoryview:
    view = memoryview(storage)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


@dataclass
class BlockIoAdapter(BlockIo):
    """Gives byte-oriented storage a block size so it can act as BlockIo.

    Errors from in-memory storage are raised as SliceBlockIoError; errors
    from file objects are raised as OSError.
    """

    storage: Any
    block_size: BlockSize

    def _unsupported(self) -> TypeError:
        return TypeError(
            f"storage of type {type(self.storage).__name__} does not support block IO"
        )

    def num_blocks(self) -> int:
        """Number of whole blocks in the storage."""
        if _is_buffer(self.storage):
            return _byte_view(self.storage).nbytes // int(self.block_size)
        if _is_stream(self.storage):
            num_bytes = self.storage.seek(0, io.SEEK_END)
            return num_bytes // int(self.block_size)
        raise self._unsupported()

    def read_blocks(self, start_lba: int, length: int) -> bytes:
        """Read ``length`` bytes starting at block ``start_lba``."""
        _check_block_length(self.block_size, length)
        if _is_buffer(self.storage):
            start, end = _byte_range(self.block_size, start_lba, length)
            view = _byte_view(self.storage)
            if end > view.nbytes:
                raise SliceBlockIoError(
                    SliceBlockIoErrorKind.OUT_OF_BOUNDS, start_lba, length
                )
            return bytes(view[start:end])
        if _is_stream(self.storage):
            _check_lba(start_lba)
            self.storage.seek(start_lba * int(self.block_size))
            return self._read_exact(length)
        raise self._unsupported()

    def _read_exact(self, length: int) -> bytes:
        out = bytearray()
        while len(out) < length:
            chunk = self.storage.read(length - len(out))
            if not chunk:
                raise OSError("failed to fill whole buffer")
            out += chunk
        return bytes(out)

    def write_blocks(self, start_lba: int, data: bytes) -> None:
        """Write ``data`` starting at block ``start_lba``."""
        if _is_buffer(self.storage):
            view = _byte_view(self.storage)
            if view.readonly:
                raise SliceBlockIoError(SliceBlockIoErrorKind.READ_ONLY)
            src = bytes(data)
            _check_block_length(self.block_size, len(src))
            start, end = _byte_range(self.block_size, start_lba, len(src))
            if end > view.nbytes:
                raise SliceBlockIoError(
                    SliceBlockIoErrorKind.OUT_OF_BOUNDS, start_lba, len(src)
                )
            view[start:end] = src
            return
        if _is_stream(self.storage):
            src = memoryview(bytes(data))
            _check_block_length(self.block_size, len(src))
            _check_lba(start_lba)
            self.storage.seek(start_lba * int(self.block_size))
            while len(src):
                written = self.storage.write(src)
                if written is None:
                    written = len(src)
                if written == 0:
                    raise OSError("failed to write whole buffer")
                src = src[written:]
            return
        raise self._unsupported()

    def flush(self) -> None:
        """Flush pending writes; a no-op for in-memory storage."""
        if _is_buffer(self.storage):
            return
        if _is_stream(self.storage):
            self.storage.flush()
            return
        raise self._unsupported()

    def take_storage(self) -> Any:
        """Return the underlying storage."""
        return self.storage