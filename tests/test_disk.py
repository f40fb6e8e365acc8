import dataclasses

import pytest

from gptdisk.block import BlockSize
from gptdisk.block_io import (
    BlockIo,
    BlockIoAdapter,
    SliceBlockIoError,
    SliceBlockIoErrorKind,
)
from gptdisk.crc32 import Crc32
from gptdisk.disk import Disk, DiskError, DiskErrorKind
from gptdisk.guid import guid
from gptdisk.header import GptHeader
from gptdisk.mbr import MasterBootRecord

DISK_SIZE = 4 * 1024 * 1024

SPARSE_DISK = [
    (0x1C0, [2, 0, 238, 130, 2, 0, 1, 0, 0, 0, 255, 31, 0, 0, 0, 0]),
    (0x1F0, [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 85, 170]),
    (0x200, [69, 70, 73, 32, 80, 65, 82, 84, 0, 0, 1, 0, 92, 0, 0, 0]),
    (0x210, [67, 120, 135, 164, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0]),
    (0x220, [255, 31, 0, 0, 0, 0, 0, 0, 34, 0, 0, 0, 0, 0, 0, 0]),
    (0x230, [222, 31, 0, 0, 0, 0, 0, 0, 182, 254, 167, 87, 213, 140, 34, 73]),
    (0x240, [183, 189, 199, 139, 9, 20, 232, 112, 2, 0, 0, 0, 0, 0, 0, 0]),
    (0x250, [128, 0, 0, 0, 128, 0, 0, 0, 255, 173, 6, 146, 0, 0, 0, 0]),
    (0x400, [79, 153, 240, 204, 224, 247, 38, 78, 160, 17, 132, 62, 56, 170, 46, 172]),
    (0x410, [253, 95, 199, 55, 50, 137, 122, 70, 156, 86, 140, 241, 240, 69, 107, 18]),
    (0x420, [0, 8, 0, 0, 0, 0, 0, 0, 0, 16, 0, 0, 0, 0, 0, 0]),
    (0x430, [0, 0, 0, 0, 0, 0, 0, 0, 104, 0, 101, 0, 108, 0, 108, 0]),
    (0x440, [111, 0, 32, 0, 119, 0, 111, 0, 114, 0, 108, 0, 100, 0, 33, 0]),
    (0x3FBE00, [79, 153, 240, 204, 224, 247, 38, 78, 160, 17, 132, 62, 56, 170, 46, 172]),
    (0x3FBE10, [253, 95, 199, 55, 50, 137, 122, 70, 156, 86, 140, 241, 240, 69, 107, 18]),
    (0x3FBE20, [0, 8, 0, 0, 0, 0, 0, 0, 0, 16, 0, 0, 0, 0, 0, 0]),
    (0x3FBE30, [0, 0, 0, 0, 0, 0, 0, 0, 104, 0, 101, 0, 108, 0, 108, 0]),
    (0x3FBE40, [111, 0, 32, 0, 119, 0, 111, 0, 114, 0, 108, 0, 100, 0, 33, 0]),
    (0x3FFE00, [69, 70, 73, 32, 80, 65, 82, 84, 0, 0, 1, 0, 92, 0, 0, 0]),
    (0x3FFE10, [19, 76, 235, 219, 0, 0, 0, 0, 255, 31, 0, 0, 0, 0, 0, 0]),
    (0x3FFE20, [1, 0, 0, 0, 0, 0, 0, 0, 34, 0, 0, 0, 0, 0, 0, 0]),
    (0x3FFE30, [222, 31, 0, 0, 0, 0, 0, 0, 182, 254, 167, 87, 213, 140, 34, 73]),
    (0x3FFE40, [183, 189, 199, 139, 9, 20, 232, 112, 223, 31, 0, 0, 0, 0, 0, 0]),
    (0x3FFE50, [128, 0, 0, 0, 128, 0, 0, 0, 255, 173, 6, 146, 0, 0, 0, 0]),
]

# Byte ranges written by the MBR and header writers.
MBR_RANGE = slice(0, 512)
PRIMARY_RANGE = slice(512, 1024)
SECONDARY_RANGE = slice(DISK_SIZE - 512, DISK_SIZE)


def load_test_disk() -> bytearray:
    disk = bytearray(DISK_SIZE)
    for offset, data in SPARSE_DISK:
        disk[offset : offset + len(data)] = bytes(data)
    return disk


def create_primary_header() -> GptHeader:
    return GptHeader(
        header_crc32=Crc32(0xA4877843),
        my_lba=1,
        alternate_lba=8191,
        first_usable_lba=34,
        last_usable_lba=8158,
        disk_guid=guid("57a7feb6-8cd5-4922-b7bd-c78b0914e870"),
        partition_entry_lba=2,
        number_of_partition_entries=128,
        partition_entry_array_crc32=Crc32(0x9206ADFF),
    )


def create_secondary_header() -> GptHeader:
    return dataclasses.replace(
        create_primary_header(),
        header_crc32=Crc32(0xDBEB4C13),
        my_lba=8191,
        alternate_lba=1,
        partition_entry_lba=8159,
    )


def check_disk_read(block_io: BlockIo) -> None:
    disk = Disk(block_io)
    primary = disk.read_primary_gpt_header()
    assert primary == create_primary_header()
    assert primary.is_signature_valid()
    assert primary.calculate_header_crc32() == primary.header_crc32

    secondary = disk.read_secondary_gpt_header()
    assert secondary == create_secondary_header()
    assert secondary.calculate_header_crc32() == secondary.header_crc32


def write_test_disk(block_io: BlockIo) -> None:
    disk = Disk(block_io)
    disk.write_protective_mbr()
    disk.write_primary_gpt_header(create_primary_header())
    disk.write_secondary_gpt_header(create_secondary_header())
    disk.flush()


def test_read_from_bytes():
    check_disk_read(BlockIoAdapter(bytes(load_test_disk()), BlockSize.BS_512))


def test_read_from_bytearray():
    check_disk_read(BlockIoAdapter(load_test_disk(), BlockSize.BS_512))


def test_write_to_bytearray_matches_reference():
    expected = load_test_disk()
    contents = bytearray(DISK_SIZE)
    write_test_disk(BlockIoAdapter(contents, BlockSize.BS_512))
    for region in (MBR_RANGE, PRIMARY_RANGE, SECONDARY_RANGE):
        assert contents[region] == expected[region]


def test_written_disk_reads_back():
    contents = bytearray(DISK_SIZE)
    write_test_disk(BlockIoAdapter(contents, BlockSize.BS_512))
    check_disk_read(BlockIoAdapter(contents, BlockSize.BS_512))


def test_written_protective_mbr_decodes():
    contents = bytearray(DISK_SIZE)
    Disk(BlockIoAdapter(contents, BlockSize.BS_512)).write_protective_mbr()
    mbr = MasterBootRecord.from_bytes(bytes(contents[:512]))
    assert mbr == MasterBootRecord.protective_mbr(DISK_SIZE // 512)
    assert mbr.partitions[0].os_indicator == 0xEE
    assert mbr.partitions[0].size_in_lba == 8191
    assert mbr.signature == b"\x55\xaa"


def test_header_block_is_zero_padded():
    contents = bytearray(b"\xff" * 2048)
    disk = Disk(BlockIoAdapter(contents, BlockSize.BS_512))
    disk.write_gpt_header(2, create_primary_header())
    assert contents[1024:1116] == create_primary_header().to_bytes()
    assert contents[1116:1536] == bytes(420)
    assert contents[1536:] == b"\xff" * 512


def test_file_read_and_write(tmp_path):
    path = tmp_path / "disk.bin"
    path.write_bytes(bytes(load_test_disk()))
    with open(path, "rb") as f:
        check_disk_read(BlockIoAdapter(f, BlockSize.BS_512))

    new_path = tmp_path / "new.bin"
    new_path.write_bytes(bytes(DISK_SIZE))
    with open(new_path, "r+b") as f:
        write_test_disk(BlockIoAdapter(f, BlockSize.BS_512))
    written = new_path.read_bytes()
    expected = load_test_disk()
    for region in (MBR_RANGE, PRIMARY_RANGE, SECONDARY_RANGE):
        assert written[region] == bytes(expected[region])


def test_write_to_read_only_storage_raises_io_error():
    disk = Disk(BlockIoAdapter(bytes(1024), BlockSize.BS_512))
    with pytest.raises(DiskError) as info:
        disk.write_primary_gpt_header(create_primary_header())
    assert info.value.kind is DiskErrorKind.IO
    assert info.value.io_error == SliceBlockIoError(SliceBlockIoErrorKind.READ_ONLY)
    assert str(info.value) == "attempted to write to a read-only byte slice"


def test_read_out_of_bounds_raises_io_error():
    disk = Disk(BlockIoAdapter(bytes(512), BlockSize.BS_512))
    with pytest.raises(DiskError) as info:
        disk.read_primary_gpt_header()
    assert info.value.kind is DiskErrorKind.IO
    assert str(info.value) == "out of bounds: start_lba=1, length_in_bytes=512"


def test_secondary_header_on_empty_disk_overflows():
    disk = Disk(BlockIoAdapter(bytearray(), BlockSize.BS_512))
    with pytest.raises(DiskError) as info:
        disk.read_secondary_gpt_header()
    assert info.value.kind is DiskErrorKind.OVERFLOW
    assert str(info.value) == "numeric overflow occurred"
    with pytest.raises(DiskError) as info:
        disk.write_secondary_gpt_header(create_secondary_header())
    assert info.value.kind is DiskErrorKind.OVERFLOW


def test_error_messages():
    assert str(DiskError(DiskErrorKind.BUFFER_TOO_SMALL)) == "storage buffer is too small"
    assert (
        str(DiskError(DiskErrorKind.BLOCK_SIZE_SMALLER_THAN_PARTITION_ENTRY))
        == "partition entries are larger than a single block"
    )


class _CountingBlockIo(BlockIo):
    def __init__(self, fail_flush: bool = False) -> None:
        self.block_size = BlockSize.BS_512
        self.flushes = 0
        self.fail_flush = fail_flush

    def num_blocks(self) -> int:
        return 4

    def read_blocks(self, start_lba: int, length: int) -> bytes:
        return bytes(length)

    def write_blocks(self, start_lba: int, data: bytes) -> None:
        pass

    def flush(self) -> None:
        self.flushes += 1
        if self.fail_flush:
            raise OSError("flush failed")


def test_context_manager_flushes():
    block_io = _CountingBlockIo()
    with Disk(block_io) as disk:
        disk.write_protective_mbr()
        assert block_io.flushes == 0
    assert block_io.flushes == 1


def test_flush_error_is_raised_but_close_ignores_it():
    block_io = _CountingBlockIo(fail_flush=True)
    disk = Disk(block_io)
    with pytest.raises(DiskError) as info:
        disk.flush()
    assert info.value.kind is DiskErrorKind.IO
    assert str(info.value) == "flush failed"
    disk.close()
    assert block_io.flushes == 2


def test_read_zeroed_header_has_invalid_signature():
    disk = Disk(_CountingBlockIo())
    header = disk.read_gpt_header(3)
    assert not header.is_signature_valid()
    assert header.header_size == 0