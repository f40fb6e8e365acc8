# gptdisk

`gptdisk` reads and writes the on-disk structures at the edges of a GUID
Partition Table (GPT) disk:

- the protective MBR in the first block,
- the primary GPT header in the second block,
- the secondary GPT header in the last block.

It also provides the GUID type those structures use, the CRC-32 checksum
GPT relies on, and a small block IO layer that works with in-memory
buffers and binary files. All fields are stored little-endian, as the
UEFI Specification requires. The package has no dependencies outside
the standard library.

## Installation

```
pip install gptdisk
```

To run the test suite:

```
pip install "gptdisk[test]"
pytest
```

## GUIDs

`gptdisk.guid` provides `Guid`, a GUID in the UEFI mixed-endian layout.
The first three fields are little-endian in memory and big-endian in the
text form.

```python
from gptdisk.guid import Guid, Variant, guid

g = guid("01234567-89ab-cdef-0123-456789abcdef")
print(str(g))          # 01234567-89ab-cdef-0123-456789abcdef
print(g.to_bytes())    # b'gE#\x01\xab\x89\xef\xcd\x01#Eg\x89\xab\xcd\xef'

assert Guid.from_bytes(g.to_bytes()) == g
assert Guid.zero().is_zero()
assert guid("308bbc16-a308-47e8-8977-5e5646c5291f").variant() == Variant.RFC4122
assert guid("308bbc16-a308-47e8-8977-5e5646c5291f").version() == 4
```

The fields `time_low`, `time_mid`, `time_high_and_version`, `node` (as
bytes) and `clock_seq_high_and_reserved`, `clock_seq_low` (as ints) are
available as attributes. `to_ascii_hex_lower()` returns the 36-byte
ASCII form.

`Guid.parse` (and `guid`) raise `GuidFromStrError`, a `ValueError`, for
bad input. Its `kind` (`GuidErrorKind.LENGTH`, `SEPARATOR` or `HEX`)
tells whether the length was wrong, a `-` separator was missing, or a
character was not a hex digit; for the last two, `index` gives the byte
position.

`Guid.from_random_bytes` builds a version 4 GUID from 16 bytes that you
supply, for example from `os.urandom(16)`.

## Inspecting a GUID from the command line

```
guid-info 01234567-89ab-cdef-0123-456789abcdef
```

The command prints the version, the variant and each raw field of the
GUID, with the field bytes in hex grouped in pairs. With a wrong number
of arguments it prints a usage message; if the input is not a valid
GUID it prints the reason. Either way it exits with status 1. The same
formatting is available as `gptdisk.guid_info.format_guid` and
`format_bytes`.

## Reading a disk image

A `Disk` works on top of a `BlockIo`. `BlockIoAdapter` turns storage
into block storage with a given `BlockSize`:

- `bytes` is read-only (writes raise `SliceBlockIoError`),
- `bytearray` and writable `memoryview` objects can be read and written,
- binary file objects with `seek`, `read`, `write` and `flush` are used
  through those methods.

```python
from gptdisk.block import BlockSize
from gptdisk.block_io import BlockIoAdapter
from gptdisk.disk import Disk

with open("disk.bin", "rb") as f:
    io = BlockIoAdapter(f, BlockSize.BS_512)
    with Disk(io) as disk:
        header = disk.read_primary_gpt_header()
        print(header)
        assert header.is_signature_valid()
        backup = disk.read_secondary_gpt_header()
```

Headers are read without validation. Leaving the `with` block (or
calling `Disk.close()`) flushes pending writes and ignores any error, so
call `Disk.flush()` yourself when you need to know the writes completed.

Failures from the storage are raised as `DiskError` with kind
`DiskErrorKind.IO`; the original `SliceBlockIoError` or `OSError` is in
`io_error`. Reading or writing the secondary header of a disk with no
blocks raises `DiskError` with kind `OVERFLOW`.

## Writing a disk image

```python
from gptdisk.block import BlockSize
from gptdisk.block_io import BlockIoAdapter
from gptdisk.disk import Disk
from gptdisk.guid import guid
from gptdisk.header import GptHeader

storage = bytearray(4 * 1024 * 1024)
with Disk(BlockIoAdapter(storage, BlockSize.BS_512)) as disk:
    header = GptHeader(
        my_lba=1,
        alternate_lba=8191,
        first_usable_lba=34,
        last_usable_lba=8158,
        disk_guid=guid("57a7feb6-8cd5-4922-b7bd-c78b0914e870"),
        partition_entry_lba=2,
        number_of_partition_entries=128,
    )
    header.update_header_crc32()

    disk.write_protective_mbr()
    disk.write_primary_gpt_header(header)
    disk.flush()
```

Each header or MBR is written at the start of its block, and the rest of
the block is filled with zeroes. `write_mbr` writes any
`MasterBootRecord`; `write_gpt_header` writes a header to any block.

## Other building blocks

- `gptdisk.block`: `BlockSize` (at least 512 bytes and fitting in 32
  bits; `BS_512` and `BS_4096` are predefined) and `LbaRangeInclusive`,
  which converts between block ranges and inclusive byte ranges.
- `gptdisk.crc32`: `Crc32`, the CRC-32/ISO-HDLC checksum used by GPT.
  `Crc32.compute(*chunks)` checksums the concatenated chunks.
- `gptdisk.num`: `format_hex_le` and `format_int_hex_le`, which print
  little-endian fields as hex, most significant byte first.
- `gptdisk.mbr`: `MasterBootRecord`, `MbrPartitionRecord`, `Chs` and
  `DiskGeometry`, including `MasterBootRecord.protective_mbr`. Records
  convert to and from their on-disk bytes.
- `gptdisk.header`: `GptHeader`, `GptHeaderSignature` and
  `GptHeaderRevision`. `GptHeader` converts to and from its 92 on-disk
  bytes and computes its own CRC.
- `gptdisk.block_io`: the `BlockIo` abstract class, `BlockIoAdapter`,
  and `SliceBlockIoError` for in-memory reads and writes that are out of
  bounds, overflow, or target read-only storage.
- `gptdisk.disk`: `Disk`, `DiskError` and `DiskErrorKind`.

## What this package does not do

- It has no partition entry type and does not read, write or iterate
  over partition entry arrays. A header's `partition_entry_lba`,
  `number_of_partition_entries`, `size_of_partition_entry` and
  `partition_entry_array_crc32` are carried as plain fields; the array
  itself must be handled with `BlockIo.read_blocks` and
  `BlockIo.write_blocks`, and its checksum with `Crc32.compute`.
- It does not validate headers beyond `is_signature_valid` and the CRC
  calculation; it does not check LBAs, sizes or the revision.
- Apart from `guid-info`, it provides no command-line tool; reading or
  writing a disk image is done from Python.