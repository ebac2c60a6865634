"""
In-memory ustar container writer.

Writes exactly the header fields pacman and libarchive need, nothing more,
so the output stays byte-for-byte predictable:

    offset  width  field
    0       100    name, NUL padded
    100     8      mode      "000644\\0"
    108     8      uid       "000000\\0"
    116     8      gid       "000000\\0"
    124     12     size      11 octal digits + NUL
    136     12     mtime     11 octal digits + NUL
    148     8      checksum  6 octal digits + NUL + space
    156     1      typeflag
    257     6      magic     "ustar\\0"
    263     2      version   "00"

Every entry is padded to a 512 byte boundary and the archive ends with two
zero blocks.
"""

import gzip
import time
from dataclasses import dataclass
from typing import Optional

from release_db.errors import ArchiveError, ArchiveFieldOverflowError, ArchiveNameTooLongError

BLOCK_SIZE = 512
END_OF_ARCHIVE = b"\0" * (2 * BLOCK_SIZE)

NAME_SIZE = 100
FILE_MODE = b"000644\0"
OWNER_ID = b"000000\0"
MAGIC = b"ustar\0"
VERSION = b"00"
REGULAR_FILE = "0"


@dataclass(frozen=True)
class ArchiveEntry:
    """A named blob to place in the container."""
    path: str
    content: bytes
    mtime: Optional[int] = None
    typeflag: str = REGULAR_FILE


def _octal(value: int, digits: int, field_name: str) -> bytes:
    if value < 0 or value >= 8 ** digits:
        raise ArchiveFieldOverflowError(
            f"{field_name} {value} does not fit in {digits} octal digits"
        )
    return f"{value:0{digits}o}".encode("ascii") + b"\0"


def _typeflag(typeflag: str) -> bytes:
    if len(typeflag) != 1 or not typeflag.isascii():
        raise ArchiveError(f"typeflag must be one ASCII character, got {typeflag!r}")
    return typeflag.encode("ascii")


def header_checksum(header: bytes) -> int:
    """Unsigned byte sum with the checksum field counted as spaces."""
    return sum(header[:148]) + 8 * ord(" ") + sum(header[156:])


def make_header(name: str, size: int, mtime: int, typeflag: str = REGULAR_FILE) -> bytes:
    """Build one 512 byte ustar header block."""
    encoded_name = name.encode("utf-8")
    if len(encoded_name) > NAME_SIZE:
        raise ArchiveNameTooLongError(
            f"Member name is {len(encoded_name)} bytes, limit is {NAME_SIZE}: {name}"
        )

    buf = bytearray(BLOCK_SIZE)
    buf[0:len(encoded_name)] = encoded_name
    buf[100:108] = FILE_MODE + b"\0"
    buf[108:116] = OWNER_ID + b"\0"
    buf[116:124] = OWNER_ID + b"\0"
    buf[124:136] = _octal(size, 11, "size")
    buf[136:148] = _octal(mtime, 11, "mtime")
    buf[148:156] = b" " * 8
    buf[156:157] = _typeflag(typeflag)
    buf[257:263] = MAGIC
    buf[263:265] = VERSION

    checksum = header_checksum(buf)
    buf[148:156] = f"{checksum:06o}".encode("ascii") + b"\0 "
    return bytes(buf)


def padding(length: int) -> bytes:
    """Zero bytes needed to bring length up to the next block boundary."""
    return b"\0" * ((BLOCK_SIZE - length % BLOCK_SIZE) % BLOCK_SIZE)


def build_archive(entries: list[ArchiveEntry], now: Optional[int] = None) -> bytes:
    """Pack entries, in order, into an uncompressed tar stream.

    Entries without an explicit mtime get the build time, so two builds of
    the same input differ in their header mtimes.
    """
    if now is None:
        now = int(time.time())

    blocks = []
    for entry in entries:
        mtime = entry.mtime if entry.mtime is not None else now
        blocks.append(make_header(entry.path, len(entry.content), mtime, entry.typeflag))
        blocks.append(entry.content)
        blocks.append(padding(len(entry.content)))

    blocks.append(END_OF_ARCHIVE)
    return b"".join(blocks)


def compress(data: bytes, reproducible: bool = False) -> bytes:
    """Gzip a finished container in one shot."""
    if reproducible:
        return gzip.compress(data, mtime=0)
    return gzip.compress(data)
