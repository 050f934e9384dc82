"""Header-only support for Fallout 4 / 76 BA2 archives.

BA2 archives are recognized so that their basic metadata can be shown;
their contents cannot be listed or extracted.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..utils.binary import LITTLE_ENDIAN, BinaryReader
from .errors import ArchiveIOError, InvalidFormatError
from .header import BA2_MAGIC, ArchiveInfo

BA2_HEADER_SIZE = 24


@dataclass
class BA2Header:
    """BA2 file header (24 bytes, little-endian)."""

    magic: bytes  # 0x00: b"BTDX"
    version: int  # 0x04: 1, 2, 3, 7 or 8
    archive_type: str  # 0x08: "GNRL" (general) or "DX10" (textures)
    file_count: int  # 0x0C
    name_table_offset: int  # 0x10: u64


def read_ba2_header(reader: BinaryReader) -> BA2Header:
    """Read the 24-byte BA2 header at the reader's position."""
    if reader.remaining() < BA2_HEADER_SIZE:
        raise InvalidFormatError(
            f"Not a valid BA2 archive: file is {reader.size} bytes, header needs {BA2_HEADER_SIZE}"
        )

    magic = reader.read_bytes(4)
    if magic != BA2_MAGIC:
        raise InvalidFormatError(f"Not a valid BA2 archive: magic {magic!r}, expected {BA2_MAGIC!r}")

    reader.byte_order = LITTLE_ENDIAN
    return BA2Header(
        magic=magic,
        version=reader.read_u32(),
        archive_type=reader.read_bytes(4).rstrip(b"\x00").decode("ascii", errors="replace"),
        file_count=reader.read_u32(),
        name_table_offset=reader.read_u64(),
    )


def read_magic(path: Union[str, Path]) -> bytes:
    """Return the first four bytes of a file (fewer if it is shorter)."""
    try:
        with open(path, "rb") as f:
            return f.read(4)
    except OSError as e:
        raise ArchiveIOError(f"cannot open {path}: {e.strerror or e}")


def read_ba2_info(path: Union[str, Path]) -> ArchiveInfo:
    """Describe a BA2 archive from its header alone."""
    path = Path(path)
    try:
        with open(path, "rb") as f:
            reader = BinaryReader(f)
            header = read_ba2_header(reader)
    except OSError as e:
        raise ArchiveIOError(f"cannot open {path}: {e.strerror or e}")

    return ArchiveInfo(
        path=str(path),
        file_name=path.name,
        version=header.version,
        archive_flags={},
        file_flags={},
        folder_count=0,
        file_count=header.file_count,
        compressed_count=0,
        total_uncompressed_size=0,
        file_size=reader.size,
        type=f"BA2 ({header.archive_type})",
    )
