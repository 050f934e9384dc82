"""BSA header, directory record structures and the header parser."""

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, List, Optional, Type

from ..utils.binary import BIG_ENDIAN, LITTLE_ENDIAN, BinaryReader
from .errors import InvalidFormatError

# BSA magic bytes
BSA_MAGIC = b"BSA\x00"
# Fallout 4 / 76 archives; only their header can be read (see ba2.py)
BA2_MAGIC = b"BTDX"

VERSION_OBLIVION = 103
VERSION_SKYRIM = 104  # also Fallout 3 / New Vegas
VERSION_SKYRIM_SE = 105
SUPPORTED_VERSIONS = (VERSION_OBLIVION, VERSION_SKYRIM, VERSION_SKYRIM_SE)

HEADER_SIZE = 36
FILE_RECORD_SIZE = 16

# Set in FileRecord.size when the entry's compression differs from the default
COMPRESSION_TOGGLE_BIT = 0x40000000
SIZE_MASK = 0x3FFFFFFF


class ArchiveFlag(IntFlag):
    """Global archive properties."""

    HAS_DIRECTORY_NAMES = 0x001
    HAS_FILE_NAMES = 0x002
    COMPRESSED_BY_DEFAULT = 0x004
    RETAIN_NAMES_ON_DECOMPRESS = 0x008
    BIG_ENDIAN_RECORDS = 0x040
    EMBEDDED_FILE_NAMES_WITH_EXTENSIONS = 0x080
    EMBEDDED_FILE_NAMES = 0x100
    XBOX360_COMPRESSED = 0x200


class FileTypeFlag(IntFlag):
    """Asset categories present in the archive."""

    MESHES = 0x001
    TEXTURES = 0x002
    MENUS = 0x004
    SOUNDS = 0x008
    VOICES = 0x010
    SHADERS = 0x020
    TREES = 0x040
    FONTS = 0x080
    MISCELLANEOUS = 0x100


def decode_flags(value: int, flag_type: Type[IntFlag]) -> Dict[str, bool]:
    """Expand a bitset into a {flag_name: bool} mapping, in bit order."""
    return {flag.name.lower(): bool(value & flag) for flag in flag_type}


def folder_record_size(version: int) -> int:
    """SSE widened the folder record offset to 64 bits."""
    return 24 if version == VERSION_SKYRIM_SE else 16


@dataclass
class BSAHeader:
    """BSA archive header (36 bytes)."""

    magic: bytes  # 4 bytes: "BSA\0"
    version: int  # 4 bytes: 103, 104 or 105
    header_size: int  # 4 bytes: always 36
    archive_flags: int  # 4 bytes: ArchiveFlag bitset
    folder_count: int  # 4 bytes
    file_count: int  # 4 bytes: total across all folders
    total_folder_name_length: int  # 4 bytes: folder name table size
    total_file_name_length: int  # 4 bytes: file name table size
    file_flags: int  # 4 bytes: FileTypeFlag bitset

    def has(self, flag: ArchiveFlag) -> bool:
        return bool(self.archive_flags & flag)

    @property
    def has_directory_names(self) -> bool:
        return self.has(ArchiveFlag.HAS_DIRECTORY_NAMES)

    @property
    def has_file_names(self) -> bool:
        return self.has(ArchiveFlag.HAS_FILE_NAMES)

    @property
    def compressed_by_default(self) -> bool:
        return self.has(ArchiveFlag.COMPRESSED_BY_DEFAULT)

    @property
    def embeds_file_names(self) -> bool:
        # Oblivion reused this bit for something else
        return self.version != VERSION_OBLIVION and self.has(ArchiveFlag.EMBEDDED_FILE_NAMES)

    @property
    def record_byte_order(self) -> str:
        return BIG_ENDIAN if self.has(ArchiveFlag.BIG_ENDIAN_RECORDS) else LITTLE_ENDIAN

    @property
    def folder_record_size(self) -> int:
        return folder_record_size(self.version)

    @property
    def directory_size(self) -> int:
        """Minimum number of bytes the header claims for its directory."""
        size = self.header_size
        size += self.folder_count * self.folder_record_size
        size += self.file_count * FILE_RECORD_SIZE
        if self.has_directory_names:
            size += self.total_folder_name_length
        if self.has_file_names:
            size += self.total_file_name_length
        return size


@dataclass
class FolderRecord:
    """Folder record (16 bytes, 24 bytes in SSE archives)."""

    name_hash: int  # 8 bytes
    file_count: int  # 4 bytes
    offset: int  # 4 bytes (8 bytes in SSE): absolute offset of the file-record block

    # Resolved from the folder name table
    name: Optional[str] = None
    files: List["FileRecord"] = field(default_factory=list)


@dataclass
class FileRecord:
    """File record (16 bytes)."""

    name_hash: int  # 8 bytes
    size: int  # 4 bytes: packed size plus the compression toggle bit
    offset: int  # 4 bytes: absolute offset of the data block

    # Resolved from the file name table
    name: Optional[str] = None
    # Filled in by the reader for compressed entries
    raw_size: Optional[int] = None

    @property
    def packed_size(self) -> int:
        return self.size & SIZE_MASK

    @property
    def compression_toggled(self) -> bool:
        return bool(self.size & COMPRESSION_TOGGLE_BIT)


@dataclass(frozen=True)
class ArchiveEntry:
    """One packed file, as reported by listings."""

    path: str
    packed_size: int
    raw_size: int
    compressed: bool
    offset: int
    folder_hash: int
    file_hash: int
    named: bool = True

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "size": self.raw_size,
            "packedSize": self.packed_size,
            "compressed": self.compressed,
            "named": self.named,
        }


@dataclass(frozen=True)
class ArchiveInfo:
    """Read-only snapshot of an archive's metadata."""

    path: str
    file_name: str
    version: int
    archive_flags: Dict[str, bool]
    file_flags: Dict[str, bool]
    folder_count: int
    file_count: int
    compressed_count: int
    total_uncompressed_size: int
    file_size: int
    type: str = "BSA"

    def to_dict(self) -> dict:
        return {
            "fileName": self.file_name,
            "type": self.type,
            "version": self.version,
            "archiveFlags": dict(self.archive_flags),
            "fileFlags": dict(self.file_flags),
            "folderCount": self.folder_count,
            "fileCount": self.file_count,
            "compressedCount": self.compressed_count,
            "totalUncompressedSize": self.total_uncompressed_size,
            "fileSize": self.file_size,
        }


@dataclass
class ExtractResult:
    """Outcome of extracting (part of) an archive to disk."""

    output_directory: str
    extracted_count: int = 0
    errors: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "extractedCount": self.extracted_count,
            "outputDirectory": self.output_directory,
            "errors": list(self.errors),
        }


def read_header(reader: BinaryReader) -> BSAHeader:
    """Read and validate the 36-byte header at the reader's position.

    Raises InvalidFormatError for anything that is not a supported BSA.
    """
    size = reader.remaining()
    magic = reader.read_bytes(min(size, 4))
    if magic == BA2_MAGIC:
        raise InvalidFormatError(
            "Not a valid BSA archive: BA2 (BTDX) archives use a different layout",
            suggestions=["Open BA2 archives with a BA2-aware tool such as BSArch"],
        )
    if magic != BSA_MAGIC:
        raise InvalidFormatError(f"Not a valid BSA archive: magic {magic!r}, expected {BSA_MAGIC!r}")
    if size < HEADER_SIZE:
        raise InvalidFormatError(
            f"Not a valid BSA archive: file is {reader.size} bytes, header needs {HEADER_SIZE}"
        )

    # The header itself is always little-endian
    reader.byte_order = LITTLE_ENDIAN
    version = reader.read_u32()
    if version not in SUPPORTED_VERSIONS:
        raise InvalidFormatError(f"Not a valid BSA archive: unsupported version {version}")

    header_size = reader.read_u32()
    if header_size != HEADER_SIZE:
        raise InvalidFormatError(
            f"Not a valid BSA archive: header size {header_size}, expected {HEADER_SIZE}"
        )

    return BSAHeader(
        magic=magic,
        version=version,
        header_size=header_size,
        archive_flags=reader.read_u32(),
        folder_count=reader.read_u32(),
        file_count=reader.read_u32(),
        total_folder_name_length=reader.read_u32(),
        total_file_name_length=reader.read_u32(),
        file_flags=reader.read_u32(),
    )
