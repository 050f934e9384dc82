"""BSA (Bethesda Softworks Archive) reading."""

from .errors import (
    ArchiveError,
    ArchiveIOError,
    CorruptArchiveError,
    InvalidFormatError,
    NotFoundError,
    UnsupportedCompressionError,
)
from .header import ArchiveEntry, ArchiveFlag, ArchiveInfo, BSAHeader, ExtractResult, FileTypeFlag
from .reader import BSAReader

__all__ = [
    "ArchiveEntry",
    "ArchiveError",
    "ArchiveFlag",
    "ArchiveIOError",
    "ArchiveInfo",
    "BSAHeader",
    "BSAReader",
    "CorruptArchiveError",
    "ExtractResult",
    "FileTypeFlag",
    "InvalidFormatError",
    "NotFoundError",
    "UnsupportedCompressionError",
]
