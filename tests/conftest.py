"""Shared fixtures: synthetic BSA archives built in memory."""

import struct
import zlib
from pathlib import Path
from typing import List, Tuple

import lz4.frame
import pytest

from bsa_toolkit.bsa.header import (
    BA2_MAGIC,
    BSA_MAGIC,
    FILE_RECORD_SIZE,
    HEADER_SIZE,
    VERSION_SKYRIM_SE,
    ArchiveFlag,
    FileTypeFlag,
    folder_record_size,
)

SAMPLE_FILES = [
    ("meshes/armor/helmet.nif", b"NIF helmet data"),
    ("meshes/armor/boots.nif", b"NIF boots data!!"),
    ("textures/armor/helmet.dds", b"DDS " + b"\x00" * 60),
    ("sound/fx/hit.wav", b"RIFF....WAVE"),
]


def name_hash(name: str) -> int:
    return (len(name) << 32) | zlib.crc32(name.encode("ascii"))


def build_bsa(
    files: List[Tuple[str, bytes]],
    version: int = 104,
    compressed: bool = False,
    toggle: Tuple[str, ...] = (),
    folder_names: bool = True,
    file_names: bool = True,
    embed_names: bool = False,
    big_endian: bool = False,
    extra_flags: int = 0,
    file_flags: int = FileTypeFlag.MESHES | FileTypeFlag.TEXTURES,
    header_size: int = HEADER_SIZE,
    magic: bytes = BSA_MAGIC,
) -> bytes:
    """Lay out a BSA: header, folder records, file blocks, name tables, data."""
    order = ">" if big_endian else "<"

    folders = {}
    for path, data in files:
        folder, _, name = path.rpartition("/")
        folders.setdefault(folder or ".", []).append((path, name, data))

    flags = extra_flags
    if folder_names:
        flags |= ArchiveFlag.HAS_DIRECTORY_NAMES
    if file_names:
        flags |= ArchiveFlag.HAS_FILE_NAMES
    if compressed:
        flags |= ArchiveFlag.COMPRESSED_BY_DEFAULT
    if embed_names:
        flags |= ArchiveFlag.EMBEDDED_FILE_NAMES
    if big_endian:
        flags |= ArchiveFlag.BIG_ENDIAN_RECORDS

    folder_table = b"".join(name.encode("ascii") + b"\x00" for name in folders)
    file_table = b"".join(
        name.encode("ascii") + b"\x00" for entries in folders.values() for _, name, _ in entries
    )

    frs = folder_record_size(version)
    records_start = HEADER_SIZE + len(folders) * frs
    tables_start = records_start + len(files) * FILE_RECORD_SIZE
    data_offset = tables_start
    if folder_names:
        data_offset += len(folder_table)
    if file_names:
        data_offset += len(file_table)

    folder_records = b""
    file_records = b""
    data_blocks = b""
    block_offset = records_start
    for folder, entries in folders.items():
        if version == VERSION_SKYRIM_SE:
            folder_records += struct.pack(order + "QIIQ", name_hash(folder), len(entries), 0, block_offset)
        else:
            folder_records += struct.pack(order + "QII", name_hash(folder), len(entries), block_offset)
        block_offset += len(entries) * FILE_RECORD_SIZE

        for path, name, data in entries:
            is_compressed = compressed != (path in toggle)
            block = b""
            if embed_names:
                block += bytes([len(path)]) + path.encode("ascii")
            if is_compressed:
                packed = lz4.frame.compress(data) if version == VERSION_SKYRIM_SE else zlib.compress(data)
                block += struct.pack(order + "I", len(data)) + packed
            else:
                block += data

            size = len(block) | (0x40000000 if path in toggle else 0)
            file_records += struct.pack(
                order + "QII", name_hash(name), size, data_offset + len(data_blocks)
            )
            data_blocks += block

    header = magic + struct.pack(
        "<8I",
        version,
        header_size,
        flags,
        len(folders),
        len(files),
        len(folder_table),
        len(file_table),
        file_flags,
    )
    body = folder_records + file_records
    if folder_names:
        body += folder_table
    if file_names:
        body += file_table
    return header + body + data_blocks


def build_ba2(version: int = 1, archive_type: bytes = b"GNRL", file_count: int = 3) -> bytes:
    """A bare BA2 header whose name table starts right after it."""
    return BA2_MAGIC + struct.pack("<I4sIQ", version, archive_type, file_count, 24)


@pytest.fixture
def sample_files():
    return list(SAMPLE_FILES)


@pytest.fixture
def bsa_bytes():
    """The archive builder, for tests that want raw bytes."""
    return build_bsa


@pytest.fixture
def make_archive(tmp_path):
    """Write a synthetic archive to tmp_path and return its path."""

    def _make(files=None, name: str = "test.bsa", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_bsa(list(SAMPLE_FILES) if files is None else files, **kwargs))
        return path

    return _make


@pytest.fixture
def sample_archive(make_archive):
    return make_archive()


@pytest.fixture
def make_ba2(tmp_path):
    """Write a BA2 header to tmp_path and return its path."""

    def _make(name: str = "test.ba2", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_ba2(**kwargs))
        return path

    return _make


@pytest.fixture
def ba2_bytes():
    """The BA2 header builder, for tests that want raw bytes."""
    return build_ba2
