"""Tests for the directory walker."""

import struct

import pytest

from bsa_toolkit.bsa.errors import CorruptArchiveError
from bsa_toolkit.bsa.header import read_header
from bsa_toolkit.bsa.walker import split_name_table, walk_directory
from bsa_toolkit.utils.binary import BinaryReader

# Layout of the sample archive (v104): 36-byte header, three 16-byte folder
# records, four 16-byte file records.
FIRST_FOLDER_RECORD = 36
FIRST_FILE_RECORD = 36 + 3 * 16


def walk(data: bytes):
    reader = BinaryReader(data)
    header = read_header(reader)
    return walk_directory(reader, header)


def patch_u32(data: bytes, offset: int, value: int) -> bytes:
    return data[:offset] + struct.pack("<I", value) + data[offset + 4 :]


class TestWalkDirectory:
    """Tests for walk_directory."""

    def test_folders_and_files_in_disk_order(self, bsa_bytes, sample_files):
        folders = walk(bsa_bytes(sample_files))

        assert [f.name for f in folders] == ["meshes/armor", "textures/armor", "sound/fx"]
        assert [len(f.files) for f in folders] == [2, 1, 1]
        assert [r.name for r in folders[0].files] == ["helmet.nif", "boots.nif"]
        assert folders[1].files[0].name == "helmet.dds"

    def test_folder_offsets_point_at_file_blocks(self, bsa_bytes, sample_files):
        folders = walk(bsa_bytes(sample_files))
        assert folders[0].offset == FIRST_FILE_RECORD
        assert folders[1].offset == FIRST_FILE_RECORD + 2 * 16

    def test_record_sizes(self, bsa_bytes):
        folders = walk(bsa_bytes([("a/b.txt", b"12345")]))
        record = folders[0].files[0]
        assert record.packed_size == 5
        assert not record.compression_toggled

    def test_sse_folder_records(self, bsa_bytes, sample_files):
        folders = walk(bsa_bytes(sample_files, version=105))
        assert [f.name for f in folders] == ["meshes/armor", "textures/armor", "sound/fx"]
        assert folders[0].offset == 36 + 3 * 24

    def test_big_endian_records(self, bsa_bytes, sample_files):
        folders = walk(bsa_bytes(sample_files, big_endian=True))
        assert [len(f.files) for f in folders] == [2, 1, 1]
        assert folders[0].offset == FIRST_FILE_RECORD
        assert folders[2].files[0].name == "hit.wav"

    def test_names_absent(self, bsa_bytes, sample_files):
        folders = walk(bsa_bytes(sample_files, folder_names=False, file_names=False))
        assert all(f.name is None for f in folders)
        assert all(r.name is None for f in folders for r in f.files)
        assert folders[0].name_hash != folders[1].name_hash

    def test_empty_archive(self, bsa_bytes):
        assert walk(bsa_bytes([])) == []

    def test_truncated_directory(self, bsa_bytes, sample_files):
        data = bsa_bytes(sample_files)
        with pytest.raises(CorruptArchiveError, match="truncated"):
            walk(data[:100])

    def test_folder_block_past_end_of_file(self, bsa_bytes, sample_files):
        data = patch_u32(bsa_bytes(sample_files), FIRST_FOLDER_RECORD + 12, 0xFFFFFF00)
        with pytest.raises(CorruptArchiveError, match="past end of file"):
            walk(data)

    def test_folder_claims_too_many_files(self, bsa_bytes, sample_files):
        data = patch_u32(bsa_bytes(sample_files), FIRST_FOLDER_RECORD + 8, 10)
        with pytest.raises(CorruptArchiveError, match="declares 10 files"):
            walk(data)

    def test_folder_counts_short_of_header(self, bsa_bytes, sample_files):
        data = patch_u32(bsa_bytes(sample_files), FIRST_FOLDER_RECORD + 2 * 16 + 8, 0)
        with pytest.raises(CorruptArchiveError, match="header declares 4"):
            walk(data)

    def test_file_data_past_end_of_file(self, bsa_bytes, sample_files):
        data = patch_u32(bsa_bytes(sample_files), FIRST_FILE_RECORD + 12, 0xFFFFFF00)
        with pytest.raises(CorruptArchiveError, match="past end of file"):
            walk(data)

    def test_file_name_table_count_mismatch(self, bsa_bytes, sample_files):
        data = bsa_bytes(sample_files)
        # Drop "hit.wav\0" from the declared file name table length
        declared = struct.unpack_from("<I", data, 28)[0]
        data = patch_u32(data, 28, declared - len(b"hit.wav\x00"))
        with pytest.raises(CorruptArchiveError, match="holds 3 names, expected 4"):
            walk(data)

    def test_folder_name_table_not_terminated(self, bsa_bytes, sample_files):
        data = bsa_bytes(sample_files)
        declared = struct.unpack_from("<I", data, 24)[0]
        data = patch_u32(data, 24, declared + 1)
        with pytest.raises(CorruptArchiveError, match="not null-terminated"):
            walk(data)


class TestSplitNameTable:
    """Tests for split_name_table."""

    def test_split(self):
        assert split_name_table(b"a\x00bc\x00", 2, "file") == ["a", "bc"]

    def test_empty_table_with_no_names(self):
        assert split_name_table(b"", 0, "file") == []

    def test_empty_table_with_names_expected(self):
        with pytest.raises(CorruptArchiveError, match="empty"):
            split_name_table(b"", 1, "folder")

    def test_too_many_names(self):
        with pytest.raises(CorruptArchiveError, match="holds 3 names"):
            split_name_table(b"a\x00b\x00c\x00", 2, "file")
