"""Directory walker: folder records, file records and name tables.

Everything is checked against the archive's known size before it is
read, so a malformed count or offset fails fast instead of reading
garbage past the end of the file.
"""

from typing import List

from ..utils.binary import BinaryReader
from .errors import CorruptArchiveError
from .header import FILE_RECORD_SIZE, VERSION_SKYRIM_SE, BSAHeader, FileRecord, FolderRecord


def walk_directory(reader: BinaryReader, header: BSAHeader) -> List[FolderRecord]:
    """Read every folder record and its file records, then resolve names.

    Folders and files keep their on-disk order.
    """
    if header.directory_size > reader.size:
        raise CorruptArchiveError(
            f"archive is truncated: directory needs {header.directory_size} bytes, "
            f"file has {reader.size}"
        )

    reader.seek(header.header_size)
    reader.byte_order = header.record_byte_order

    folders = _read_folder_records(reader, header)
    _read_file_records(reader, header, folders)
    _resolve_names(reader, header, folders)
    return folders


def _read_folder_records(reader: BinaryReader, header: BSAHeader) -> List[FolderRecord]:
    folders = []
    for _ in range(header.folder_count):
        name_hash = reader.read_u64()
        file_count = reader.read_u32()
        if header.version == VERSION_SKYRIM_SE:
            reader.skip(4)  # padding
            offset = reader.read_u64()
        else:
            offset = reader.read_u32()
        folders.append(FolderRecord(name_hash=name_hash, file_count=file_count, offset=offset))
    return folders


def _read_file_records(
    reader: BinaryReader, header: BSAHeader, folders: List[FolderRecord]
) -> None:
    remaining_files = header.file_count

    for index, folder in enumerate(folders):
        if folder.file_count > remaining_files:
            raise CorruptArchiveError(
                f"folder {index} declares {folder.file_count} files, "
                f"only {remaining_files} left of {header.file_count}"
            )
        block_end = folder.offset + folder.file_count * FILE_RECORD_SIZE
        if block_end > reader.size:
            raise CorruptArchiveError(
                f"folder {index} file block at 0x{folder.offset:X} runs past end of file"
            )
        remaining_files -= folder.file_count

        reader.seek(folder.offset)
        for _ in range(folder.file_count):
            record = FileRecord(
                name_hash=reader.read_u64(),
                size=reader.read_u32(),
                offset=reader.read_u32(),
            )
            if record.offset + record.packed_size > reader.size:
                raise CorruptArchiveError(
                    f"file record 0x{record.name_hash:016X} data "
                    f"(offset 0x{record.offset:X}, {record.packed_size} bytes) runs past end of file"
                )
            folder.files.append(record)

    if remaining_files:
        raise CorruptArchiveError(
            f"folders account for {header.file_count - remaining_files} files, "
            f"header declares {header.file_count}"
        )


def _resolve_names(reader: BinaryReader, header: BSAHeader, folders: List[FolderRecord]) -> None:
    """Zip the folder and file name tables onto the records, in walk order."""
    reader.seek(
        header.header_size
        + header.folder_count * header.folder_record_size
        + header.file_count * FILE_RECORD_SIZE
    )

    if header.has_directory_names:
        table = reader.read_bytes(header.total_folder_name_length)
        names = split_name_table(table, header.folder_count, "folder")
        for folder, name in zip(folders, names):
            folder.name = name

    if header.has_file_names:
        table = reader.read_bytes(header.total_file_name_length)
        names = iter(split_name_table(table, header.file_count, "file"))
        for folder in folders:
            for record in folder.files:
                record.name = next(names)


def split_name_table(table: bytes, count: int, kind: str) -> List[str]:
    """Split a table of null-terminated strings, requiring exactly ``count``."""
    if not table:
        if count:
            raise CorruptArchiveError(f"{kind} name table is empty, expected {count} names")
        return []
    if not table.endswith(b"\x00"):
        raise CorruptArchiveError(f"{kind} name table is not null-terminated")

    names = table[:-1].split(b"\x00")
    if len(names) != count:
        raise CorruptArchiveError(
            f"{kind} name table holds {len(names)} names, expected {count}"
        )
    return [name.decode("cp1252", errors="replace") for name in names]
