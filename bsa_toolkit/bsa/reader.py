"""BSA archive reader and extractor."""

import os
from pathlib import Path
from typing import BinaryIO, Dict, KeysView, List, Optional, Tuple, Union

from ..utils.binary import BinaryReader
from .compression import decompress
from .errors import ArchiveIOError, CorruptArchiveError, NotFoundError
from .header import (
    ArchiveEntry,
    ArchiveFlag,
    ArchiveInfo,
    BSAHeader,
    FileRecord,
    FileTypeFlag,
    FolderRecord,
    decode_flags,
    read_header,
)
from .walker import walk_directory


def normalize_path(name: str) -> str:
    """Lower-case a name and use forward slashes, without outer separators."""
    return name.replace("\\", "/").strip("/").lower()


def virtual_path(folder: FolderRecord, record: FileRecord) -> Tuple[str, bool]:
    """Join folder and file names; fall back to hashes for missing names.

    A file name that is empty after normalizing counts as missing.
    Returns the path and whether both names were known.
    """
    folder_name = normalize_path(folder.name) if folder.name is not None else None
    file_name = normalize_path(record.name) if record.name is not None else ""
    named = folder_name is not None and bool(file_name)

    if folder_name is None:
        folder_name = f"#{folder.name_hash:016x}"
    if not file_name:
        file_name = f"#{record.name_hash:016x}"

    if folder_name in ("", "."):
        return file_name, named
    return f"{folder_name}/{file_name}", named


class BSAReader:
    """Reader for BSA (Bethesda Softworks Archive) files.

    The directory is parsed once on open; file contents are only read by
    read_file(). The reader owns one file handle and is not thread-safe.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file: Optional[BinaryIO] = None
        self._reader: Optional[BinaryReader] = None
        self._header: Optional[BSAHeader] = None
        self._folders: List[FolderRecord] = []
        self._index: Dict[str, ArchiveEntry] = {}
        self._file_size = 0

    def __enter__(self) -> "BSAReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the archive and parse the header and directory.

        The file handle is closed again if any step fails.
        """
        if not self.path.is_file():
            raise NotFoundError(f"File not found: {self.path}", suggestions=["Check the archive path"])

        try:
            self._file = open(self.path, "rb")
        except OSError as e:
            raise ArchiveIOError(f"cannot open {self.path}: {e.strerror or e}")

        try:
            self._reader = BinaryReader(self._file)
            self._file_size = self._reader.size
            self._header = read_header(self._reader)
            self._folders = walk_directory(self._reader, self._header)
            self._index = {}
            self._build_index()
        except EOFError as e:
            self.close()
            raise CorruptArchiveError(f"archive is truncated: {e}")
        except OSError as e:
            self.close()
            raise ArchiveIOError(f"read failed: {e.strerror or e}")
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        """Close the archive file."""
        if self._file:
            self._file.close()
            self._file = None
            self._reader = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    @property
    def header(self) -> BSAHeader:
        if not self._header:
            raise RuntimeError("Archive not opened")
        return self._header

    @property
    def folders(self) -> List[FolderRecord]:
        return self._folders

    @property
    def entries(self) -> List[ArchiveEntry]:
        return list(self._index.values())

    def _build_index(self) -> None:
        """Map virtual paths to entries in walk order, resolving decoded sizes."""
        for folder in self._folders:
            for record in folder.files:
                path, named = virtual_path(folder, record)
                if path in self._index:
                    raise CorruptArchiveError(f"duplicate entry {path}")

                compressed = self.header.compressed_by_default != record.compression_toggled
                data_offset, data_size = self._locate_data(record)
                if compressed:
                    if data_size < 4:
                        raise CorruptArchiveError(
                            f"{path}: compressed entry too small for its size prefix"
                        )
                    self._reader.seek(data_offset)
                    record.raw_size = self._reader.read_u32()
                else:
                    record.raw_size = data_size

                self._index[path] = ArchiveEntry(
                    path=path,
                    packed_size=record.packed_size,
                    raw_size=record.raw_size,
                    compressed=compressed,
                    offset=record.offset,
                    folder_hash=folder.name_hash,
                    file_hash=record.name_hash,
                    named=named,
                )

    def _locate_data(self, record: FileRecord) -> Tuple[int, int]:
        """Return (offset, size) of the record's data past any embedded name."""
        offset = record.offset
        size = record.packed_size
        if self.header.embeds_file_names:
            if size < 1:
                raise CorruptArchiveError(
                    f"file record 0x{record.name_hash:016X} is too small for its embedded name"
                )
            self._reader.seek(offset)
            name_length = self._reader.read_u8() + 1
            if name_length > size:
                raise CorruptArchiveError(
                    f"file record 0x{record.name_hash:016X} embedded name overruns its data"
                )
            offset += name_length
            size -= name_length
        return offset, size

    def get_info(self) -> ArchiveInfo:
        """Snapshot the archive metadata. Does no I/O."""
        header = self.header
        return ArchiveInfo(
            path=str(self.path),
            file_name=self.path.name,
            version=header.version,
            archive_flags=decode_flags(header.archive_flags, ArchiveFlag),
            file_flags=decode_flags(header.file_flags, FileTypeFlag),
            folder_count=header.folder_count,
            file_count=len(self._index),
            compressed_count=sum(1 for e in self._index.values() if e.compressed),
            total_uncompressed_size=sum(e.raw_size for e in self._index.values()),
            file_size=self._file_size,
        )

    def enumerate_entries(self) -> KeysView:
        """Virtual paths in walk order.

        The returned view can be iterated any number of times.
        """
        return self._index.keys()

    def list_files(self) -> List[str]:
        """List all virtual paths in the archive."""
        return list(self._index)

    def get_entry(self, path: str) -> Optional[ArchiveEntry]:
        """Find an entry by path (case and separator insensitive)."""
        return self._index.get(normalize_path(path))

    def _resolve(self, entry: Union[str, ArchiveEntry]) -> ArchiveEntry:
        if isinstance(entry, ArchiveEntry):
            return entry
        found = self.get_entry(entry)
        if found is None:
            raise KeyError(entry)
        return found

    def read_file(self, entry: Union[str, ArchiveEntry]) -> bytes:
        """Read and decode a single file from the archive."""
        entry = self._resolve(entry)
        if not self._reader:
            raise RuntimeError("Archive not opened")

        record = FileRecord(name_hash=entry.file_hash, size=entry.packed_size, offset=entry.offset)
        offset, size = self._locate_data(record)
        self._reader.seek(offset)
        if not entry.compressed:
            return self._reader.read_bytes(size)

        self._reader.skip(4)  # decoded size, already known
        return decompress(self.header, self._reader.read_bytes(size - 4), entry.raw_size)

    def extract_file(self, entry: Union[str, ArchiveEntry], output_dir: Path) -> Path:
        """Extract one file below output_dir, keeping its virtual path."""
        entry = self._resolve(entry)

        root = Path(output_dir).resolve()
        output_path = (root / entry.path).resolve()
        if os.path.commonpath([str(root), str(output_path)]) != str(root):
            raise CorruptArchiveError(f"{entry.path}: refusing to write outside {output_dir}")

        data = self.read_file(entry)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        return output_path
