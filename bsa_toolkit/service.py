"""High-level archive operations returning Result envelopes.

Every public method is total: archive faults come back as failed results
and never propagate to the caller. Each call opens its own reader, so
calls may run concurrently from different threads.
"""

from pathlib import Path
from typing import Callable, List, Optional, TypeVar, Union

from .bsa import (
    ArchiveEntry,
    ArchiveError,
    ArchiveInfo,
    BSAReader,
    CorruptArchiveError,
    ExtractResult,
    InvalidFormatError,
    NotFoundError,
)
from .bsa.ba2 import read_ba2_info, read_magic
from .bsa.header import BA2_MAGIC
from .log import ModLogger, SilentLogger
from .matching import make_filter
from .result import Result

T = TypeVar("T")

PathLike = Union[str, Path, None]


class ArchiveService:
    """Inspect and extract BSA archives."""

    def __init__(self, logger: Optional[ModLogger] = None):
        self._logger = logger or SilentLogger()

    def get_info(self, archive_path: PathLike) -> Result[ArchiveInfo]:
        """Get information about an archive by reading its header and directory.

        BA2 archives are described from their header alone.
        """

        def inspect(path: Path) -> ArchiveInfo:
            if read_magic(path) == BA2_MAGIC:
                self._logger.debug(f"Reading BA2 header: {path}")
                return read_ba2_info(path)
            return self._open_and_run(path, lambda reader: reader.get_info())

        return self._guarded(archive_path, inspect)

    def list_entries(
        self,
        archive_path: PathLike,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Result[List[ArchiveEntry]]:
        """List entries matching the glob filter, at most ``limit`` of them.

        A missing or non-positive limit means no cap.
        """
        matches = make_filter(filter)

        def select(reader: BSAReader) -> List[ArchiveEntry]:
            selected = []
            for entry in reader.entries:
                if limit is not None and 0 < limit <= len(selected):
                    break
                if matches(entry.path):
                    selected.append(entry)
            return selected

        return self._with_archive(archive_path, select)

    def list_files(
        self,
        archive_path: PathLike,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Result[List[str]]:
        """List virtual paths matching the glob filter, at most ``limit`` of them."""
        result = self.list_entries(archive_path, filter=filter, limit=limit)
        if not result.success:
            return Result.fail(result.error, context=result.error_context, suggestions=result.suggestions)
        return Result.ok([entry.path for entry in result.value])

    def extract(
        self,
        archive_path: PathLike,
        output_dir: Union[str, Path],
        filter: Optional[str] = None,
    ) -> Result[ExtractResult]:
        """Extract matching files below output_dir.

        A file that fails to decode is recorded in the result's errors and
        does not stop the remaining files.
        """
        matches = make_filter(filter)
        output_dir = Path(output_dir)

        def run(reader: BSAReader) -> ExtractResult:
            outcome = ExtractResult(output_directory=str(output_dir))
            output_dir.mkdir(parents=True, exist_ok=True)
            for entry in reader.entries:
                if not matches(entry.path):
                    continue
                try:
                    reader.extract_file(entry, output_dir)
                except (ArchiveError, OSError) as e:
                    self._logger.warning(f"Skipping {entry.path}: {e}")
                    outcome.errors.append(f"{entry.path}: {e}")
                else:
                    outcome.extracted_count += 1
            self._logger.debug(f"Extracted {outcome.extracted_count} file(s) to {output_dir}")
            return outcome

        try:
            return self._with_archive(archive_path, run)
        except OSError as e:
            return Result.fail(f"Cannot write to {output_dir}: {e}", suggestions=["Check the output directory"])

    def _with_archive(self, archive_path: PathLike, action: Callable[[BSAReader], T]) -> Result[T]:
        """Open the archive, run action on it and close it again on every path."""
        return self._guarded(archive_path, lambda path: self._open_and_run(path, action))

    def _open_and_run(self, path: Path, action: Callable[[BSAReader], T]) -> T:
        self._logger.debug(f"Opening archive: {path}")
        with BSAReader(path) as reader:
            self._logger.debug(
                f"Read {reader.header.folder_count} folders, {len(reader.enumerate_entries())} files"
            )
            return action(reader)

    def _guarded(self, archive_path: PathLike, action: Callable[[Path], T]) -> Result[T]:
        """Run action on an existing archive path, turning archive errors into failed results."""
        if archive_path is None or not Path(archive_path).is_file():
            return Result.fail(f"File not found: {archive_path}", suggestions=["Check the archive path"])

        try:
            return Result.ok(action(Path(archive_path)))
        except NotFoundError as e:
            return Result.fail(str(e), suggestions=e.suggestions)
        except InvalidFormatError as e:
            self._logger.warning(str(e))
            return Result.fail(str(e), suggestions=e.suggestions)
        except CorruptArchiveError as e:
            self._logger.warning(f"Corrupt archive {archive_path}: {e}")
            return Result.fail(
                f"Not a valid BSA archive, directory is corrupt: {e}",
                suggestions=e.suggestions or ["The archive may be truncated; re-download or re-pack it"],
            )
        except ArchiveError as e:
            self._logger.error(f"Failed to read archive {archive_path}", e)
            return Result.fail(f"Failed to read archive: {e}", suggestions=e.suggestions)
