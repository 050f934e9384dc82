"""Exceptions raised while opening and reading BSA archives."""

from typing import List, Optional


class ArchiveError(Exception):
    """Base class for archive failures.

    ``suggestions`` carries remediation hints that the service passes on
    to the caller unchanged.
    """

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.suggestions = list(suggestions) if suggestions else []


class NotFoundError(ArchiveError):
    """The archive path does not resolve to an existing file."""


class InvalidFormatError(ArchiveError):
    """The file is not (recognizably) a BSA archive."""


class CorruptArchiveError(ArchiveError):
    """The archive is well-signed but internally inconsistent."""


class ArchiveIOError(ArchiveError):
    """An underlying read failed for reasons unrelated to the format."""


class UnsupportedCompressionError(ArchiveError):
    """No codec is registered for an entry's compression scheme."""
