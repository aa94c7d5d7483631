"""Exception hierarchy for AI Photo Studio.

Library-layer errors are raised by :mod:`photostudio.core.library` and caught
at the HTTP route boundary, where they become either a safe fallback (an empty
library) or a user-visible message.  Nothing in this hierarchy is meant to
escape as an unhandled fault.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from photostudio.core.library import Library


class PhotoStudioError(Exception):
    """Base class for all application errors."""


class StorageError(PhotoStudioError):
    """A key/value storage backend failed to read or write a value."""


class StorageQuotaError(StorageError):
    """A write would exceed the storage backend's capacity."""


class LibraryError(PhotoStudioError):
    """Base class for image library failures."""


class CorruptStoreError(LibraryError):
    """The persisted library is not a JSON array.

    Callers recover by starting from an empty library.
    """


class ImportParseError(LibraryError):
    """An import file is not valid JSON or its top level is not an array."""


class PersistenceError(LibraryError):
    """The library could not be written to storage.

    The mutated in-memory library is attached as :attr:`library` so the
    caller can keep using it for the rest of the session.
    """

    def __init__(self, message: str, library: Library):
        super().__init__(message)
        self.library = library


class GenerationError(PhotoStudioError):
    """The remote image service failed or returned no image."""


class InvalidImageError(PhotoStudioError):
    """Uploaded bytes or a data URL could not be read as an image."""
