"""String-valued key/value storage backends.

The image library never talks to the file system directly.  It is handed a
:class:`KeyValueStorage` and reads or writes one string under one key, the
same contract browser local storage offers.  :class:`MemoryStorage` is the
test double; :class:`FileStorage` is what the web application uses.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from photostudio.core.errors import StorageError, StorageQuotaError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class KeyValueStorage(ABC):
    """Get/set strings by key."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or ``None`` if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the value stored under *key*.

        Raises:
            StorageQuotaError: If the value does not fit.
            StorageError: If the backend cannot write.
        """


class MemoryStorage(KeyValueStorage):
    """In-memory storage, optionally with a character quota across all keys."""

    def __init__(self, initial: dict[str, str] | None = None, quota: int | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self.quota = quota

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._values.items() if k != key)
            if used + len(value) > self.quota:
                raise StorageQuotaError(
                    f"Storing {len(value)} characters under '{key}' exceeds quota of {self.quota}"
                )
        self._values[key] = value


class FileStorage(KeyValueStorage):
    """Store each key as ``<key>.json`` inside a directory.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a failed write never leaves a half-written value behind.
    """

    def __init__(self, directory: Path, quota_bytes: int | None = None):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.quota_bytes = quota_bytes
        logger.info(f"Initialized file storage at {self.directory}")

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Error reading {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        encoded = value.encode("utf-8")

        if self.quota_bytes is not None and len(encoded) > self.quota_bytes:
            raise StorageQuotaError(
                f"Storing {len(encoded)} bytes under '{key}' exceeds quota of {self.quota_bytes}"
            )

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb", dir=self.directory, prefix=f".{key}.", suffix=".tmp", delete=False
            ) as handle:
                tmp_name = handle.name
                handle.write(encoded)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Error writing {path}: {e}") from e

        logger.debug(f"Wrote {len(encoded)} bytes to {path}")
