"""Core components for AI Photo Studio.

The image library, its storage backends, encoded image helpers, presets,
the remote generation service and the application state transitions.
"""

from photostudio.core.config import PhotoStudioConfig, config
from photostudio.core.errors import (
    CorruptStoreError,
    GenerationError,
    ImportParseError,
    PersistenceError,
)
from photostudio.core.library import LibraryStore, SavedImage
from photostudio.core.storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "PhotoStudioConfig",
    "config",
    "CorruptStoreError",
    "GenerationError",
    "ImportParseError",
    "PersistenceError",
    "LibraryStore",
    "SavedImage",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
]
