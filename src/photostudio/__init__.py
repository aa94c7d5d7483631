"""AI Photo Studio - prompt-driven image generation with a local image library."""

__version__ = "0.1.0"

from photostudio.core.config import PhotoStudioConfig, config
from photostudio.core.library import Library, LibraryStore, SavedImage

__all__ = [
    "Library",
    "LibraryStore",
    "PhotoStudioConfig",
    "SavedImage",
    "config",
]
