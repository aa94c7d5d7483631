"""Local image library storage for AI Photo Studio.

The library is an ordered collection of :class:`SavedImage` records, newest
first.  It is persisted as one JSON array under a single storage key, and the
same array shape is used for export files, so an exported file can always be
imported back.

Every mutation rewrites the whole collection; there is no partial update.
Library values are immutable tuples: each operation returns a new library and
leaves its input untouched, which lets the caller keep the previous value when
persistence fails.

The rules for merging an import are deliberately forgiving about content and
strict about shape:

- the payload must be JSON with an array at the top level, otherwise
  :class:`~photostudio.core.errors.ImportParseError` is raised
- array entries that do not look like saved images are dropped silently
- entries whose ``id`` is already in the library are dropped
- survivors are placed in front of the existing entries in file order
"""

from __future__ import annotations

import json
import logging
import math
import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from photostudio.core.errors import (
    CorruptStoreError,
    ImportParseError,
    PersistenceError,
    StorageError,
)
from photostudio.core.images import (
    DEFAULT_MIME_TYPE,
    ImageInput,
    image_input_from_data_url,
    mime_type_from_data_url,
)
from photostudio.core.storage import KeyValueStorage

logger = logging.getLogger(__name__)

LIBRARY_KEY = "ai-photo-studio-library"
EXPORT_FILENAME = "ai-photo-studio-library.json"


class SavedImage(BaseModel):
    """One saved image in the library.

    Field names serialise to the camelCase keys of the library file format
    (``imageDataUrl``, ``mimeType``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    image_data_url: str = Field(alias="imageDataUrl")
    mime_type: str = Field(default=DEFAULT_MIME_TYPE, alias="mimeType")
    prompt: str
    timestamp: int | float

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready dictionary used by storage and export files."""
        return self.model_dump(by_alias=True)


Library = tuple[SavedImage, ...]


def new_image_id(now_ms: int | None = None) -> str:
    """Generate a library id from a millisecond timestamp and a random part."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{uuid.uuid4().hex}"


def new_saved_image(image_data_url: str, prompt: str, now_ms: int | None = None) -> SavedImage:
    """Create a record for a freshly generated image the user chose to keep.

    Args:
        image_data_url: The generated image as a data URL.
        prompt: Prompt that produced the image.  Must not be empty.
        now_ms: Creation time in epoch milliseconds (defaults to now).

    Raises:
        ValueError: If the prompt or the image is empty.
    """
    if not image_data_url:
        raise ValueError("Cannot save an empty image")
    if not prompt:
        raise ValueError("Cannot save an image without a prompt")

    if now_ms is None:
        now_ms = int(time.time() * 1000)

    return SavedImage(
        id=new_image_id(now_ms),
        image_data_url=image_data_url,
        mime_type=mime_type_from_data_url(image_data_url) or DEFAULT_MIME_TYPE,
        prompt=prompt,
        timestamp=now_ms,
    )


def is_saved(library: Library, image_data_url: str) -> bool:
    """Return True if an entry holds exactly this data URL."""
    return any(image.image_data_url == image_data_url for image in library)


def find(library: Library, image_id: str) -> SavedImage | None:
    """Return the entry with the given id, or None."""
    return next((image for image in library if image.id == image_id), None)


def select_for_reuse(image: SavedImage) -> ImageInput:
    """Convert a saved image into a generation input image."""
    return image_input_from_data_url(image.image_data_url, mime_type=image.mime_type)


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_entry(entry: Any) -> SavedImage | None:
    """Validate one raw array entry and build a :class:`SavedImage`.

    Returns None when the entry lacks a non-empty string ``id``,
    ``imageDataUrl`` or ``prompt``, or a numeric ``timestamp``.  A missing
    ``mimeType`` is derived from the data URL.
    """
    if not isinstance(entry, dict):
        return None

    if not (
        _non_empty_string(entry.get("id"))
        and _non_empty_string(entry.get("imageDataUrl"))
        and _non_empty_string(entry.get("prompt"))
        and _is_number(entry.get("timestamp"))
    ):
        return None

    mime_type = entry.get("mimeType")
    if not _non_empty_string(mime_type):
        mime_type = mime_type_from_data_url(entry["imageDataUrl"])

    return SavedImage(
        id=entry["id"],
        image_data_url=entry["imageDataUrl"],
        mime_type=mime_type,
        prompt=entry["prompt"],
        timestamp=entry["timestamp"],
    )


def _valid_unique_entries(raw_entries: list, existing_ids: set[str]) -> list[SavedImage]:
    """Parse entries, dropping invalid ones and ids already seen."""
    seen = set(existing_ids)
    accepted: list[SavedImage] = []
    for entry in raw_entries:
        image = parse_entry(entry)
        if image is None or image.id in seen:
            continue
        seen.add(image.id)
        accepted.append(image)
    return accepted


class LibraryStore:
    """Persist and mutate the image library through a key/value storage.

    Args:
        storage: Backend the library is read from and written to.
        key: Storage key holding the serialized library.
    """

    def __init__(self, storage: KeyValueStorage, key: str = LIBRARY_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Library:
        """Read the persisted library.

        Returns:
            The stored library, or an empty one if nothing is stored.

        Raises:
            CorruptStoreError: If the stored value is not a JSON array.
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return ()

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CorruptStoreError(f"Stored library is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise CorruptStoreError("Stored library is not a JSON array")

        images: list[SavedImage] = []
        for entry in data:
            try:
                images.append(SavedImage.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipped unreadable library entry: {e}")
        return tuple(images)

    def load_or_empty(self) -> Library:
        """Load the library, falling back to an empty one if it cannot be read."""
        try:
            return self.load()
        except (CorruptStoreError, StorageError) as e:
            logger.error(f"Failed to load library, starting empty: {e}")
            return ()

    def save(self, library: Library) -> None:
        """Replace the stored library with *library*.

        Raises:
            PersistenceError: If the storage write fails.  The error carries
                *library* so the caller can keep it in memory.
        """
        payload = json.dumps([image.to_record() for image in library], ensure_ascii=False)
        try:
            self.storage.set(self.key, payload)
        except StorageError as e:
            logger.error(f"Failed to persist library ({len(library)} images): {e}")
            raise PersistenceError(f"Could not save library: {e}", library) from e

    def add(self, library: Library, image: SavedImage) -> Library:
        """Put *image* at the front of the library and persist.

        If the image's id is already taken, a fresh id is assigned.
        """
        if find(library, image.id) is not None:
            fresh_id = new_image_id()
            logger.debug(f"Id {image.id} already in library, using {fresh_id}")
            image = image.model_copy(update={"id": fresh_id})

        updated = (image, *library)
        self.save(updated)
        logger.info(f"Added image {image.id} to library")
        return updated

    def remove(self, library: Library, image_id: str) -> Library:
        """Remove the entry with *image_id* and persist.

        Removing an id that is not present is a no-op and does not write.
        """
        updated = tuple(image for image in library if image.id != image_id)
        if len(updated) == len(library):
            logger.debug(f"Not in library: {image_id}")
            return library

        self.save(updated)
        logger.info(f"Removed image {image_id} from library")
        return updated

    def export_all(self, library: Library) -> bytes:
        """Serialize the library as pretty-printed UTF-8 JSON for download."""
        records = [image.to_record() for image in library]
        return json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")

    def import_merge(self, library: Library, raw: bytes | str) -> tuple[Library, int]:
        """Merge an exported library file into *library*.

        Args:
            library: Current library.
            raw: File contents as produced by :meth:`export_all`.

        Returns:
            Tuple of ``(updated_library, added_count)``.  A count of zero is a
            normal outcome and leaves the library and storage untouched.

        Raises:
            ImportParseError: If *raw* is not JSON or not a JSON array.
            PersistenceError: If the merged library could not be saved.
        """
        try:
            text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
            data = json.loads(text)
        except ValueError as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            raise ImportParseError(f"Import file is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise ImportParseError("Imported data is not an array")

        new_images = _valid_unique_entries(data, {image.id for image in library})
        if not new_images:
            logger.info(f"No new images found in import of {len(data)} entries")
            return library, 0

        updated = (*new_images, *library)
        self.save(updated)
        logger.info(f"Imported {len(new_images)} of {len(data)} entries into library")
        return updated, len(new_images)
