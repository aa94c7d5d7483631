"""Encoded image payload helpers.

Images move through the application as data URLs
(``data:<mime>;base64,<payload>``).  The remote service wants the bare base64
payload plus its media type, so :class:`ImageInput` carries all three forms.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from photostudio.core.errors import InvalidImageError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class ImageInput:
    """An input image in the shape the generation service expects.

    Attributes:
        base64: Base64 payload without the ``data:`` prefix.
        mime_type: Declared media type of the payload.
        data_url: The full data URL, kept for previews.
    """

    base64: str
    mime_type: str
    data_url: str

    def to_bytes(self) -> bytes:
        """Decode the payload into raw image bytes."""
        return decode_base64(self.base64)


def mime_type_from_data_url(data_url: str, default: str = DEFAULT_MIME_TYPE) -> str:
    """Return the media type declared between ``:`` and ``;`` of a data URL.

    Falls back to *default* when the URL does not declare one.
    """
    colon = data_url.find(":")
    semicolon = data_url.find(";")
    if colon == -1 or semicolon == -1 or semicolon <= colon + 1:
        return default
    return data_url[colon + 1 : semicolon]


def split_data_url(data_url: str) -> tuple[str, str]:
    """Split a data URL into ``(mime_type, base64_payload)``.

    Raises:
        InvalidImageError: If the URL has no ``,`` separating the payload.
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:"):
        raise InvalidImageError("Not a data URL")
    return mime_type_from_data_url(header + ";"), payload


def make_data_url(payload: bytes | str, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Build a data URL from raw bytes or an already base64-encoded string."""
    if isinstance(payload, bytes):
        payload = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def decode_base64(payload: str) -> bytes:
    """Decode a base64 payload, raising :class:`InvalidImageError` on bad input."""
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 payload: {e}") from e


def image_input_from_data_url(data_url: str, mime_type: str | None = None) -> ImageInput:
    """Build an :class:`ImageInput` from a data URL.

    Args:
        data_url: ``data:<mime>;base64,<payload>`` string.
        mime_type: Media type to use instead of the one declared in the URL.
    """
    declared, payload = split_data_url(data_url)
    return ImageInput(base64=payload, mime_type=mime_type or declared, data_url=data_url)


def sniff_mime_type(data: bytes) -> str:
    """Identify image bytes with Pillow and return their media type.

    Raises:
        InvalidImageError: If Pillow cannot identify the bytes as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError(f"Unreadable image: {e}") from e

    return Image.MIME.get(image_format or "", DEFAULT_MIME_TYPE)


def image_input_from_upload(data: bytes, content_type: str | None = None) -> ImageInput:
    """Turn uploaded file bytes into an :class:`ImageInput`.

    The declared content type wins when it names an image type; otherwise the
    type detected by Pillow is used.

    Raises:
        InvalidImageError: If the bytes are empty or not an image.
    """
    if not data:
        raise InvalidImageError("Empty upload")

    detected = sniff_mime_type(data)
    mime_type = content_type if content_type and content_type.startswith("image/") else detected
    logger.debug(f"Decoded upload: {len(data)} bytes as {mime_type}")

    data_url = make_data_url(data, mime_type)
    _, payload = split_data_url(data_url)
    return ImageInput(base64=payload, mime_type=mime_type, data_url=data_url)
