"""Pydantic request models for the AI Photo Studio API.

FastAPI uses these for request validation and OpenAPI documentation.  Images
travel as data URLs (``data:<mime>;base64,<payload>``) in every request body.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
SaveImageRequest
    Payload for ``POST /api/library`` — keeps a generated image.
ImageDataUrlRequest
    Payload for ``POST /api/library/saved`` and ``POST /api/download``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from photostudio.core.presets import AspectRatio, FeatureKey, Language, StyleKey


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        feature: Feature tab the request comes from.
        prompt: User prompt.  Must not be empty.
        style: Style preset whose prompt text is appended.
        aspect_ratio: Aspect ratio for text-only generation.
        image1: First input image as a data URL.
        image2: Second input image as a data URL (image fusion).
        language: Language for error messages.  Defaults to the configured
            language.
    """

    feature: FeatureKey = Field(
        default=FeatureKey.TEXT_TO_PHOTO,
        description="Feature tab (e.g. 'text-to-photo', 'image-fusion').",
    )
    prompt: str = Field(
        ...,
        description="Prompt describing the image to generate.",
    )
    style: StyleKey = Field(
        default=StyleKey.NONE,
        description="Style preset key, or 'none'.",
    )
    aspect_ratio: AspectRatio = Field(
        default="1:1",
        description="Aspect ratio for text-to-photo generation.",
    )
    image1: str | None = Field(
        default=None,
        description="First input image as a data URL.",
    )
    image2: str | None = Field(
        default=None,
        description="Second input image as a data URL (image fusion only).",
    )
    language: Language | None = Field(
        default=None,
        description="Language for user-visible messages ('en' or 'vi').",
    )


class SaveImageRequest(BaseModel):
    """Request body for the ``POST /api/library`` endpoint.

    Attributes:
        image_data_url: Generated image as a data URL.
        prompt: Prompt that produced the image.
        language: Language for user-visible messages.
    """

    image_data_url: str = Field(
        ...,
        description="Generated image as a data URL.",
    )
    prompt: str = Field(
        ...,
        description="Prompt that produced the image.",
    )
    language: Language | None = Field(
        default=None,
        description="Language for user-visible messages ('en' or 'vi').",
    )


class ImageDataUrlRequest(BaseModel):
    """Request body carrying a single image data URL."""

    image_data_url: str = Field(
        ...,
        description="Image as a data URL.",
    )
