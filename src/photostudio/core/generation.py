"""Remote image generation through Google's hosted models.

:class:`GeminiImageService` is a thin facade: it appends the selected style
text to the prompt, forwards the prompt and up to two input images to the
hosted model, and returns the first image in the response.  Any failure
(missing API key, transport error, blocked or empty response) is reported as
a single :class:`~photostudio.core.errors.GenerationError`.

Three request shapes are supported:

- text only: Imagen ``generate_images`` with an aspect ratio
- one input image: Gemini ``generate_content`` with the image and the prompt
- two input images: the same call with both images before the prompt
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import types

from photostudio.core.config import PhotoStudioConfig
from photostudio.core.errors import GenerationError
from photostudio.core.images import DEFAULT_MIME_TYPE, ImageInput, make_data_url
from photostudio.core.presets import DEFAULT_ASPECT_RATIO, FeatureKey, requires_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedImage:
    """Raw bytes of one generated image and their media type."""

    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE

    @property
    def data_url(self) -> str:
        return make_data_url(self.data, self.mime_type)


@dataclass(frozen=True)
class GenerationRequest:
    """Everything needed to run one generation for a feature tab."""

    feature: FeatureKey
    prompt: str
    style_prompt: str | None = None
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    image1: ImageInput | None = None
    image2: ImageInput | None = None


def build_final_prompt(prompt: str, style_prompt: str | None = None) -> str:
    """Append the style text to the prompt, separated by a comma."""
    return f"{prompt}, {style_prompt}" if style_prompt else prompt


def _first_inline_image(response: Any) -> GeneratedImage:
    """Return the first inline image part of a ``generate_content`` response."""
    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            blob = getattr(part, "inline_data", None)
            if blob is not None and blob.data:
                return GeneratedImage(data=blob.data, mime_type=blob.mime_type or DEFAULT_MIME_TYPE)
    raise GenerationError("No image part found in the response.")


class GeminiImageService:
    """Generate images with the Google generative AI API.

    Args:
        config: Application configuration (API key and model ids).
        client: Pre-built ``genai.Client``.  Built lazily from the config when
            omitted, so the service can be constructed without a key.
    """

    def __init__(self, config: PhotoStudioConfig, client: Any = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.config.gemini_api_key:
                raise GenerationError("PHOTOSTUDIO_GEMINI_API_KEY is not set.")
            self._client = genai.Client(api_key=self.config.gemini_api_key)
            logger.info("Created Google generative AI client")
        return self._client

    def generate_from_text(
        self,
        prompt: str,
        style_prompt: str | None = None,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    ) -> GeneratedImage:
        """Generate an image from text alone."""
        final_prompt = build_final_prompt(prompt, style_prompt)
        try:
            response = self.client.models.generate_images(
                model=self.config.text_model_id,
                prompt=final_prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/png",
                    aspect_ratio=aspect_ratio,
                ),
            )
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"Error generating image from text: {e}")
            raise GenerationError(f"Text-to-image request failed: {e}") from e

        generated = getattr(response, "generated_images", None) or []
        image = getattr(generated[0], "image", None) if generated else None
        if image is None or not image.image_bytes:
            logger.error("Text-to-image response contained no image")
            raise GenerationError("No image was generated.")
        return GeneratedImage(data=image.image_bytes, mime_type="image/png")

    def _generate_from_images(
        self, prompt: str, images: list[ImageInput], style_prompt: str | None
    ) -> GeneratedImage:
        final_prompt = build_final_prompt(prompt, style_prompt)
        try:
            parts = [
                types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type)
                for image in images
            ]
            parts.append(types.Part(text=final_prompt))
            response = self.client.models.generate_content(
                model=self.config.image_model_id,
                contents=[types.Content(role="user", parts=parts)],
                config=types.GenerateContentConfig(
                    response_modalities=[types.Modality.IMAGE],
                ),
            )
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"Error generating image from {len(images)} image(s): {e}")
            raise GenerationError(f"Image-to-image request failed: {e}") from e

        try:
            return _first_inline_image(response)
        except GenerationError:
            logger.error(f"Response to {len(images)}-image request contained no image")
            raise

    def generate_from_image(
        self, prompt: str, image: ImageInput, style_prompt: str | None = None
    ) -> GeneratedImage:
        """Generate an image from one input image and a prompt."""
        return self._generate_from_images(prompt, [image], style_prompt)

    def generate_from_two_images(
        self,
        prompt: str,
        image1: ImageInput,
        image2: ImageInput,
        style_prompt: str | None = None,
    ) -> GeneratedImage:
        """Generate an image combining two input images."""
        return self._generate_from_images(prompt, [image1, image2], style_prompt)

    def generate(self, request: GenerationRequest) -> GeneratedImage:
        """Route a request to the matching generation call.

        Image fusion with both images uses the two-image call; any feature
        that needs an image and has one uses the one-image call; everything
        else falls back to text-only generation.
        """
        if request.feature is FeatureKey.IMAGE_FUSION and request.image1 and request.image2:
            logger.info("Generating from two images")
            return self.generate_from_two_images(
                request.prompt, request.image1, request.image2, request.style_prompt
            )
        if requires_image(request.feature) and request.image1:
            logger.info(f"Generating from one image for {request.feature.value}")
            return self.generate_from_image(request.prompt, request.image1, request.style_prompt)

        logger.info(f"Generating from text with aspect ratio {request.aspect_ratio}")
        return self.generate_from_text(request.prompt, request.style_prompt, request.aspect_ratio)
