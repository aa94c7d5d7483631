"""Tests for photostudio.core.generation — the remote image service facade.

All tests use a MagicMock in place of ``genai.Client`` so no network access
occurs.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from photostudio.core.errors import GenerationError
from photostudio.core.generation import (
    GeminiImageService,
    GeneratedImage,
    GenerationRequest,
    build_final_prompt,
)
from photostudio.core.images import ImageInput
from photostudio.core.presets import FeatureKey

IMAGE_A = ImageInput(base64="QUJD", mime_type="image/jpeg", data_url="data:image/jpeg;base64,QUJD")
IMAGE_B = ImageInput(base64="REVG", mime_type="image/png", data_url="data:image/png;base64,REVG")


def _imagen_response(data: bytes | None = b"png-bytes"):
    if data is None:
        return SimpleNamespace(generated_images=[])
    return SimpleNamespace(generated_images=[SimpleNamespace(image=SimpleNamespace(image_bytes=data))])


def _gemini_response(*parts):
    content = SimpleNamespace(parts=list(parts))
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


def _inline(data: bytes, mime_type: str = "image/png"):
    return SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)


def _text_part(text: str):
    return SimpleNamespace(inline_data=None, text=text)


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.models.generate_images.return_value = _imagen_response()
    client.models.generate_content.return_value = _gemini_response(_inline(b"edited"))
    return client


@pytest.fixture
def service(test_config, client) -> GeminiImageService:
    return GeminiImageService(test_config, client=client)


class TestBuildFinalPrompt:
    """Style text is appended after a comma."""

    def test_with_style(self):
        assert build_final_prompt("a cat", "watercolor") == "a cat, watercolor"

    @pytest.mark.parametrize("style", [None, ""])
    def test_without_style(self, style):
        assert build_final_prompt("a cat", style) == "a cat"


class TestGenerateFromText:
    """Text-only generation through Imagen."""

    def test_returns_png(self, service):
        result = service.generate_from_text("a cat")
        assert result == GeneratedImage(data=b"png-bytes", mime_type="image/png")
        assert result.data_url == "data:image/png;base64,cG5nLWJ5dGVz"

    def test_sends_prompt_and_aspect_ratio(self, service, client, test_config):
        service.generate_from_text("a cat", "vintage photo", aspect_ratio="16:9")
        kwargs = client.models.generate_images.call_args.kwargs
        assert kwargs["model"] == test_config.text_model_id
        assert kwargs["prompt"] == "a cat, vintage photo"
        assert kwargs["config"].aspect_ratio == "16:9"
        assert kwargs["config"].number_of_images == 1
        assert kwargs["config"].output_mime_type == "image/png"

    def test_empty_result_raises(self, service, client):
        client.models.generate_images.return_value = _imagen_response(None)
        with pytest.raises(GenerationError):
            service.generate_from_text("a cat")

    def test_transport_error_raises(self, service, client):
        client.models.generate_images.side_effect = RuntimeError("connection reset")
        with pytest.raises(GenerationError) as exc_info:
            service.generate_from_text("a cat")
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestGenerateFromImages:
    """Generation from one or two reference images through Gemini."""

    def test_one_image(self, service, client, test_config):
        result = service.generate_from_image("make it night", IMAGE_A, "neon")
        assert result.data == b"edited"

        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == test_config.image_model_id
        parts = kwargs["contents"][0].parts
        assert len(parts) == 2
        assert parts[0].inline_data.data == b"ABC"
        assert parts[0].inline_data.mime_type == "image/jpeg"
        assert parts[1].text == "make it night, neon"

    def test_two_images_in_order(self, service, client):
        service.generate_from_two_images("merge", IMAGE_A, IMAGE_B)
        parts = client.models.generate_content.call_args.kwargs["contents"][0].parts
        assert [p.inline_data.data for p in parts[:2]] == [b"ABC", b"DEF"]
        assert parts[2].text == "merge"

    def test_skips_text_parts(self, service, client):
        """The first inline image wins even after text parts."""
        client.models.generate_content.return_value = _gemini_response(
            _text_part("here you go"), _inline(b"first", "image/jpeg"), _inline(b"second")
        )
        result = service.generate_from_image("p", IMAGE_A)
        assert result == GeneratedImage(data=b"first", mime_type="image/jpeg")

    def test_no_image_part_raises(self, service, client):
        client.models.generate_content.return_value = _gemini_response(_text_part("refused"))
        with pytest.raises(GenerationError):
            service.generate_from_image("p", IMAGE_A)

    def test_no_candidates_raises(self, service, client):
        client.models.generate_content.return_value = SimpleNamespace(candidates=None)
        with pytest.raises(GenerationError):
            service.generate_from_image("p", IMAGE_A)

    def test_transport_error_raises(self, service, client):
        client.models.generate_content.side_effect = ValueError("bad request")
        with pytest.raises(GenerationError):
            service.generate_from_two_images("p", IMAGE_A, IMAGE_B)

    def test_undecodable_input_raises_generation_error(self, service, client):
        """Bad base64 in an input image never reaches the client."""
        broken = ImageInput(
            base64="@@@@", mime_type="image/png", data_url="data:image/png;base64,@@@@"
        )
        with pytest.raises(GenerationError):
            service.generate_from_image("p", broken)
        client.models.generate_content.assert_not_called()


class TestGenerateRouting:
    """GeminiImageService.generate picks the call for the feature tab."""

    def test_text_tab_uses_imagen(self, service, client):
        service.generate(GenerationRequest(feature=FeatureKey.TEXT_TO_PHOTO, prompt="p"))
        client.models.generate_images.assert_called_once()
        client.models.generate_content.assert_not_called()

    def test_image_tab_with_image(self, service, client):
        service.generate(
            GenerationRequest(feature=FeatureKey.EDIT_PHOTO, prompt="p", image1=IMAGE_A)
        )
        parts = client.models.generate_content.call_args.kwargs["contents"][0].parts
        assert len(parts) == 2

    def test_fusion_with_two_images(self, service, client):
        service.generate(
            GenerationRequest(
                feature=FeatureKey.IMAGE_FUSION, prompt="p", image1=IMAGE_A, image2=IMAGE_B
            )
        )
        parts = client.models.generate_content.call_args.kwargs["contents"][0].parts
        assert len(parts) == 3

    def test_fusion_with_one_image_uses_one_image_call(self, service, client):
        service.generate(
            GenerationRequest(feature=FeatureKey.IMAGE_FUSION, prompt="p", image1=IMAGE_A)
        )
        parts = client.models.generate_content.call_args.kwargs["contents"][0].parts
        assert len(parts) == 2

    def test_image_tab_without_image_falls_back_to_text(self, service, client):
        service.generate(
            GenerationRequest(feature=FeatureKey.AI_MODEL, prompt="p", aspect_ratio="4:3")
        )
        assert client.models.generate_images.call_args.kwargs["config"].aspect_ratio == "4:3"


class TestClientCreation:
    """The genai client is created lazily."""

    def test_missing_api_key_raises(self, test_config):
        service = GeminiImageService(test_config)
        with pytest.raises(GenerationError):
            service.generate_from_text("a cat")

    def test_client_built_from_key(self, test_config, monkeypatch):
        created = MagicMock()
        monkeypatch.setattr("photostudio.core.generation.genai.Client", created)
        config = test_config.model_copy(update={"gemini_api_key": "secret"})

        service = GeminiImageService(config)
        assert service.client is created.return_value
        created.assert_called_once_with(api_key="secret")
