"""Shared pytest fixtures for AI Photo Studio tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from photostudio.core.config import PhotoStudioConfig
from photostudio.core.errors import GenerationError
from photostudio.core.generation import GeneratedImage, GenerationRequest
from photostudio.core.library import LibraryStore, SavedImage
from photostudio.core.storage import MemoryStorage


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> PhotoStudioConfig:
    """Create a test configuration with a temporary data directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PhotoStudioConfig instance for testing
    """
    monkeypatch.delenv("PHOTOSTUDIO_GEMINI_API_KEY", raising=False)
    return PhotoStudioConfig(
        _env_file=None,
        data_dir=temp_dir / "data",
        gemini_api_key=None,
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def store(memory_storage: MemoryStorage) -> LibraryStore:
    """Library store backed by empty in-memory storage."""
    return LibraryStore(memory_storage)


@pytest.fixture
def sample_image() -> SavedImage:
    """The one-image scenario used throughout the library tests."""
    return SavedImage(
        id="x1",
        image_data_url="data:image/png;base64,AAAA",
        mime_type="image/png",
        prompt="cat",
        timestamp=1000,
    )


@pytest.fixture
def sample_records() -> list[dict]:
    """Three valid library file records, newest first."""
    return [
        {
            "id": "c",
            "imageDataUrl": "data:image/png;base64,CCCC",
            "mimeType": "image/png",
            "prompt": "third",
            "timestamp": 3000,
        },
        {
            "id": "b",
            "imageDataUrl": "data:image/jpeg;base64,BBBB",
            "mimeType": "image/jpeg",
            "prompt": "second",
            "timestamp": 2000,
        },
        {
            "id": "a",
            "imageDataUrl": "data:image/png;base64,AAAA",
            "mimeType": "image/png",
            "prompt": "first",
            "timestamp": 1000,
        },
    ]


@pytest.fixture
def png_bytes() -> bytes:
    """A small real PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeImageService:
    """Stand-in for GeminiImageService that records requests."""

    def __init__(self, result: bytes = b"fake-png", fail: bool = False):
        self.result = result
        self.fail = fail
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> GeneratedImage:
        self.requests.append(request)
        if self.fail:
            raise GenerationError("remote service unavailable")
        return GeneratedImage(data=self.result, mime_type="image/png")


@pytest.fixture
def fake_service() -> FakeImageService:
    return FakeImageService()


@pytest.fixture
def test_client(test_config: PhotoStudioConfig, fake_service: FakeImageService, monkeypatch):
    """FastAPI TestClient running against temporary storage and a fake service."""
    from fastapi.testclient import TestClient

    import photostudio.api.main as main_module

    monkeypatch.setattr(main_module, "config", test_config)
    with TestClient(main_module.app) as client:
        main_module.app.state.image_service = fake_service
        yield client
