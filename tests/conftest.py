"""Shared pytest fixtures for Atelier tests."""

from __future__ import annotations

import io
import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
from PIL import Image

from atelier.core.catalog import PromptCatalog
from atelier.core.config import DEFAULT_PROMPTS_FILE, AtelierConfig
from atelier.core.orchestrator import RequestOrchestrator
from atelier.core.payloads import ImagePayload
from atelier.services.generation import GenerationServiceBase


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
def test_config() -> AtelierConfig:
    """Create a test configuration that ignores any local .env file."""
    return AtelierConfig(
        _env_file=None,
        google_api_key="test-key",
        prompts_file=DEFAULT_PROMPTS_FILE,
        background_tolerance=5,
        background_thumbnail_size=100,
    )


@pytest.fixture
def catalog() -> PromptCatalog:
    return PromptCatalog.load(DEFAULT_PROMPTS_FILE)


# ---------------------------------------------------------------------------
# Image payload factories.
# ---------------------------------------------------------------------------


def encode_image(img: Image.Image, fmt: str = "PNG") -> ImagePayload:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return ImagePayload(data=buffer.getvalue(), mime_type=f"image/{fmt.lower()}")


@pytest.fixture
def make_image() -> Callable[..., ImagePayload]:
    """Factory for solid-colour image payloads.

    Usage:
        make_image(10, 10, (0, 0, 255, 255))
        make_image(8, 8, (200, 200, 200), mode="RGB", fmt="JPEG")
    """

    def _make(
        width: int,
        height: int,
        color: tuple = (0, 0, 255, 255),
        mode: str = "RGBA",
        fmt: str = "PNG",
    ) -> ImagePayload:
        return encode_image(Image.new(mode, (width, height), color), fmt)

    return _make


@pytest.fixture
def checkerboard() -> ImagePayload:
    """An opaque 10x10 black and white checkerboard."""
    img = Image.new("RGBA", (10, 10))
    for y in range(10):
        for x in range(10):
            value = 255 if (x + y) % 2 == 0 else 0
            img.putpixel((x, y), (value, value, value, 255))
    return encode_image(img)


def decode(payload: ImagePayload) -> Image.Image:
    """Open a payload with Pillow (test helper)."""
    img = Image.open(io.BytesIO(payload.data))
    img.load()
    return img


# ---------------------------------------------------------------------------
# Remote service doubles.
# ---------------------------------------------------------------------------


def text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(text=text, inline_data=None)


def image_part(payload: ImagePayload | None = None, mime_type=None, data=None) -> SimpleNamespace:
    if payload is not None:
        mime_type = payload.mime_type
        data = payload.data
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(mime_type=mime_type, data=data))


@pytest.fixture
def fake_service() -> Mock:
    """A GenerationServiceBase double.

    Defaults: translation echoes nothing useful (``"translated"``), content
    generation returns no parts, and image generation returns a tiny PNG.
    """
    service = Mock(spec=GenerationServiceBase)
    service.generate_text.return_value = "translated"
    service.generate_content.return_value = None
    service.generate_image.return_value = encode_image(Image.new("RGB", (4, 4), (1, 2, 3)))
    return service


@pytest.fixture
def orchestrator(fake_service: Mock, catalog: PromptCatalog, test_config: AtelierConfig) -> RequestOrchestrator:
    return RequestOrchestrator(fake_service, catalog, test_config)


@pytest.fixture
def test_client(fake_service: Mock):
    """FastAPI TestClient with the generation service replaced by a mock."""
    from fastapi.testclient import TestClient

    from atelier.api.main import app

    with patch("atelier.api.main.service_registry.instantiate", return_value=fake_service):
        with TestClient(app) as client:
            yield client
