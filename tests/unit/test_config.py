"""Tests for atelier.core.config - configuration management.

Tests cover:
- Default values for model names, sampling and pixel pipeline settings.
- Environment variable overrides via the ATELIER_ prefix.
- The GOOGLE_API_KEY fallback.
- Pydantic validation constraints (tolerance, port, upscale factor).
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from atelier.core.config import DEFAULT_PROMPTS_FILE, AtelierConfig


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("GOOGLE_API_KEY", "ATELIER_GOOGLE_API_KEY", "ATELIER_BACKGROUND_TOLERANCE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that AtelierConfig provides sensible defaults."""

    def test_model_defaults(self, clean_env):
        """Test the default Gemini and Imagen model names."""
        cfg = AtelierConfig(_env_file=None)
        assert cfg.edit_model == "gemini-2.5-flash-image-preview"
        assert cfg.text_model == "gemini-2.5-flash"
        assert cfg.imagen_model == "imagen-4.0-generate-001"

    def test_sampling_defaults(self, clean_env):
        """Test the default temperatures for each text call."""
        cfg = AtelierConfig(_env_file=None)
        assert cfg.translation_temperature == 0.1
        assert cfg.composition_temperature == 0.7
        assert cfg.suggestion_temperature == 0.8
        assert cfg.dish_temperature == 0.2

    def test_pixel_defaults(self, clean_env):
        """Test the default tolerance, thumbnail size and upscale factor."""
        cfg = AtelierConfig(_env_file=None)
        assert cfg.background_tolerance == 5
        assert cfg.background_thumbnail_size == 100
        assert cfg.default_upscale_factor == 2

    def test_prompts_file_ships_with_package(self, clean_env):
        """Test that the default catalog file exists inside the package."""
        cfg = AtelierConfig(_env_file=None)
        assert cfg.prompts_file == DEFAULT_PROMPTS_FILE
        assert cfg.prompts_file.exists()

    def test_api_key_defaults_to_none(self, clean_env):
        """Test that no API key is configured by default."""
        assert AtelierConfig(_env_file=None).google_api_key is None


class TestEnvironmentOverrides:
    """Tests for loading values from the environment."""

    def test_prefixed_override(self, clean_env):
        """Test that ATELIER_ variables override defaults."""
        clean_env.setenv("ATELIER_BACKGROUND_TOLERANCE", "12")
        assert AtelierConfig(_env_file=None).background_tolerance == 12

    def test_plain_google_api_key(self, clean_env):
        """Test that the SDK's GOOGLE_API_KEY variable is honoured."""
        clean_env.setenv("GOOGLE_API_KEY", "plain-key")
        assert AtelierConfig(_env_file=None).google_api_key == "plain-key"

    def test_prefixed_api_key(self, clean_env):
        """Test that ATELIER_GOOGLE_API_KEY is honoured."""
        clean_env.setenv("ATELIER_GOOGLE_API_KEY", "prefixed-key")
        assert AtelierConfig(_env_file=None).google_api_key == "prefixed-key"

    def test_constructor_argument(self, clean_env):
        """Test that the key can be passed by field name."""
        assert AtelierConfig(_env_file=None, google_api_key="kw").google_api_key == "kw"


class TestConfigValidation:
    """Tests for field constraints."""

    @pytest.mark.parametrize("tolerance", [-1, 256])
    def test_tolerance_range(self, clean_env, tolerance):
        """Test that the tolerance must lie within 0-255."""
        with pytest.raises(ValidationError):
            AtelierConfig(_env_file=None, background_tolerance=tolerance)

    def test_upscale_factor_literal(self, clean_env):
        """Test that only 2 and 4 are valid default upscale factors."""
        with pytest.raises(ValidationError):
            AtelierConfig(_env_file=None, default_upscale_factor=3)

    def test_server_port_range(self, clean_env):
        """Test that privileged ports are rejected."""
        with pytest.raises(ValidationError):
            AtelierConfig(_env_file=None, server_port=80)
