"""Configuration management for Atelier.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the ATELIER_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (ATELIER_* prefix)
2. .env file in the project root
3. Default values defined in AtelierConfig

The API key is the one exception: it is read from ``ATELIER_GOOGLE_API_KEY``
or, failing that, the plain ``GOOGLE_API_KEY`` variable used by the Google
SDKs.

Example .env file:
    GOOGLE_API_KEY=...
    ATELIER_EDIT_MODEL=gemini-2.5-flash-image-preview
    ATELIER_BACKGROUND_TOLERANCE=5
    ATELIER_SERVER_PORT=7860

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from atelier.core.config import config

    print(config.edit_model)
    print(config.background_tolerance)

Background Classification
-------------------------
The emptiness heuristic samples a bounded thumbnail of the image:
- background_thumbnail_size: longest allowed thumbnail side (per axis)
- background_tolerance: per-channel distance from the first pixel that
  still counts as "the same colour"

See Also
--------
- AtelierConfig: Full configuration class documentation
- atelier.core.background: The classifier that consumes these values
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROMPTS_FILE = Path(__file__).resolve().parent.parent / "data" / "prompts.json"


class AtelierConfig(BaseSettings):
    """Main configuration for Atelier.

    Attributes
    ----------
    Remote Service Settings:
        google_api_key : str | None
            API key for the Gemini / Imagen endpoints
        generation_service : str
            Name of the registered generation service to instantiate
        edit_model : str
            Multimodal model used for image edits and mixed output
        text_model : str
            Text model used for translation and suggestions
        imagen_model : str
            Text-to-image model used for original image generation

    Sampling Settings:
        translation_temperature : float
        suggestion_temperature : float
        composition_temperature : float
        dish_temperature : float
        source_language : str
            Language that free text is translated from

    Pixel Pipeline Settings:
        background_tolerance : int
            Per-channel tolerance (0-255) for the solid colour check
        background_thumbnail_size : int
            Upper bound on each side of the sampled thumbnail
        default_upscale_factor : Literal[2, 4]

    Paths:
        prompts_file : Path
            JSON file holding the style, process and template catalogs

    Server Settings:
        server_host : str
        server_port : int

    Examples
    --------
        >>> custom_config = AtelierConfig(background_tolerance=10, google_api_key="test")
        >>> custom_config.background_tolerance
        10
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ATELIER_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Remote service settings
    google_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("google_api_key", "ATELIER_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
        description="API key for Google generative endpoints",
    )
    generation_service: str = Field(
        default="gemini",
        description="Registered generation service name",
    )
    edit_model: str = Field(
        default="gemini-2.5-flash-image-preview",
        description="Model used for image edits (IMAGE + TEXT modalities)",
    )
    text_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for translation and prompt suggestions",
    )
    imagen_model: str = Field(
        default="imagen-4.0-generate-001",
        description="Model used for text-to-image generation",
    )

    # Sampling settings
    translation_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    suggestion_temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    composition_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    dish_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    source_language: str = Field(
        default="Korean",
        description="Language of user free text before translation to English",
    )

    # Pixel pipeline settings
    background_tolerance: int = Field(
        default=5,
        ge=0,
        le=255,
        description="Per-channel tolerance for the solid colour background check",
    )
    background_thumbnail_size: int = Field(
        default=100,
        ge=1,
        le=4096,
        description="Maximum thumbnail side used by the background check",
    )
    default_upscale_factor: Literal[2, 4] = Field(
        default=2,
        description="Upscale factor used when a request does not specify one",
    )

    # Paths
    prompts_file: Path = Field(
        default=DEFAULT_PROMPTS_FILE,
        description="Prompt catalog JSON file",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )


# Global configuration instance
# Loads values from environment variables (ATELIER_* prefix) and .env file.
config = AtelierConfig()
