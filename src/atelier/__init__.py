"""Atelier - Image editing and compositing studio backed by Gemini and Imagen."""

__version__ = "0.1.0"

from atelier.core.config import AtelierConfig, config
from atelier.services import GenerationServiceBase, service_registry

__all__ = [
    "AtelierConfig",
    "GenerationServiceBase",
    "config",
    "service_registry",
]
