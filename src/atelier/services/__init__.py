"""Remote generation services for Atelier."""

from atelier.services.generation import (
    GeminiGenerationService,
    GenerationServiceBase,
    ServiceRegistry,
    service_registry,
)

__all__ = [
    "GenerationServiceBase",
    "GeminiGenerationService",
    "ServiceRegistry",
    "service_registry",
]
