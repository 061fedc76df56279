"""Remote generation services and their registry.

A generation service is the only component that talks to the remote
model. It exposes three calls:

- ``generate_content``: multimodal parts in, raw response parts out
  (image edits, synthesis, stories, recipes)
- ``generate_text``: multimodal parts in, a single string out
  (translation and prompt suggestions)
- ``generate_image``: a text prompt in, one encoded image out
  (text-to-image generation)

Request Part Order
------------------
Callers pass parts in the order the model should read them. Image edits
always send ``[base image, *source images, instruction text]``.

Error Handling
--------------
Any SDK or transport failure is wrapped in
:class:`~atelier.core.errors.RemoteServiceError`. Services never retry.

Usage Example
-------------
    >>> from atelier.services import service_registry
    >>> from atelier.core.config import config
    >>>
    >>> service = service_registry.instantiate("gemini", config)
    >>> parts = service.generate_content([image, "Colorize this photo"], ["IMAGE", "TEXT"])

See Also
--------
- atelier.core.segments.normalize_segments: Turns raw parts into segments
- atelier.core.orchestrator.RequestOrchestrator: Sequences the calls
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from google import genai
from google.genai import types

from atelier.core.config import AtelierConfig
from atelier.core.errors import RemoteServiceError
from atelier.core.payloads import ImagePayload

logger = logging.getLogger(__name__)

RequestPart = ImagePayload | str

IMAGE_AND_TEXT = ("IMAGE", "TEXT")
IMAGE_ONLY = ("IMAGE",)


class GenerationServiceBase(ABC):
    """Abstract base class for remote generation services.

    Attributes
    ----------
    name : str
        Registry name of the service
    description : str
        Brief description of the backend
    config : AtelierConfig
        Configuration holding model names and credentials
    """

    name: str = "Base Generation Service"
    description: str = "Base class for generation services"

    def __init__(self, config: AtelierConfig) -> None:
        self.config = config
        logger.info(f"Initialized {self.name} generation service")

    @abstractmethod
    def generate_content(
        self,
        parts: Sequence[RequestPart],
        modalities: Sequence[str] = IMAGE_AND_TEXT,
        model: str | None = None,
        temperature: float | None = None,
    ) -> list[Any] | None:
        """Send *parts* and return the first candidate's raw parts.

        Returns:
            The raw response parts, or None when the response carries no
            candidate content

        Raises:
            RemoteServiceError: If the remote call fails
        """

    @abstractmethod
    def generate_text(
        self,
        parts: Sequence[RequestPart],
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        """Send *parts* to the text model and return its stripped text answer.

        Raises:
            RemoteServiceError: If the remote call fails or returns no text
        """

    @abstractmethod
    def generate_image(self, prompt: str, aspect_ratio: str = "1:1") -> ImagePayload:
        """Generate one PNG image from an English *prompt*.

        Raises:
            RemoteServiceError: If the remote call fails or returns no image
        """


class GeminiGenerationService(GenerationServiceBase):
    """Generation service backed by the ``google-genai`` SDK.

    The client is created lazily on the first call so that the application
    can start (and serve local-only endpoints) without an API key.
    """

    name = "gemini"
    description = "Google Gemini (image edits, text) and Imagen (text-to-image)"

    def __init__(self, config: AtelierConfig, client: Any | None = None) -> None:
        super().__init__(config)
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.config.google_api_key:
                raise RemoteServiceError(
                    "No API key configured. Set GOOGLE_API_KEY or ATELIER_GOOGLE_API_KEY."
                )
            self._client = genai.Client(api_key=self.config.google_api_key)
        return self._client

    @staticmethod
    def _to_sdk_parts(parts: Sequence[RequestPart]) -> list[types.Part]:
        sdk_parts = []
        for part in parts:
            if isinstance(part, ImagePayload):
                sdk_parts.append(types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
            else:
                sdk_parts.append(types.Part.from_text(text=part))
        return sdk_parts

    def generate_content(
        self,
        parts: Sequence[RequestPart],
        modalities: Sequence[str] = IMAGE_AND_TEXT,
        model: str | None = None,
        temperature: float | None = None,
    ) -> list[Any] | None:
        model = model or self.config.edit_model
        client = self.client
        logger.info(f"Requesting {list(modalities)} from {model} with {len(parts)} parts")

        try:
            response = client.models.generate_content(
                model=model,
                contents=self._to_sdk_parts(parts),
                config=types.GenerateContentConfig(
                    response_modalities=list(modalities),
                    temperature=temperature,
                ),
            )
        except Exception as e:
            logger.error(f"Content generation failed on {model}: {e}", exc_info=True)
            raise RemoteServiceError(f"Content generation failed: {e}") from e

        candidates = response.candidates or []
        if not candidates or candidates[0].content is None:
            return None
        return candidates[0].content.parts

    def generate_text(
        self,
        parts: Sequence[RequestPart],
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        model = model or self.config.text_model
        client = self.client

        try:
            response = client.models.generate_content(
                model=model,
                contents=self._to_sdk_parts(parts),
                config=types.GenerateContentConfig(temperature=temperature),
            )
        except Exception as e:
            logger.error(f"Text generation failed on {model}: {e}", exc_info=True)
            raise RemoteServiceError(f"Text generation failed: {e}") from e

        text = response.text
        if not text or not text.strip():
            raise RemoteServiceError("The AI returned an empty text response.")
        return text.strip()

    def generate_image(self, prompt: str, aspect_ratio: str = "1:1") -> ImagePayload:
        model = self.config.imagen_model
        client = self.client
        logger.info(f"Requesting {aspect_ratio} image from {model}")

        try:
            response = client.models.generate_images(
                model=model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/png",
                    aspect_ratio=aspect_ratio,
                ),
            )
        except Exception as e:
            logger.error(f"Image generation failed on {model}: {e}", exc_info=True)
            raise RemoteServiceError(f"Failed to generate image: {e}") from e

        if not response.generated_images:
            raise RemoteServiceError("Image generation failed, no images returned.")

        image = response.generated_images[0].image
        if image is None or not image.image_bytes:
            raise RemoteServiceError("Image generation failed, the returned image is empty.")
        return ImagePayload(data=image.image_bytes, mime_type="image/png")


class ServiceRegistry:
    """Registry for managing available generation services.

    Usage
    -----
        >>> service_registry.register(MyService)
        >>> service = service_registry.instantiate("my-service", config)
    """

    def __init__(self) -> None:
        self._services: dict[str, type[GenerationServiceBase]] = {}

    def register(self, service_class: type[GenerationServiceBase]) -> None:
        service_name = service_class.name

        if service_name in self._services:
            logger.warning(f"Generation service '{service_name}' is already registered, overwriting")

        self._services[service_name] = service_class
        logger.info(f"Registered generation service: {service_name}")

    def instantiate(self, service_name: str, config: AtelierConfig) -> GenerationServiceBase:
        """Create an instance of a registered service.

        Raises
        ------
        KeyError
            If service_name is not registered
        """
        if service_name not in self._services:
            available = ", ".join(self.list_available())
            raise KeyError(
                f"Generation service '{service_name}' not found. Available services: {available}"
            )

        instance = self._services[service_name](config=config)
        logger.info(f"Instantiated generation service: {service_name}")
        return instance

    def get_service_class(self, service_name: str) -> type[GenerationServiceBase] | None:
        return self._services.get(service_name)

    def list_available(self) -> list[str]:
        return list(self._services.keys())

    def get_service_info(self, service_name: str) -> dict[str, str] | None:
        service_class = self._services.get(service_name)
        if service_class is None:
            return None
        return {"name": service_class.name, "description": service_class.description}


# Global service registry instance
service_registry = ServiceRegistry()

service_registry.register(GeminiGenerationService)
