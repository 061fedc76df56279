"""Pydantic request and response models for the Atelier API.

These models define the JSON schema for every API endpoint. FastAPI uses
them for automatic request validation, serialisation, and OpenAPI
documentation generation.

Images travel as :class:`ImageModel` objects: base64 data plus the MIME
type the client declared. Decoding happens in the pixel pipeline, so a
payload that is valid base64 but not a valid image is reported as a decode
error (400) rather than a schema error (422).

Models
------
ImageModel
    A base64-encoded image.
EditRequest
    Payload for ``POST /api/edit``.
SynthesisRequest
    Payload for ``POST /api/synthesize``.
ImageRequest
    Payload for endpoints that only need one image.
InpaintRequest / MaskRequest
    Payloads carrying an image and a mask.
QuickActionRequest
    Payload for ``POST /api/quick/{action}``.
GenerateOriginalRequest, StoryRequest, RecipeRequest
    Text-to-content payloads.
SuggestRequest
    Payload for ``POST /api/suggest/{kind}``.
UpscaleRequest
    Payload for ``POST /api/upscale``.
WorkflowResponse
    Result of every workflow endpoint.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from atelier.core.payloads import GeneratedSegment, ImagePayload


class ImageModel(BaseModel):
    """A base64-encoded image.

    Attributes:
        data: Base64 image bytes, or a full ``data:<mime>;base64,...`` URL
            as produced by a browser file reader.
        mime_type: Declared MIME type, e.g. ``image/png``. A data URL's own
            MIME type takes precedence.
    """

    data: str = Field(..., description="Base64-encoded image bytes or a data URL.")
    mime_type: str = Field(default="image/png", description="MIME type of the image.")

    def to_payload(self) -> ImagePayload:
        if self.data.startswith("data:"):
            return ImagePayload.from_data_url(self.data)
        return ImagePayload.from_base64(self.data, self.mime_type)

    @classmethod
    def from_payload(cls, payload: ImagePayload) -> ImageModel:
        return cls(data=payload.to_base64(), mime_type=payload.mime_type)


class EditRequest(BaseModel):
    """Request body for the ``POST /api/edit`` endpoint.

    Attributes:
        image: Image to edit.
        process_ids: Selected process ids from the catalog (e.g. ``restore``,
            ``upscale``).
        style_id: Selected style id, or ``None``.
        custom_text: Free-text edit request in the source language.
        upscale_factor: 2 or 4. Only used when the ``upscale`` process is
            selected. Defaults to the configured factor.
    """

    image: ImageModel
    process_ids: list[str] = Field(default_factory=list)
    style_id: str | None = Field(default=None)
    custom_text: str = Field(default="")
    upscale_factor: int | None = Field(default=None)


class SynthesisRequest(BaseModel):
    """Request body for the ``POST /api/synthesize`` endpoint."""

    base: ImageModel
    sources: list[ImageModel] = Field(..., min_length=1)
    instruction: str = Field(..., description="What to combine, in the source language.")
    aspect_ratio: str = Field(default="original")


class ImageRequest(BaseModel):
    image: ImageModel


class InpaintRequest(BaseModel):
    """Image plus a mask whose white region is removed and filled."""

    image: ImageModel
    mask: ImageModel


class MaskRequest(BaseModel):
    """Image plus a grayscale mask whose red channel becomes the alpha channel."""

    image: ImageModel
    mask: ImageModel


class UpscaleRequest(BaseModel):
    image: ImageModel
    factor: int = Field(default=2, description="Upscale factor (2 or 4).")


class QuickActionRequest(BaseModel):
    """Request body for ``POST /api/quick/{action}``.

    Fields not used by the chosen action are ignored.
    """

    image: ImageModel
    aspect_ratio: str | None = Field(default=None)
    comic_style: Literal["noir", "webtoon", "american"] = Field(default="noir")
    comic_text: str = Field(default="")
    comic_language: Literal["ko", "en"] = Field(default="ko")
    age: str = Field(default="")


class GenerateOriginalRequest(BaseModel):
    prompt: str = Field(..., description="Idea for the image, in the source language.")
    aspect_ratio: str = Field(default="1:1")


class StoryRequest(BaseModel):
    idea: str


class RecipeRequest(BaseModel):
    prompt: str = Field(..., description="Dish name, or a full recipe command.")


class SuggestRequest(BaseModel):
    """Request body for ``POST /api/suggest/{kind}``.

    Attributes:
        image: Base image (composition, primary, story, recipe).
        sources: Source images (composition).
        process_ids: Selected processes (primary).
        style_id: Selected style (primary).
        custom_text: Current free text (primary).
        idea: Image idea (original).
        category_id: Image category (original).
        aspect_ratio: Target aspect ratio (composition, primary).
    """

    image: ImageModel | None = None
    sources: list[ImageModel] = Field(default_factory=list)
    process_ids: list[str] = Field(default_factory=list)
    style_id: str | None = None
    custom_text: str = ""
    idea: str = ""
    category_id: str = "default"
    aspect_ratio: str = "original"


class SegmentModel(BaseModel):
    type: Literal["text", "image"]
    text: str | None = None
    image: ImageModel | None = None
    data_url: str | None = None

    @classmethod
    def from_segment(cls, segment: GeneratedSegment) -> SegmentModel:
        if segment.kind == "image":
            return cls(
                type="image",
                image=ImageModel.from_payload(segment.image),
                data_url=segment.image.to_data_url(),
            )
        return cls(type="text", text=segment.text)


class WorkflowResponse(BaseModel):
    """Result of a workflow endpoint."""

    slot: str | None = None
    status: str
    message: str | None = None
    segments: list[SegmentModel] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    slot: str
    status: str
    suggestion: str
