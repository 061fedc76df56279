"""Request orchestration for every Atelier workflow.

The orchestrator sequences one workflow from user input to a finished
result. Each step runs strictly after the previous one:

1. Translate free text to English (falls back to the source text)
2. Classify the base image's background (where the prompt depends on it)
3. Assemble the prompt and call the remote service
4. Normalize the response parts into segments
5. Post-process locally (upscale, mask compositing) where requested

The orchestrator holds no per-request state; slot bookkeeping lives in
:class:`~atelier.workflows.base.WorkflowBoard`.

Usage Example
-------------
    >>> orchestrator = RequestOrchestrator(service, catalog, config)
    >>> result = orchestrator.primary_edit(image, process_ids=["restore"], style_id="oil-painting")
    >>> result.image
    ImagePayload(data=b'...', mime_type='image/png')
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from atelier.services.generation import IMAGE_AND_TEXT, IMAGE_ONLY, GenerationServiceBase

from . import prompt_builder
from .background import BackgroundClassifier
from .catalog import UPSCALE_PROCESS_ID, PromptCatalog
from .compositing import apply_mask
from .config import AtelierConfig
from .errors import RemoteServiceError, TranslationError
from .payloads import GeneratedSegment, ImagePayload, ImageSegment, TextSegment
from .raster import RasterCodec, default_codec
from .segments import first_image, last_image, normalize_segments, text_segments
from .upscaler import upscale
from .validation import (
    ValidationError,
    require_text,
    validate_aspect_ratio,
    validate_upscale_factor,
)

logger = logging.getLogger(__name__)

MASK_MIME_MARKERS = ("png", "jpeg")


@dataclass
class WorkflowResult:
    """Outcome of a workflow.

    Attributes:
        segments: Ordered text and image segments to display
        message: Completion message, if the workflow produces one
    """

    segments: list[GeneratedSegment] = field(default_factory=list)
    message: str | None = None

    @property
    def image(self) -> ImagePayload | None:
        return first_image(self.segments)


class RequestOrchestrator:
    """Sequence translation, classification, remote calls and post-processing.

    Attributes:
        service: Remote generation service
        catalog: Style, process and category catalog
        config: Application configuration
        classifier: Background emptiness classifier
        codec: Pixel access collaborator for local post-processing
    """

    def __init__(
        self,
        service: GenerationServiceBase,
        catalog: PromptCatalog,
        config: AtelierConfig,
        classifier: BackgroundClassifier | None = None,
        codec: RasterCodec = default_codec,
    ) -> None:
        self.service = service
        self.catalog = catalog
        self.config = config
        self.codec = codec
        self.classifier = classifier or BackgroundClassifier.from_config(config, codec=codec)

    # ------------------------------------------------------------------
    # Building blocks.
    # ------------------------------------------------------------------

    def translate_to_english(self, text: str) -> str:
        """Translate *text* to English, returning *text* unchanged on failure.

        Blank input returns ``""`` without a remote call.
        """
        if not text or not text.strip():
            return ""

        try:
            return self._translate(text)
        except TranslationError as e:
            logger.warning(f"Translation failed, using the original text: {e}")
            return text

    def _translate(self, text: str) -> str:
        prompt = prompt_builder.build_translation_prompt(text, self.config.source_language)
        try:
            translated = self.service.generate_text(
                [prompt],
                temperature=self.config.translation_temperature,
                model=self.config.text_model,
            )
        except RemoteServiceError as e:
            raise TranslationError(str(e)) from e

        if not translated:
            raise TranslationError("Translation returned no text")
        return translated

    def edit_image(
        self,
        base: ImagePayload,
        prompt: str,
        sources: Sequence[ImagePayload] = (),
    ) -> list[GeneratedSegment]:
        """Send ``[base, *sources, prompt]`` to the edit model and normalize the reply."""
        raw_parts = self.service.generate_content(
            [base, *sources, prompt],
            modalities=IMAGE_AND_TEXT,
            model=self.config.edit_model,
        )
        return normalize_segments(raw_parts)

    def generate_mixed(self, prompt: str, modalities: Sequence[str] = IMAGE_AND_TEXT) -> list[GeneratedSegment]:
        """Send a text-only prompt to the edit model and normalize the reply."""
        raw_parts = self.service.generate_content(
            [prompt], modalities=modalities, model=self.config.edit_model
        )
        return normalize_segments(raw_parts)

    def _suggest(self, parts: list, temperature: float) -> str:
        return self.service.generate_text(parts, temperature=temperature, model=self.config.text_model)

    @staticmethod
    def _require_image(segments: list[GeneratedSegment], failure: str) -> ImagePayload:
        image = first_image(segments)
        if image is None:
            texts = text_segments(segments)
            detail = texts[0].text if texts else ""
            raise RemoteServiceError(f"{failure} {detail}".strip())
        return image

    @staticmethod
    def _image_result(message: str, image: ImagePayload) -> WorkflowResult:
        return WorkflowResult(
            segments=[TextSegment(text=message), ImageSegment(image=image)],
            message=message,
        )

    # ------------------------------------------------------------------
    # Image edit workflows.
    # ------------------------------------------------------------------

    def primary_edit(
        self,
        image: ImagePayload,
        process_ids: Sequence[str] = (),
        style_id: str | None = None,
        custom_text: str = "",
        upscale_factor: int | None = None,
    ) -> WorkflowResult:
        """Apply processes, a style and free text to *image* in one edit.

        When the upscale process is selected, a detail-enhancement
        instruction leads the prompt and the returned image is upscaled
        locally by ``upscale_factor``.

        Raises:
            ValidationError: If nothing was requested or an id is unknown
            RemoteServiceError: If the model returns no image
            DecodeError: If an image cannot be decoded
        """
        if not process_ids and not style_id and not (custom_text and custom_text.strip()):
            raise ValidationError("Select a process or style, or describe the edit.")

        factor = validate_upscale_factor(upscale_factor or self.config.default_upscale_factor)
        processes = [self.catalog.get_process(pid) for pid in process_ids]
        style = self.catalog.get_style(style_id) if style_id else None

        translated = self.translate_to_english(custom_text)

        upscale_selected = any(p.id == UPSCALE_PROCESS_ID for p in processes)
        detail_prompt = self.catalog.get_process(UPSCALE_PROCESS_ID).prompt if upscale_selected else None
        other_prompts = [p.prompt for p in processes if p.id != UPSCALE_PROCESS_ID]

        background_empty = self.classifier.is_background_empty(image)

        prompt = prompt_builder.build_primary_prompt(
            other_prompts,
            style.prompt if style else None,
            translated,
            detail_prompt=detail_prompt,
            background_empty=background_empty,
        )

        segments = self.edit_image(image, prompt)
        result_image = self._require_image(segments, "The AI did not return an image.")

        if upscale_selected:
            result_image = upscale(result_image, factor, self.codec)
            message = f"Upscaling ({factor}x) and detail enhancement complete."
        else:
            message = "Edit complete."

        return self._image_result(message, result_image)

    def synthesize(
        self,
        base: ImagePayload,
        sources: Sequence[ImagePayload],
        instruction: str,
        aspect_ratio: str = "original",
    ) -> WorkflowResult:
        """Combine elements of *sources* into *base* following *instruction*.

        Every text segment the model returned is kept, followed by a
        completion message and the last returned image.
        """
        if not sources:
            raise ValidationError("Add at least one source image to synthesize.")
        instruction = require_text(instruction, "Synthesis instruction")
        validate_aspect_ratio(aspect_ratio)

        translated = self.translate_to_english(instruction)
        background_empty = self.classifier.is_background_empty(base)

        prompt = prompt_builder.build_synthesis_prompt(translated, background_empty, aspect_ratio)
        segments = self.edit_image(base, prompt, sources)

        image = last_image(segments)
        if image is None:
            texts = text_segments(segments)
            detail = texts[0].text if texts else ""
            raise RemoteServiceError(f"The AI did not return a synthesized image. {detail}".strip())

        if aspect_ratio == "original":
            message = "Synthesis complete."
        else:
            message = f"Synthesis and recomposition to {aspect_ratio} complete."

        return WorkflowResult(
            segments=[*text_segments(segments), TextSegment(text=message), ImageSegment(image=image)],
            message=message,
        )

    def remove_background(self, image: ImagePayload) -> WorkflowResult:
        """Ask the model for a subject mask and apply it as the alpha channel.

        Raises:
            RemoteServiceError: If no mask is returned or it is not PNG or JPEG
        """
        segments = self.edit_image(image, prompt_builder.REMOVE_BACKGROUND_PROMPT)
        mask = self._require_image(
            segments, "Background removal failed: no mask image was returned."
        )

        if not any(marker in mask.mime_type for marker in MASK_MIME_MARKERS):
            raise RemoteServiceError(f"AI returned an invalid mask format ({mask.mime_type}).")

        composited = apply_mask(image, mask, self.codec)
        return self._image_result("Background removal complete.", composited)

    def inpaint(self, image: ImagePayload, mask: ImagePayload) -> WorkflowResult:
        """Remove the white region of *mask* from *image* and fill it in."""
        segments = self.edit_image(image, prompt_builder.INPAINT_PROMPT, [mask])
        result = self._require_image(segments, "Inpainting failed.")
        return self._image_result("Inpainting complete.", result)

    def id_photo(self, image: ImagePayload) -> WorkflowResult:
        segments = self.edit_image(image, prompt_builder.ID_PHOTO_PROMPT)
        result = self._require_image(segments, "ID photo conversion failed.")
        return self._image_result("ID photo conversion complete.", result)

    def floorplan(self, image: ImagePayload, aspect_ratio: str = "original") -> WorkflowResult:
        validate_aspect_ratio(aspect_ratio)
        segments = self.edit_image(image, prompt_builder.build_floorplan_prompt(aspect_ratio))
        result = self._require_image(segments, "Floor plan 3D conversion failed.")
        return self._image_result(f"Floor plan 3D conversion ({aspect_ratio}) complete.", result)

    def comic_panel(
        self,
        image: ImagePayload,
        style: str = "noir",
        text: str = "",
        language: str = "ko",
        aspect_ratio: str = "original",
    ) -> WorkflowResult:
        """Redraw *image* as a single comic panel, optionally with a caption.

        English captions are translated first; other captions are rendered
        as written.
        """
        validate_aspect_ratio(aspect_ratio)
        if style not in prompt_builder.COMIC_STYLES:
            raise ValidationError(
                f"Unknown comic style '{style}'. Choose one of: {', '.join(prompt_builder.COMIC_STYLES)}"
            )
        if language not in prompt_builder.COMIC_LANGUAGES:
            raise ValidationError(f"Unknown caption language '{language}'")

        caption = ""
        if text and text.strip():
            caption = self.translate_to_english(text) if language == "en" else text.strip()

        prompt = prompt_builder.build_comic_prompt(style, caption, language, aspect_ratio)
        segments = self.edit_image(image, prompt)
        result = self._require_image(segments, "The AI did not return a comic panel image.")
        return self._image_result(f"Comic panel ({aspect_ratio}) complete.", result)

    def life_album(self, image: ImagePayload, age: str, aspect_ratio: str = "1:1") -> WorkflowResult:
        """Build a scrapbook of the pictured person at several ages."""
        age = require_text(age, "Current age")
        if aspect_ratio not in prompt_builder.LIFE_ALBUM_ASPECT_RATIOS:
            raise ValidationError(
                f"Life album aspect ratio must be one of: "
                f"{', '.join(prompt_builder.LIFE_ALBUM_ASPECT_RATIOS)}"
            )

        prompt = prompt_builder.build_life_album_prompt(age, aspect_ratio)
        segments = self.edit_image(image, prompt)
        self._require_image(segments, "The AI did not return a life album image.")
        return WorkflowResult(segments=segments, message="Life album complete.")

    # ------------------------------------------------------------------
    # Text-to-content workflows.
    # ------------------------------------------------------------------

    def generate_original(self, prompt: str, aspect_ratio: str = "1:1") -> WorkflowResult:
        """Generate a brand new base image from a text idea."""
        prompt = require_text(prompt, "Image description")
        validate_aspect_ratio(aspect_ratio, allow_original=False)

        english = self.translate_to_english(prompt)
        if not english:
            raise ValidationError("Prompt translation failed.")

        image = self.service.generate_image(english, aspect_ratio)
        return self._image_result(
            "Original image generated. You can now edit or synthesize it.", image
        )

    def story(self, idea: str) -> WorkflowResult:
        """Generate a silent visual story of eight images."""
        idea = require_text(idea, "Story idea")
        segments = self.generate_mixed(prompt_builder.build_story_prompt(idea), IMAGE_ONLY)
        return WorkflowResult(segments=segments)

    def recipe(self, prompt: str) -> WorkflowResult:
        """Generate an illustrated recipe from a dish name or a full recipe command."""
        prompt = require_text(prompt, "Dish name")
        if not prompt_builder.is_recipe_command(prompt):
            prompt = prompt_builder.build_recipe_prompt(prompt, self.config.source_language)
        segments = self.generate_mixed(prompt, IMAGE_AND_TEXT)
        return WorkflowResult(segments=segments)

    # ------------------------------------------------------------------
    # Suggestions.
    # ------------------------------------------------------------------

    def suggest_composition(
        self, base: ImagePayload, sources: Sequence[ImagePayload], aspect_ratio: str = "original"
    ) -> str:
        if not sources:
            raise ValidationError("Add at least one source image to get a suggestion.")
        validate_aspect_ratio(aspect_ratio)

        background_empty = self.classifier.is_background_empty(base)
        prompt = prompt_builder.build_composition_suggestion_prompt(
            background_empty, aspect_ratio, self.config.source_language
        )
        return self._suggest([base, *sources, prompt], self.config.composition_temperature)

    def suggest_primary(
        self,
        image: ImagePayload,
        process_ids: Sequence[str] = (),
        style_id: str | None = None,
        custom_text: str = "",
        aspect_ratio: str = "original",
    ) -> str:
        validate_aspect_ratio(aspect_ratio)
        process_labels = [self.catalog.get_process(pid).label for pid in process_ids]
        style_label = self.catalog.get_style(style_id).label if style_id else None

        background_empty = self.classifier.is_background_empty(image)
        prompt = prompt_builder.build_primary_suggestion_prompt(
            process_labels,
            style_label,
            custom_text,
            background_empty,
            aspect_ratio,
            self.config.source_language,
        )
        return self._suggest([image, prompt], self.config.suggestion_temperature)

    def suggest_original(self, idea: str, category_id: str = "default") -> str:
        idea = require_text(idea, "Image idea")
        category = self.catalog.get_category(category_id)
        prompt = prompt_builder.build_original_suggestion_prompt(
            idea, category.role, category.template, self.config.source_language
        )
        return self._suggest([prompt], self.config.suggestion_temperature)

    def suggest_story(self, image: ImagePayload) -> str:
        prompt = prompt_builder.build_story_suggestion_prompt(self.config.source_language)
        return self._suggest([image, prompt], self.config.suggestion_temperature)

    def suggest_recipe(self, image: ImagePayload) -> str:
        """Identify the pictured dish and return a full recipe command for it."""
        prompt = prompt_builder.build_dish_suggestion_prompt(self.config.source_language)
        dish = self._suggest([image, prompt], self.config.dish_temperature)
        return prompt_builder.build_recipe_prompt(dish, self.config.source_language)
