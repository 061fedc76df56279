"""Atelier - FastAPI Application.

This module is the single entry point for the web application. It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :data:`~atelier.core.config.config`; the
  prompt catalog is loaded once from ``prompts.json`` at startup.
- **Remote generation** goes through a
  :class:`~atelier.services.generation.GenerationServiceBase` created from
  the service registry.
- **Workflow sequencing** is done by
  :class:`~atelier.core.orchestrator.RequestOrchestrator`.
- **Slot state** lives in a :class:`~atelier.workflows.base.WorkflowBoard`
  on ``app.state``; only one remote request may be in flight at a time.
- **Local pixel operations** (upscale, mask, background check) bypass the
  board because they never leave the process.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/api/config``               Catalog, aspect ratios, options
GET       ``/api/slots``                Workflow slot states
POST      ``/api/slots/{name}/reset``   Reset a slot to idle
POST      ``/api/edit``                 Primary edit (process/style/text)
POST      ``/api/synthesize``           Multi-image synthesis
POST      ``/api/remove-background``    Remote mask + local compositing
POST      ``/api/inpaint``              Fill the masked region
POST      ``/api/quick/{action}``       ID photo, floorplan, comic, album
POST      ``/api/generate-original``    Text-to-image base generation
POST      ``/api/story``                Eight-image silent story
POST      ``/api/recipe``               Illustrated recipe
POST      ``/api/suggest/{kind}``       Prompt suggestions
POST      ``/api/upscale``              Local 2x / 4x upscale
POST      ``/api/mask``                 Local mask compositing
POST      ``/api/background-check``     Local background classification
========  ============================  ====================================

Error Mapping
-------------
- ``ValidationError`` and ``DecodeError`` -> 400
- ``WorkflowBusyError`` -> 409
- ``RemoteServiceError`` -> 502

Usage
-----
CLI (installed entry point)::

    atelier

Direct invocation::

    python -m atelier.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from atelier import __version__
from atelier.api.models import (
    EditRequest,
    GenerateOriginalRequest,
    ImageModel,
    ImageRequest,
    InpaintRequest,
    MaskRequest,
    QuickActionRequest,
    RecipeRequest,
    SegmentModel,
    StoryRequest,
    SuggestionResponse,
    SuggestRequest,
    SynthesisRequest,
    UpscaleRequest,
    WorkflowResponse,
)
from atelier.core.background import BackgroundClassifier
from atelier.core.catalog import PromptCatalog
from atelier.core.compositing import apply_mask
from atelier.core.config import config
from atelier.core.errors import DecodeError, RemoteServiceError
from atelier.core.orchestrator import RequestOrchestrator, WorkflowResult
from atelier.core.payloads import ASPECT_RATIOS, FULL_ASPECT_RATIOS
from atelier.core.prompt_builder import COMIC_LANGUAGES, COMIC_STYLES, LIFE_ALBUM_ASPECT_RATIOS
from atelier.core.upscaler import upscale
from atelier.core.validation import ValidationError, validate_upscale_factor
from atelier.services import service_registry
from atelier.workflows.base import WorkflowBoard, WorkflowBusyError

logger = logging.getLogger(__name__)

QUICK_ACTIONS = ("id-photo", "floorplan", "comic", "life-album")
SUGGESTION_KINDS = ("composition", "primary", "original", "story", "recipe")

# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Loads the prompt catalog, instantiates the configured generation
        service, and stores the orchestrator and workflow board on
        ``app.state``. No remote call is made at this point.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    catalog = PromptCatalog.load(config.prompts_file)
    service = service_registry.instantiate(config.generation_service, config)

    app.state.catalog = catalog
    app.state.classifier = BackgroundClassifier.from_config(config)
    app.state.orchestrator = RequestOrchestrator(
        service, catalog, config, classifier=app.state.classifier
    )
    app.state.board = WorkflowBoard()
    logger.info(f"Atelier started with generation service '{config.generation_service}'.")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    logger.info("Atelier shut down.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Atelier",
    description="Image editing, synthesis and compositing backed by Gemini and Imagen.",
    version=__version__,
    lifespan=lifespan,
)

# Allow cross-origin requests so a frontend can be served from a different
# port during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error mapping.
# ---------------------------------------------------------------------------


@app.exception_handler(ValidationError)
async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(DecodeError)
async def _decode_error_handler(request: Request, exc: DecodeError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(WorkflowBusyError)
async def _busy_error_handler(request: Request, exc: WorkflowBusyError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(RemoteServiceError)
async def _remote_error_handler(request: Request, exc: RemoteServiceError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Workflow helpers.
# ---------------------------------------------------------------------------


def _run_workflow(
    request: Request, slot: str, fn: Callable[[], WorkflowResult]
) -> WorkflowResponse:
    """Run *fn* inside *slot* and serialise the result."""
    board: WorkflowBoard = request.app.state.board
    result = board.run(slot, fn)
    return WorkflowResponse(
        slot=slot,
        status=board.get(slot).status.value,
        message=result.message,
        segments=[SegmentModel.from_segment(s) for s in result.segments],
    )


def _image_response(message: str, image: ImageModel) -> WorkflowResponse:
    return WorkflowResponse(
        status="succeeded",
        message=message,
        segments=[
            SegmentModel(type="text", text=message),
            SegmentModel(
                type="image",
                image=image,
                data_url=f"data:{image.mime_type};base64,{image.data}",
            ),
        ],
    )


def _require_image(image: ImageModel | None, what: str = "An image"):
    if image is None:
        raise ValidationError(f"{what} is required")
    return image.to_payload()


# ---------------------------------------------------------------------------
# Configuration and slot endpoints.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config(request: Request) -> dict:
    """Return the catalog and the options the frontend needs.

    Returns:
        Dictionary with ``version``, ``styles``, ``processes``,
        ``image_categories``, ``aspect_ratios``, ``comic_styles``,
        ``comic_languages``, ``life_album_aspect_ratios`` and
        ``upscale_factors``.
    """
    catalog: PromptCatalog = request.app.state.catalog
    return {
        "version": __version__,
        **catalog.to_dict(),
        "aspect_ratios": list(FULL_ASPECT_RATIOS),
        "generation_aspect_ratios": list(ASPECT_RATIOS),
        "comic_styles": list(COMIC_STYLES),
        "comic_languages": list(COMIC_LANGUAGES),
        "life_album_aspect_ratios": list(LIFE_ALBUM_ASPECT_RATIOS),
        "upscale_factors": [2, 4],
        "default_upscale_factor": config.default_upscale_factor,
    }


@app.get("/api/slots")
async def list_slots(request: Request) -> dict:
    board: WorkflowBoard = request.app.state.board
    return {"busy": board.busy, "slots": [slot.snapshot() for slot in board.slots]}


@app.post("/api/slots/{name}/reset")
async def reset_slot(name: str, request: Request) -> dict:
    """Reset a workflow slot to idle.

    A slot with a request in flight answers 409 via the
    ``WorkflowBusyError`` handler.

    Raises:
        HTTPException: 404 if the slot does not exist.
    """
    board: WorkflowBoard = request.app.state.board
    try:
        slot = board.reset(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown workflow slot '{name}'")
    return slot.snapshot()


# ---------------------------------------------------------------------------
# Image edit workflows.
# ---------------------------------------------------------------------------


@app.post("/api/edit")
def primary_edit(req: EditRequest, request: Request) -> WorkflowResponse:
    """Apply selected processes, a style and free text to an image."""
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    image = req.image.to_payload()
    return _run_workflow(
        request,
        "primary",
        lambda: orchestrator.primary_edit(
            image,
            process_ids=req.process_ids,
            style_id=req.style_id,
            custom_text=req.custom_text,
            upscale_factor=req.upscale_factor,
        ),
    )


@app.post("/api/synthesize")
def synthesize(req: SynthesisRequest, request: Request) -> WorkflowResponse:
    """Combine elements from source images into the base image."""
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    base = req.base.to_payload()
    sources = [s.to_payload() for s in req.sources]
    return _run_workflow(
        request,
        "synthesis",
        lambda: orchestrator.synthesize(base, sources, req.instruction, req.aspect_ratio),
    )


@app.post("/api/remove-background")
def remove_background(req: ImageRequest, request: Request) -> WorkflowResponse:
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    image = req.image.to_payload()
    return _run_workflow(request, "primary", lambda: orchestrator.remove_background(image))


@app.post("/api/inpaint")
def inpaint(req: InpaintRequest, request: Request) -> WorkflowResponse:
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    image = req.image.to_payload()
    mask = req.mask.to_payload()
    return _run_workflow(request, "primary", lambda: orchestrator.inpaint(image, mask))


@app.post("/api/quick/{action}")
def quick_action(action: str, req: QuickActionRequest, request: Request) -> WorkflowResponse:
    """Run one of the one-click transformations.

    Raises:
        HTTPException: 404 if the action is unknown.
    """
    if action not in QUICK_ACTIONS:
        raise HTTPException(status_code=404, detail=f"Unknown quick action '{action}'")

    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    image = req.image.to_payload()

    if action == "id-photo":
        fn = lambda: orchestrator.id_photo(image)  # noqa: E731
    elif action == "floorplan":
        fn = lambda: orchestrator.floorplan(image, req.aspect_ratio or "original")  # noqa: E731
    elif action == "comic":
        fn = lambda: orchestrator.comic_panel(  # noqa: E731
            image,
            style=req.comic_style,
            text=req.comic_text,
            language=req.comic_language,
            aspect_ratio=req.aspect_ratio or "original",
        )
    else:
        fn = lambda: orchestrator.life_album(image, req.age, req.aspect_ratio or "1:1")  # noqa: E731

    return _run_workflow(request, "primary", fn)


# ---------------------------------------------------------------------------
# Text-to-content workflows.
# ---------------------------------------------------------------------------


@app.post("/api/generate-original")
def generate_original(req: GenerateOriginalRequest, request: Request) -> WorkflowResponse:
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    return _run_workflow(
        request,
        "original",
        lambda: orchestrator.generate_original(req.prompt, req.aspect_ratio),
    )


@app.post("/api/story")
def story(req: StoryRequest, request: Request) -> WorkflowResponse:
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    return _run_workflow(request, "special", lambda: orchestrator.story(req.idea))


@app.post("/api/recipe")
def recipe(req: RecipeRequest, request: Request) -> WorkflowResponse:
    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    return _run_workflow(request, "special", lambda: orchestrator.recipe(req.prompt))


@app.post("/api/suggest/{kind}")
def suggest(kind: str, req: SuggestRequest, request: Request) -> SuggestionResponse:
    """Ask the text model for a prompt suggestion.

    Raises:
        HTTPException: 404 if the suggestion kind is unknown.
    """
    if kind not in SUGGESTION_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown suggestion kind '{kind}'")

    orchestrator: RequestOrchestrator = request.app.state.orchestrator
    board: WorkflowBoard = request.app.state.board

    if kind == "original":
        fn = lambda: orchestrator.suggest_original(req.idea, req.category_id)  # noqa: E731
    else:
        image = _require_image(req.image, "A base image")
        if kind == "composition":
            sources = [s.to_payload() for s in req.sources]
            fn = lambda: orchestrator.suggest_composition(image, sources, req.aspect_ratio)  # noqa: E731
        elif kind == "primary":
            fn = lambda: orchestrator.suggest_primary(  # noqa: E731
                image,
                process_ids=req.process_ids,
                style_id=req.style_id,
                custom_text=req.custom_text,
                aspect_ratio=req.aspect_ratio,
            )
        elif kind == "story":
            fn = lambda: orchestrator.suggest_story(image)  # noqa: E731
        else:
            fn = lambda: orchestrator.suggest_recipe(image)  # noqa: E731

    suggestion = board.run("suggestion", fn)
    return SuggestionResponse(
        slot="suggestion",
        status=board.get("suggestion").status.value,
        suggestion=suggestion,
    )


# ---------------------------------------------------------------------------
# Local pixel operations.
# ---------------------------------------------------------------------------


@app.post("/api/upscale")
def upscale_image(req: UpscaleRequest) -> WorkflowResponse:
    factor = validate_upscale_factor(req.factor)
    result = upscale(req.image.to_payload(), factor)
    return _image_response(f"Upscaling ({factor}x) complete.", ImageModel.from_payload(result))


@app.post("/api/mask")
def mask_image(req: MaskRequest) -> WorkflowResponse:
    result = apply_mask(req.image.to_payload(), req.mask.to_payload())
    return _image_response("Mask applied.", ImageModel.from_payload(result))


@app.post("/api/background-check")
def background_check(req: ImageRequest, request: Request) -> dict:
    """Report whether the image's background is transparent or a solid colour."""
    classifier: BackgroundClassifier = request.app.state.classifier
    return {"background_empty": classifier.is_background_empty(req.image.to_payload())}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~atelier.core.config.config` (which
    loads from ``ATELIER_SERVER_HOST`` and ``ATELIER_SERVER_PORT``
    environment variables). Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``atelier`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "atelier.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
