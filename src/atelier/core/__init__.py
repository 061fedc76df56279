"""Core functionality for Atelier.

This package holds the client-side image pipeline and the request logic:

- **Configuration** (config.py): Pydantic Settings with the ATELIER_ prefix
- **Payloads** (payloads.py): ImagePayload, RasterBuffer, generated segments
- **Pixel access** (raster.py): RasterCodec collaborator backed by Pillow
- **Compositing** (compositing.py): mask to alpha channel
- **Upscaling** (upscaler.py): bicubic 2x / 4x enlargement
- **Background check** (background.py): transparent or solid colour detection
- **Segments** (segments.py): normalization of remote response parts
- **Catalog and prompts** (catalog.py, prompt_builder.py)
- **Orchestration** (orchestrator.py): workflow sequencing

The orchestrator is not re-exported here because it depends on the
services package; import it from ``atelier.core.orchestrator``.

Usage Example
-------------
    >>> from atelier.core import apply_mask, upscale, BackgroundClassifier
    >>> cutout = apply_mask(original, mask)
    >>> bigger = upscale(cutout, 2)
"""

from .background import BackgroundClassifier, is_background_empty
from .compositing import apply_mask, combine_alpha
from .config import AtelierConfig, config
from .errors import AtelierError, DecodeError, RemoteServiceError, TranslationError
from .payloads import ImagePayload, ImageSegment, RasterBuffer, TextSegment
from .raster import PillowRasterCodec, RasterCodec, default_codec
from .segments import NO_CONTENT_MESSAGE, normalize_segments
from .upscaler import upscale

__all__ = [
    "AtelierConfig",
    "AtelierError",
    "BackgroundClassifier",
    "DecodeError",
    "ImagePayload",
    "ImageSegment",
    "NO_CONTENT_MESSAGE",
    "PillowRasterCodec",
    "RasterBuffer",
    "RasterCodec",
    "RemoteServiceError",
    "TextSegment",
    "TranslationError",
    "apply_mask",
    "combine_alpha",
    "config",
    "default_codec",
    "is_background_empty",
    "normalize_segments",
    "upscale",
]
