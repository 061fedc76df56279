"""Normalization of remote response parts into generated segments.

The remote service returns a list of parts where each part carries either
text or inline image data. Parts are read by attribute, so both the
``google.genai`` ``types.Part`` objects and simple test doubles work:

    part.text                      -> str | None
    part.inline_data.mime_type     -> str | None
    part.inline_data.data          -> bytes | None
"""

import logging
from collections.abc import Iterable
from typing import Any

from .payloads import GeneratedSegment, ImagePayload, ImageSegment, TextSegment

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = "No content generated."


def normalize_segments(raw_parts: Iterable[Any] | None) -> list[GeneratedSegment]:
    """Convert raw response parts into an ordered list of segments.

    Rules:
        - Order is preserved.
        - A part with non-empty text becomes a TextSegment.
        - Otherwise, a part with inline data that has both a MIME type and
          bytes becomes an ImageSegment.
        - Anything else is dropped.
        - If nothing survives (or ``raw_parts`` is None) the result is a
          single TextSegment with NO_CONTENT_MESSAGE.

    Args:
        raw_parts: Parts from the first response candidate, or None

    Returns:
        Non-empty list of segments
    """
    segments: list[GeneratedSegment] = []

    for part in raw_parts or []:
        text = getattr(part, "text", None)
        if text:
            segments.append(TextSegment(text=text))
            continue

        inline = getattr(part, "inline_data", None)
        if inline is None:
            continue

        mime_type = getattr(inline, "mime_type", None)
        data = getattr(inline, "data", None)
        if mime_type and data:
            segments.append(ImageSegment(image=ImagePayload(data=bytes(data), mime_type=mime_type)))
        else:
            logger.debug("Dropping inline image part without a MIME type or data")

    if not segments:
        return [TextSegment(text=NO_CONTENT_MESSAGE)]
    return segments


def first_image(segments: Iterable[GeneratedSegment]) -> ImagePayload | None:
    """Return the first image in *segments*, or None."""
    for segment in segments:
        if isinstance(segment, ImageSegment):
            return segment.image
    return None


def last_image(segments: Iterable[GeneratedSegment]) -> ImagePayload | None:
    """Return the last image in *segments*, or None."""
    found = None
    for segment in segments:
        if isinstance(segment, ImageSegment):
            found = segment.image
    return found


def text_segments(segments: Iterable[GeneratedSegment]) -> list[TextSegment]:
    return [s for s in segments if isinstance(s, TextSegment)]
