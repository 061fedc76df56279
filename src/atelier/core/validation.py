"""Validation utilities for Atelier request inputs."""

import logging

from .errors import AtelierError
from .payloads import ASPECT_RATIOS, FULL_ASPECT_RATIOS

logger = logging.getLogger(__name__)

UPSCALE_FACTORS = (2, 4)


class ValidationError(AtelierError):
    """User-friendly validation error.

    This exception is raised when user input fails validation.
    The message is intended to be displayed directly to the user.
    """

    pass


def validate_upscale_factor(factor: int) -> int:
    """Return *factor* if it is a supported upscale factor.

    Raises:
        ValidationError: If factor is not 2 or 4
    """
    if factor not in UPSCALE_FACTORS:
        raise ValidationError(f"Upscale factor must be 2 or 4, got {factor}")
    return factor


def validate_aspect_ratio(ratio: str, allow_original: bool = True) -> str:
    """Return *ratio* if it names a supported aspect ratio.

    Args:
        ratio: Aspect ratio string such as ``"16:9"``
        allow_original: Whether the ``"original"`` sentinel is accepted

    Raises:
        ValidationError: If the ratio is not supported
    """
    allowed = FULL_ASPECT_RATIOS if allow_original else ASPECT_RATIOS
    if ratio not in allowed:
        raise ValidationError(
            f"Unsupported aspect ratio '{ratio}'. Choose one of: {', '.join(allowed)}"
        )
    return ratio


def require_text(value: str | None, field_name: str) -> str:
    """Return the stripped *value*, raising if it is blank."""
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()
