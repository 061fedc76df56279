"""Heuristic detection of images with no meaningful background.

An image is "effectively empty" when its background carries no scene
information: either it has any transparency at all, or every pixel is
within a small tolerance of a single colour. The result decides whether
edit and synthesis prompts ask the model to invent a new background.

Algorithm
---------
1. Decode the image (a decode failure propagates as DecodeError).
2. Resample bilinearly to ``(min(w, T), min(h, T))``. Each axis is clamped
   independently, so the aspect ratio is not preserved.
3. Any sampled alpha below 255 means empty.
4. Otherwise the image is empty when every pixel lies within the tolerance
   of the first pixel on R, G and B independently.

Runtime failures after a successful decode are logged and treated as
"not empty".
"""

import logging

import numpy as np

from .errors import DecodeError
from .payloads import ImagePayload, RasterBuffer
from .raster import RasterCodec, default_codec

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 5
DEFAULT_THUMBNAIL_SIZE = 100


def classify_raster(raster: RasterBuffer, tolerance: int = DEFAULT_TOLERANCE) -> bool:
    """Apply the transparency and solid-colour rules to an already sampled raster."""
    pixels = raster.to_array()

    if (pixels[:, :, 3] < 255).any():
        return True

    rgb = pixels[:, :, :3].astype(np.int16)
    first = rgb[0, 0]
    return bool((np.abs(rgb - first) <= tolerance).all())


class BackgroundClassifier:
    """Decide whether an image's background is transparent or a solid colour.

    Attributes:
        tolerance: Per-channel distance (0-255) from the first pixel allowed
            for a pixel to count as the same colour
        thumbnail_size: Upper bound on each side of the sampled thumbnail
        codec: Pixel access collaborator
    """

    def __init__(
        self,
        tolerance: int = DEFAULT_TOLERANCE,
        thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE,
        codec: RasterCodec = default_codec,
    ) -> None:
        if not 0 <= tolerance <= 255:
            raise ValueError(f"Tolerance must be 0-255, got {tolerance}")
        if thumbnail_size < 1:
            raise ValueError(f"Thumbnail size must be positive, got {thumbnail_size}")

        self.tolerance = tolerance
        self.thumbnail_size = thumbnail_size
        self.codec = codec

    @classmethod
    def from_config(cls, config, codec: RasterCodec = default_codec) -> "BackgroundClassifier":
        return cls(
            tolerance=config.background_tolerance,
            thumbnail_size=config.background_thumbnail_size,
            codec=codec,
        )

    def is_background_empty(self, image: ImagePayload) -> bool:
        """Return True when *image* has transparency or a uniform colour.

        Raises:
            DecodeError: If the image cannot be decoded
        """
        raster = self.codec.decode(image)

        try:
            width = min(raster.width, self.thumbnail_size)
            height = min(raster.height, self.thumbnail_size)
            thumbnail = self.codec.resize(raster, width, height, "bilinear")
            return classify_raster(thumbnail, self.tolerance)
        except DecodeError:
            raise
        except Exception as e:
            logger.warning(f"Background check failed, assuming a meaningful background: {e}")
            return False


def is_background_empty(image: ImagePayload, codec: RasterCodec = default_codec) -> bool:
    """Classify *image* with the default tolerance and thumbnail bound."""
    return BackgroundClassifier(codec=codec).is_background_empty(image)
