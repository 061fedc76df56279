"""Pixel buffer access for the compositing pipeline.

The pixel algorithms (mask compositing, upscaling, background
classification) never touch an imaging library directly. They receive a
:class:`RasterCodec` that can decode an encoded payload into a
:class:`~atelier.core.payloads.RasterBuffer`, encode a buffer back to PNG,
and resample a buffer to a new size.

Resampling Quality
------------------
=========  ==================  ==========================================
Quality    Pillow filter       Used by
=========  ==================  ==========================================
nearest    ``NEAREST``         (tests, previews)
bilinear   ``BILINEAR``        mask reconciliation, background thumbnail
high       ``BICUBIC``         upscaling
=========  ==================  ==========================================

Usage Example
-------------
    >>> from atelier.core.raster import default_codec
    >>> raster = default_codec.decode(payload)
    >>> bigger = default_codec.resize(raster, raster.width * 2, raster.height * 2, "high")
    >>> png = default_codec.encode(bigger)
"""

import io
import logging
from abc import ABC, abstractmethod
from typing import Literal

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .payloads import ImagePayload, RasterBuffer

logger = logging.getLogger(__name__)

Quality = Literal["nearest", "bilinear", "high"]

_PIL_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "high": Image.Resampling.BICUBIC,
}


class RasterCodec(ABC):
    """Decode, encode and resample RGBA rasters."""

    @abstractmethod
    def decode(self, payload: ImagePayload) -> RasterBuffer:
        """Decode *payload* into an RGBA raster.

        Raises:
            DecodeError: If the bytes are not a supported raster format
        """

    @abstractmethod
    def encode(self, raster: RasterBuffer, fmt: str = "png") -> ImagePayload:
        """Encode *raster* losslessly. Only ``"png"`` is supported."""

    @abstractmethod
    def resize(
        self, raster: RasterBuffer, width: int, height: int, quality: Quality = "bilinear"
    ) -> RasterBuffer:
        """Resample *raster* to exactly ``width`` x ``height``."""


class PillowRasterCodec(RasterCodec):
    """RasterCodec backed by Pillow."""

    def decode(self, payload: ImagePayload) -> RasterBuffer:
        try:
            with Image.open(io.BytesIO(payload.data)) as img:
                img.load()
                rgba = img.convert("RGBA")
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image is too large to process: {e}") from e
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise DecodeError(f"Could not decode image ({payload.mime_type}): {e}") from e

        return self._from_image(rgba)

    def encode(self, raster: RasterBuffer, fmt: str = "png") -> ImagePayload:
        if fmt.lower() != "png":
            raise ValueError(f"Unsupported output format '{fmt}', only 'png' is supported")

        buffer = io.BytesIO()
        self._to_image(raster).save(buffer, format="PNG")
        return ImagePayload(data=buffer.getvalue(), mime_type="image/png")

    def resize(
        self, raster: RasterBuffer, width: int, height: int, quality: Quality = "bilinear"
    ) -> RasterBuffer:
        if quality not in _PIL_FILTERS:
            raise ValueError(f"Unknown resampling quality '{quality}'")
        if (width, height) == raster.size:
            return raster

        resized = self._to_image(raster).resize((width, height), resample=_PIL_FILTERS[quality])
        return self._from_image(resized)

    @staticmethod
    def _to_image(raster: RasterBuffer) -> Image.Image:
        return Image.frombytes("RGBA", raster.size, raster.samples)

    @staticmethod
    def _from_image(img: Image.Image) -> RasterBuffer:
        return RasterBuffer(width=img.width, height=img.height, samples=img.tobytes())


# Shared codec instance used when callers do not inject their own.
default_codec = PillowRasterCodec()
