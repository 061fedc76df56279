"""Data models for image payloads, raster buffers and generated segments."""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Literal, Union

import numpy as np

from .errors import DecodeError

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")
ORIGINAL_ASPECT_RATIO = "original"
FULL_ASPECT_RATIOS = (ORIGINAL_ASPECT_RATIO,) + ASPECT_RATIOS

CHANNELS = 4


@dataclass(frozen=True)
class ImagePayload:
    """An encoded image as exchanged with users and the remote service.

    Attributes:
        data: Encoded image bytes (PNG, JPEG, WEBP, ...)
        mime_type: MIME type declared for ``data``
    """

    data: bytes
    mime_type: str

    @classmethod
    def from_base64(cls, data: str, mime_type: str) -> "ImagePayload":
        """Build a payload from a base64 string.

        Raises:
            DecodeError: If ``data`` is not valid base64
        """
        try:
            raw = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Image data is not valid base64: {e}") from e
        return cls(data=raw, mime_type=mime_type)

    @classmethod
    def from_data_url(cls, url: str) -> "ImagePayload":
        """Build a payload from a ``data:<mime>;base64,<data>`` URL."""
        header, sep, encoded = url.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise DecodeError("Image data URL must look like 'data:<mime>;base64,<data>'")
        mime_type = header[len("data:") : -len(";base64")]
        return cls.from_base64(encoded, mime_type)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


@dataclass(frozen=True)
class RasterBuffer:
    """A decoded RGBA8 raster.

    Samples are row-major, four bytes per pixel in R, G, B, A order with
    unpremultiplied alpha. A mask is a RasterBuffer read in grayscale; only
    its red channel is consulted.
    """

    width: int
    height: int
    samples: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * CHANNELS
        if len(self.samples) != expected:
            raise ValueError(
                f"Raster of {self.width}x{self.height} needs {expected} bytes, "
                f"got {len(self.samples)}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def to_array(self) -> np.ndarray:
        """Return a read-only ``(height, width, 4)`` uint8 view of the samples."""
        return np.frombuffer(self.samples, dtype=np.uint8).reshape(
            self.height, self.width, CHANNELS
        )

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterBuffer":
        """Build a raster from a ``(height, width, 4)`` array."""
        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (h, w, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        samples = np.ascontiguousarray(array, dtype=np.uint8).tobytes()
        return cls(width=width, height=height, samples=samples)


@dataclass(frozen=True)
class TextSegment:
    """A text part of a generated response."""

    text: str
    kind: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class ImageSegment:
    """An image part of a generated response."""

    image: ImagePayload
    kind: Literal["image"] = field(default="image", init=False)


GeneratedSegment = Union[TextSegment, ImageSegment]
