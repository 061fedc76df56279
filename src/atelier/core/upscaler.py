"""Local integer upscaling of generated images."""

import logging

from .payloads import ImagePayload, RasterBuffer
from .raster import RasterCodec, default_codec

logger = logging.getLogger(__name__)

SUPPORTED_FACTORS = (2, 4)


def resample_raster(raster: RasterBuffer, factor: int, codec: RasterCodec = default_codec) -> RasterBuffer:
    """Scale *raster* by an integer *factor* with high-quality (bicubic) filtering.

    Raises:
        ValueError: If factor is not 2 or 4
    """
    if factor not in SUPPORTED_FACTORS:
        raise ValueError(f"Upscale factor must be 2 or 4, got {factor}")
    return codec.resize(raster, raster.width * factor, raster.height * factor, "high")


def upscale(image: ImagePayload, factor: int, codec: RasterCodec = default_codec) -> ImagePayload:
    """Upscale an encoded image by 2x or 4x.

    Args:
        image: Encoded source image
        factor: 2 or 4
        codec: Pixel access collaborator

    Returns:
        PNG payload of exactly ``(width * factor, height * factor)``

    Raises:
        ValueError: If factor is not 2 or 4
        DecodeError: If the image cannot be decoded
    """
    if factor not in SUPPORTED_FACTORS:
        raise ValueError(f"Upscale factor must be 2 or 4, got {factor}")

    raster = codec.decode(image)
    scaled = resample_raster(raster, factor, codec)
    logger.info(f"Upscaled image {raster.size} -> {scaled.size} ({factor}x)")
    return codec.encode(scaled)
