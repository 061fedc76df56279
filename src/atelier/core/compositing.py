"""Mask-based alpha compositing.

Turns a grayscale mask (subject white, background black, soft grey edges)
into the alpha channel of the original image. Used by the background
removal workflow once the remote model has produced the mask.
"""

import logging

from .payloads import ImagePayload, RasterBuffer
from .raster import RasterCodec, default_codec

logger = logging.getLogger(__name__)


def combine_alpha(original: RasterBuffer, mask: RasterBuffer) -> RasterBuffer:
    """Copy RGB from *original* and take alpha from the red channel of *mask*.

    Both rasters must already share the same dimensions.

    Raises:
        ValueError: If the sizes differ
    """
    if original.size != mask.size:
        raise ValueError(f"Mask size {mask.size} does not match original size {original.size}")

    result = original.to_array().copy()
    result[:, :, 3] = mask.to_array()[:, :, 0]
    return RasterBuffer.from_array(result)


def apply_mask(
    original: ImagePayload, mask: ImagePayload, codec: RasterCodec = default_codec
) -> ImagePayload:
    """Use *mask* as the alpha channel of *original*.

    The mask is resampled bilinearly to the original's exact dimensions, so
    a size mismatch between the two is reconciled rather than rejected.

    Args:
        original: Image whose colours are kept
        mask: Grayscale mask; its red channel becomes the output alpha
        codec: Pixel access collaborator

    Returns:
        PNG payload with the original's size and RGB and the mask's alpha

    Raises:
        DecodeError: If either payload cannot be decoded
    """
    original_raster = codec.decode(original)
    mask_raster = codec.decode(mask)

    if mask_raster.size != original_raster.size:
        logger.debug(f"Resampling mask from {mask_raster.size} to {original_raster.size}")
        mask_raster = codec.resize(
            mask_raster, original_raster.width, original_raster.height, "bilinear"
        )

    return codec.encode(combine_alpha(original_raster, mask_raster))
