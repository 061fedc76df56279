"""Tests for atelier.core.compositing - mask to alpha compositing."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from atelier.core.compositing import apply_mask, combine_alpha
from atelier.core.errors import DecodeError
from atelier.core.payloads import ImagePayload, RasterBuffer
from conftest import decode, encode_image


def _quadrant_mask(size: int = 10, quadrant: int = 5) -> ImagePayload:
    """Black mask with a white top-left quadrant."""
    mask = Image.new("L", (size, size), 0)
    mask.paste(255, (0, 0, quadrant, quadrant))
    return encode_image(mask.convert("RGB"))


class TestCombineAlpha:
    """Tests for combining raster buffers."""

    def test_alpha_from_red_channel(self):
        """Test that alpha comes from the mask's red channel."""
        original = RasterBuffer(width=1, height=1, samples=bytes([1, 2, 3, 255]))
        mask = RasterBuffer(width=1, height=1, samples=bytes([77, 0, 0, 255]))
        assert combine_alpha(original, mask).samples == bytes([1, 2, 3, 77])

    def test_size_mismatch_raises(self):
        """Test that rasters of different sizes are rejected."""
        original = RasterBuffer(width=1, height=1, samples=bytes(4))
        mask = RasterBuffer(width=2, height=1, samples=bytes(8))
        with pytest.raises(ValueError):
            combine_alpha(original, mask)


class TestApplyMask:
    """Test the full decode, reconcile, combine and encode path."""

    def test_blue_image_with_white_quadrant_mask(self, make_image):
        """Test that only the white quadrant of the mask stays opaque."""
        original = make_image(10, 10, (0, 0, 255, 255))

        result = apply_mask(original, _quadrant_mask())

        assert result.mime_type == "image/png"
        img = decode(result).convert("RGBA")
        assert img.size == (10, 10)
        pixels = np.array(img)
        assert (pixels[:5, :5] == [0, 0, 255, 255]).all()
        assert (pixels[5:, :, 3] == 0).all()
        assert (pixels[:, 5:, 3] == 0).all()
        assert (pixels[:, :, :3] == [0, 0, 255]).all()

    def test_output_keeps_original_rgb(self, make_image):
        """Test that colours come from the original and alpha from the mask."""
        original = make_image(6, 4, (12, 34, 56, 255))
        mask = make_image(6, 4, (128, 128, 128), mode="RGB")

        pixels = np.array(decode(apply_mask(original, mask)).convert("RGBA"))

        assert (pixels[:, :, :3] == [12, 34, 56]).all()
        assert (pixels[:, :, 3] == 128).all()

    def test_mask_size_is_reconciled(self, make_image):
        """Test that a smaller mask is resampled to the original's size."""
        original = make_image(10, 10, (0, 0, 255, 255))
        small_mask = make_image(5, 5, (255, 255, 255), mode="RGB")

        img = decode(apply_mask(original, small_mask)).convert("RGBA")

        assert img.size == (10, 10)
        assert (np.array(img)[:, :, 3] == 255).all()

    def test_jpeg_mask_is_accepted(self, make_image):
        """Test that a JPEG mask is decoded and applied."""
        original = make_image(8, 8, (255, 0, 0, 255))
        mask = make_image(8, 8, (255, 255, 255), mode="RGB", fmt="JPEG")

        img = decode(apply_mask(original, mask)).convert("RGBA")

        assert (np.array(img)[:, :, 3] >= 250).all()

    def test_undecodable_mask_raises(self, make_image):
        """Test that an undecodable mask raises DecodeError."""
        with pytest.raises(DecodeError):
            apply_mask(make_image(4, 4), ImagePayload(b"nope", "image/png"))

    def test_undecodable_original_raises(self, make_image):
        """Test that an undecodable original raises DecodeError."""
        with pytest.raises(DecodeError):
            apply_mask(ImagePayload(b"nope", "image/png"), make_image(4, 4))
