"""Tests for atelier.core.upscaler - local integer upscaling."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from atelier.core.errors import DecodeError
from atelier.core.payloads import ImagePayload, RasterBuffer
from atelier.core.raster import PillowRasterCodec
from atelier.core.upscaler import resample_raster, upscale
from conftest import decode


class TestUpscale:
    """Tests for upscaling encoded images."""

    @pytest.mark.parametrize("factor", [2, 4])
    def test_output_dimensions(self, make_image, factor):
        """Test that the output is exactly factor times larger."""
        result = upscale(make_image(7, 3), factor)
        assert decode(result).size == (7 * factor, 3 * factor)

    def test_output_is_png_even_for_jpeg_input(self, make_image):
        """Test that JPEG input is upscaled to PNG."""
        result = upscale(make_image(5, 5, (10, 10, 10), mode="RGB", fmt="JPEG"), 2)
        assert result.mime_type == "image/png"
        assert decode(result).format == "PNG"

    @pytest.mark.parametrize("factor", [0, 1, 3, 8])
    def test_unsupported_factor_raises(self, make_image, factor):
        """Test that factors other than 2 and 4 are rejected."""
        with pytest.raises(ValueError):
            upscale(make_image(2, 2), factor)

    def test_undecodable_input_raises(self):
        """Test that undecodable input raises DecodeError."""
        with pytest.raises(DecodeError):
            upscale(ImagePayload(b"garbage", "image/png"), 2)

    def test_solid_colour_is_preserved(self, make_image):
        """Test that a solid colour stays exact after resampling."""
        img = decode(upscale(make_image(4, 4, (40, 80, 120, 255)), 4)).convert("RGBA")
        assert set(img.getdata()) == {(40, 80, 120, 255)}


class TestResampleRaster:
    """Tests for raster resampling."""

    def test_uses_high_quality_filter(self):
        """Test that upscaling asks the codec for high quality."""
        codec = Mock(wraps=PillowRasterCodec())
        raster = RasterBuffer(width=2, height=2, samples=bytes(16))

        resample_raster(raster, 2, codec)

        codec.resize.assert_called_once_with(raster, 4, 4, "high")
