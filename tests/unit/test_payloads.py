"""Tests for atelier.core.payloads - image payloads and raster buffers."""

from __future__ import annotations

import numpy as np
import pytest

from atelier.core.errors import DecodeError
from atelier.core.payloads import ImagePayload, ImageSegment, RasterBuffer, TextSegment


class TestImagePayload:
    """Test base64 and data URL helpers."""

    def test_base64_round_trip(self):
        """Test that base64 encoding round-trips the bytes."""
        payload = ImagePayload(data=b"\x89PNG-bytes", mime_type="image/png")
        restored = ImagePayload.from_base64(payload.to_base64(), "image/png")
        assert restored == payload

    def test_invalid_base64_raises_decode_error(self):
        """Test that invalid base64 raises DecodeError."""
        with pytest.raises(DecodeError):
            ImagePayload.from_base64("not base64!!", "image/png")

    def test_data_url(self):
        """Test the data URL format and parsing."""
        payload = ImagePayload(data=b"abc", mime_type="image/jpeg")
        url = payload.to_data_url()
        assert url == "data:image/jpeg;base64,YWJj"
        assert ImagePayload.from_data_url(url) == payload

    def test_malformed_data_url_raises(self):
        """Test that a URL without the data prefix raises DecodeError."""
        with pytest.raises(DecodeError):
            ImagePayload.from_data_url("image/png,YWJj")

    def test_payload_is_immutable(self):
        """Test that payload fields cannot be reassigned."""
        payload = ImagePayload(data=b"abc", mime_type="image/png")
        with pytest.raises(AttributeError):
            payload.mime_type = "image/jpeg"


class TestRasterBuffer:
    """Test raster dimension validation and numpy conversion."""

    def test_valid_buffer(self):
        """Test that a correctly sized buffer is accepted."""
        raster = RasterBuffer(width=2, height=3, samples=bytes(2 * 3 * 4))
        assert raster.size == (2, 3)

    def test_sample_length_mismatch_raises(self):
        """Test that the sample length must equal width * height * 4."""
        with pytest.raises(ValueError, match="needs 16 bytes"):
            RasterBuffer(width=2, height=2, samples=bytes(15))

    def test_non_positive_dimensions_raise(self):
        """Test that zero dimensions are rejected."""
        with pytest.raises(ValueError):
            RasterBuffer(width=0, height=2, samples=b"")

    def test_array_round_trip(self):
        """Test that numpy conversion keeps shape and values."""
        array = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(3, 2, 4)
        raster = RasterBuffer.from_array(array)
        assert raster.width == 2
        assert raster.height == 3
        np.testing.assert_array_equal(raster.to_array(), array)

    def test_from_array_rejects_wrong_channel_count(self):
        """Test that RGB arrays are rejected."""
        with pytest.raises(ValueError):
            RasterBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))


class TestSegments:
    """Tests for generated segment types."""

    def test_segment_kinds(self):
        """Test that each segment reports its kind."""
        assert TextSegment("hi").kind == "text"
        assert ImageSegment(ImagePayload(b"x", "image/png")).kind == "image"

    def test_kind_is_not_an_init_argument(self):
        """Test that a segment's kind cannot be overridden."""
        with pytest.raises(TypeError):
            TextSegment("hi", "image")
