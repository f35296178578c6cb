"""Unit tests for 8-bit to float normalization."""

import numpy as np
import pytest

from imgproc import FloatImage, Image, ShapeError, normalize


class TestNormalize:
    """Tests for the normalize function."""

    def test_endpoints(self):
        out = normalize(np.array([[0, 127, 255]], dtype=np.uint8))
        assert out[0, 0, 0] == pytest.approx(-0.9921875)
        assert out[0, 1, 0] == 0.0
        assert out[0, 2, 0] == 1.0

    def test_allocates_float32_hwc(self):
        out = normalize(np.zeros((3, 4, 2), dtype=np.uint8))
        assert out.shape == (3, 4, 2)
        assert out.dtype == np.float32

    def test_writes_into_caller_view(self):
        img = Image(bytearray([0, 255, 127, 131]), w=2, h=2)
        out = FloatImage.zeros(w=2, h=2)
        returned = normalize(img, out)
        assert returned is out
        np.testing.assert_allclose(out.data, [-127 / 128, 1.0, 0.0, 4 / 128])

    def test_fully_overwrites_output(self):
        out = np.full((2, 2, 1), 42.0, dtype=np.float32)
        normalize(np.full((2, 2), 255, dtype=np.uint8), out)
        assert np.all(out == 1.0)

    def test_pure_function_no_mutation(self, rng):
        img = rng.integers(0, 256, (8, 8, 3), dtype=np.uint8)
        original = img.copy()
        _ = normalize(img)
        assert np.array_equal(img, original)

    def test_shape_mismatch_raises_and_leaves_output(self):
        out = np.full((2, 3, 1), 5.0, dtype=np.float32)
        with pytest.raises(ShapeError):
            normalize(np.zeros((2, 2), dtype=np.uint8), out)
        assert np.all(out == 5.0)

    def test_channel_mismatch_raises(self):
        with pytest.raises(ShapeError):
            normalize(np.zeros((2, 2, 3), dtype=np.uint8), np.zeros((2, 2, 1), dtype=np.float32))

    def test_non_uint8_input_raises(self):
        with pytest.raises(TypeError, match="8-bit"):
            normalize(np.zeros((2, 2), dtype=np.float32))

    def test_integer_output_raises(self):
        with pytest.raises(TypeError, match="float image"):
            normalize(np.zeros((2, 2), dtype=np.uint8), np.zeros((2, 2), dtype=np.uint8))
