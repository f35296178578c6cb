"""
Unit tests for line / quadrilateral rasterization.

Covers: stepper sampling, channel policy, thickness sweep, silent clipping
of off-canvas points and argument validation.
"""

import numpy as np
import pytest

from imgproc import I2, I3, Image, draw_line, draw_quadrilateral, draw_rectangle

WHITE = (255, 255, 255)


def _mask(img: np.ndarray) -> np.ndarray:
    """Boolean (h, w) map of pixels with any nonzero channel."""
    return np.any(img.reshape(img.shape[0], img.shape[1], -1) != 0, axis=2)


def _square_outline(size: int, lo: int, hi: int) -> np.ndarray:
    expected = np.zeros((size, size), dtype=bool)
    expected[lo, lo:hi + 1] = True
    expected[hi, lo:hi + 1] = True
    expected[lo:hi + 1, lo] = True
    expected[lo:hi + 1, hi] = True
    return expected


class TestDrawLine:
    """Tests for the draw_line function."""

    def test_horizontal_line_excludes_end_point(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, (0, 0), (4, 0), WHITE)
        assert img[0].tolist() == [255, 255, 255, 255, 0]
        assert img[1:].sum() == 0

    def test_vertical_line(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, I2(2, 4), I2(2, 0), WHITE)
        assert img[:, 2].tolist() == [0, 255, 255, 255, 255]

    def test_diagonal_line(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, (0, 0), (3, 3), WHITE)
        assert np.array_equal(np.argwhere(img), [[0, 0], [1, 1], [2, 2]])

    def test_steep_line_uses_larger_delta(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, (0, 0), (2, 4), WHITE)
        # 4 steps along y, x advances by 0.5 per step and is floored
        assert np.array_equal(np.argwhere(img), [[0, 0], [1, 0], [2, 1], [3, 1]])

    def test_long_sloped_line_hits_lattice_points_exactly(self):
        img = np.zeros((31, 45), dtype=np.uint8)
        draw_line(img, (0, 0), (44, 30), WHITE)
        # x = 22 lies exactly on y = 22 * 30 / 44 = 15
        assert np.flatnonzero(img[:, 22]).tolist() == [15]
        cols = np.arange(44)
        expected = np.zeros((31, 45), dtype=bool)
        expected[(cols * 30) // 44, cols] = True
        assert np.array_equal(_mask(img), expected)

    def test_negative_slope_floors_toward_minus_infinity(self):
        img = np.zeros((4, 5), dtype=np.uint8)
        draw_line(img, (0, 3), (4, 1), WHITE)
        # y = 3 - i / 2 floors to 3, 2, 2, 1
        assert np.array_equal(np.argwhere(img), [[1, 3], [2, 1], [2, 2], [3, 0]])

    def test_coincident_points_draw_nothing(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, (2, 2), (2, 2), WHITE)
        assert img.sum() == 0

    def test_off_canvas_points_are_skipped(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, (-3, 2), (3, 2), WHITE)
        assert img[2].tolist() == [255, 255, 255, 0, 0]

    def test_fully_off_canvas_line_is_noop(self):
        img = np.zeros((5, 5), dtype=np.uint8)
        draw_line(img, (-10, -10), (-2, -8), WHITE)
        assert img.sum() == 0

    def test_single_channel_uses_first_component(self):
        img = np.zeros((3, 3), dtype=np.uint8)
        draw_line(img, (0, 1), (3, 1), I3(10, 20, 30))
        assert img[1].tolist() == [10, 10, 10]

    def test_rgb_receives_all_components(self):
        img = np.zeros((3, 3, 3), dtype=np.uint8)
        draw_line(img, (0, 1), (3, 1), (10, 20, 30))
        assert img[1, 0].tolist() == [10, 20, 30]

    def test_two_channels_receive_two_components(self):
        img = np.zeros((3, 3, 2), dtype=np.uint8)
        draw_line(img, (0, 1), (3, 1), (10, 20, 30))
        assert img[1, 2].tolist() == [10, 20]

    def test_alpha_channel_untouched(self):
        img = np.full((3, 3, 4), 7, dtype=np.uint8)
        draw_line(img, (0, 1), (3, 1), (10, 20, 30))
        assert img[1, 1].tolist() == [10, 20, 30, 7]

    def test_thickness_sweeps_both_axes(self):
        img = np.zeros((6, 6), dtype=np.uint8)
        draw_line(img, (1, 2), (4, 2), WHITE, thickness=3)
        expected = np.zeros((6, 6), dtype=bool)
        expected[1, 1:4] = True
        expected[2, 0:5] = True
        expected[3, 1:4] = True
        assert np.array_equal(_mask(img), expected)

    def test_thickness_zero_and_one_are_single_sweep(self):
        thin = np.zeros((5, 5), dtype=np.uint8)
        zero = np.zeros((5, 5), dtype=np.uint8)
        draw_line(thin, (0, 2), (4, 2), WHITE, thickness=1)
        draw_line(zero, (0, 2), (4, 2), WHITE, thickness=0)
        assert np.array_equal(thin, zero)

    def test_writes_through_image_view(self):
        buf = bytearray(4 * 4)
        draw_line(Image(buf, w=4, h=4), (0, 3), (4, 3), WHITE)
        assert list(buf[12:16]) == [255, 255, 255, 255]

    def test_returns_image(self):
        img = np.zeros((3, 3), dtype=np.uint8)
        assert draw_line(img, (0, 0), (2, 2), WHITE) is img

    def test_negative_thickness_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            draw_line(np.zeros((3, 3), dtype=np.uint8), (0, 0), (2, 2), WHITE, thickness=-1)

    def test_color_out_of_range_raises(self):
        with pytest.raises(ValueError, match="0..255"):
            draw_line(np.zeros((3, 3), dtype=np.uint8), (0, 0), (2, 2), (256, 0, 0))


class TestDrawQuadrilateral:
    """Tests for draw_quadrilateral and draw_rectangle."""

    def test_outline_is_closed_and_unfilled(self):
        img = np.zeros((6, 6), dtype=np.uint8)
        draw_quadrilateral(img, (1, 1), (4, 1), (4, 4), (1, 4), WHITE)
        assert np.array_equal(_mask(img), _square_outline(6, 1, 4))

    def test_rectangle_matches_quadrilateral(self):
        quad = np.zeros((8, 8, 3), dtype=np.uint8)
        rect = np.zeros((8, 8, 3), dtype=np.uint8)
        draw_quadrilateral(quad, (2, 1), (6, 1), (6, 5), (2, 5), (1, 2, 3), thickness=2)
        draw_rectangle(rect, (2, 1), (5, 5), (1, 2, 3), thickness=2)
        assert np.array_equal(quad, rect)

    def test_partially_off_canvas_is_clipped(self):
        img = np.zeros((4, 4), dtype=np.uint8)
        draw_quadrilateral(img, (-2, -2), (2, -2), (2, 2), (-2, 2), WHITE)
        expected = np.zeros((4, 4), dtype=bool)
        expected[0:3, 2] = True
        expected[2, 0:3] = True
        assert np.array_equal(_mask(img), expected)

    def test_fully_off_canvas_is_noop(self):
        img = np.zeros((4, 4), dtype=np.uint8)
        draw_quadrilateral(img, (10, 10), (12, 10), (12, 12), (10, 12), WHITE, thickness=3)
        assert img.sum() == 0

    def test_rectangle_size_must_be_positive(self):
        with pytest.raises(ValueError, match="positive"):
            draw_rectangle(np.zeros((4, 4), dtype=np.uint8), (0, 0), (0, 3), WHITE)
