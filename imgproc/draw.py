"""
Rasterized drawing of lines and quadrilaterals into 8-bit images.

Used for annotation and visualization. Points that fall outside the canvas
are skipped without error, so shapes may be partially or fully off-image.
"""

import numpy as np

from config import COLOR_COMPONENTS, DEFAULT_LINE_THICKNESS, MAX_PIXEL_VALUE
from geometry import rect_to_quad

from .buffers import ImageLike, as_pixels
from .types import ColorLike, PointLike, as_i2, as_i3


def _draw_line_prim(
    pixels: np.ndarray,
    x0: int, y0: int, x1: int, y1: int,
    color: np.ndarray,
) -> None:
    """Draw a one-pixel line with a parametric stepper.

    Samples ``steps = max(|dx|, |dy|)`` points starting at (x0, y0); the end
    point itself is not sampled. Sample i lands on x0 + floor(i * dx / steps),
    computed in integers so lattice points are hit exactly. Coinciding end
    points draw nothing.
    """
    dx = x1 - x0
    dy = y1 - y0
    steps = max(abs(dx), abs(dy))
    if steps == 0:
        return

    i = np.arange(steps, dtype=np.intp)
    xs = x0 + (i * dx) // steps
    ys = y0 + (i * dy) // steps

    h, w = pixels.shape[:2]
    inside = (xs >= 0) & (ys >= 0) & (xs < w) & (ys < h)
    pixels[ys[inside], xs[inside], :color.size] = color


def _color_for(pixels: np.ndarray, color: ColorLike) -> np.ndarray:
    """Color components to write for an image with ``d`` channels."""
    rgb = as_i3(color)
    for component in rgb:
        if not 0 <= component <= MAX_PIXEL_VALUE:
            raise ValueError(f"Color components must be within 0..{MAX_PIXEL_VALUE}, got {tuple(rgb)}")
    channels = min(pixels.shape[2], COLOR_COMPONENTS)
    return np.asarray(rgb[:channels], dtype=pixels.dtype)


def _check_thickness(thickness: int) -> int:
    if not isinstance(thickness, (int, np.integer)):
        raise TypeError(f"thickness must be int, got {type(thickness).__name__}")
    if thickness < 0:
        raise ValueError(f"thickness must be non-negative, got {thickness}")
    return int(thickness)


def _stroke(pixels: np.ndarray, p1, p2, color: np.ndarray, thickness: int) -> None:
    # Thickness is approximated by sweeping the line along both axes.
    half = thickness // 2
    for offset in range(-half, half + 1):
        _draw_line_prim(pixels, p1.x + offset, p1.y, p2.x + offset, p2.y, color)
        _draw_line_prim(pixels, p1.x, p1.y + offset, p2.x, p2.y + offset, color)


def draw_line(
    img: ImageLike,
    p1: PointLike,
    p2: PointLike,
    color: ColorLike,
    thickness: int = DEFAULT_LINE_THICKNESS,
):
    """Draw a line from ``p1`` towards ``p2`` in place.

    Channel 0 receives ``color.x``, channel 1 ``color.y`` and channel 2
    ``color.z``, each only if the image has that channel. Further channels
    (e.g. alpha) are left untouched.

    Args:
        img: 8-bit image to draw into. Modified in place.
        p1: Start point (x, y).
        p2: End point (x, y).
        color: (x, y, z) color components in 0..255.
        thickness: Stroke thickness; 0 and 1 both give a single sweep.

    Returns:
        ``img``.
    """
    pixels = as_pixels(img, "img")
    thickness = _check_thickness(thickness)
    _stroke(pixels, as_i2(p1, "p1"), as_i2(p2, "p2"), _color_for(pixels, color), thickness)
    return img


def draw_quadrilateral(
    img: ImageLike,
    p1: PointLike,
    p2: PointLike,
    p3: PointLike,
    p4: PointLike,
    color: ColorLike,
    thickness: int = DEFAULT_LINE_THICKNESS,
):
    """Draw the outline p1 -> p2 -> p3 -> p4 -> p1 in place (not filled)."""
    pixels = as_pixels(img, "img")
    thickness = _check_thickness(thickness)
    rgb = _color_for(pixels, color)
    corners = [as_i2(p, f"p{i}") for i, p in enumerate((p1, p2, p3, p4), start=1)]

    for start, end in zip(corners, corners[1:] + corners[:1]):
        _stroke(pixels, start, end, rgb, thickness)
    return img


def draw_rectangle(
    img: ImageLike,
    left_top: PointLike,
    size: PointLike,
    color: ColorLike,
    thickness: int = DEFAULT_LINE_THICKNESS,
):
    """Draw the outline of an axis-aligned ``size.x`` x ``size.y`` rectangle."""
    x, y = as_i2(left_top, "left_top")
    w, h = as_i2(size, "size")
    return draw_quadrilateral(img, *rect_to_quad(x, y, w, h), color, thickness)
