"""
Geometric resampling: affine warp and crop+rescale.

Both operations are inverse mappings built on one bilinear sampling
primitive. Source pixel coordinates put integer k at the center of pixel k.
Neighbors that fall outside the source image contribute zero (zero-pad);
they are never clamped or mirrored, so content near the border fades
towards black instead of smearing edge pixels.
"""

import logging

import numpy as np

from .buffers import ImageLike, as_pixels, prepare_output, store
from .errors import ShapeError
from .types import PointLike, as_i2

logger = logging.getLogger(__name__)


def _sample(pixels: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Bilinear-sample ``pixels`` at same-shaped coordinate arrays.

    Returns:
        float64 array of shape ``xs.shape + (d,)``.
    """
    h, w, d = pixels.shape
    x0 = np.floor(xs)
    y0 = np.floor(ys)
    fx = xs - x0
    fy = ys - y0
    x0 = x0.astype(np.intp)
    y0 = y0.astype(np.intp)

    result = np.zeros(xs.shape + (d,), dtype=np.float64)
    for oy, wy in ((0, 1.0 - fy), (1, fy)):
        for ox, wx in ((0, 1.0 - fx), (1, fx)):
            nx = x0 + ox
            ny = y0 + oy
            inside = (nx >= 0) & (ny >= 0) & (nx < w) & (ny < h)
            weight = (wx * wy)[inside]
            result[inside] += weight[:, np.newaxis] * pixels[ny[inside], nx[inside]]
    return result


def bilinear_sample(img: ImageLike, x, y) -> np.ndarray:
    """Sample an image at fractional source pixel coordinates.

    Args:
        img: Image to sample.
        x: X coordinate(s); scalar or array.
        y: Y coordinate(s), same shape as ``x``.

    Returns:
        float64 array of shape ``np.shape(x) + (d,)``, one value per channel.
        Coordinates whose four neighbors all lie outside the image give 0.

    Examples:
        >>> img = np.array([[0, 100]], dtype=np.uint8)
        >>> bilinear_sample(img, 0.5, 0.0)
        array([50.])
    """
    pixels = as_pixels(img, "img")
    xs = np.asarray(x, dtype=np.float64)
    ys = np.asarray(y, dtype=np.float64)
    if xs.shape != ys.shape:
        raise ShapeError(f"x and y must have the same shape, got {xs.shape} and {ys.shape}")
    samples = _sample(pixels, xs.reshape(-1), ys.reshape(-1))
    return samples.reshape(xs.shape + (pixels.shape[2],))


def _as_theta(theta) -> np.ndarray:
    matrix = np.asarray(theta, dtype=np.float64)
    if matrix.size != 4:
        raise ValueError(f"theta must hold 4 values (2x2 matrix), got {matrix.size}")
    return matrix.reshape(2, 2)


def _output_size(src: np.ndarray, out: ImageLike) -> tuple[int, int, int]:
    out_h, out_w, out_d = as_pixels(out, "out").shape
    if out_d != src.shape[2]:
        raise ShapeError(
            f"Input and output must have the same channel count, got {src.shape[2]} and {out_d}"
        )
    return out_h, out_w, out_d


def affine_transform(img: ImageLike, in_offset: PointLike, theta, out: ImageLike):
    """Warp ``img`` into ``out`` with an inverse affine mapping.

    For output pixel (ix, iy) with normalized center
    ``p = ((ix + 0.5) / out.w, (iy + 0.5) / out.h)`` the source normalized
    coordinate is ``theta @ p + (in_offset.x / in.w, in_offset.y / in.h)``.
    With an identity ``theta`` and equal sizes, ``out[0, 0] == in[in_offset]``.

    Args:
        img: Source image.
        in_offset: Translation in source pixels.
        theta: 2x2 matrix as ``[t0, t1, t2, t3]`` (row major) or a 2x2 array.
        out: Destination image; its w, h set the output size. Must have the
             same channel count as ``img``.

    Returns:
        ``out``.
    """
    src = as_pixels(img, "img")
    offset = as_i2(in_offset, "in_offset")
    matrix = _as_theta(theta)
    in_h, in_w, _ = src.shape
    out_h, out_w, d = _output_size(src, out)
    result, dst = prepare_output(out, (out_h, out_w, d), src.dtype)

    grid_x, grid_y = np.meshgrid(
        (np.arange(out_w) + 0.5) / out_w,
        (np.arange(out_h) + 0.5) / out_h,
    )
    xt = matrix[0, 0] * grid_x + matrix[0, 1] * grid_y + offset.x / in_w
    yt = matrix[1, 0] * grid_x + matrix[1, 1] * grid_y + offset.y / in_h

    store(dst, _sample(src, xt * in_w - 0.5, yt * in_h - 0.5))
    return result


def downscale_factor(crop_size: PointLike, out_w: int, out_h: int) -> int:
    """Integer decimation factor ``max(ceil(crop.x / out_w), ceil(crop.y / out_h))``."""
    crop = as_i2(crop_size, "crop_size")
    return max(-(-crop.x // out_w), -(-crop.y // out_h))


def crop_rescale(
    img: ImageLike,
    in_left_top: PointLike,
    crop_size: PointLike,
    out: ImageLike,
):
    """Crop a region of ``img`` and rescale it into ``out`` with box averaging.

    The output canvas is conceptually enlarged by the downscale factor
    ``dsf``; every enlarged pixel is bilinear-sampled from the crop (with the
    zero-pad policy) and each output pixel is the mean of its dsf x dsf block.
    Oversampling before averaging keeps large crops from aliasing.

    Args:
        img: Source image.
        in_left_top: Top-left corner of the crop in source pixels. The crop
                     may extend past the image; that part reads as zero.
        crop_size: (width, height) of the crop, both >= 1.
        out: Destination image with the same channel count as ``img``.

    Returns:
        ``out``.
    """
    src = as_pixels(img, "img")
    left = as_i2(in_left_top, "in_left_top")
    crop = as_i2(crop_size, "crop_size")
    if crop.x <= 0 or crop.y <= 0:
        raise ValueError(f"crop_size must be positive, got {tuple(crop)}")
    out_h, out_w, d = _output_size(src, out)
    result, dst = prepare_output(out, (out_h, out_w, d), src.dtype)

    dsf = downscale_factor(crop, out_w, out_h)
    enlarged_w = out_w * dsf
    enlarged_h = out_h * dsf
    logger.debug(
        "crop_rescale: %dx%d crop at (%d, %d) -> %dx%d, dsf=%d",
        crop.x, crop.y, left.x, left.y, out_w, out_h, dsf,
    )

    grid_x, grid_y = np.meshgrid(
        (np.arange(enlarged_w) + 0.5) / enlarged_w * crop.x - 0.5 + left.x,
        (np.arange(enlarged_h) + 0.5) / enlarged_h * crop.y - 0.5 + left.y,
    )
    samples = _sample(src, grid_x, grid_y)
    blocks = samples.reshape(out_h, dsf, out_w, dsf, d).mean(axis=(1, 3))

    store(dst, blocks)
    return result
