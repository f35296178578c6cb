"""
Histogram-based thresholding and contrast enhancement.

All functions work on single-channel 8-bit images and build a 256-bin
intensity histogram first.
"""

import logging

import numpy as np

from config import BINARY_BACKGROUND, BINARY_FOREGROUND, HISTOGRAM_BINS, MAX_PIXEL_VALUE

from .buffers import (
    ImageLike,
    as_pixels,
    prepare_output,
    require_single_channel,
    require_uint8,
)

logger = logging.getLogger(__name__)


def _gray_pixels(img: ImageLike, name: str = "img") -> np.ndarray:
    pixels = as_pixels(img, name)
    require_single_channel(pixels, name)
    require_uint8(pixels, name)
    return pixels


def histogram(img: ImageLike) -> np.ndarray:
    """Count pixels per intensity level.

    Returns:
        int64 array of length 256.
    """
    pixels = _gray_pixels(img)
    return np.bincount(pixels.ravel(), minlength=HISTOGRAM_BINS)


def otsu(img: ImageLike) -> int:
    """Find the threshold level that maximizes between-class variance.

    Candidates 0..255 are scanned in order with running sums. Levels where
    the background class is still empty are skipped; the scan stops once the
    foreground class becomes empty. The objective is
    ``wB * wF * (mB - mF) ** 2`` and a candidate replaces the best level
    when its objective is greater than *or equal to* the best so far, so
    ties resolve to the highest level scanned.

    A constant image has no valid split and returns 0.

    Returns:
        Selected level as an int in 0..255; pixels ``<= level`` form the
        background class.
    """
    hist = [int(count) for count in histogram(img)]
    total = sum(hist)
    weighted_total = sum(level * count for level, count in enumerate(hist))

    weight_b = 0
    sum_b = 0
    best_level = 0
    best_objective = 0.0
    for level, count in enumerate(hist):
        weight_b += count
        if weight_b == 0:
            continue
        weight_f = total - weight_b
        if weight_f == 0:
            break

        sum_b += level * count
        mean_b = sum_b / weight_b
        mean_f = (weighted_total - sum_b) / weight_f
        objective = weight_b * weight_f * (mean_b - mean_f) ** 2
        if objective >= best_objective:
            best_level = level
            best_objective = objective

    return best_level


def binarize(img: ImageLike, level: int | None = None, out: ImageLike | None = None):
    """Split an image into foreground (255) and background (0).

    Pixels strictly above ``level`` become foreground.

    Args:
        img: Single-channel 8-bit image.
        level: Threshold level; computed with otsu() when None.
        out: Optional 8-bit output of the same shape.

    Returns:
        ``out`` if given, otherwise a new uint8 (h, w, 1) array.
    """
    pixels = _gray_pixels(img)
    if level is None:
        level = otsu(pixels)
        logger.debug("binarize: Otsu level %d", level)
    elif not 0 <= level <= MAX_PIXEL_VALUE:
        raise ValueError(f"level must be within 0..{MAX_PIXEL_VALUE}, got {level}")

    result, dst = prepare_output(out, pixels.shape, np.uint8)
    dst[...] = np.where(pixels > level, BINARY_FOREGROUND, BINARY_BACKGROUND)
    return result


def enhance_contrast(img: ImageLike, out: ImageLike | None = None):
    """Histogram equalization.

    With ``cdf`` the cumulative histogram, ``cdf_min`` its smallest nonzero
    value and ``n`` the pixel count, every pixel v becomes
    ``round((cdf[v] - cdf_min) * 255 / (n - cdf_min))``. The darkest level
    present maps to 0 and the brightest to 255.

    A constant image (``n == cdf_min``) cannot be stretched; it is copied to
    the output unchanged.

    Args:
        img: Single-channel 8-bit image.
        out: Optional 8-bit output with identical shape.

    Returns:
        ``out`` if given, otherwise a new uint8 (h, w, 1) array.
    """
    pixels = _gray_pixels(img)
    result, dst = prepare_output(out, pixels.shape, np.uint8)
    require_uint8(dst, "out")

    cdf = np.cumsum(histogram(pixels))
    num_pixels = int(cdf[-1])
    cdf_min = int(cdf[cdf > 0][0])

    if num_pixels == cdf_min:
        logger.debug("enhance_contrast: constant image, output is a copy of the input")
        dst[...] = pixels
        return result

    lut = np.rint((cdf - cdf_min) * MAX_PIXEL_VALUE / (num_pixels - cdf_min))
    lut = np.clip(lut, 0, MAX_PIXEL_VALUE).astype(np.uint8)
    dst[...] = lut[pixels]
    return result
