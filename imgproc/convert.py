"""
Pixel-format conversion.
"""

import numpy as np

from config import FLOAT_DTYPE, NORMALIZE_OFFSET, NORMALIZE_SCALE

from .buffers import ImageLike, as_pixels, prepare_output, require_uint8


def normalize(img: ImageLike, out: ImageLike | None = None):
    """Convert an 8-bit image to normalized floats.

    Every element becomes ``(v - 127) / 128``, so 0 maps to -0.9921875 and
    255 maps to exactly 1.0. The range is not symmetric.

    Args:
        img: 8-bit input image (Image view or uint8 ndarray).
        out: Optional float output with the same w, h, d. Fully overwritten.

    Returns:
        ``out`` if given, otherwise a new float32 (h, w, d) array.

    Raises:
        ShapeError: If ``out`` does not match the input shape.
        TypeError: If the input is not 8-bit.
    """
    src = as_pixels(img, "img")
    require_uint8(src, "img")
    result, dst = prepare_output(out, src.shape, np.dtype(FLOAT_DTYPE))
    if not np.issubdtype(dst.dtype, np.floating):
        raise TypeError(f"out must be a float image, got {dst.dtype}")

    dst[...] = (src.astype(np.float32) - NORMALIZE_OFFSET) / NORMALIZE_SCALE
    return result
