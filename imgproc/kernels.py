"""
Convolutional network forward-pass kernels.

The caller drives a network layer by layer, e.g.::

    x = normalize(img)
    x = add_bias(conv2d_valid(x, filt), biases)
    x = maxpool2(relu(x))
    ...
    probs = softmax(logits)

Every kernel validates shapes up front and raises ShapeError before writing
anything.
"""

import logging

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from config import FLOAT_DTYPE, POOL_SIZE

from .buffers import (
    FilterLike,
    ImageLike,
    RasterView,
    as_pixels,
    as_weights,
    prepare_output,
)
from .errors import ShapeError

logger = logging.getLogger(__name__)


def conv2d_valid(img: ImageLike, filt: FilterLike, out: ImageLike | None = None):
    """Valid 2D convolution: no padding, unit stride, no bias.

    ``out[yo, xo, co] = sum(in[yo + fy, xo + fx, ci] * filt[fy, fx, ci, co])``
    over all fy, fx, ci. As is usual for CNNs the filter is not flipped.

    Args:
        img: Float input of shape (H, W, in_channels).
        filt: Filter of shape (fh, fw, in_channels, out_channels).
        out: Optional output of shape (H - fh + 1, W - fw + 1, out_channels).

    Returns:
        ``out`` if given, otherwise a new float32 array.

    Raises:
        ShapeError: If channel counts disagree, the filter is larger than
                    the image, or ``out`` has the wrong size.
    """
    src = as_pixels(img, "img")
    weights = as_weights(filt)
    fh, fw, in_channels, out_channels = weights.shape
    in_h, in_w, in_d = src.shape

    if in_channels != in_d:
        raise ShapeError(
            f"Filter expects {in_channels} input channels, image has {in_d}"
        )
    out_h = in_h - fh + 1
    out_w = in_w - fw + 1
    if out_h <= 0 or out_w <= 0:
        raise ShapeError(
            f"Filter ({fh}x{fw}) is larger than the image ({in_h}x{in_w})"
        )
    result, dst = prepare_output(out, (out_h, out_w, out_channels), np.dtype(FLOAT_DTYPE))

    # (out_h, out_w, in_d, fh, fw) windows over the input, no copy
    windows = sliding_window_view(src, (fh, fw), axis=(0, 1))
    dst[...] = np.einsum("yxcij,ijcd->yxd", windows, weights)
    return result


def add_bias(img: ImageLike, biases):
    """Add ``biases[c]`` to channel c of every pixel, in place.

    Returns:
        ``img``.
    """
    pixels = as_pixels(img, "img")
    values = np.asarray(biases, dtype=pixels.dtype).reshape(-1)
    if values.size != pixels.shape[2]:
        raise ShapeError(
            f"Expected {pixels.shape[2]} biases (one per channel), got {values.size}"
        )
    pixels += values
    return img


def relu(img: ImageLike, out: ImageLike | None = None):
    """Rectify: ``out = max(in, 0)`` elementwise. ``out`` may be ``img`` itself."""
    src = as_pixels(img, "img")
    result, dst = prepare_output(out, src.shape, src.dtype)
    np.maximum(src, 0, out=dst)
    return result


def maxpool2(img: ImageLike, out: ImageLike | None = None):
    """2x2 max pooling with stride 2.

    An odd trailing row or column is dropped.

    Raises:
        ShapeError: If the input is smaller than 2x2 or ``out`` is not
                    (H // 2, W // 2, d).
    """
    src = as_pixels(img, "img")
    h, w, d = src.shape
    out_h = h // POOL_SIZE
    out_w = w // POOL_SIZE
    if out_h == 0 or out_w == 0:
        raise ShapeError(f"Image of {w}x{h} is too small for {POOL_SIZE}x{POOL_SIZE} pooling")
    result, dst = prepare_output(out, (out_h, out_w, d), src.dtype)

    blocks = src[:out_h * POOL_SIZE, :out_w * POOL_SIZE].reshape(
        out_h, POOL_SIZE, out_w, POOL_SIZE, d
    )
    dst[...] = blocks.max(axis=(1, 3))
    return result


def _as_vector(values, name: str) -> np.ndarray:
    if isinstance(values, RasterView):
        return values.data
    vector = np.asarray(values)
    if vector.ndim != 1:
        raise ShapeError(f"{name} must be 1D, got shape {vector.shape}")
    return vector


def softmax(scores, out=None):
    """Convert scores to probabilities.

    The maximum score is subtracted before exponentiating, so large scores
    do not overflow and adding a constant to every score changes nothing.

    An empty ``scores`` vector is a no-op: the (empty) output is returned
    unchanged.

    Args:
        scores: 1D sequence of scores, or a FloatImage whose flat data is used.
        out: Optional 1D output of the same length.

    Returns:
        ``out`` if given, otherwise a new float64 array.
    """
    values = _as_vector(scores, "scores").astype(np.float64, copy=False)
    n = values.size
    if out is None:
        result = dst = np.zeros(n, dtype=np.float64)
    else:
        if not isinstance(out, (np.ndarray, RasterView)):
            raise TypeError(f"Expected numpy.ndarray for out, got {type(out).__name__}")
        result = out
        dst = _as_vector(out, "out")
        if dst.size != n:
            raise ShapeError(f"out must hold {n} values, got {dst.size}")

    if n == 0:
        logger.debug("softmax called with no scores, nothing to normalize")
        return result

    exps = np.exp(values - values.max())
    dst[...] = exps / exps.sum()
    return result
