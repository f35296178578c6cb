"""
Buffer views over caller-owned dense arrays.

Images are stored pixel-interleaved (HWC): element (x, y, c) of a w x h
image with d channels lives at flat offset ``d * (w * y + x) + c``. Filters
are stored as [filter_h, filter_w, in_channels, out_channels]: element
(fy, fx, ci, co) lives at ``((fy * filter_w + fx) * in_channels + ci) *
out_channels + co``. Numpy's C order reproduces both formulas, so the
``pixels`` / ``weights`` properties are plain reshapes of the same memory.

Views never copy. Wrapping a ``bytearray`` (or any writable buffer) lets
kernels write straight into memory owned by the caller.

Kernels accept either a view or an ndarray; the helpers at the bottom of
this module normalize both to an HWC ndarray and check shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Union

import numpy as np

from .errors import ShapeError


def _as_flat(buffer: Any, dtype: np.dtype) -> np.ndarray:
    """Return a 1D ndarray sharing memory with ``buffer``."""
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != dtype:
            raise TypeError(f"Expected buffer of dtype {dtype}, got {buffer.dtype}")
        if not buffer.flags.c_contiguous:
            raise ValueError("Buffer must be C-contiguous to be viewed without copying")
        return buffer.reshape(-1)
    return np.frombuffer(buffer, dtype=dtype)


def _check_dims(**dims: int) -> None:
    for name, value in dims.items():
        if not isinstance(value, (int, np.integer)) or value <= 0:
            raise ShapeError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True, eq=False)
class RasterView:
    """Base class for HWC image views.

    Attributes:
        data: Flat buffer of exactly w * h * d elements.
        w: Width in pixels.
        h: Height in pixels.
        d: Number of channels.
    """

    dtype: ClassVar[np.dtype] = np.dtype(np.uint8)

    data: Any
    w: int
    h: int
    d: int = 1

    def __post_init__(self) -> None:
        _check_dims(w=self.w, h=self.h, d=self.d)
        flat = _as_flat(self.data, self.dtype)
        expected = self.w * self.h * self.d
        if flat.size != expected:
            raise ShapeError(
                f"Buffer holds {flat.size} elements, expected w*h*d = "
                f"{self.w}*{self.h}*{self.d} = {expected}"
            )
        object.__setattr__(self, "data", flat)

    @classmethod
    def from_array(cls, arr: np.ndarray):
        """Wrap an (h, w) or (h, w, d) ndarray without copying."""
        if not isinstance(arr, np.ndarray):
            raise TypeError(f"Expected numpy.ndarray, got {type(arr).__name__}")
        if arr.ndim == 2:
            h, w = arr.shape
            d = 1
        elif arr.ndim == 3:
            h, w, d = arr.shape
        else:
            raise ShapeError(
                f"Image must be 2D or 3D array, got {arr.ndim}D array with shape {arr.shape}"
            )
        return cls(arr, w=w, h=h, d=d)

    @classmethod
    def zeros(cls, w: int, h: int, d: int = 1):
        """Create a view over a fresh zero-filled buffer."""
        _check_dims(w=w, h=h, d=d)
        return cls(np.zeros(w * h * d, dtype=cls.dtype), w=w, h=h, d=d)

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.h, self.w, self.d)

    @property
    def pixels(self) -> np.ndarray:
        """The buffer as an (h, w, d) ndarray sharing the same memory."""
        return self.data.reshape(self.h, self.w, self.d)

    def offset(self, x: int, y: int, c: int = 0) -> int:
        """Flat index of element (x, y, c)."""
        if not (0 <= x < self.w and 0 <= y < self.h and 0 <= c < self.d):
            raise IndexError(
                f"Element ({x}, {y}, {c}) outside {self.w}x{self.h}x{self.d} image"
            )
        return self.d * (self.w * y + x) + c


class Image(RasterView):
    """8-bit raster view."""

    dtype: ClassVar[np.dtype] = np.dtype(np.uint8)


class FloatImage(RasterView):
    """Float raster view with the same layout as Image and no implied range."""

    dtype: ClassVar[np.dtype] = np.dtype(np.float32)


@dataclass(frozen=True, eq=False)
class Filter:
    """Convolution weights laid out as [h, w, in_channels, out_channels].

    Attributes:
        data: Flat float32 buffer of h * w * in_channels * out_channels elements.
        h: Filter height.
        w: Filter width.
        in_channels: Channels consumed from the input image.
        out_channels: Channels produced in the output image.
    """

    dtype: ClassVar[np.dtype] = np.dtype(np.float32)

    data: Any
    h: int
    w: int
    in_channels: int
    out_channels: int

    def __post_init__(self) -> None:
        _check_dims(
            h=self.h, w=self.w,
            in_channels=self.in_channels, out_channels=self.out_channels,
        )
        flat = _as_flat(self.data, self.dtype)
        expected = self.h * self.w * self.in_channels * self.out_channels
        if flat.size != expected:
            raise ShapeError(
                f"Filter buffer holds {flat.size} elements, expected {expected} "
                f"for shape ({self.h}, {self.w}, {self.in_channels}, {self.out_channels})"
            )
        object.__setattr__(self, "data", flat)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Filter":
        """Wrap a (h, w, in_channels, out_channels) ndarray without copying."""
        if not isinstance(arr, np.ndarray):
            raise TypeError(f"Expected numpy.ndarray, got {type(arr).__name__}")
        if arr.ndim != 4:
            raise ShapeError(f"Filter must be a 4D array, got shape {arr.shape}")
        h, w, in_channels, out_channels = arr.shape
        return cls(arr, h=h, w=w, in_channels=in_channels, out_channels=out_channels)

    @property
    def shape(self) -> tuple[int, int, int, int]:
        return (self.h, self.w, self.in_channels, self.out_channels)

    @property
    def weights(self) -> np.ndarray:
        """The buffer as an (h, w, in_channels, out_channels) ndarray."""
        return self.data.reshape(self.shape)

    def offset(self, fy: int, fx: int, ci: int, co: int) -> int:
        """Flat index of weight (fy, fx, ci, co)."""
        if not (
            0 <= fy < self.h and 0 <= fx < self.w
            and 0 <= ci < self.in_channels and 0 <= co < self.out_channels
        ):
            raise IndexError(f"Weight ({fy}, {fx}, {ci}, {co}) outside filter {self.shape}")
        return ((fy * self.w + fx) * self.in_channels + ci) * self.out_channels + co


ImageLike = Union[RasterView, np.ndarray]
FilterLike = Union[Filter, np.ndarray]


# =============================================================================
# Kernel-side helpers
# =============================================================================

def as_pixels(img: ImageLike, name: str = "img") -> np.ndarray:
    """Return ``img`` as an (h, w, d) ndarray sharing its memory.

    A 2D ndarray is treated as a single-channel image.

    Raises:
        TypeError: If img is neither a view nor an ndarray.
        ShapeError: If img is not 2D/3D or has an empty dimension.
    """
    if isinstance(img, RasterView):
        return img.pixels
    if not isinstance(img, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray for {name}, got {type(img).__name__}")
    if img.ndim == 2:
        pixels = img[:, :, np.newaxis]
    elif img.ndim == 3:
        pixels = img
    else:
        raise ShapeError(
            f"{name} must be 2D or 3D array, got {img.ndim}D array with shape {img.shape}"
        )
    if pixels.size == 0:
        raise ShapeError(f"{name} is empty (shape {img.shape})")
    return pixels


def as_weights(filt: FilterLike) -> np.ndarray:
    """Return ``filt`` as an (h, w, in_channels, out_channels) ndarray."""
    if isinstance(filt, Filter):
        return filt.weights
    if not isinstance(filt, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray for filt, got {type(filt).__name__}")
    if filt.ndim != 4 or filt.size == 0:
        raise ShapeError(f"Filter must be a non-empty 4D array, got shape {filt.shape}")
    return filt


def check_same_shape(a: np.ndarray, b: np.ndarray, a_name: str, b_name: str) -> None:
    if a.shape != b.shape:
        raise ShapeError(
            f"{a_name} and {b_name} must have identical shape, "
            f"got {_describe(a.shape)} and {_describe(b.shape)}"
        )


def require_single_channel(pixels: np.ndarray, name: str = "img") -> None:
    if pixels.shape[2] != 1:
        raise ShapeError(f"{name} must be single-channel, got {pixels.shape[2]} channels")


def require_uint8(pixels: np.ndarray, name: str = "img") -> None:
    if pixels.dtype != np.uint8:
        raise TypeError(f"{name} must be an 8-bit image (uint8), got {pixels.dtype}")


def prepare_output(
    out: ImageLike | None,
    shape: tuple[int, int, int],
    dtype: Any,
    name: str = "out",
) -> tuple[Any, np.ndarray]:
    """Resolve an optional output argument.

    Returns:
        Tuple of (object to return to the caller, HWC ndarray to write into).
        When ``out`` is None a fresh zero-filled ndarray serves as both.

    Raises:
        ShapeError: If ``out`` is given with a shape other than ``shape``.
    """
    if out is None:
        fresh = np.zeros(shape, dtype=dtype)
        return fresh, fresh
    pixels = as_pixels(out, name)
    if pixels.shape != tuple(shape):
        raise ShapeError(
            f"{name} must have shape {_describe(shape)}, got {_describe(pixels.shape)}"
        )
    return out, pixels


def store(dst: np.ndarray, values: np.ndarray) -> None:
    """Write computed values into ``dst``.

    Integer destinations get the values rounded to nearest and clipped to the
    dtype range; float destinations take them as is.
    """
    if np.issubdtype(dst.dtype, np.integer):
        info = np.iinfo(dst.dtype)
        dst[...] = np.clip(np.rint(values), info.min, info.max)
    else:
        dst[...] = values


def _describe(shape: tuple[int, ...]) -> str:
    if len(shape) == 3:
        h, w, d = shape
        return f"w={w}, h={h}, d={d}"
    return str(tuple(shape))
