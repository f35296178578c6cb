"""
Forward-pass step classes with a common interface.

Each step wraps one kernel behind the ForwardStep interface so a caller can
describe a network (or an image-preparation chain) as a list of steps and
drive it in whatever order it needs.

Usage:
    from imgproc.steps import NormalizeStep, ConvStep, ReluStep, MaxPoolStep

    steps = [NormalizeStep(), ConvStep(filt, biases), ReluStep(), MaxPoolStep()]
    x = image
    for step in steps:
        x = step.apply(x)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from .buffers import FilterLike, as_weights
from .convert import normalize
from .kernels import add_bias, conv2d_valid, maxpool2, relu, softmax
from .resample import crop_rescale, downscale_factor
from .threshold import enhance_contrast
from .types import I2, as_i2


class ForwardStep(ABC):
    """Base class for forward-pass steps.

    Steps never mutate their input: each returns a new array.
    """

    @abstractmethod
    def apply(self, x: np.ndarray) -> np.ndarray:
        """Apply this step to an array and return a new array."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging and debugging."""
        pass

    def get_metadata(self) -> dict[str, Any]:
        """Return any metadata produced by the last apply(). Empty by default."""
        return {}


@dataclass(frozen=True)
class NormalizeStep(ForwardStep):
    """8-bit image to normalized float32."""

    def apply(self, x: np.ndarray) -> np.ndarray:
        return normalize(x)

    @property
    def name(self) -> str:
        return "normalize"


@dataclass(frozen=True, eq=False)
class ConvStep(ForwardStep):
    """Valid convolution, optionally followed by a per-channel bias.

    Attributes:
        filt: Filter view or (fh, fw, in_channels, out_channels) array.
        biases: Optional sequence of out_channels biases.
    """

    filt: FilterLike
    biases: Sequence[float] | None = None

    def apply(self, x: np.ndarray) -> np.ndarray:
        out = conv2d_valid(x, self.filt)
        if self.biases is not None:
            add_bias(out, self.biases)
        return out

    @property
    def name(self) -> str:
        fh, fw, _, out_channels = as_weights(self.filt).shape
        return f"conv({fh}x{fw}x{out_channels})"


@dataclass(frozen=True)
class ReluStep(ForwardStep):
    def apply(self, x: np.ndarray) -> np.ndarray:
        return relu(x)

    @property
    def name(self) -> str:
        return "relu"


@dataclass(frozen=True)
class MaxPoolStep(ForwardStep):
    def apply(self, x: np.ndarray) -> np.ndarray:
        return maxpool2(x)

    @property
    def name(self) -> str:
        return "maxpool2"


@dataclass(frozen=True)
class SoftmaxStep(ForwardStep):
    """Flatten the input and turn it into class probabilities."""

    def apply(self, x: np.ndarray) -> np.ndarray:
        return softmax(np.asarray(x).reshape(-1))

    @property
    def name(self) -> str:
        return "softmax"


@dataclass
class CropRescaleStep(ForwardStep):
    """Crop a region and box-resample it to a fixed size.

    The downscale factor used is kept as metadata.

    Attributes:
        left_top: Top-left corner of the crop in source pixels.
        crop_size: (width, height) of the crop.
        out_size: (width, height) of the output.
    """

    left_top: I2
    crop_size: I2
    out_size: I2
    _dsf: int = field(default=1, init=False, repr=False)

    def apply(self, x: np.ndarray) -> np.ndarray:
        out_w, out_h = as_i2(self.out_size, "out_size")
        channels = 1 if x.ndim == 2 else x.shape[2]
        out = np.zeros((out_h, out_w, channels), dtype=x.dtype)
        crop_rescale(x, self.left_top, self.crop_size, out)
        self._dsf = downscale_factor(self.crop_size, out_w, out_h)
        return out

    @property
    def name(self) -> str:
        out_w, out_h = as_i2(self.out_size, "out_size")
        return f"crop_rescale({out_w}x{out_h})"

    def get_metadata(self) -> dict[str, Any]:
        return {"downscale_factor": self._dsf}


@dataclass(frozen=True)
class EnhanceContrastStep(ForwardStep):
    """Histogram equalization of a single-channel 8-bit image."""

    def apply(self, x: np.ndarray) -> np.ndarray:
        return enhance_contrast(x)

    @property
    def name(self) -> str:
        return "enhance_contrast"

