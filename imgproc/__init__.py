"""
Image-processing and tensor kernels over dense HWC buffers.

All kernels read explicitly shaped input buffers and write into optional
pre-sized output buffers; none of them keep state between calls.

Key components:
- buffers: Image / FloatImage / Filter views over caller-owned memory
- convert: 8-bit to normalized float conversion
- draw: line, quadrilateral and rectangle rasterization
- resample: bilinear sampling, affine warp, crop+rescale
- kernels: valid convolution, bias, ReLU, 2x2 max pooling, softmax
- threshold: histogram, Otsu threshold, binarization, histogram equalization
- steps: class-based wrappers with a common interface for chaining kernels

Shape mismatches raise ShapeError (a ValueError). Degenerate but valid
inputs, such as a constant image passed to enhance_contrast(), get a
documented fallback instead.
"""

from .buffers import Filter, FloatImage, Image, RasterView
from .convert import normalize
from .draw import draw_line, draw_quadrilateral, draw_rectangle
from .errors import ShapeError
from .kernels import add_bias, conv2d_valid, maxpool2, relu, softmax
from .resample import affine_transform, bilinear_sample, crop_rescale
from .steps import (
    ConvStep,
    CropRescaleStep,
    EnhanceContrastStep,
    ForwardStep,
    MaxPoolStep,
    NormalizeStep,
    ReluStep,
    SoftmaxStep,
)
from .threshold import binarize, enhance_contrast, histogram, otsu
from .types import I2, I3, I4

__all__ = [
    # Buffer model
    "Image",
    "FloatImage",
    "Filter",
    "RasterView",
    "I2",
    "I3",
    "I4",
    "ShapeError",
    # Kernels
    "normalize",
    "draw_line",
    "draw_quadrilateral",
    "draw_rectangle",
    "bilinear_sample",
    "affine_transform",
    "crop_rescale",
    "conv2d_valid",
    "add_bias",
    "relu",
    "maxpool2",
    "softmax",
    "histogram",
    "otsu",
    "binarize",
    "enhance_contrast",
    # Class-based API
    "ForwardStep",
    "NormalizeStep",
    "ConvStep",
    "ReluStep",
    "MaxPoolStep",
    "SoftmaxStep",
    "CropRescaleStep",
    "EnhanceContrastStep",
]
