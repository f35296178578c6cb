"""
Small integer vector types used as point and color parameters.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence, Union


class I2(NamedTuple):
    """2D integer vector: a pixel position or a size."""

    x: int
    y: int


class I3(NamedTuple):
    """3D integer vector, mostly used as an (x, y, z) drawing color."""

    x: int
    y: int
    z: int


class I4(NamedTuple):
    x: int
    y: int
    z: int
    w: int


# Anything that unpacks into integer components
PointLike = Union[I2, Sequence[int]]
ColorLike = Union[I3, Sequence[int]]


def as_i2(value: PointLike, name: str = "point") -> I2:
    """Coerce a 2-sequence into an I2, validating its length."""
    if len(value) != 2:
        raise ValueError(f"{name} must have 2 components, got {len(value)}")
    return I2(int(value[0]), int(value[1]))


def as_i3(value: ColorLike, name: str = "color") -> I3:
    """Coerce a 3-sequence into an I3, validating its length."""
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    return I3(int(value[0]), int(value[1]), int(value[2]))
