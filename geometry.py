"""Shared geometry utilities for quadrilaterals drawn on images."""

from __future__ import annotations

# Quadrilateral as list of 4 (x, y) points, in drawing order
Quad = list[tuple[int, int]]


def rect_to_quad(x: int, y: int, w: int, h: int) -> Quad:
    """Convert rectangle (x, y, w, h) to a clockwise quadrilateral.

    The far corner is (x + w - 1, y + h - 1) so the outline stays inside
    a w x h pixel area.
    """
    if w <= 0 or h <= 0:
        raise ValueError(f"Rectangle size must be positive, got {w}x{h}")
    right = x + w - 1
    bottom = y + h - 1
    return [
        (x, y),
        (right, y),
        (right, bottom),
        (x, bottom),
    ]
