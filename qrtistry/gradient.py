"""Gradient field: blend factor for a pixel position and two-colour interpolation."""

import math

from qrtistry.types import RGB, RGBA, Gradient, GradientType


def gradient_factor(x: float, y: float, width: float, height: float, kind: GradientType) -> float:
    """Blend factor ``t`` for pixel (x, y) on a ``width x height`` canvas.

    Horizontal and vertical run from the left/top edge (0.0) to the
    right/bottom edge (1.0); diagonal runs from the top-left corner to the
    bottom-right corner; radial runs from the centre to the corners, clamped
    at 1.0.
    """
    if kind is GradientType.HORIZONTAL:
        return x / width
    if kind is GradientType.VERTICAL:
        return y / height
    if kind is GradientType.DIAGONAL:
        return (x + y) / (width + height)
    if kind is GradientType.RADIAL:
        cx, cy = width / 2.0, height / 2.0
        max_dist = math.hypot(cx, cy)
        return min(1.0, math.hypot(x - cx, y - cy) / max_dist)
    raise ValueError(f"Unsupported gradient type: {kind!r}")


def lerp(a: int, b: int, t: float) -> int:
    """Linear interpolation of one 8-bit channel, truncated toward zero."""
    return int(a * (1.0 - t) + b * t)


def interpolate_rgb(start: RGB, end: RGB, t: float) -> RGBA:
    """Per-channel blend from *start* (t=0) to *end* (t=1); always fully opaque."""
    return (lerp(start[0], end[0], t), lerp(start[1], end[1], t), lerp(start[2], end[2], t), 255)


def gradient_color(x: int, y: int, width: int, height: int, start: RGB, gradient: Gradient) -> RGBA:
    """Colour of the gradient from *start* to ``gradient.end_color`` at pixel (x, y)."""
    return interpolate_rgb(start, gradient.end_color, gradient_factor(x, y, width, height, gradient.kind))
