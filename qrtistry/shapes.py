"""Per-module shape rasterization on an RGBA numpy canvas.

Each shape is a boolean coverage mask for a ``size x size`` module, computed
from pixel top-left coordinates with hard edges (no anti-aliasing). Masks are
cached per size and painted with clipping against the canvas bounds.
"""

import functools

import numpy as np

from qrtistry.types import DEFAULT_CORNER_RADIUS, RGBA, ModuleStyle

# Dots are circles at 70% of the module size.
DOT_RADIUS_FRACTION = 0.35


def _offsets(size: int) -> tuple[np.ndarray, np.ndarray]:
    """(dx, dy) pixel offsets inside a module, as float grids."""
    d = np.arange(size, dtype=np.float64)
    return np.meshgrid(d, d)


def _dist_sq(dx, dy, cx, cy) -> np.ndarray:
    return (dx - cx) ** 2 + (dy - cy) ** 2


def _frozen(mask: np.ndarray) -> np.ndarray:
    mask.flags.writeable = False
    return mask


@functools.lru_cache(maxsize=256)
def square_mask(size: int) -> np.ndarray:
    return _frozen(np.ones((size, size), dtype=bool))


@functools.lru_cache(maxsize=256)
def circle_mask(size: int) -> np.ndarray:
    """Inscribed circle: radius size/2 around the module centre."""
    radius = size / 2.0
    dx, dy = _offsets(size)
    return _frozen(_dist_sq(dx, dy, radius, radius) <= radius * radius)


@functools.lru_cache(maxsize=256)
def dot_mask(size: int) -> np.ndarray:
    center = size / 2.0
    dx, dy = _offsets(size)
    radius = size * DOT_RADIUS_FRACTION
    return _frozen(_dist_sq(dx, dy, center, center) <= radius * radius)


@functools.lru_cache(maxsize=256)
def rounded_square_mask(size: int, radius_fraction: float = DEFAULT_CORNER_RADIUS) -> np.ndarray:
    """Square with four quarter-circle corners of radius ``int(size * radius_fraction)``.

    Pixels inside a ``radius x radius`` corner block are kept only if they lie
    within *radius* of that corner's arc centre.
    """
    radius = int(size * radius_fraction)
    dx, dy = _offsets(size)
    left = dx < radius
    top = dy < radius
    right = dx >= size - radius
    bottom = dy >= size - radius
    in_corner = (left | right) & (top | bottom)

    arc_x = np.where(left, radius, size - radius)
    arc_y = np.where(top, radius, size - radius)
    inside_arc = _dist_sq(dx, dy, arc_x, arc_y) <= radius * radius
    return _frozen(~in_corner | inside_arc)


def shape_mask(shape: ModuleStyle, size: int, radius_fraction: float = DEFAULT_CORNER_RADIUS) -> np.ndarray:
    """Coverage mask of *shape* for a module of *size* pixels."""
    if shape is ModuleStyle.ROUNDED_SQUARE:
        return rounded_square_mask(size, radius_fraction)
    return _SIMPLE_MASKS[shape](size)


_SIMPLE_MASKS = {
    ModuleStyle.SQUARE: square_mask,
    ModuleStyle.CIRCLE: circle_mask,
    ModuleStyle.DOTS: dot_mask,
}


def paint_mask(canvas: np.ndarray, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
    """Set every masked pixel of the module anchored at (x, y) to *color*.

    Parts of the module that fall outside the canvas are skipped.
    """
    height, width = canvas.shape[:2]
    if x >= width or y >= height:
        return
    x1 = min(x + mask.shape[1], width)
    y1 = min(y + mask.shape[0], height)
    region = canvas[y:y1, x:x1]
    region[mask[: y1 - y, : x1 - x]] = color


def fill_square(canvas: np.ndarray, x: int, y: int, size: int, color: RGBA) -> None:
    paint_mask(canvas, x, y, square_mask(size), color)


def fill_circle(canvas: np.ndarray, x: int, y: int, size: int, color: RGBA) -> None:
    paint_mask(canvas, x, y, circle_mask(size), color)


def fill_rounded_square(canvas: np.ndarray, x: int, y: int, size: int, color: RGBA,
                        radius_fraction: float = DEFAULT_CORNER_RADIUS) -> None:
    paint_mask(canvas, x, y, rounded_square_mask(size, radius_fraction), color)


def fill_dot(canvas: np.ndarray, x: int, y: int, size: int, color: RGBA) -> None:
    paint_mask(canvas, x, y, dot_mask(size), color)


def draw_module(canvas: np.ndarray, x: int, y: int, size: int, color: RGBA,
                shape: ModuleStyle, radius_fraction: float = DEFAULT_CORNER_RADIUS) -> None:
    """Rasterize one data module of the given *shape*."""
    paint_mask(canvas, x, y, shape_mask(shape, size, radius_fraction), color)
