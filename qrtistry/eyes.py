"""Finder-pattern (eye) styling.

The three 7x7 finder blocks sit at the top-left, top-right and bottom-left
corners of the symbol. Every dark module inside one of them is drawn through
an eye policy instead of the data-module shape: the policy looks at the
module's position inside its block and decides which shape, if any, to paint.
"""

import numpy as np

from qrtistry.shapes import draw_module
from qrtistry.types import DEFAULT_CORNER_RADIUS, RGBA, EyeStyle, ModuleStyle

FINDER_SIZE = 7
FINDER_CENTER = FINDER_SIZE // 2

# (shape, rounding fraction) to paint, or None to leave the module unpainted
EyeShape = tuple[ModuleStyle, float] | None


def finder_origins(module_count: int) -> list[tuple[int, int]]:
    """(col, row) of the top-left module of each finder block: TL, TR, BL."""
    far = module_count - FINDER_SIZE
    return [(0, 0), (far, 0), (0, far)]


def locate_in_finder(col: int, row: int, module_count: int) -> tuple[int, int] | None:
    """Position of (col, row) relative to the finder block containing it, if any."""
    for ox, oy in finder_origins(module_count):
        if ox <= col < ox + FINDER_SIZE and oy <= row < oy + FINDER_SIZE:
            return col - ox, row - oy
    return None


def _standard(rx, ry, radius_fraction) -> EyeShape:
    return ModuleStyle.SQUARE, radius_fraction


def _circle(rx, ry, radius_fraction) -> EyeShape:
    # Outer two rings plus the centre; the moat between them stays empty.
    on_ring = rx <= 1 or rx >= 5 or ry <= 1 or ry >= 5
    is_center = rx == FINDER_CENTER and ry == FINDER_CENTER
    if on_ring or is_center:
        return ModuleStyle.CIRCLE, radius_fraction
    return None


def _rounded(rx, ry, radius_fraction) -> EyeShape:
    return ModuleStyle.ROUNDED_SQUARE, radius_fraction


def _flower(rx, ry, radius_fraction) -> EyeShape:
    is_outer = rx in (0, FINDER_SIZE - 1) or ry in (0, FINDER_SIZE - 1)
    is_inner = 2 <= rx <= 4 and 2 <= ry <= 4
    if not (is_outer or is_inner):
        return None
    if (rx + ry) % 2 == 0:
        return ModuleStyle.CIRCLE, radius_fraction
    # Petals always use the default rounding, whatever the user configured.
    return ModuleStyle.ROUNDED_SQUARE, DEFAULT_CORNER_RADIUS


def _diamond(rx, ry, radius_fraction) -> EyeShape:
    manhattan = abs(rx - FINDER_CENTER) + abs(ry - FINDER_CENTER)
    if manhattan in (1, 3):
        return ModuleStyle.SQUARE, radius_fraction
    return None


EYE_POLICIES = {
    EyeStyle.STANDARD: _standard,
    EyeStyle.CIRCLE: _circle,
    EyeStyle.ROUNDED_SQUARE: _rounded,
    EyeStyle.FLOWER: _flower,
    EyeStyle.DIAMOND: _diamond,
}


def eye_shape(style: EyeStyle, rx: int, ry: int,
              radius_fraction: float = DEFAULT_CORNER_RADIUS) -> EyeShape:
    """Shape to paint at relative position (rx, ry) of a finder block.

    *radius_fraction* is the rounding currently in effect for rounded-square
    modules; only the rounded-square eye honours it.
    """
    if not (0 <= rx < FINDER_SIZE and 0 <= ry < FINDER_SIZE):
        raise ValueError(f"Position ({rx}, {ry}) is outside a {FINDER_SIZE}x{FINDER_SIZE} finder block")
    return EYE_POLICIES[style](rx, ry, radius_fraction)


def draw_eye_module(canvas: np.ndarray, x: int, y: int, size: int, color: RGBA,
                    style: EyeStyle, rx: int, ry: int,
                    radius_fraction: float = DEFAULT_CORNER_RADIUS) -> bool:
    """Draw one finder module at pixel (x, y). Returns False if the policy left it empty."""
    shape = eye_shape(style, rx, ry, radius_fraction)
    if shape is None:
        return False
    module_style, fraction = shape
    draw_module(canvas, x, y, size, color, module_style, fraction)
    return True
