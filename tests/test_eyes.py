import numpy as np
import pytest

from qrtistry.eyes import draw_eye_module, eye_shape, finder_origins, locate_in_finder
from qrtistry.shapes import circle_mask
from qrtistry.types import DEFAULT_CORNER_RADIUS, EyeStyle, ModuleStyle

POSITIONS = [(rx, ry) for ry in range(7) for rx in range(7)]


def test_finder_origins():
    assert finder_origins(21) == [(0, 0), (14, 0), (0, 14)]
    assert finder_origins(25) == [(0, 0), (18, 0), (0, 18)]


@pytest.mark.parametrize("col, row, expected", [
    (0, 0, (0, 0)),
    (6, 6, (6, 6)),
    (15, 3, (1, 3)),
    (20, 6, (6, 6)),
    (2, 20, (2, 6)),
    (7, 0, None),
    (0, 7, None),
    (10, 10, None),
    (20, 20, None),
    (13, 0, None),
])
def test_locate_in_finder(col, row, expected):
    assert locate_in_finder(col, row, 21) == expected


@pytest.mark.parametrize("rx, ry", POSITIONS)
def test_standard_is_always_square(rx, ry):
    assert eye_shape(EyeStyle.STANDARD, rx, ry) == (ModuleStyle.SQUARE, DEFAULT_CORNER_RADIUS)


@pytest.mark.parametrize("rx, ry", POSITIONS)
def test_circle_paints_rings_and_centre(rx, ry):
    on_ring = rx <= 1 or rx >= 5 or ry <= 1 or ry >= 5
    shape = eye_shape(EyeStyle.CIRCLE, rx, ry)
    if on_ring or (rx, ry) == (3, 3):
        assert shape[0] is ModuleStyle.CIRCLE
    else:
        assert shape is None


def test_circle_moat():
    assert eye_shape(EyeStyle.CIRCLE, 2, 2) is None
    assert eye_shape(EyeStyle.CIRCLE, 4, 3) is None
    assert eye_shape(EyeStyle.CIRCLE, 1, 3) is not None


@pytest.mark.parametrize("rx, ry", POSITIONS)
def test_rounded_follows_current_rounding(rx, ry):
    assert eye_shape(EyeStyle.ROUNDED_SQUARE, rx, ry, 0.45) == (ModuleStyle.ROUNDED_SQUARE, 0.45)


@pytest.mark.parametrize("rx, ry, expected", [
    (0, 0, ModuleStyle.CIRCLE),
    (0, 1, ModuleStyle.ROUNDED_SQUARE),
    (6, 3, ModuleStyle.ROUNDED_SQUARE),
    (6, 6, ModuleStyle.CIRCLE),
    (3, 3, ModuleStyle.CIRCLE),
    (2, 3, ModuleStyle.ROUNDED_SQUARE),
    (4, 4, ModuleStyle.CIRCLE),
    (1, 1, None),
    (1, 3, None),
    (5, 2, None),
])
def test_flower_pattern(rx, ry, expected):
    shape = eye_shape(EyeStyle.FLOWER, rx, ry, 0.9)
    if expected is None:
        assert shape is None
    else:
        assert shape[0] is expected


def test_flower_petals_ignore_user_rounding():
    # The flower's rounded petals are pinned to the default rounding on purpose.
    assert eye_shape(EyeStyle.FLOWER, 0, 1, 0.9) == (ModuleStyle.ROUNDED_SQUARE, DEFAULT_CORNER_RADIUS)
    assert eye_shape(EyeStyle.FLOWER, 3, 2, 0.0) == (ModuleStyle.ROUNDED_SQUARE, DEFAULT_CORNER_RADIUS)


@pytest.mark.parametrize("rx, ry", POSITIONS)
def test_diamond_paints_two_rings(rx, ry):
    manhattan = abs(rx - 3) + abs(ry - 3)
    shape = eye_shape(EyeStyle.DIAMOND, rx, ry)
    if manhattan in (1, 3):
        assert shape[0] is ModuleStyle.SQUARE
    else:
        assert shape is None


def test_diamond_leaves_centre_and_corners_empty():
    assert eye_shape(EyeStyle.DIAMOND, 3, 3) is None
    assert eye_shape(EyeStyle.DIAMOND, 0, 0) is None
    assert eye_shape(EyeStyle.DIAMOND, 3, 0) is not None


@pytest.mark.parametrize("rx, ry", [(-1, 0), (7, 3), (3, 7)])
def test_position_outside_block_rejected(rx, ry):
    with pytest.raises(ValueError):
        eye_shape(EyeStyle.STANDARD, rx, ry)


def test_draw_eye_module_paints_chosen_shape():
    canvas = np.zeros((10, 10, 4), dtype=np.uint8)
    assert draw_eye_module(canvas, 0, 0, 10, (9, 9, 9, 255), EyeStyle.CIRCLE, 3, 3)
    np.testing.assert_array_equal(canvas[..., 3] == 255, circle_mask(10))


def test_draw_eye_module_skips_empty_positions():
    canvas = np.zeros((10, 10, 4), dtype=np.uint8)
    assert not draw_eye_module(canvas, 0, 0, 10, (9, 9, 9, 255), EyeStyle.DIAMOND, 3, 3)
    assert not canvas.any()
