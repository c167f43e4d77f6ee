import logging

import numpy as np
import pytest
from PIL import Image

from qrtistry.encoder import ModuleMatrix

FINDER = [
    [1, 1, 1, 1, 1, 1, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 1, 1, 1, 0, 1],
    [1, 0, 1, 1, 1, 0, 1],
    [1, 0, 1, 1, 1, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 1, 1, 1, 1, 1, 1],
]


def make_matrix(width=21, dark=()):
    """Matrix with the three standard finder patterns plus extra dark (col, row) cells."""
    rows = [[False] * width for _ in range(width)]
    for ox, oy in [(0, 0), (width - 7, 0), (0, width - 7)]:
        for ry in range(7):
            for rx in range(7):
                rows[oy + ry][ox + rx] = bool(FINDER[ry][rx])
    for col, row in dark:
        rows[row][col] = True
    return ModuleMatrix.from_rows(rows)


def pixel(image, x, y):
    return tuple(int(v) for v in np.array(image)[y, x])


def unique_colors(image):
    arr = np.array(image).reshape(-1, 4)
    return {tuple(int(v) for v in c) for c in np.unique(arr, axis=0)}


@pytest.fixture
def matrix():
    # 21 modules at 10 px each when rendered at 210 px with no border
    return make_matrix(dark=[(10, 10), (12, 9)])


@pytest.fixture
def blank_canvas():
    return np.zeros((40, 40, 4), dtype=np.uint8)


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "logo.png"
    Image.new("RGBA", (32, 32), (200, 0, 0, 255)).save(path)
    return path


@pytest.fixture(autouse=True)
def reset_qrtistry_logging():
    yield
    logger = logging.getLogger("qrtistry")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
