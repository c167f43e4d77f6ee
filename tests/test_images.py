from datetime import datetime

import pytest
from PIL import Image

from qrtistry.errors import ImageLoadError, PersistenceError
from qrtistry.images import default_png_name, load_image, save_png


def test_load_image(png_file):
    image = load_image(png_file)
    assert image.size == (32, 32)
    assert image.mode == "RGBA"


def test_missing_image(tmp_path):
    with pytest.raises(ImageLoadError, match="not found"):
        load_image(tmp_path / "missing.png")


def test_not_an_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("definitely not a png", encoding="utf-8")
    with pytest.raises(ImageLoadError):
        load_image(path)


def test_save_png_creates_directories(tmp_path):
    image = Image.new("RGBA", (8, 8), (1, 2, 3, 255))
    path = save_png(image, tmp_path / "a" / "b" / "out.png")
    assert path.exists()
    with Image.open(path) as reopened:
        assert reopened.format == "PNG"
        assert reopened.size == (8, 8)


def test_save_png_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(PersistenceError):
        save_png(Image.new("RGBA", (4, 4)), blocker / "out.png")


def test_default_png_name():
    assert default_png_name(datetime(2024, 1, 31, 15, 45, 0)) == "qrcode_20240131_154500.png"
