"""Image I/O: logo and background loading, PNG export."""

from datetime import datetime
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from qrtistry.errors import ImageLoadError, PersistenceError
from qrtistry.logging import audit, get_logger, trace

log = get_logger("images")


@trace
def load_image(path: str | Path) -> Image.Image:
    """Open and fully decode an image file.

    The pixels are loaded eagerly so that a truncated or corrupt file fails
    here rather than in the middle of a render.

    Raises:
        ImageLoadError: Missing, unreadable or unsupported file.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            loaded = img.copy()
    except FileNotFoundError as e:
        raise ImageLoadError(f"Image not found: {path}") from e
    except UnidentifiedImageError as e:
        raise ImageLoadError(f"Unsupported image format: {path}") from e
    except OSError as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e

    audit("image.loaded", logger=log, path=str(path), mode=loaded.mode,
          size=f"{loaded.size[0]}x{loaded.size[1]}")
    return loaded


def default_png_name(now: datetime | None = None) -> str:
    """Timestamped export name, e.g. ``qrcode_20240131_154500.png``."""
    return f"qrcode_{(now or datetime.now()).strftime('%Y%m%d_%H%M%S')}.png"


@trace
def save_png(image: Image.Image, path: str | Path) -> Path:
    """Write *image* as PNG, creating parent directories as needed.

    Raises:
        PersistenceError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        image.save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise PersistenceError(f"Failed to save {path}: {e}") from e

    audit("image.saved", logger=log, path=str(path),
          size=f"{image.size[0]}x{image.size[1]}")
    return path
