"""Render pipeline: base canvas, styled modules, logo overlay, overall opacity.

Stages:
    1  Base canvas (solid background colour, optionally blended with a
       resized background image)
    2  Dark modules: finder blocks through the eye styler, everything else
       through the shape rasterizer, coloured flat or by gradient
    3  Logo overlay, centred on the symbol with its own alpha
    4  Overall opacity on every pixel that is not the background colour

Each call allocates a fresh canvas; nothing is cached between renders.
"""

import numpy as np
from PIL import Image

from qrtistry.encoder import ModuleMatrix, encode
from qrtistry.errors import LogoSizingError
from qrtistry.eyes import draw_eye_module, locate_in_finder
from qrtistry.geometry import Layout, compute_layout
from qrtistry.gradient import gradient_color
from qrtistry.logging import audit, get_logger, trace
from qrtistry.shapes import draw_module
from qrtistry.types import RGB, RGBA, BackgroundOverlay, ErrorCorrectionLevel, LogoOverlay, StyleConfig

log = get_logger("compositor")


def _opaque(rgb: RGB) -> RGBA:
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255)


def _scale_alpha(arr: np.ndarray, factor: float, where: np.ndarray | None = None) -> None:
    """Multiply the alpha channel by *factor* in place, clamped to 0-255 and truncated."""
    alpha = arr[..., 3]
    scaled = np.clip(alpha.astype(np.float64) * factor, 0, 255).astype(np.uint8)
    if where is None:
        arr[..., 3] = scaled
    else:
        alpha[where] = scaled[where]


# ---------------------------------------------------------------------------
# 1  Base canvas
# ---------------------------------------------------------------------------

def build_base_canvas(size: int, background_color: RGB,
                      background: BackgroundOverlay | None = None) -> Image.Image:
    """Square RGBA canvas of *size* px: solid colour, optionally under a faded image."""
    base = Image.new("RGBA", (size, size), _opaque(background_color))
    if background is None:
        return base

    resized = background.image.convert("RGBA").resize((size, size), Image.LANCZOS)
    if background.opacity < 1.0:
        arr = np.array(resized)
        _scale_alpha(arr, background.opacity)
        resized = Image.fromarray(arr)
    return Image.alpha_composite(base, resized)


# ---------------------------------------------------------------------------
# 2  Modules
# ---------------------------------------------------------------------------

def _module_color(style: StyleConfig, x: int, y: int, canvas_px: int) -> RGBA:
    if style.gradient is not None:
        return gradient_color(x, y, canvas_px, canvas_px, style.foreground_color, style.gradient)
    return _opaque(style.foreground_color)


def _eye_color(style: StyleConfig, x: int, y: int, canvas_px: int) -> RGBA:
    if style.eye_color is not None:
        return _opaque(style.eye_color)
    return _module_color(style, x, y, canvas_px)


def draw_modules(canvas: np.ndarray, matrix: ModuleMatrix, layout: Layout, style: StyleConfig) -> dict:
    """Rasterize every dark module of *matrix* onto *canvas* in row-major order.

    Light modules are never painted. Returns per-kind counts of the modules
    that were actually painted.
    """
    canvas_px = layout.canvas_px
    size = layout.module_px
    radius = style.corner_radius
    counts = {"data": 0, "eye": 0}

    for row in range(matrix.width):
        for col in range(matrix.width):
            if not matrix.is_dark(col, row):
                continue
            x, y = layout.module_origin(col, row)
            rel = locate_in_finder(col, row, matrix.width)
            if rel is not None:
                color = _eye_color(style, x, y, canvas_px)
                if draw_eye_module(canvas, x, y, size, color, style.eye_style, rel[0], rel[1], radius):
                    counts["eye"] += 1
            else:
                color = _module_color(style, x, y, canvas_px)
                draw_module(canvas, x, y, size, color, style.module_style, radius)
                counts["data"] += 1
    return counts


# ---------------------------------------------------------------------------
# 3  Logo
# ---------------------------------------------------------------------------

def logo_placement(layout: Layout, size_fraction: float) -> tuple[int, int]:
    """(logo side in px, top-left offset in px) for a logo centred on the symbol.

    Raises:
        LogoSizingError: If the logo rounds down to nothing or outgrows the symbol.
    """
    qr_px = layout.qr_px
    logo_px = int(qr_px * size_fraction)
    if logo_px == 0:
        raise LogoSizingError("Logo size too small to render")
    if logo_px > qr_px:
        raise LogoSizingError("Logo size exceeds QR code dimensions")
    return logo_px, layout.border_px + (qr_px - logo_px) // 2


@trace
def overlay_logo(canvas: Image.Image, logo: LogoOverlay, layout: Layout) -> Image.Image:
    """Alpha-blend the logo, resized with Lanczos, over the centre of the symbol."""
    logo_px, offset = logo_placement(layout, logo.size_fraction)
    resized = logo.image.convert("RGBA").resize((logo_px, logo_px), Image.LANCZOS)
    canvas.alpha_composite(resized, dest=(offset, offset))
    audit("logo.overlaid", logger=log, logo_px=logo_px, offset=offset,
          fraction=logo.size_fraction)
    return canvas


# ---------------------------------------------------------------------------
# 4  Opacity
# ---------------------------------------------------------------------------

def apply_opacity(arr: np.ndarray, opacity: float, background_color: RGB) -> None:
    """Fade every pixel whose RGB differs from *background_color*, in place.

    This is an exact colour match, not a mask: background-coloured pixels
    stay opaque wherever they are.
    """
    not_background = np.any(arr[..., :3] != np.asarray(background_color, dtype=np.uint8), axis=-1)
    _scale_alpha(arr, opacity, where=not_background)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

@trace
def render_matrix(matrix: ModuleMatrix, style: StyleConfig) -> Image.Image:
    """Render *matrix* with *style* into a new RGBA image of ``canvas_px`` square.

    Raises:
        SizingError: Output size too small for the border and module count.
        LogoSizingError: Logo fraction yields an empty or oversized logo.
    """
    layout = compute_layout(style.output_size_px, style.border_modules, matrix.width)

    # Validate the logo before doing any pixel work.
    if style.logo is not None:
        logo_placement(layout, style.logo.size_fraction)

    base = build_base_canvas(layout.canvas_px, style.background_color, style.background)
    arr = np.array(base)
    counts = draw_modules(arr, matrix, layout, style)
    image = Image.fromarray(arr)

    if style.logo is not None:
        image = overlay_logo(image, style.logo, layout)

    if style.overall_opacity < 1.0:
        arr = np.array(image)
        apply_opacity(arr, style.overall_opacity, style.background_color)
        image = Image.fromarray(arr)

    audit("qr.rendered", logger=log,
          modules=f"{matrix.width}x{matrix.width}",
          module_px=layout.module_px,
          canvas=f"{layout.canvas_px}x{layout.canvas_px}",
          data_modules=counts["data"], eye_modules=counts["eye"],
          module_style=style.module_style.value, eye_style=style.eye_style.value,
          gradient=style.gradient.kind.value if style.gradient else None,
          logo=style.logo is not None, background=style.background is not None,
          opacity=style.overall_opacity)
    return image


@trace
def generate_qr_image(text: str, ecc: str | ErrorCorrectionLevel, style: StyleConfig) -> Image.Image:
    """Encode *text* and render it: the full text-to-pixels path.

    Raises:
        EncodingError, SizingError, LogoSizingError.
    """
    return render_matrix(encode(text, ecc), style)
