"""QRtistry CLI: render styled QR codes and manage presets from the command line."""

import argparse
import sys
from pathlib import Path

from qrtistry.errors import QRtistryError
from qrtistry.logging import audit, get_logger, setup_logging
from qrtistry.types import (
    COLOR_PRESETS,
    ErrorCorrectionLevel,
    EyeStyle,
    GradientType,
    ModuleStyle,
    find_color_preset,
    parse_choice,
)

log = get_logger("cli")


def _parse_hex_color(s: str) -> tuple[int, int, int]:
    """Parse a hex colour string (with or without '#') to an RGB tuple."""
    s = s.strip().lstrip("#")
    if len(s) != 6:
        raise argparse.ArgumentTypeError(f"expected a 6-digit hex colour, got {s!r}")
    try:
        return tuple(int(s[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid hex colour {s!r}") from None


def _choice(enum_cls):
    def parse(value: str):
        try:
            return parse_choice(enum_cls, value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from None
    parse.__name__ = enum_cls.__name__
    return parse


def _ecc(value: str) -> ErrorCorrectionLevel:
    try:
        return ErrorCorrectionLevel.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


# CLI flag -> settings field
_OVERRIDES = {
    "size": "size_px",
    "border": "border_modules",
    "ecc": "error_correction_level",
    "fg": "foreground_color",
    "bg": "background_color",
    "gradient": "gradient_type",
    "gradient_end": "gradient_end_color",
    "module_style": "module_style",
    "corner_radius": "corner_radius",
    "eye_style": "eye_style",
    "eye_color": "eye_color",
    "logo": "logo_path",
    "logo_size": "logo_size_fraction",
    "background": "background_image_path",
    "background_opacity": "background_image_opacity",
    "opacity": "overall_opacity",
}


def build_preset(args):
    """Start from --preset (or defaults) and layer explicit flags on top."""
    from qrtistry.presets import Preset, QRSettings, load_preset

    if args.preset:
        preset = load_preset(args.preset)
        settings = preset.settings
    else:
        preset = None
        settings = QRSettings()

    if args.color_preset:
        settings.apply_color_preset(find_color_preset(args.color_preset))

    if args.text is not None:
        settings.text = args.text
    for flag, attr in _OVERRIDES.items():
        value = getattr(args, flag)
        if value is not None:
            setattr(settings, attr, value)

    # Turning a feature's parameter on implies enabling the feature.
    if args.gradient is not None:
        settings.use_gradient = True
    if args.no_gradient:
        settings.use_gradient = False
    if args.corner_radius is not None:
        settings.use_rounded_corners = True
    if args.eye_color is not None:
        settings.use_custom_eye_color = True

    settings.validate()

    # Images named on the command line must load; preset images were already
    # reopened leniently by load_preset.
    explicit_images = args.logo is not None or args.background is not None
    if preset is None or explicit_images:
        preset = Preset.from_settings(settings, strict=True)
    return preset


def cmd_render(args):
    """Render a styled QR code to PNG."""
    from qrtistry.compositor import generate_qr_image
    from qrtistry.images import default_png_name, save_png
    from qrtistry.presets import save_preset

    preset = build_preset(args)
    settings = preset.settings

    image = generate_qr_image(settings.text, settings.error_correction_level, preset.style())
    output = save_png(image, Path(args.output) if args.output else Path(default_png_name()))
    print(f"Generated: {output} ({image.size[0]}x{image.size[1]})")

    if args.save_preset:
        saved = save_preset(settings, args.save_preset)
        print(f"Preset saved to: {saved}")


def cmd_presets(args):
    """List the built-in colour presets."""
    for preset in COLOR_PRESETS:
        fg = "#%02x%02x%02x" % preset.fg
        bg = "#%02x%02x%02x" % preset.bg
        print(f"  {preset.name:8s} fg={fg} bg={bg}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrtistry", description="QRtistry: styled QR code renderer")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a styled QR code to PNG")
    p_render.add_argument("text", nargs="?", default=None, help="Text or URL to encode")
    p_render.add_argument("-o", "--output", default=None, help="Output PNG path (timestamped if omitted)")
    p_render.add_argument("--preset", default=None, help="Load settings from a JSON preset")
    p_render.add_argument("--save-preset", default=None, help="Save the effective settings as a JSON preset")
    p_render.add_argument("--color-preset", default=None, help="Built-in colour preset (see 'presets')")
    p_render.add_argument("-s", "--size", type=int, default=None, help="Requested output size in px (128-2048)")
    p_render.add_argument("-b", "--border", type=int, default=None, help="Quiet zone in modules (0-10)")
    p_render.add_argument("-e", "--ecc", type=_ecc, default=None, help="Error correction level: L/M/Q/H")
    p_render.add_argument("--fg", type=_parse_hex_color, default=None, help="Foreground colour (hex)")
    p_render.add_argument("--bg", type=_parse_hex_color, default=None, help="Background colour (hex)")
    p_render.add_argument("--gradient", type=_choice(GradientType), default=None,
                          help="Enable a gradient: horizontal, vertical, diagonal or radial")
    p_render.add_argument("--no-gradient", action="store_true", help="Disable a gradient set by a preset")
    p_render.add_argument("--gradient-end", type=_parse_hex_color, default=None, help="Gradient end colour (hex)")
    p_render.add_argument("--module-style", type=_choice(ModuleStyle), default=None,
                          help="square, circle, rounded-square or dots")
    p_render.add_argument("--corner-radius", type=float, default=None,
                          help="Enable custom rounding with this radius fraction (0-1)")
    p_render.add_argument("--eye-style", type=_choice(EyeStyle), default=None,
                          help="standard, circle, rounded-square, flower or diamond")
    p_render.add_argument("--eye-color", type=_parse_hex_color, default=None, help="Custom eye colour (hex)")
    p_render.add_argument("--logo", default=None, help="Logo image path")
    p_render.add_argument("--logo-size", type=float, default=None, help="Logo size fraction (0.05-0.35)")
    p_render.add_argument("--background", default=None, help="Background image path")
    p_render.add_argument("--background-opacity", type=float, default=None, help="Background image opacity (0-1)")
    p_render.add_argument("--opacity", type=float, default=None, help="Overall QR opacity (0-1)")

    # --- presets ---
    subparsers.add_parser("presets", help="List built-in colour presets")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "render": cmd_render,
        "presets": cmd_presets,
    }
    try:
        commands[args.command](args)
    except (QRtistryError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        audit("cli.failed", logger=log, command=args.command, error=str(e))
        return 1
    audit("cli.done", logger=log, command=args.command)
    return 0


if __name__ == "__main__":
    sys.exit(main())
