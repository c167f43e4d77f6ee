"""Settings record and JSON presets.

:class:`QRSettings` is the flat, user-facing configuration (what a host UI or
the CLI edits). It is what gets persisted: image *paths* are saved, image
data never is. :class:`Preset` pairs settings with the images they point at
and builds the :class:`~qrtistry.types.StyleConfig` the renderer consumes.
"""

import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from PIL import Image

from qrtistry.errors import ImageLoadError, PersistenceError
from qrtistry.images import load_image
from qrtistry.logging import audit, get_logger, trace
from qrtistry.types import (
    RGB,
    BackgroundOverlay,
    ColorPreset,
    ErrorCorrectionLevel,
    EyeStyle,
    Gradient,
    GradientType,
    LogoOverlay,
    ModuleStyle,
    Rounding,
    StyleConfig,
    parse_choice,
)

log = get_logger("presets")

SIZE_RANGE = (128, 2048)
BORDER_RANGE = (0, 10)
LOGO_SIZE_RANGE = (0.05, 0.35)

_ENUM_FIELDS = {
    "error_correction_level": ErrorCorrectionLevel,
    "gradient_type": GradientType,
    "module_style": ModuleStyle,
    "eye_style": EyeStyle,
}
_COLOR_FIELDS = ("foreground_color", "background_color", "gradient_end_color", "eye_color")
_INT_FIELDS = ("size_px", "border_modules")
_FLOAT_FIELDS = ("corner_radius", "logo_size_fraction", "background_image_opacity", "overall_opacity")
_FLAG_FIELDS = ("use_gradient", "use_rounded_corners", "use_custom_eye_color")
_PATH_FIELDS = ("logo_path", "background_image_path")


def _check_type(name: str, value, accepted, label: str) -> None:
    # bool is an int subclass; JSON true/false must not pass as numbers
    if (isinstance(value, bool) and bool not in accepted) or not isinstance(value, accepted):
        raise ValueError(f"{name} must be {label}, got {type(value).__name__}")


def _check_range(name: str, value, low, high) -> None:
    if not (low <= value <= high):
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


def _check_color(name: str, value) -> None:
    if (
        not isinstance(value, tuple)
        or len(value) != 3
        or not all(isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255 for c in value)
    ):
        raise ValueError(f"{name} must be three integers 0-255, got {value!r}")


@dataclass
class QRSettings:
    """Every user-adjustable option, with the application defaults."""

    text: str = "https://example.com"
    size_px: int = 512
    border_modules: int = 2
    error_correction_level: ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM

    foreground_color: RGB = (0, 0, 0)
    background_color: RGB = (255, 255, 255)
    use_gradient: bool = False
    gradient_type: GradientType = GradientType.HORIZONTAL
    gradient_end_color: RGB = (100, 100, 255)

    module_style: ModuleStyle = ModuleStyle.SQUARE
    use_rounded_corners: bool = False
    corner_radius: float = 0.3

    eye_style: EyeStyle = EyeStyle.STANDARD
    use_custom_eye_color: bool = False
    eye_color: RGB = (255, 0, 0)

    logo_path: str | None = None
    logo_size_fraction: float = 0.2
    background_image_path: str | None = None
    background_image_opacity: float = 0.3

    overall_opacity: float = 1.0

    def validate(self) -> "QRSettings":
        """Check every field against its type and allowed range.

        Raises:
            ValueError: Naming the first offending field.
        """
        _check_type("text", self.text, (str,), "a string")
        for name in _INT_FIELDS:
            _check_type(name, getattr(self, name), (int,), "an integer")
        for name in _FLOAT_FIELDS:
            _check_type(name, getattr(self, name), (int, float), "a number")
        for name in _FLAG_FIELDS:
            _check_type(name, getattr(self, name), (bool,), "true or false")
        for name in _PATH_FIELDS:
            _check_type(name, getattr(self, name), (str, type(None)), "a path string or null")
        for name, enum_cls in _ENUM_FIELDS.items():
            _check_type(name, getattr(self, name), (enum_cls,), f"a {enum_cls.__name__}")
        _check_range("size_px", self.size_px, *SIZE_RANGE)
        _check_range("border_modules", self.border_modules, *BORDER_RANGE)
        _check_range("corner_radius", self.corner_radius, 0.0, 1.0)
        _check_range("logo_size_fraction", self.logo_size_fraction, *LOGO_SIZE_RANGE)
        _check_range("background_image_opacity", self.background_image_opacity, 0.0, 1.0)
        _check_range("overall_opacity", self.overall_opacity, 0.0, 1.0)
        for name in _COLOR_FIELDS:
            _check_color(name, getattr(self, name))
        return self

    def apply_color_preset(self, preset: ColorPreset) -> None:
        self.foreground_color = preset.fg
        self.background_color = preset.bg

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        for name in _ENUM_FIELDS:
            data[name] = data[name].value
        for name in _COLOR_FIELDS:
            data[name] = list(data[name])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "QRSettings":
        """Build settings from a decoded preset; missing keys keep their defaults.

        Raises:
            ValueError: Unknown keys, bad enum names, wrong types or out-of-range values.
        """
        if not isinstance(data, dict):
            raise ValueError("Preset must be a JSON object")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown preset keys: {', '.join(unknown)}")

        values = dict(data)
        for name, enum_cls in _ENUM_FIELDS.items():
            if name in values:
                values[name] = parse_choice(enum_cls, values[name])
        for name in _COLOR_FIELDS:
            if name in values and isinstance(values[name], list):
                values[name] = tuple(values[name])
        return cls(**values).validate()

    def to_style(self, logo_image: Image.Image | None = None,
                 background_image: Image.Image | None = None) -> StyleConfig:
        """Collapse the enable flags into a StyleConfig with optional sub-records."""
        return StyleConfig(
            foreground_color=self.foreground_color,
            background_color=self.background_color,
            gradient=Gradient(self.gradient_type, self.gradient_end_color) if self.use_gradient else None,
            module_style=self.module_style,
            rounding=Rounding(self.corner_radius) if self.use_rounded_corners else None,
            eye_style=self.eye_style,
            eye_color=self.eye_color if self.use_custom_eye_color else None,
            border_modules=self.border_modules,
            output_size_px=self.size_px,
            logo=LogoOverlay(logo_image, self.logo_size_fraction) if logo_image is not None else None,
            background=(
                BackgroundOverlay(background_image, self.background_image_opacity)
                if background_image is not None else None
            ),
            overall_opacity=self.overall_opacity,
        )


@dataclass
class Preset:
    """Settings plus the decoded images their paths refer to."""

    settings: QRSettings = field(default_factory=QRSettings)
    logo_image: Image.Image | None = None
    background_image: Image.Image | None = None

    @classmethod
    def from_settings(cls, settings: QRSettings, strict: bool = True) -> "Preset":
        """Open the logo and background referenced by *settings*.

        With ``strict=False`` an unreadable image is dropped: its path is
        cleared on *settings* and the preset falls back to no image.

        Raises:
            ImageLoadError: Only when *strict* is true.
        """
        preset = cls(settings=settings)
        for path_attr, image_attr in (("logo_path", "logo_image"),
                                      ("background_image_path", "background_image")):
            path = getattr(settings, path_attr)
            if not path:
                continue
            try:
                setattr(preset, image_attr, load_image(path))
            except ImageLoadError as e:
                if strict:
                    raise
                log.warning("Dropping %s: %s", path_attr, e)
                audit("preset.image_dropped", logger=log, field=path_attr, path=str(path))
                setattr(settings, path_attr, None)
        return preset

    def style(self) -> StyleConfig:
        return self.settings.to_style(self.logo_image, self.background_image)


def default_preset_name(now: datetime | None = None) -> str:
    """Timestamped preset name, e.g. ``qr_preset_20240131_154500.json``."""
    return f"qr_preset_{(now or datetime.now()).strftime('%Y%m%d_%H%M%S')}.json"


@trace
def save_preset(settings: QRSettings, path: str | Path) -> Path:
    """Write *settings* as pretty-printed JSON.

    Raises:
        PersistenceError: If the settings are invalid or the file cannot be written.
    """
    path = Path(path)
    try:
        payload = json.dumps(settings.validate().to_dict(), indent=2)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Failed to serialize preset: {e}") from e
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n", encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to save preset {path}: {e}") from e

    audit("preset.saved", logger=log, path=str(path))
    return path


@trace
def load_preset(path: str | Path) -> Preset:
    """Read a preset and reopen its images, dropping any that are gone.

    Raises:
        PersistenceError: Unreadable file, malformed JSON or invalid settings.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to read preset file {path}: {e}") from e
    try:
        settings = QRSettings.from_dict(json.loads(raw))
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Failed to parse preset {path}: {e}") from e

    preset = Preset.from_settings(settings, strict=False)
    audit("preset.loaded", logger=log, path=str(path),
          logo=preset.logo_image is not None,
          background=preset.background_image is not None)
    return preset
