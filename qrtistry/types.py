"""Style axes, optional style sub-records and the render-time StyleConfig."""

from dataclasses import dataclass
from enum import Enum

from PIL import Image

RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]

# Fallback corner rounding for rounded-square modules, and the fixed
# rounding of the flower eye's petals.
DEFAULT_CORNER_RADIUS = 0.2


class ErrorCorrectionLevel(Enum):
    LOW = "Low"            # ~7%
    MEDIUM = "Medium"      # ~15%
    QUARTILE = "Quartile"  # ~25%
    HIGH = "High"          # ~30%

    @property
    def letter(self) -> str:
        return self.value[0]

    @classmethod
    def parse(cls, value: "str | ErrorCorrectionLevel") -> "ErrorCorrectionLevel":
        """Accept an enum member, its name (``"Medium"``) or its letter (``"M"``)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for level in cls:
            if text.lower() in (level.value.lower(), level.letter.lower()):
                return level
        raise ValueError(f"Unknown error correction level: {value!r}")


class ModuleStyle(Enum):
    SQUARE = "Square"
    CIRCLE = "Circle"
    ROUNDED_SQUARE = "RoundedSquare"
    DOTS = "Dots"


class GradientType(Enum):
    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"
    DIAGONAL = "Diagonal"
    RADIAL = "Radial"


class EyeStyle(Enum):
    STANDARD = "Standard"
    CIRCLE = "Circle"
    ROUNDED_SQUARE = "RoundedSquare"
    FLOWER = "Flower"
    DIAMOND = "Diamond"


def parse_choice(enum_cls, value):
    """Resolve *value* to a member of *enum_cls* by value or by name, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    key = str(value).strip().replace("-", "_").replace(" ", "_").lower()
    for member in enum_cls:
        if key in (member.value.lower(), member.name.lower(), member.name.lower().replace("_", "")):
            return member
    raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}")


@dataclass(frozen=True)
class Gradient:
    """Two-colour blend from the foreground colour to *end_color*."""
    kind: GradientType
    end_color: RGB


@dataclass(frozen=True)
class Rounding:
    """User-enabled corner rounding, as a fraction of the module size."""
    radius_fraction: float


@dataclass(frozen=True)
class LogoOverlay:
    image: Image.Image
    size_fraction: float


@dataclass(frozen=True)
class BackgroundOverlay:
    image: Image.Image
    opacity: float


@dataclass(frozen=True)
class StyleConfig:
    """Everything the compositor needs to turn a module matrix into pixels.

    Optional features are sub-records that are either fully configured or
    ``None``; there are no enable flags.
    """
    foreground_color: RGB = (0, 0, 0)
    background_color: RGB = (255, 255, 255)
    gradient: Gradient | None = None
    module_style: ModuleStyle = ModuleStyle.SQUARE
    rounding: Rounding | None = None
    eye_style: EyeStyle = EyeStyle.STANDARD
    eye_color: RGB | None = None
    border_modules: int = 2
    output_size_px: int = 512
    logo: LogoOverlay | None = None
    background: BackgroundOverlay | None = None
    overall_opacity: float = 1.0

    @property
    def corner_radius(self) -> float:
        """Rounding fraction in effect for rounded-square modules and eyes."""
        return self.rounding.radius_fraction if self.rounding else DEFAULT_CORNER_RADIUS


@dataclass(frozen=True)
class ColorPreset:
    name: str
    fg: RGB
    bg: RGB


COLOR_PRESETS = (
    ColorPreset("Classic", (0, 0, 0), (255, 255, 255)),
    ColorPreset("Ocean", (0, 119, 182), (224, 247, 250)),
    ColorPreset("Sunset", (255, 87, 34), (255, 243, 224)),
    ColorPreset("Forest", (27, 94, 32), (232, 245, 233)),
    ColorPreset("Purple", (123, 31, 162), (243, 229, 245)),
    ColorPreset("Rose", (194, 24, 91), (252, 228, 236)),
    ColorPreset("Night", (255, 255, 255), (33, 33, 33)),
    ColorPreset("Cyber", (0, 255, 255), (10, 10, 40)),
)


def find_color_preset(name: str) -> ColorPreset:
    for preset in COLOR_PRESETS:
        if preset.name.lower() == name.strip().lower():
            return preset
    raise ValueError(f"Unknown colour preset: {name!r}")
