"""QR symbol encoding: text + error correction level in, dark/light module matrix out.

The heavy lifting (mode selection, Reed-Solomon, masking, version fitting) is
done by the ``qrcode`` library; this module only adapts its output to the
immutable :class:`ModuleMatrix` the renderer consumes.
"""

from dataclasses import dataclass

import qrcode
import qrcode.constants
from qrcode.exceptions import DataOverflowError

from qrtistry.errors import EncodingError
from qrtistry.logging import audit, get_logger, trace
from qrtistry.types import ErrorCorrectionLevel

log = get_logger("encoder")

_QRCODE_LEVELS = {
    ErrorCorrectionLevel.LOW: qrcode.constants.ERROR_CORRECT_L,
    ErrorCorrectionLevel.MEDIUM: qrcode.constants.ERROR_CORRECT_M,
    ErrorCorrectionLevel.QUARTILE: qrcode.constants.ERROR_CORRECT_Q,
    ErrorCorrectionLevel.HIGH: qrcode.constants.ERROR_CORRECT_H,
}


@dataclass(frozen=True)
class ModuleMatrix:
    """Row-major dark/light cells of a square QR symbol (True = dark)."""

    width: int
    cells: tuple[bool, ...]

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError("Module matrix width must be positive")
        if len(self.cells) != self.width * self.width:
            raise ValueError(
                f"Module matrix needs {self.width * self.width} cells, got {len(self.cells)}"
            )

    @classmethod
    def from_rows(cls, rows) -> "ModuleMatrix":
        rows = [list(r) for r in rows]
        return cls(width=len(rows), cells=tuple(bool(c) for row in rows for c in row))

    def is_dark(self, col: int, row: int) -> bool:
        return self.cells[row * self.width + col]

    def rows(self) -> list[list[bool]]:
        w = self.width
        return [list(self.cells[r * w:(r + 1) * w]) for r in range(w)]

    @property
    def dark_count(self) -> int:
        return sum(self.cells)


@trace
def encode(text: str, ecc: str | ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM) -> ModuleMatrix:
    """Encode *text* at the smallest QR version that fits.

    Args:
        text: Payload (URL, plain text...). Must not be empty.
        ecc: Error correction level, as an enum member, name or L/M/Q/H letter.

    Raises:
        EncodingError: Empty payload, payload too long for the level, or
            characters that cannot be encoded.
    """
    level = ErrorCorrectionLevel.parse(ecc)
    if not text:
        raise EncodingError("Please enter text for the QR code")

    qr = qrcode.QRCode(
        version=None,
        error_correction=_QRCODE_LEVELS[level],
        box_size=1,
        border=0,
    )
    try:
        qr.add_data(text)
        qr.make(fit=True)
    except DataOverflowError as e:
        raise EncodingError(
            f"Failed to create QR code: data too long for error correction level {level.value}"
        ) from e
    except (UnicodeError, ValueError) as e:
        raise EncodingError(f"Failed to create QR code: {e}") from e

    matrix = ModuleMatrix.from_rows(qr.modules)
    audit("qr.encoded", logger=log,
          data=text[:80], ecc=level.letter, version=qr.version,
          modules=f"{matrix.width}x{matrix.width}")
    return matrix
