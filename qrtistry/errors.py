"""Error types raised by the QRtistry render pipeline and its I/O helpers."""


class QRtistryError(Exception):
    """Base class for every failure a host should report to the user."""


class EncodingError(QRtistryError):
    """The payload cannot be encoded at the requested error correction level."""


class SizingError(QRtistryError):
    """Output size, border and module count leave no room for a module pixel."""


class LogoSizingError(QRtistryError):
    """The logo would be zero pixels wide or larger than the QR region."""


class ImageLoadError(QRtistryError):
    """A logo or background image could not be opened or decoded."""


class PersistenceError(QRtistryError):
    """A preset or exported file could not be read, parsed or written."""
