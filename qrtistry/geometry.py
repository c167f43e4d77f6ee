"""Module grid to pixel space: module size, quiet-zone offset and canvas size."""

from dataclasses import dataclass

from qrtistry.errors import SizingError
from qrtistry.logging import get_logger, trace

log = get_logger("geometry")


@dataclass(frozen=True)
class Layout:
    module_count: int
    module_px: int
    border_modules: int

    @property
    def qr_px(self) -> int:
        """Side of the symbol itself, quiet zone excluded."""
        return self.module_px * self.module_count

    @property
    def border_px(self) -> int:
        return self.border_modules * self.module_px

    @property
    def canvas_px(self) -> int:
        # Always a multiple of module_px; may differ from the requested size.
        return self.qr_px + 2 * self.border_px

    def module_origin(self, col: int, row: int) -> tuple[int, int]:
        """Top-left pixel of the module at (*col*, *row*)."""
        return self.border_px + col * self.module_px, self.border_px + row * self.module_px


@trace
def compute_layout(output_size_px: int, border_modules: int, module_count: int) -> Layout:
    """Fit *module_count* modules plus a *border_modules* quiet zone into *output_size_px*.

    The border is estimated with the naive module size ``output // count``
    before the real module size is derived, so the resulting canvas can come
    out smaller than requested.

    Raises:
        SizingError: If no whole pixel is left per module.
    """
    if module_count <= 0:
        raise SizingError(f"Module count must be positive, got {module_count}")
    if border_modules < 0:
        raise SizingError(f"Border must be non-negative, got {border_modules}")
    if output_size_px <= 0:
        raise SizingError(f"Output size must be positive, got {output_size_px}")

    naive_px = output_size_px // module_count
    module_px = (output_size_px - 2 * border_modules * naive_px) // module_count
    if module_px < 1:
        raise SizingError(
            f"Size {output_size_px}px is too small for {module_count} modules "
            f"with a {border_modules}-module border"
        )
    return Layout(module_count=module_count, module_px=module_px, border_modules=border_modules)
