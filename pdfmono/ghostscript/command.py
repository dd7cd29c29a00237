"""Ghostscript argument construction for monochrome bitmap output."""

from __future__ import annotations

from dataclasses import dataclass
import math
from numbers import Real

from .errors import InvalidResolutionError


MONO_BITMAP_DEVICE = "bmpmono"
STDOUT_SINK = "%stdout"
STDIN_MARKER = "-"
# Logical page units are hundredths of an inch; 254 converts them against dpi.
UNIT_CONVERSION = 254.0


@dataclass(frozen=True, slots=True)
class ImageResolution:
    """Target resolution and logical page size for a rendered bitmap.

    Attributes:
        dpi: Dots per inch passed to the engine as ``-r<dpi>``.
        width: Logical page width.
        height: Logical page height.
    """

    dpi: int
    width: float
    height: float

    def __post_init__(self) -> None:
        if isinstance(self.dpi, bool) or not isinstance(self.dpi, int) or self.dpi <= 0:
            raise InvalidResolutionError(f"dpi must be a positive integer, got {self.dpi!r}")
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise InvalidResolutionError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidResolutionError(f"{name} must be positive and finite, got {value!r}")
        if self.pixel_width < 1 or self.pixel_height < 1:
            raise InvalidResolutionError(
                f"Resolution {self.dpi} dpi at {self.width}x{self.height} yields an empty "
                f"geometry ({self.geometry})"
            )

    @property
    def pixel_width(self) -> int:
        return math.floor(self.dpi * self.width / UNIT_CONVERSION)

    @property
    def pixel_height(self) -> int:
        return math.floor(self.dpi * self.height / UNIT_CONVERSION)

    @property
    def geometry(self) -> str:
        """Pixel geometry in the engine's ``<width>x<height>`` notation."""
        return f"{self.pixel_width}x{self.pixel_height}"


DEFAULT_RESOLUTION = ImageResolution(dpi=300, width=1025, height=1500)


def build_invocation(resolution: ImageResolution) -> list[str]:
    """Return the engine arguments that render stdin to a mono bitmap on stdout.

    The order is fixed: device, output sink, quiet flag, resolution, geometry,
    fit-to-page and finally the stdin marker.
    """
    return [
        f"-sDEVICE={MONO_BITMAP_DEVICE}",
        f"-sOutputFile={STDOUT_SINK}",
        "-q",
        f"-r{resolution.dpi}",
        f"-g{resolution.geometry}",
        "-dPDFFitPage",
        STDIN_MARKER,
    ]


__all__ = [
    "DEFAULT_RESOLUTION",
    "ImageResolution",
    "MONO_BITMAP_DEVICE",
    "build_invocation",
]
