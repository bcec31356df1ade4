from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol, Sequence, Union

from .errors import SurfaceStateError
from .geometry import Offset, Size


Color = tuple[int, int, int, int]

BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)


@dataclass(frozen=True)
class TextMetrics:
    """Tight ink bounds of a glyph run plus the font's descent below the baseline."""

    width: float
    height: float
    descent: float


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


PathCommand = Union[MoveTo, LineTo]


class FontMetrics(Protocol):
    """Synchronous read-only text measurement service."""

    def measure_text(self, content: str, font_size: float) -> TextMetrics:
        ...


class DrawingSurface(FontMetrics, Protocol):
    """Paint target owned by the host.

    Positions are in the surface's current local frame; `push_scale` installs a
    scaled frame about `pivot` (origin when `pivot` is None) until `pop_scale`.
    """

    @property
    def width(self) -> float:
        ...

    @property
    def height(self) -> float:
        ...

    def draw_text(self, content: str, position: Offset, font_size: float, color: Color) -> None:
        ...

    def draw_line(self, start: Offset, end: Offset, stroke_width: float, color: Color) -> None:
        ...

    def draw_path(self, commands: Sequence[PathCommand], stroke_width: float, color: Color) -> None:
        ...

    def push_scale(self, factor: float, pivot: Offset | None = None) -> None:
        ...

    def pop_scale(self) -> None:
        ...


@contextmanager
def scaled(surface: DrawingSurface, factor: float, pivot: Offset | None = None) -> Iterator[DrawingSurface]:
    """Run the block inside a scaled frame; the ambient frame is restored on any exit."""

    if factor <= 0:
        raise SurfaceStateError(f"scale factor must be > 0, got {factor}")
    surface.push_scale(factor, pivot)
    try:
        yield surface
    finally:
        surface.pop_scale()


@dataclass(frozen=True)
class DrawContext:
    """Display context handed down a draw pass.

    `viewport` is the ambient surface size. `center_main` enables the
    viewport-centered placement of `is_main` fractions and superscripts.
    """

    viewport: Size
    center_main: bool = True

    @classmethod
    def for_surface(cls, surface: DrawingSurface, *, center_main: bool = True) -> DrawContext:
        return cls(viewport=Size(float(surface.width), float(surface.height)), center_main=center_main)


def parse_color(value: str) -> Color:
    raw = value.strip()
    if not raw.startswith("#"):
        raise ValueError(f"color must be #RRGGBB or #RRGGBBAA, got `{value}`")
    digits = raw[1:]
    if len(digits) not in (6, 8):
        raise ValueError(f"color must be #RRGGBB or #RRGGBBAA, got `{value}`")
    try:
        r = int(digits[0:2], 16)
        g = int(digits[2:4], 16)
        b = int(digits[4:6], 16)
        a = int(digits[6:8], 16) if len(digits) == 8 else 255
    except ValueError as exc:
        raise ValueError(f"color must be #RRGGBB or #RRGGBBAA, got `{value}`") from exc
    return (r, g, b, a)
