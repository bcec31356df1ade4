from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
from pathlib import Path

from PIL import ImageFont

from eqcanvas.surface import TextMetrics


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
SANS_FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "liberationsans",
    "freesans",
    "helvetica",
    "arial",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class PillowFontMetrics:
    """Font-metrics service backed by a single Pillow font face."""

    font_family: str = DEFAULT_FONT_FAMILY
    font_file: str | None = None

    def font(self, font_size: float) -> Font:
        return load_font(self.font_family, font_size_to_px(font_size), self.font_file)

    def measure_text(self, content: str, font_size: float) -> TextMetrics:
        font = self.font(font_size)
        descent = _font_descent(font)
        if not content:
            return TextMetrics(width=0.0, height=0.0, descent=descent)
        left, top, right, bottom = font.getbbox(content)
        return TextMetrics(
            width=float(max(0, right - left)),
            height=float(max(0, bottom - top)),
            descent=descent,
        )


@lru_cache(maxsize=1)
def default_font_metrics() -> PillowFontMetrics:
    return PillowFontMetrics()


def font_size_to_px(font_size: float) -> int:
    return max(1, int(round(font_size)))


@lru_cache(maxsize=64)
def load_font(font_family: str, size_px: int, font_file: str | None = None) -> Font:
    font_path = Path(font_file) if font_file else resolve_font_path(font_family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size_px)
        except OSError as exc:
            LOGGER.warning("could not load font %s (%s); using Pillow default font", font_path, exc)
    else:
        LOGGER.warning("no system font matches `%s`; using Pillow default font", font_family)
    return ImageFont.load_default(size=size_px)


@lru_cache(maxsize=16)
def resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower() if font_family.strip() else DEFAULT_FONT_FAMILY.lower()
    patterns = (wanted,) + SANS_FONT_FALLBACK_PATTERNS

    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(sorted(base.rglob(ext)))

    for pattern in patterns:
        p = pattern.replace(" ", "")
        for path in candidates:
            if path.stem.lower().replace(" ", "") == p:
                return path
        for path in candidates:
            if p in path.stem.lower().replace(" ", ""):
                return path
    return None


def _font_descent(font: Font) -> float:
    if isinstance(font, ImageFont.FreeTypeFont):
        _, descent = font.getmetrics()
        return float(descent)
    return 0.0
