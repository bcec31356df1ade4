from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import tomllib

from .errors import RenderConfigError
from .raster.fonts import DEFAULT_FONT_FAMILY, PillowFontMetrics
from .surface import WHITE, Color, parse_color


@dataclass(frozen=True)
class RenderConfig:
    viewport_width: int = 1080
    viewport_height: int = 540
    background: Color = WHITE
    font_family: str = DEFAULT_FONT_FAMILY
    font_file: str | None = None

    def __post_init__(self) -> None:
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise RenderConfigError("viewport dimensions must be > 0")
        if not self.font_family.strip() and self.font_file is None:
            raise RenderConfigError("font_family is required when font_file is not set")
        if self.font_file is not None and not str(self.font_file).strip():
            raise RenderConfigError("font_file must be non-empty when provided")

    def font_metrics(self) -> PillowFontMetrics:
        return PillowFontMetrics(font_family=self.font_family, font_file=self.font_file)


def load_render_config(path: str | Path) -> RenderConfig:
    """Read a render config TOML file.

    Recognized keys live under a `[render]` table:
    `viewport_width`, `viewport_height`, `background`, `font_family`, `font_file`.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"render config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise RenderConfigError(f"invalid TOML in {config_path}: {exc}") from exc
    section = raw.get("render", {})
    if not isinstance(section, dict):
        raise RenderConfigError("`render` must be a table")
    unknown = sorted(set(section) - {"viewport_width", "viewport_height", "background", "font_family", "font_file"})
    if unknown:
        raise RenderConfigError(f"unknown render config keys: {', '.join(unknown)}")

    defaults = RenderConfig()
    background = defaults.background
    if "background" in section:
        try:
            background = parse_color(_coerce_str(section["background"], "background"))
        except ValueError as exc:
            raise RenderConfigError(str(exc)) from exc
    return RenderConfig(
        viewport_width=_coerce_int(section.get("viewport_width", defaults.viewport_width), "viewport_width"),
        viewport_height=_coerce_int(section.get("viewport_height", defaults.viewport_height), "viewport_height"),
        background=background,
        font_family=_coerce_str(section.get("font_family", defaults.font_family), "font_family"),
        font_file=_coerce_optional_str(section.get("font_file"), "font_file"),
    )


def _coerce_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RenderConfigError(f"`{name}` must be an integer")
    return value


def _coerce_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise RenderConfigError(f"`{name}` must be a string")
    return value


def _coerce_optional_str(value: object, name: str) -> str | None:
    if value is None:
        return None
    return _coerce_str(value, name)
