"""Measure/draw layout engine for typeset mathematical expressions."""

from .config import RenderConfig, load_render_config
from .elements import (
    Element,
    Fraction,
    HorizontalGroup,
    Matrix,
    Radical,
    Subscript,
    Superscript,
    Text,
    bind_metrics,
    combine,
    draw_element,
    iter_texts,
    measure_element,
)
from .errors import (
    EquationError,
    InvalidElementError,
    InvalidMatrixShape,
    RenderConfigError,
    SurfaceStateError,
)
from .geometry import Offset, Size
from .host import ExpressionHost
from .surface import (
    BLACK,
    WHITE,
    Color,
    DrawContext,
    DrawingSurface,
    FontMetrics,
    LineTo,
    MoveTo,
    PathCommand,
    TextMetrics,
    parse_color,
    scaled,
)

__all__ = [
    "BLACK",
    "Color",
    "DrawContext",
    "DrawingSurface",
    "Element",
    "EquationError",
    "ExpressionHost",
    "FontMetrics",
    "Fraction",
    "HorizontalGroup",
    "InvalidElementError",
    "InvalidMatrixShape",
    "LineTo",
    "Matrix",
    "MoveTo",
    "Offset",
    "PathCommand",
    "Radical",
    "RenderConfig",
    "RenderConfigError",
    "Size",
    "Subscript",
    "Superscript",
    "SurfaceStateError",
    "Text",
    "TextMetrics",
    "WHITE",
    "bind_metrics",
    "combine",
    "draw_element",
    "iter_texts",
    "load_render_config",
    "measure_element",
    "parse_color",
    "scaled",
]
