"""Numpy/Pillow raster backend for expression rendering."""

from .canvas import blend_mask, draw_pixel, new_canvas
from .draw_lines import draw_polyline, draw_segment
from .draw_text import draw_text_at_baseline
from .fonts import DEFAULT_FONT_FAMILY, PillowFontMetrics, default_font_metrics, load_font, resolve_font_path
from .surface import RasterSurface

__all__ = [
    "DEFAULT_FONT_FAMILY",
    "PillowFontMetrics",
    "RasterSurface",
    "blend_mask",
    "default_font_metrics",
    "draw_pixel",
    "draw_polyline",
    "draw_segment",
    "draw_text_at_baseline",
    "load_font",
    "new_canvas",
    "resolve_font_path",
]
