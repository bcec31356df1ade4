from __future__ import annotations

from functools import lru_cache

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from eqcanvas.surface import Color

from .canvas import blend_mask
from .fonts import Font


def draw_text_at_baseline(dst: np.ndarray, x: float, baseline_y: float, text: str, color: Color, *, font: Font) -> None:
    """Paint `text` with its left baseline point at (x, baseline_y)."""

    if not text:
        return
    mask, left, top = _render_mask(text, font)
    blend_mask(dst, int(round(x + left)), int(round(baseline_y + top)), mask, color)


@lru_cache(maxsize=256)
def _render_mask(text: str, font: Font) -> tuple[np.ndarray, int, int]:
    if not isinstance(font, ImageFont.FreeTypeFont):
        # Bitmap fonts have no anchors; the ink bottom stands in for the baseline.
        left, top, right, bottom = font.getbbox(text)
        image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
        ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=font)
        return np.asarray(image, dtype=np.uint8), int(left), int(top - bottom)
    left, top, right, bottom = font.getbbox(text, anchor="ls")
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font, anchor="ls")
    return np.asarray(image, dtype=np.uint8), int(left), int(top)
