from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image

from eqcanvas.errors import SurfaceStateError
from eqcanvas.geometry import Offset
from eqcanvas.surface import WHITE, Color, LineTo, MoveTo, PathCommand, TextMetrics

from .canvas import new_canvas
from .draw_lines import draw_polyline, draw_segment
from .draw_text import draw_text_at_baseline
from .fonts import PillowFontMetrics, default_font_metrics


@dataclass(frozen=True)
class _ScaleFrame:
    """Local-to-device mapping `device = scale * local + (tx, ty)`."""

    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def apply(self, point: Offset) -> tuple[float, float]:
        return (self.scale * point.x + self.tx, self.scale * point.y + self.ty)

    def scaled_about(self, factor: float, pivot: Offset) -> _ScaleFrame:
        return _ScaleFrame(
            scale=self.scale * factor,
            tx=self.tx + self.scale * pivot.x * (1.0 - factor),
            ty=self.ty + self.scale * pivot.y * (1.0 - factor),
        )


class RasterSurface:
    """Drawing surface over a numpy RGBA canvas (rows x columns x 4, uint8)."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: Color = WHITE,
        metrics: PillowFontMetrics | None = None,
    ) -> None:
        self._canvas = new_canvas(width, height, color=background)
        self._metrics = metrics or default_font_metrics()
        self._frames: list[_ScaleFrame] = [_ScaleFrame()]

    @property
    def width(self) -> float:
        return float(self._canvas.shape[1])

    @property
    def height(self) -> float:
        return float(self._canvas.shape[0])

    @property
    def canvas(self) -> np.ndarray:
        return self._canvas

    @property
    def font_metrics(self) -> PillowFontMetrics:
        return self._metrics

    def measure_text(self, content: str, font_size: float) -> TextMetrics:
        return self._metrics.measure_text(content, font_size)

    def draw_text(self, content: str, position: Offset, font_size: float, color: Color) -> None:
        frame = self._frames[-1]
        x, y = frame.apply(position)
        font = self._metrics.font(font_size * frame.scale)
        draw_text_at_baseline(self._canvas, x, y, content, color, font=font)

    def draw_line(self, start: Offset, end: Offset, stroke_width: float, color: Color) -> None:
        x0, y0 = self._device_px(start)
        x1, y1 = self._device_px(end)
        draw_segment(self._canvas, x0, y0, x1, y1, color=color, width=self._stroke_px(stroke_width))

    def draw_path(self, commands: Sequence[PathCommand], stroke_width: float, color: Color) -> None:
        width = self._stroke_px(stroke_width)
        run: list[tuple[int, int]] = []
        for command in commands:
            if isinstance(command, MoveTo):
                draw_polyline(self._canvas, run, color, width=width)
                run = [self._device_px(Offset(command.x, command.y))]
            elif isinstance(command, LineTo):
                if not run:
                    run = [self._device_px(Offset(0.0, 0.0))]
                run.append(self._device_px(Offset(command.x, command.y)))
            else:
                raise TypeError(f"unsupported path command: {command!r}")
        draw_polyline(self._canvas, run, color, width=width)

    def push_scale(self, factor: float, pivot: Offset | None = None) -> None:
        if factor <= 0:
            raise SurfaceStateError(f"scale factor must be > 0, got {factor}")
        self._frames.append(self._frames[-1].scaled_about(factor, pivot or Offset(0.0, 0.0)))

    def pop_scale(self) -> None:
        if len(self._frames) == 1:
            raise SurfaceStateError("pop_scale called without a matching push_scale")
        self._frames.pop()

    def to_image(self) -> Image.Image:
        return Image.fromarray(self._canvas)

    def save_png(self, path: str | Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        self.to_image().save(out, format="PNG")
        return out

    def _device_px(self, point: Offset) -> tuple[int, int]:
        x, y = self._frames[-1].apply(point)
        return (int(round(x)), int(round(y)))

    def _stroke_px(self, stroke_width: float) -> int:
        return max(1, int(round(stroke_width * self._frames[-1].scale)))
