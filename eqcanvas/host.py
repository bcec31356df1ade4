from __future__ import annotations

import logging

from .elements import Element, Text, bind_metrics, draw_element, iter_texts, measure_element
from .geometry import Offset, Size
from .surface import DrawContext, DrawingSurface, FontMetrics


LOGGER = logging.getLogger(__name__)


class ExpressionHost:
    """Headless stand-in for the UI that owns the current expression.

    Each `render` measures the root once, centers it in the viewport and
    draws it; the expression is swapped wholesale via `set_expression`.
    """

    def __init__(self, viewport: Size, expression: Element | None = None) -> None:
        if viewport.width <= 0 or viewport.height <= 0:
            raise ValueError("viewport dimensions must be > 0")
        self._viewport = viewport
        self._expression: Element = expression if expression is not None else Text("")

    @property
    def viewport(self) -> Size:
        return self._viewport

    @property
    def expression(self) -> Element:
        return self._expression

    def set_expression(self, expression: Element) -> None:
        self._expression = expression

    def expression_for(self, surface: DrawingSurface) -> Element:
        """Current expression measured with the font `surface` paints with.

        Surfaces without a `font_metrics` attribute get the expression as is.
        """

        metrics: FontMetrics | None = getattr(surface, "font_metrics", None)
        if metrics is None:
            return self._expression
        if any(text.metrics != metrics for text in iter_texts(self._expression)):
            LOGGER.warning("expression text metrics differ from the surface font; rebinding to %r", metrics)
            return bind_metrics(self._expression, metrics)
        return self._expression

    def centering_offset(self, expression: Element | None = None) -> Offset:
        size = measure_element(expression if expression is not None else self._expression)
        return Offset(
            (self._viewport.width - size.width) / 2.0,
            (self._viewport.height - size.height) / 2.0,
        )

    def render(self, surface: DrawingSurface) -> Offset:
        expression = self.expression_for(surface)
        offset = self.centering_offset(expression)
        LOGGER.debug(
            "rendering %s at (%.1f, %.1f) in %sx%s viewport",
            type(expression).__name__,
            offset.x,
            offset.y,
            self._viewport.width,
            self._viewport.height,
        )
        draw_element(expression, surface, offset, DrawContext.for_surface(surface))
        return offset
