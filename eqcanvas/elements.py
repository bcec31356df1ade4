from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, Union

from .errors import InvalidElementError, InvalidMatrixShape
from .geometry import ZERO_SIZE, Offset, Size
from .raster.fonts import default_font_metrics
from .surface import BLACK, Color, DrawContext, DrawingSurface, FontMetrics, LineTo, MoveTo, scaled


DESCENDER_CHARS = frozenset("gjpqy,;_")

RADICAND_HORIZONTAL_PADDING = 10.0
RADICAND_VERTICAL_PADDING = 8.0
RADICAL_TOP_PADDING = 5.0
TOP_LINE_EXTENSION = 5.0
HOOK_DEPTH_RATIO = 0.15
VINCULUM_VERTICAL_OFFSET = 4.0
INDEX_HORIZONTAL_PADDING = 5.0
INDEX_VERTICAL_PADDING = 6.0
SYMBOL_WIDTH_RATIO = 0.7
HOOK_WIDTH_RATIO = 0.3
INDEX_HEIGHT_OVERLAP_RATIO = 0.85

BRACKET_WIDTH = 10.0
BRACKET_THICKNESS = 2.0
HORIZONTAL_CELL_PADDING = 15.0
VERTICAL_CELL_PADDING = 10.0
BRACKET_PADDING = 8.0


class _ElementOps:
    """Method surface shared by every element variant.

    Layout itself lives in `measure_element` / `draw_element`, which dispatch
    over the closed variant set.
    """

    def measure(self) -> Size:
        return measure_element(self)  # type: ignore[arg-type]

    def draw(self, surface: DrawingSurface, top_left: Offset, context: DrawContext | None = None) -> None:
        draw_element(self, surface, top_left, context)  # type: ignore[arg-type]

    def __add__(self, other: object) -> "Element":
        if not isinstance(other, _ELEMENT_TYPES):
            return NotImplemented
        return combine(self, other)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Text(_ElementOps):
    content: str
    font_size: float = 80.0
    vertical_padding: float = 0.0
    horizontal_padding: float = 0.0
    color: Color = BLACK
    metrics: FontMetrics = field(default_factory=default_font_metrics, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.font_size <= 0:
            raise ValueError("Text font_size must be > 0")

    @property
    def has_descenders(self) -> bool:
        return any(ch.lower() in DESCENDER_CHARS for ch in self.content)


@dataclass(frozen=True)
class HorizontalGroup(_ElementOps):
    """Left-to-right run of elements; built by `combine`, not by callers."""

    children: tuple[Element, ...]

    def __post_init__(self) -> None:
        children = tuple(self.children)
        for child in children:
            _require_element(child, "HorizontalGroup child")
        object.__setattr__(self, "children", children)


@dataclass(frozen=True)
class Fraction(_ElementOps):
    numerator: Element
    denominator: Element
    vertical_padding: float = 20.0
    line_width: float = 3.0
    line_color: Color = BLACK
    is_main: bool = True

    def __post_init__(self) -> None:
        _require_element(self.numerator, "Fraction numerator")
        _require_element(self.denominator, "Fraction denominator")


@dataclass(frozen=True)
class Superscript(_ElementOps):
    base: Element
    power: Element
    power_scale: float = 0.5
    vertical_padding: float = 15.0
    is_main: bool = True

    def __post_init__(self) -> None:
        _require_element(self.base, "Superscript base")
        _require_element(self.power, "Superscript power")
        if self.power_scale <= 0:
            raise ValueError("Superscript power_scale must be > 0")


@dataclass(frozen=True)
class Subscript(_ElementOps):
    base: Element
    sub: Element
    sub_scale: float = 0.5
    top_padding: float = 20.0
    start_padding: float = 20.0

    def __post_init__(self) -> None:
        _require_element(self.base, "Subscript base")
        _require_element(self.sub, "Subscript sub")
        if self.sub_scale <= 0:
            raise ValueError("Subscript sub_scale must be > 0")


@dataclass(frozen=True)
class Radical(_ElementOps):
    radicand: Element
    index: Element | None = None
    index_scale: float = 0.5
    line_color: Color = BLACK
    line_width: float = 2.5

    def __post_init__(self) -> None:
        _require_element(self.radicand, "Radical radicand")
        if self.index is not None:
            _require_element(self.index, "Radical index")
        if self.index_scale <= 0:
            raise ValueError("Radical index_scale must be > 0")


@dataclass(frozen=True)
class Matrix(_ElementOps):
    rows: int
    columns: int
    cells: tuple[tuple[Element, ...], ...]

    def __post_init__(self) -> None:
        if self.rows < 1 or self.columns < 1:
            raise InvalidMatrixShape(f"matrix needs at least one row and column, got {self.rows}x{self.columns}")
        grid = tuple(_grid_row(row, i) for i, row in enumerate(_grid_rows(self.cells)))
        if len(grid) != self.rows:
            raise InvalidMatrixShape(f"matrix declares {self.rows} rows but cells hold {len(grid)}")
        for i, row in enumerate(grid):
            if len(row) != self.columns:
                raise InvalidMatrixShape(
                    f"matrix declares {self.columns} columns but row {i} holds {len(row)}"
                )
            for j, cell in enumerate(row):
                if not isinstance(cell, _ELEMENT_TYPES):
                    raise InvalidMatrixShape(f"matrix cell ({i}, {j}) is not an element: {cell!r}")
        object.__setattr__(self, "cells", grid)


Element = Union[Text, HorizontalGroup, Fraction, Superscript, Subscript, Radical, Matrix]

_ELEMENT_TYPES = (Text, HorizontalGroup, Fraction, Superscript, Subscript, Radical, Matrix)


def combine(left: Element, right: Element) -> Element:
    """Concatenate two elements horizontally.

    Two Text nodes merge into one Text that keeps the left node's styling;
    every other pairing becomes a two-child HorizontalGroup.
    """

    _require_element(left, "combine operand")
    _require_element(right, "combine operand")
    if isinstance(left, Text) and isinstance(right, Text):
        return replace(left, content=left.content + right.content)
    return HorizontalGroup((left, right))


def iter_texts(element: Element) -> Iterator[Text]:
    """Yield the Text leaves of a tree, left to right."""

    if isinstance(element, Text):
        yield element
    elif isinstance(element, HorizontalGroup):
        for child in element.children:
            yield from iter_texts(child)
    elif isinstance(element, Fraction):
        yield from iter_texts(element.numerator)
        yield from iter_texts(element.denominator)
    elif isinstance(element, Superscript):
        yield from iter_texts(element.base)
        yield from iter_texts(element.power)
    elif isinstance(element, Subscript):
        yield from iter_texts(element.base)
        yield from iter_texts(element.sub)
    elif isinstance(element, Radical):
        if element.index is not None:
            yield from iter_texts(element.index)
        yield from iter_texts(element.radicand)
    elif isinstance(element, Matrix):
        for row in element.cells:
            for cell in row:
                yield from iter_texts(cell)
    else:
        raise InvalidElementError(f"unknown element type: {type(element).__name__}")


def bind_metrics(element: Element, metrics: FontMetrics) -> Element:
    """Copy of `element` whose Text leaves all measure with `metrics`."""

    if isinstance(element, Text):
        return element if element.metrics == metrics else replace(element, metrics=metrics)
    if isinstance(element, HorizontalGroup):
        return HorizontalGroup(tuple(bind_metrics(child, metrics) for child in element.children))
    if isinstance(element, Fraction):
        return replace(
            element,
            numerator=bind_metrics(element.numerator, metrics),
            denominator=bind_metrics(element.denominator, metrics),
        )
    if isinstance(element, Superscript):
        return replace(element, base=bind_metrics(element.base, metrics), power=bind_metrics(element.power, metrics))
    if isinstance(element, Subscript):
        return replace(element, base=bind_metrics(element.base, metrics), sub=bind_metrics(element.sub, metrics))
    if isinstance(element, Radical):
        index = None if element.index is None else bind_metrics(element.index, metrics)
        return replace(element, radicand=bind_metrics(element.radicand, metrics), index=index)
    if isinstance(element, Matrix):
        cells = tuple(tuple(bind_metrics(cell, metrics) for cell in row) for row in element.cells)
        return replace(element, cells=cells)
    raise InvalidElementError(f"unknown element type: {type(element).__name__}")


def measure_element(element: Element) -> Size:
    if isinstance(element, Text):
        return _measure_text(element)
    if isinstance(element, HorizontalGroup):
        return _measure_group(element)
    if isinstance(element, Fraction):
        return _measure_fraction(element)
    if isinstance(element, Superscript):
        return _measure_superscript(element)
    if isinstance(element, Subscript):
        return _measure_subscript(element)
    if isinstance(element, Radical):
        return _measure_radical(element)
    if isinstance(element, Matrix):
        return _measure_matrix(element)
    raise InvalidElementError(f"unknown element type: {type(element).__name__}")


def draw_element(
    element: Element,
    surface: DrawingSurface,
    top_left: Offset,
    context: DrawContext | None = None,
) -> None:
    ctx = context or DrawContext.for_surface(surface)
    if isinstance(element, Text):
        _draw_text(element, surface, top_left)
    elif isinstance(element, HorizontalGroup):
        _draw_group(element, surface, top_left, ctx)
    elif isinstance(element, Fraction):
        _draw_fraction(element, surface, top_left, ctx)
    elif isinstance(element, Superscript):
        _draw_superscript(element, surface, top_left, ctx)
    elif isinstance(element, Subscript):
        _draw_subscript(element, surface, top_left, ctx)
    elif isinstance(element, Radical):
        _draw_radical(element, surface, top_left, ctx)
    elif isinstance(element, Matrix):
        _draw_matrix(element, surface, top_left, ctx)
    else:
        raise InvalidElementError(f"unknown element type: {type(element).__name__}")


def _require_element(value: object, role: str) -> None:
    if not isinstance(value, _ELEMENT_TYPES):
        raise InvalidElementError(f"{role} must be an element, got {value!r}")


def _grid_rows(cells: object) -> tuple:
    if cells is None or isinstance(cells, (str, bytes)) or isinstance(cells, _ELEMENT_TYPES):
        raise InvalidMatrixShape(f"matrix cells must be a grid of rows, got {cells!r}")
    try:
        return tuple(cells)  # type: ignore[call-overload]
    except TypeError as exc:
        raise InvalidMatrixShape(f"matrix cells must be a grid of rows, got {cells!r}") from exc


def _grid_row(row: object, i: int) -> tuple:
    if isinstance(row, (str, bytes)) or isinstance(row, _ELEMENT_TYPES):
        raise InvalidMatrixShape(f"matrix row {i} must be a sequence of elements, got {row!r}")
    try:
        return tuple(row)  # type: ignore[call-overload]
    except TypeError as exc:
        raise InvalidMatrixShape(f"matrix row {i} must be a sequence of elements, got {row!r}") from exc


# Text


def _measure_text(text: Text) -> Size:
    if not text.content:
        return ZERO_SIZE
    bounds = text.metrics.measure_text(text.content, text.font_size)
    return Size(bounds.width + text.horizontal_padding, bounds.height + text.vertical_padding)


def _draw_text(text: Text, surface: DrawingSurface, top_left: Offset) -> None:
    if not text.content:
        return
    size = _measure_text(text)
    baseline_y = top_left.y + size.height - text.vertical_padding / 2.0
    if text.has_descenders:
        baseline_y -= surface.measure_text(text.content, text.font_size).descent
    surface.draw_text(
        text.content,
        Offset(top_left.x + text.horizontal_padding / 2.0, baseline_y),
        text.font_size,
        text.color,
    )


# HorizontalGroup


def _measure_group(group: HorizontalGroup) -> Size:
    total_width = 0.0
    max_height = 0.0
    for child in group.children:
        size = measure_element(child)
        total_width += size.width
        max_height = max(max_height, size.height)
    return Size(total_width, max_height)


def _draw_group(group: HorizontalGroup, surface: DrawingSurface, top_left: Offset, ctx: DrawContext) -> None:
    sizes = [measure_element(child) for child in group.children]
    if not sizes:
        return
    max_height = max(size.height for size in sizes)
    x = top_left.x
    for child, size in zip(group.children, sizes):
        y = top_left.y + (max_height - size.height) / 2.0
        draw_element(child, surface, Offset(x, y), ctx)
        x += size.width


# Fraction


def _measure_fraction(fraction: Fraction) -> Size:
    num = measure_element(fraction.numerator)
    den = measure_element(fraction.denominator)
    width = max(num.width, den.width)
    height = num.height + fraction.vertical_padding + fraction.line_width + fraction.vertical_padding + den.height
    return Size(width, height)


def _draw_fraction(fraction: Fraction, surface: DrawingSurface, top_left: Offset, ctx: DrawContext) -> None:
    num = measure_element(fraction.numerator)
    den = measure_element(fraction.denominator)
    width = _measure_fraction(fraction).width

    origin = top_left
    if fraction.is_main and ctx.center_main:
        origin = Offset(top_left.x, ctx.viewport.height / 2.0 - num.height - fraction.vertical_padding)

    draw_element(fraction.numerator, surface, Offset(origin.x + (width - num.width) / 2.0, origin.y), ctx)

    line_top = origin.y + num.height + fraction.vertical_padding
    line_bottom = line_top + fraction.line_width
    line_center = (line_top + line_bottom) / 2.0
    surface.draw_line(
        Offset(origin.x, line_center),
        Offset(origin.x + width, line_center),
        fraction.line_width,
        fraction.line_color,
    )

    den_top = line_bottom + fraction.vertical_padding
    draw_element(fraction.denominator, surface, Offset(origin.x + (width - den.width) / 2.0, den_top), ctx)


# Superscript


def _measure_superscript(sup: Superscript) -> Size:
    base = measure_element(sup.base)
    power = measure_element(sup.power) * sup.power_scale
    return Size(base.width + power.width, base.height + power.height + sup.vertical_padding)


def _draw_superscript(sup: Superscript, surface: DrawingSurface, top_left: Offset, ctx: DrawContext) -> None:
    base = measure_element(sup.base)
    scaled_power_height = measure_element(sup.power).height * sup.power_scale

    anchor = top_left
    if sup.is_main and ctx.center_main:
        anchor = top_left.shifted(dy=-base.height / 2.0)

    base_top_left = Offset(anchor.x, anchor.y + scaled_power_height + sup.vertical_padding)
    draw_element(sup.base, surface, base_top_left, ctx)

    power_top_left = Offset(
        base_top_left.x + base.width,
        base_top_left.y - scaled_power_height - sup.vertical_padding,
    )
    with scaled(surface, sup.power_scale, pivot=power_top_left):
        draw_element(sup.power, surface, power_top_left, ctx)


# Subscript


def _measure_subscript(sub: Subscript) -> Size:
    # Additive approximation; the drawn sub also sits past start/top padding.
    return measure_element(sub.base) + measure_element(sub.sub) * sub.sub_scale


def _draw_subscript(sub: Subscript, surface: DrawingSurface, top_left: Offset, ctx: DrawContext) -> None:
    base = measure_element(sub.base)
    draw_element(sub.base, surface, top_left, ctx)

    sub_top_left = Offset(
        top_left.x + base.width + sub.start_padding,
        top_left.y + base.height + sub.top_padding,
    )
    # Pivot is the surface origin, not the sub's own corner.
    with scaled(surface, sub.sub_scale):
        draw_element(sub.sub, surface, sub_top_left, ctx)


# Radical


def _scaled_index_size(radical: Radical) -> Size:
    if radical.index is None:
        return ZERO_SIZE
    return measure_element(radical.index) * radical.index_scale


def _measure_radical(radical: Radical) -> Size:
    radicand = measure_element(radical.radicand)
    index = _scaled_index_size(radical)
    symbol_width = radicand.height * SYMBOL_WIDTH_RATIO

    index_width = 0.0
    index_height = 0.0
    if radical.index is not None:
        index_width = max(0.0, index.width - symbol_width * HOOK_WIDTH_RATIO) + INDEX_HORIZONTAL_PADDING
        index_height = index.height + INDEX_VERTICAL_PADDING

    width = (
        index_width
        + symbol_width
        + RADICAND_HORIZONTAL_PADDING * 2
        + radicand.width
        + TOP_LINE_EXTENSION
    )
    height = max(
        radicand.height + RADICAND_VERTICAL_PADDING * 2 + RADICAL_TOP_PADDING,
        index_height + radicand.height * INDEX_HEIGHT_OVERLAP_RATIO + RADICAND_VERTICAL_PADDING,
    )
    return Size(width, height)


def _draw_radical(radical: Radical, surface: DrawingSurface, top_left: Offset, ctx: DrawContext) -> None:
    radicand = measure_element(radical.radicand)
    index = _scaled_index_size(radical)
    total_height = radicand.height + RADICAND_VERTICAL_PADDING * 2 + RADICAL_TOP_PADDING
    symbol_width = radicand.height * SYMBOL_WIDTH_RATIO
    hook_width = symbol_width * HOOK_WIDTH_RATIO

    origin = top_left
    if radical.index is not None:
        index_room = index.width + INDEX_HORIZONTAL_PADDING
        if index_room > hook_width:
            origin = top_left.shifted(dx=index_room - hook_width)

    radicand_x = origin.x + symbol_width + RADICAND_HORIZONTAL_PADDING
    radicand_y = origin.y + RADICAND_VERTICAL_PADDING + RADICAL_TOP_PADDING

    hook_bottom = origin.y + total_height
    hook_depth = total_height * HOOK_DEPTH_RATIO
    vinculum_y = origin.y + VINCULUM_VERTICAL_OFFSET + RADICAL_TOP_PADDING
    vinculum_end = radicand_x + radicand.width + RADICAND_HORIZONTAL_PADDING

    path = (
        MoveTo(origin.x, hook_bottom - hook_depth),
        LineTo(origin.x + hook_width, hook_bottom),
        LineTo(origin.x + symbol_width, vinculum_y),
        LineTo(vinculum_end, vinculum_y),
    )
    surface.draw_path(path, radical.line_width, radical.line_color)

    if radical.index is not None:
        index_pos = Offset(
            origin.x - INDEX_HORIZONTAL_PADDING,
            hook_bottom - hook_depth - index.height - INDEX_VERTICAL_PADDING,
        )
        with scaled(surface, radical.index_scale, pivot=index_pos):
            draw_element(radical.index, surface, index_pos, ctx)

    draw_element(radical.radicand, surface, Offset(radicand_x, radicand_y), ctx)


# Matrix


def _grid_extents(matrix: Matrix) -> tuple[list[list[Size]], list[float], list[float]]:
    cell_sizes = [[measure_element(cell) for cell in row] for row in matrix.cells]
    row_heights = [max(size.height for size in row) for row in cell_sizes]
    column_widths = [max(row[j].width for row in cell_sizes) for j in range(matrix.columns)]
    return cell_sizes, row_heights, column_widths


def _measure_matrix(matrix: Matrix) -> Size:
    _, row_heights, column_widths = _grid_extents(matrix)
    width = (
        sum(column_widths)
        + (matrix.columns - 1) * HORIZONTAL_CELL_PADDING
        + 2 * BRACKET_WIDTH
        + 2 * BRACKET_PADDING
    )
    height = sum(row_heights) + (matrix.rows - 1) * VERTICAL_CELL_PADDING + 2 * BRACKET_PADDING
    return Size(width, height)


def _bracket_path(x: float, top: float, bottom: float, tick_dx: float) -> tuple[MoveTo | LineTo, ...]:
    return (
        MoveTo(x, top),
        LineTo(x + tick_dx, top),
        MoveTo(x, top),
        LineTo(x, bottom),
        MoveTo(x, bottom),
        LineTo(x + tick_dx, bottom),
    )


def _draw_matrix(matrix: Matrix, surface: DrawingSurface, top_left: Offset, ctx: DrawContext) -> None:
    cell_sizes, row_heights, column_widths = _grid_extents(matrix)
    inner_height = sum(row_heights) + (matrix.rows - 1) * VERTICAL_CELL_PADDING
    inner_width = sum(column_widths) + (matrix.columns - 1) * HORIZONTAL_CELL_PADDING
    bottom = top_left.y + inner_height + 2 * BRACKET_PADDING

    surface.draw_path(_bracket_path(top_left.x, top_left.y, bottom, BRACKET_WIDTH), BRACKET_THICKNESS, BLACK)
    # Right bracket x is derived from the inner width alone and relies on both
    # brackets sharing BRACKET_WIDTH.
    right_x = top_left.x + inner_width + 2 * BRACKET_WIDTH + HORIZONTAL_CELL_PADDING
    surface.draw_path(_bracket_path(right_x, top_left.y, bottom, -BRACKET_WIDTH), BRACKET_THICKNESS, BLACK)

    y = top_left.y + BRACKET_PADDING
    for i, row in enumerate(matrix.cells):
        x = top_left.x + BRACKET_WIDTH + BRACKET_PADDING
        for j, cell in enumerate(row):
            size = cell_sizes[i][j]
            cell_top_left = Offset(
                x + (column_widths[j] - size.width) / 2.0,
                y + (row_heights[i] - size.height) / 2.0,
            )
            draw_element(cell, surface, cell_top_left, ctx)
            x += column_widths[j] + HORIZONTAL_CELL_PADDING
        y += row_heights[i] + VERTICAL_CELL_PADDING
