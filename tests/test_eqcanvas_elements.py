from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import unittest

from eqcanvas.elements import (
    Fraction,
    HorizontalGroup,
    Matrix,
    Radical,
    Subscript,
    Superscript,
    Text,
    bind_metrics,
    combine,
    iter_texts,
)
from eqcanvas.errors import InvalidElementError
from eqcanvas.geometry import Offset, Size
from eqcanvas.samples import combination
from eqcanvas.surface import BLACK, DrawContext, TextMetrics

from recording import FAKE_METRICS, FixedAdvanceMetrics, RecordingSurface


def t(content: str, **kwargs: object) -> Text:
    return Text(content, metrics=FAKE_METRICS, **kwargs)


NO_CENTERING = DrawContext(viewport=Size(1000.0, 500.0), center_main=False)


class TextLayoutTests(unittest.TestCase):
    def test_text_measures_tight_bounds_plus_padding(self) -> None:
        self.assertEqual(t("x").measure(), Size(40.0, 56.0))
        self.assertEqual(t("x", vertical_padding=10, horizontal_padding=6).measure(), Size(46.0, 66.0))

    def test_empty_text_is_zero_area_and_draws_nothing(self) -> None:
        surface = RecordingSurface()
        empty = t("")
        self.assertEqual(empty.measure(), Size(0.0, 0.0))
        empty.draw(surface, Offset(5.0, 5.0))
        self.assertEqual(surface.calls, [])

    def test_baseline_sits_on_box_bottom_without_descenders(self) -> None:
        surface = RecordingSurface()
        t("abc", vertical_padding=10, horizontal_padding=8).draw(surface, Offset(10.0, 20.0))
        (call,) = surface.of_kind("text")
        self.assertEqual(call.args[0], "abc")
        self.assertEqual(call.args[1], Offset(14.0, 20.0 + 66.0 - 5.0))
        self.assertEqual(call.args[2], 80.0)
        self.assertEqual(call.args[3], BLACK)

    def test_descenders_lift_baseline_by_font_descent(self) -> None:
        for content in ("y", "Jump", "a,b", "x_1", "Q"):
            surface = RecordingSurface()
            t(content).draw(surface, Offset(0.0, 0.0))
            (call,) = surface.of_kind("text")
            self.assertEqual(call.args[1].y, 56.0 - 16.0, content)

    def test_measure_is_deterministic(self) -> None:
        expr = t("1 + ") + Fraction(t("x"), Superscript(t("y"), t("3"), is_main=False))
        self.assertEqual(expr.measure(), expr.measure())


class CombinatorTests(unittest.TestCase):
    def test_text_pairs_merge(self) -> None:
        self.assertEqual(combine(t("a"), t("b")), t("ab"))
        self.assertEqual(t("a") + t("b"), Text("ab"))

    def test_merge_keeps_left_styling(self) -> None:
        merged = t("a", font_size=40.0, horizontal_padding=4.0) + t("b", font_size=10.0)
        self.assertEqual(merged, t("ab", font_size=40.0, horizontal_padding=4.0))

    def test_mixed_pair_becomes_two_child_group(self) -> None:
        frac = Fraction(t("1"), t("2"))
        group = t("a") + frac
        self.assertIsInstance(group, HorizontalGroup)
        self.assertEqual(group.children, (t("a"), frac))

    def test_chaining_is_left_to_right_without_flattening(self) -> None:
        frac = Fraction(t("1"), t("2"))
        expr = t("a") + t("b") + frac
        self.assertEqual(expr, HorizontalGroup((t("ab"), frac)))
        nested = frac + t("c") + t("d")
        self.assertEqual(nested, HorizontalGroup((HorizontalGroup((frac, t("c"))), t("d"))))

    def test_non_element_operand_is_rejected(self) -> None:
        with self.assertRaises(InvalidElementError):
            combine(t("a"), "b")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            t("a") + "b"  # type: ignore[operator]


class HorizontalGroupTests(unittest.TestCase):
    def test_width_sums_and_height_maxes(self) -> None:
        tall = t("x", vertical_padding=44.0)
        group = t("ab") + tall + t("cdef")
        self.assertEqual(group.measure(), Size(80.0 + 40.0 + 160.0, 100.0))

    def test_children_are_centered_against_tallest(self) -> None:
        surface = RecordingSurface()
        tall = t("x", vertical_padding=44.0)
        (t("ab") + tall).draw(surface, Offset(10.0, 0.0))
        texts = surface.texts()
        # "ab" is 56 tall in a 100-tall row: top at 22, baseline at 78.
        self.assertEqual(texts["ab"].args[1], Offset(10.0, 78.0))
        self.assertEqual(texts["x"].args[1], Offset(90.0, 100.0 - 22.0))


class FractionTests(unittest.TestCase):
    def test_width_is_max_of_operands(self) -> None:
        for num, den in ((t("ab"), t("abcd")), (t("abcd"), t("ab")), (t("a"), t("a"))):
            frac = Fraction(num, den)
            self.assertEqual(frac.measure().width, max(num.measure().width, den.measure().width))

    def test_height_stacks_operands_padding_and_rule(self) -> None:
        self.assertEqual(Fraction(t("x + y"), t("x - y")).measure(), Size(200.0, 155.0))

    def test_divider_spans_width_midway_between_operands(self) -> None:
        surface = RecordingSurface()
        frac = Fraction(t("ab"), t("abcd"), is_main=False)
        frac.draw(surface, Offset(10.0, 30.0))

        (line,) = surface.of_kind("line")
        start, end, stroke, color = line.args
        self.assertEqual(end.x - start.x, frac.measure().width)
        self.assertEqual(start.y, end.y)
        self.assertEqual(stroke, 3.0)
        self.assertEqual(color, BLACK)

        num_bottom = 30.0 + 56.0
        den_top = num_bottom + 20.0 + 3.0 + 20.0
        self.assertEqual(start.y, (num_bottom + den_top) / 2.0)

        texts = surface.texts()
        self.assertEqual(texts["ab"].args[1], Offset(10.0 + 40.0, num_bottom))
        self.assertEqual(texts["abcd"].args[1], Offset(10.0, den_top + 56.0))

    def test_main_fraction_centers_on_viewport_midline(self) -> None:
        surface = RecordingSurface(width=800.0, height=400.0)
        Fraction(t("x + y"), t("x - y")).draw(surface, Offset(0.0, 999.0))
        (line,) = surface.of_kind("line")
        num_top = 200.0 - 56.0 - 20.0
        self.assertEqual(line.args[0].y, num_top + 56.0 + 20.0 + 1.5)

    def test_main_mode_is_ignored_when_context_disables_centering(self) -> None:
        surface = RecordingSurface(width=800.0, height=400.0)
        Fraction(t("x + y"), t("x - y")).draw(surface, Offset(0.0, 30.0), NO_CENTERING)
        (line,) = surface.of_kind("line")
        self.assertEqual(line.args[0].y, 30.0 + 56.0 + 20.0 + 1.5)

    def test_context_viewport_overrides_surface_height(self) -> None:
        surface = RecordingSurface(width=800.0, height=400.0)
        ctx = DrawContext(viewport=Size(800.0, 1000.0))
        Fraction(t("x"), t("y")).draw(surface, Offset(0.0, 0.0), ctx)
        texts = surface.texts()
        self.assertEqual(texts["x"].args[1].y, 500.0 - 20.0)

    def test_rejects_non_element_operands(self) -> None:
        with self.assertRaises(InvalidElementError):
            Fraction(t("x"), None)  # type: ignore[arg-type]


class SuperscriptTests(unittest.TestCase):
    def test_measure_adds_scaled_power(self) -> None:
        self.assertEqual(Superscript(t("z"), t("2")).measure(), Size(60.0, 99.0))

    def test_power_is_painted_inside_half_scale_scope(self) -> None:
        surface = RecordingSurface()
        Superscript(t("z"), t("2"), is_main=False).draw(surface, Offset(0.0, 0.0))
        texts = surface.texts()

        self.assertEqual(texts["z"].scales, ())
        self.assertEqual(texts["z"].args[1], Offset(0.0, 28.0 + 15.0 + 56.0))

        power = texts["2"]
        self.assertEqual(power.scales, ((0.5, Offset(40.0, 0.0)),))
        self.assertEqual(power.args[1], Offset(40.0, 56.0))
        self.assertEqual(surface.scale_depth, 0)

    def test_main_superscript_lifts_anchor_by_half_base_height(self) -> None:
        surface = RecordingSurface()
        Superscript(t("z"), t("2")).draw(surface, Offset(0.0, 100.0))
        texts = surface.texts()
        self.assertEqual(texts["2"].scales[0][1], Offset(40.0, 72.0))

    def test_nested_power_scales_compose(self) -> None:
        surface = RecordingSurface()
        inner = Superscript(t("y"), t("n"), is_main=False)
        Superscript(t("e"), inner, is_main=False).draw(surface, Offset(0.0, 0.0))
        self.assertEqual([factor for factor, _ in surface.texts()["n"].scales], [0.5, 0.5])
        self.assertEqual(surface.scale_depth, 0)


class SubscriptTests(unittest.TestCase):
    def test_measure_is_additive_approximation(self) -> None:
        self.assertEqual(Subscript(t("x"), t("i")).measure(), Size(60.0, 84.0))

    def test_sub_scales_about_surface_origin(self) -> None:
        surface = RecordingSurface()
        Subscript(t("x"), t("i")).draw(surface, Offset(10.0, 10.0))
        texts = surface.texts()
        self.assertEqual(texts["x"].args[1], Offset(10.0, 66.0))
        self.assertEqual(texts["i"].scales, ((0.5, None),))
        self.assertEqual(texts["i"].args[1], Offset(10.0 + 40.0 + 20.0, 10.0 + 56.0 + 20.0 + 56.0))
        self.assertEqual(surface.scale_depth, 0)


class _DeepDescentSurface(RecordingSurface):
    def measure_text(self, content: str, font_size: float) -> TextMetrics:
        base = super().measure_text(content, font_size)
        return TextMetrics(base.width, base.height, 30.0)


class FontBindingTests(unittest.TestCase):
    def test_descent_comes_from_painting_surface(self) -> None:
        surface = _DeepDescentSurface()
        t("y").draw(surface, Offset(0.0, 0.0))
        (call,) = surface.of_kind("text")
        self.assertEqual(call.args[1].y, 56.0 - 30.0)

    def test_iter_texts_walks_every_leaf_in_order(self) -> None:
        expr = t("a") + Fraction(
            Radical(t("r"), index=t("n")),
            Matrix(rows=1, columns=2, cells=[[t("p"), Subscript(t("b"), t("s"))]]),
        ) + Superscript(t("e"), t("k"), is_main=False)
        self.assertEqual([text.content for text in iter_texts(expr)], ["a", "n", "r", "p", "b", "s", "e", "k"])

    def test_bind_metrics_rebinds_all_leaves(self) -> None:
        other = FixedAdvanceMetrics()
        expr = combination(FAKE_METRICS)
        bound = bind_metrics(expr, other)
        self.assertEqual(bound, expr)
        self.assertTrue(all(text.metrics is other for text in iter_texts(bound)))
        self.assertTrue(all(text.metrics is FAKE_METRICS for text in iter_texts(expr)))


class ConcurrentLayoutTests(unittest.TestCase):
    def test_shared_tree_measures_and_draws_identically_across_threads(self) -> None:
        expr = combination(FAKE_METRICS)
        expected_size = expr.measure()
        reference = RecordingSurface()
        expr.draw(reference, Offset(0.0, 0.0))

        def run(_: int) -> tuple[Size, list]:
            surface = RecordingSurface()
            expr.draw(surface, Offset(0.0, 0.0))
            return expr.measure(), surface.calls

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, range(32)))
        for size, calls in results:
            self.assertEqual(size, expected_size)
            self.assertEqual(calls, reference.calls)


if __name__ == "__main__":
    unittest.main()
