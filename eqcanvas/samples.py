"""Sample expressions mirroring the picker toolbar of the interactive editor."""

from __future__ import annotations

from functools import partial
from typing import Callable

from .elements import Element, Fraction, Matrix, Radical, Subscript, Superscript, Text
from .surface import FontMetrics


SampleFactory = Callable[[FontMetrics | None], Element]


def _text(metrics: FontMetrics | None) -> Callable[..., Text]:
    if metrics is None:
        return Text
    return partial(Text, metrics=metrics)


def variable(metrics: FontMetrics | None = None) -> Element:
    return _text(metrics)("x")


def fraction(metrics: FontMetrics | None = None) -> Element:
    t = _text(metrics)
    return Fraction(numerator=t("x + y"), denominator=t("x - y"))


def superscript(metrics: FontMetrics | None = None) -> Element:
    t = _text(metrics)
    return Superscript(base=t("z"), power=t("2"))


def subscript(metrics: FontMetrics | None = None) -> Element:
    t = _text(metrics)
    return Subscript(base=t("x"), sub=t("i"))


def radical(metrics: FontMetrics | None = None) -> Element:
    t = _text(metrics)
    return Radical(radicand=t("1+x"), index=t("3"))


def matrix(metrics: FontMetrics | None = None) -> Element:
    t = _text(metrics)
    return Matrix(rows=2, columns=2, cells=((t("a"), t("b")), (t("c"), t("d"))))


def combination(metrics: FontMetrics | None = None) -> Element:
    """1 + x/y^3 + 1/(1 + 1/(1 + root5(x)))"""

    t = _text(metrics)
    inner = Fraction(
        numerator=t("1"),
        denominator=t("1 +  ") + Radical(radicand=t("x"), index=t("5")),
        is_main=False,
    )
    return (
        t("1 +  ")
        + Fraction(
            numerator=t("x"),
            denominator=Superscript(base=t("y"), power=t("3"), is_main=False),
        )
        + t(" +   ")
        + Fraction(numerator=t("1"), denominator=t("1 +  ") + inner)
    )


SAMPLES: dict[str, SampleFactory] = {
    "variable": variable,
    "fraction": fraction,
    "superscript": superscript,
    "subscript": subscript,
    "radical": radical,
    "matrix": matrix,
    "combination": combination,
}


def build_sample(name: str, metrics: FontMetrics | None = None) -> Element:
    try:
        factory = SAMPLES[name]
    except KeyError as exc:
        raise ValueError(f"unknown sample `{name}`; expected one of: {', '.join(SAMPLES)}") from exc
    return factory(metrics)
