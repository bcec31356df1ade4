from __future__ import annotations


class EquationError(ValueError):
    """Base error for invalid expression trees and render setup."""


class InvalidElementError(EquationError):
    """A composite was handed something that is not an expression element."""


class InvalidMatrixShape(EquationError):
    """Matrix cell grid does not match the declared rows/columns."""


class SurfaceStateError(RuntimeError):
    """Drawing surface transform stack was misused."""


class RenderConfigError(EquationError):
    """Render configuration file holds an invalid value."""
