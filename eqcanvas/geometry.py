from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("Size width/height must be >= 0")

    def __add__(self, other: Size) -> Size:
        return Size(self.width + other.width, self.height + other.height)

    def __mul__(self, factor: float) -> Size:
        return Size(self.width * factor, self.height * factor)


ZERO_SIZE = Size(0.0, 0.0)


@dataclass(frozen=True)
class Offset:
    x: float
    y: float

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> Offset:
        return Offset(self.x + dx, self.y + dy)
