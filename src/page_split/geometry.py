"""
Geometry primitives used by the layout adapter.

Why this module exists:
- Rectangles and points come straight from PyMuPDF (fitz.Rect, fitz.Point).
- PyMuPDF has no line type, so a small directed segment and the
  line-intersection primitive live here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Optional, Sequence, Tuple

import fitz  # PyMuPDF


Coords = Tuple[float, float, float, float]


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (not banker's rounding)."""

    if value >= 0:
        return int(math.floor(value + 0.5))
    return int(math.ceil(value - 0.5))


class IntersectType(Enum):
    NO_INTERSECTION = "none"
    BOUNDED_INTERSECTION = "bounded"
    UNBOUNDED_INTERSECTION = "unbounded"


@dataclass(frozen=True)
class Line:
    """
    A directed segment from p1 to p2.

    The points are copied on construction. fitz.Point itself is mutable, so
    callers must not modify p1/p2 in place; lines may be shared between layouts.
    """

    p1: fitz.Point
    p2: fitz.Point

    def __post_init__(self) -> None:
        object.__setattr__(self, "p1", fitz.Point(self.p1))
        object.__setattr__(self, "p2", fitz.Point(self.p2))

    @classmethod
    def from_coords(cls, x1: float, y1: float, x2: float, y2: float) -> "Line":
        return cls(fitz.Point(x1, y1), fitz.Point(x2, y2))

    def to_coords(self) -> Coords:
        return (self.p1.x, self.p1.y, self.p2.x, self.p2.y)

    @property
    def x1(self) -> float:
        return self.p1.x

    @property
    def x2(self) -> float:
        return self.p2.x

    def is_null(self) -> bool:
        """True when both endpoints coincide, so the direction is undefined."""

        # Exact comparison, no fuzzy epsilon.

        return self.p1 == self.p2

    def is_vertical(self) -> bool:
        return self.p1.x == self.p2.x

    def with_p1(self, point: fitz.Point) -> "Line":
        return Line(fitz.Point(point), self.p2)

    def with_p2(self, point: fitz.Point) -> "Line":
        return Line(self.p1, fitz.Point(point))

    def rounded(self) -> "Line":
        """Round both endpoints to whole pixels."""

        return Line.from_coords(*(round_half_away(value) for value in self.to_coords()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line):
            return NotImplemented
        return self.p1 == other.p1 and self.p2 == other.p2

    def __hash__(self) -> int:
        return hash(self.to_coords())

    def __repr__(self) -> str:
        return "Line(({:g}, {:g}) -> ({:g}, {:g}))".format(*self.to_coords())


def intersect(
    line_a: Line, line_b: Line
) -> Tuple[IntersectType, Optional[fitz.Point]]:
    """
    Intersect the infinite lines through two segments.

    Returns NO_INTERSECTION for parallel lines. Otherwise the point is
    reported as BOUNDED when it lies on both segments and UNBOUNDED when it
    lies on one or both extensions.
    """

    a = line_a.p2 - line_a.p1
    b = line_b.p1 - line_b.p2
    c = line_a.p1 - line_b.p1

    denominator = a.y * b.x - a.x * b.y
    if denominator == 0 or not math.isfinite(denominator):
        return IntersectType.NO_INTERSECTION, None

    na = (b.y * c.x - b.x * c.y) / denominator
    point = line_a.p1 + a * na

    if na < 0 or na > 1:
        return IntersectType.UNBOUNDED_INTERSECTION, point

    nb = (a.x * c.y - a.y * c.x) / denominator
    if nb < 0 or nb > 1:
        return IntersectType.UNBOUNDED_INTERSECTION, point

    return IntersectType.BOUNDED_INTERSECTION, point


def is_valid_rect(rect: fitz.Rect) -> bool:
    """A rectangle is usable when it has positive width and height."""

    return rect.x0 < rect.x1 and rect.y0 < rect.y1


def top_border(rect: fitz.Rect) -> Line:
    return Line(fitz.Point(rect.x0, rect.y0), fitz.Point(rect.x1, rect.y0))


def bottom_border(rect: fitz.Rect) -> Line:
    return Line(fitz.Point(rect.x0, rect.y1), fitz.Point(rect.x1, rect.y1))


def rounded_rect(rect: fitz.Rect) -> fitz.Rect:
    """
    Round a rect to whole pixels.

    The top-left corner and the size are rounded, and the right and bottom
    edges follow from them. This can differ by one from rounding each edge.
    """

    x0 = round_half_away(rect.x0)
    y0 = round_half_away(rect.y0)
    return fitz.Rect(
        x0,
        y0,
        x0 + round_half_away(rect.x1 - rect.x0),
        y0 + round_half_away(rect.y1 - rect.y0),
    )


def rect_from_coords(values: Sequence[float]) -> fitz.Rect:
    x0, y0, x1, y1 = values
    return fitz.Rect(x0, y0, x1, y1)


def rect_to_coords(rect: fitz.Rect) -> Coords:
    return (rect.x0, rect.y0, rect.x1, rect.y1)
