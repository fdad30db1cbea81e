"""
Page layout value type.

A page layout says how one scanned sheet is cut into sub-pages:
- single-uncut: the whole outline is one page, no cutters
- single-cut: one page with a cutter on each side (two cutters)
- two-pages: a spread split by one cutter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import fitz  # PyMuPDF

from .geometry import Line


class LayoutType(Enum):
    SINGLE_PAGE_UNCUT = "single-uncut"
    SINGLE_PAGE_CUT = "single-cut"
    TWO_PAGES = "two-pages"

    @property
    def cutter_count(self) -> int:
        return _CUTTER_COUNTS[self]

    @property
    def sub_page_count(self) -> int:
        return 2 if self is LayoutType.TWO_PAGES else 1


_CUTTER_COUNTS = {
    LayoutType.SINGLE_PAGE_UNCUT: 0,
    LayoutType.SINGLE_PAGE_CUT: 2,
    LayoutType.TWO_PAGES: 1,
}


@dataclass(frozen=True, eq=False)
class PageLayout:
    """
    Immutable layout: a type, the uncut outline and the matching cutters.

    Use the named constructors; the cutter count is checked against the type
    on construction. The outline is copied on construction, but fitz.Rect is
    mutable: treat `outline` as read-only and use bounding_rect() for a copy.
    """

    type: LayoutType
    outline: fitz.Rect
    cutters: Tuple[Line, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "outline", fitz.Rect(self.outline))
        object.__setattr__(self, "cutters", tuple(self.cutters))
        expected = self.type.cutter_count
        if len(self.cutters) != expected:
            raise ValueError(
                f"{self.type.value} layout needs {expected} cutter(s), "
                f"got {len(self.cutters)}."
            )

    @classmethod
    def uncut(cls, outline: fitz.Rect) -> "PageLayout":
        return cls(LayoutType.SINGLE_PAGE_UNCUT, outline)

    @classmethod
    def two_pages(cls, outline: fitz.Rect, cutter: Line) -> "PageLayout":
        return cls(LayoutType.TWO_PAGES, outline, (cutter,))

    @classmethod
    def single_page_cut(
        cls, outline: fitz.Rect, cutter1: Line, cutter2: Line
    ) -> "PageLayout":
        return cls(LayoutType.SINGLE_PAGE_CUT, outline, (cutter1, cutter2))

    def cutter_line(self, index: int) -> Line:
        return self.cutters[index]

    def bounding_rect(self) -> fitz.Rect:
        return fitz.Rect(self.outline)

    def sub_page_count(self) -> int:
        return self.type.sub_page_count

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PageLayout):
            return NotImplemented
        return (
            self.type is other.type
            and self.outline == other.outline
            and self.cutters == other.cutters
        )

    def __hash__(self) -> int:
        return hash((self.type, tuple(self.outline), self.cutters))
