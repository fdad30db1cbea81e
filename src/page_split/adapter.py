"""
Adapt page layouts to a new outline.

Why this module exists:
- After deskew or re-crop the outline of a page changes, and the cutter lines
  drawn against the old outline have to be re-fitted to the new one.
- Cutters that end up on a page edge, crossing each other, or collapsed onto
  each other no longer split anything; the layout is then downgraded to a
  single uncut page instead of failing.
"""

from __future__ import annotations

from typing import Iterable, List

import fitz  # PyMuPDF

from .geometry import (
    IntersectType,
    Line,
    bottom_border,
    intersect,
    is_valid_rect,
    rounded_rect,
    top_border,
)
from .layout import LayoutType, PageLayout


def _clamp_x(point: fitz.Point, rect: fitz.Rect) -> fitz.Point:
    if point.x < rect.x0:
        return fitz.Point(rect.x0, point.y)
    if point.x > rect.x1:
        return fitz.Point(rect.x1, point.y)
    return point


def adapt_cutter(cutter_line: Line, new_rect: fitz.Rect) -> Line:
    """
    Stretch or clip a cutter so it runs from the top to the bottom border.

    The line is returned untouched when the rect is invalid, the line is null,
    or the line is parallel to the borders.
    """

    if not is_valid_rect(new_rect) or cutter_line.is_null():
        return cutter_line

    kind, upper = intersect(top_border(new_rect), cutter_line)
    if kind is IntersectType.NO_INTERSECTION:
        return cutter_line

    kind, lower = intersect(bottom_border(new_rect), cutter_line)
    if kind is IntersectType.NO_INTERSECTION:
        return cutter_line

    return Line(_clamp_x(upper, new_rect), _clamp_x(lower, new_rect))


def adapt_cutters(cutters: Iterable[Line], new_rect: fitz.Rect) -> List[Line]:
    """
    Adapt several cutters and un-cross neighbours inside the rect.

    The result is ordered left to right by the x of each line's first point.
    Two neighbours crossing strictly between the top and bottom borders are
    both cut back to meet on the border nearest the crossing (bottom on a tie).
    """

    adapted = [adapt_cutter(cutter, new_rect) for cutter in cutters]
    adapted.sort(key=lambda line: line.x1)

    upper_bound = new_rect.y0
    lower_bound = new_rect.y1
    for i in range(1, len(adapted)):
        left = adapted[i - 1]
        right = adapted[i]
        kind, crossing = intersect(left, right)
        if kind is IntersectType.NO_INTERSECTION:
            continue
        if not (upper_bound < crossing.y < lower_bound):
            continue

        if (lower_bound - crossing.y) <= (lower_bound - upper_bound) / 2:
            meeting = fitz.Point(crossing.x, lower_bound)
            adapted[i - 1] = left.with_p2(meeting)
            adapted[i] = right.with_p2(meeting)
        else:
            meeting = fitz.Point(crossing.x, upper_bound)
            adapted[i - 1] = left.with_p1(meeting)
            adapted[i] = right.with_p1(meeting)

    return adapted


def _on_side_edge(line: Line, outline: fitz.Rect) -> bool:
    """True for a vertical line lying on the outline's left or right edge."""

    return line.is_vertical() and line.x1 in (outline.x0, outline.x1)


def correct_layout_type(layout: PageLayout) -> PageLayout:
    """
    Downgrade a layout whose cutters no longer split the page.

    Only ever moves towards SINGLE_PAGE_UNCUT. Coordinates are compared on
    whole pixels.
    """

    outline = rounded_rect(layout.outline)

    if layout.type is LayoutType.SINGLE_PAGE_CUT:
        first = layout.cutter_line(0).rounded()
        second = layout.cutter_line(1).rounded()

        if _on_side_edge(first, outline) and _on_side_edge(second, outline):
            return PageLayout.uncut(layout.outline)

        kind, crossing = intersect(first, second)
        if kind is IntersectType.NO_INTERSECTION:
            if first.p1 == second.p1:
                return PageLayout.uncut(layout.outline)
        elif outline.y0 < crossing.y < outline.y1:
            return PageLayout.uncut(layout.outline)

    elif layout.type is LayoutType.TWO_PAGES:
        if _on_side_edge(layout.cutter_line(0).rounded(), outline):
            return PageLayout.uncut(layout.outline)

    return layout


def adapt_page_layout(previous: PageLayout, new_outline: fitz.Rect) -> PageLayout:
    """Re-fit a layout to a new outline, returning a new layout."""

    # Exact rect equality, no fuzzy epsilon.
    if previous.bounding_rect() == new_outline:
        return previous

    if previous.type is LayoutType.SINGLE_PAGE_CUT:
        first, second = adapt_cutters(previous.cutters, new_outline)
        return correct_layout_type(
            PageLayout.single_page_cut(new_outline, first, second)
        )

    if previous.type is LayoutType.TWO_PAGES:
        cutter = adapt_cutter(previous.cutter_line(0), new_outline)
        return correct_layout_type(PageLayout.two_pages(new_outline, cutter))

    return PageLayout.uncut(new_outline)
