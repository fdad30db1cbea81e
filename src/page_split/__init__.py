"""
page-split package.

Why this file exists:
- It marks this folder as a package so `python -m page_split` works after install.
- It re-exports the layout adapter, the part other pipeline stages call.
"""

from .adapter import adapt_cutter, adapt_cutters, adapt_page_layout, correct_layout_type
from .geometry import IntersectType, Line, intersect
from .layout import LayoutType, PageLayout

__all__ = [
    "__version__",
    "IntersectType",
    "LayoutType",
    "Line",
    "PageLayout",
    "adapt_cutter",
    "adapt_cutters",
    "adapt_page_layout",
    "correct_layout_type",
    "intersect",
]

# Keep a simple version string for manifests and debugging.
__version__ = "0.1.0"
