"""Graph layer — lane layout and text rendering of the undo tree."""

from undoviz.graph.layout import LayoutEntry, TreeLayout, layout_tree
from undoviz.graph.render import GraphRow, format_output, render_rows

__all__ = [
    "GraphRow",
    "LayoutEntry",
    "TreeLayout",
    "format_output",
    "layout_tree",
    "render_rows",
]
