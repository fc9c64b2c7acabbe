"""Graph rendering — turn a TreeLayout into text rows.

A rendered row has two columns: the graph (lane lines, connectors, node
glyph) and the info text (``[seq] HH:MM:SS`` and an optional change count).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from undoviz.config import GraphSymbols

if TYPE_CHECKING:
    from undoviz._types import AnnotateFunc
    from undoviz.graph.layout import Connector, LayoutEntry, TreeLayout

HELP_LINES = (
    '" j/k   Next/Prev undo state.',
    '" J/K   Next/Prev write state.',
    '" i     Toggle "inline diff" mode.',
    '" P     Play current state to selected undo.',
    '" d     Vert diff of undo with current state.',
    '" p     Diff selected undo and current state.',
    '" r     Diff selected undo and prior undo.',
    '" q     Quit!',
    '" <cr>  Revert to selected state.',
)

_MIRROR = str.maketrans({"/": "\\", "\\": "/"})


@dataclass(frozen=True, slots=True)
class GraphRow:
    """One rendered line. ``seq`` is None for connector rows."""

    graph: str
    info: str = ""
    seq: int | None = None


def format_time(timestamp: float) -> str:
    """Local wall-clock time of a state."""
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")


def connector_text(connector: Connector, symbols: GraphSymbols) -> str:
    lanes = f"{symbols.vertical} " * connector.depth
    if connector.kind == "merge":
        return f"{lanes}{symbols.vertical}/"
    return f"{lanes}{symbols.vertical}"


def node_text(entry: LayoutEntry, symbols: GraphSymbols) -> str:
    glyph = getattr(symbols, entry.glyph)
    return f"{symbols.vertical} " * entry.depth + glyph


def render_rows(
    layout: TreeLayout,
    symbols: GraphSymbols | None = None,
    annotate: AnnotateFunc | None = None,
) -> list[GraphRow]:
    """Render a layout as connector and node rows, newest first.

    Args:
        layout: Output of :func:`undoviz.graph.layout.layout_tree`.
        symbols: Glyph set (defaults to ``@ o w |``).
        annotate: Optional callback returning the change count for a seq;
            counts above zero are appended as ``(N changes)``.

    """
    symbols = symbols or GraphSymbols()
    rows: list[GraphRow] = []
    for entry in layout.entries:
        if entry.connector is not None:
            rows.append(GraphRow(graph=connector_text(entry.connector, symbols)))
        info = f"    [{entry.node.seq}] {format_time(entry.node.time)}"
        if annotate is not None and entry.node.parent is not None:
            changes = annotate(entry.node.seq)
            if changes > 0:
                info += f" ({changes} changes)"
        rows.append(GraphRow(graph=node_text(entry, symbols), info=info, seq=entry.node.seq))
    return rows


def format_output(rows: list[GraphRow], mirror: bool = False) -> list[str]:
    """Join graph and info columns, optionally mirroring the graph.

    Mirroring reverses each graph string and swaps ``/`` with ``\\`` so the
    slant still points at the lane it joins; mirrored graphs are then
    right-aligned to the widest graph column.

    """
    width = max((len(row.graph) for row in rows), default=1)
    output: list[str] = []
    for row in rows:
        graph = row.graph
        if mirror:
            graph = graph[::-1].translate(_MIRROR).rjust(width)
        output.append(f"{graph} {row.info}" if row.info else graph)
    return output


def render_header(label: str, show_help: bool = False) -> list[str]:
    """The comment-style header shown above the graph."""
    lines = [f'" {label} - Press ? for Help:']
    if show_help:
        lines.extend(HELP_LINES)
    lines.append("")
    return lines


def find_current_row(rows: list[GraphRow], symbols: GraphSymbols | None = None) -> tuple[int, int] | None:
    """Row index and column of the current-state glyph, if it is displayed."""
    symbols = symbols or GraphSymbols()
    for index, row in enumerate(rows):
        if row.seq is None:
            continue
        column = row.graph.find(symbols.current)
        if column != -1:
            return index, column
    return None
