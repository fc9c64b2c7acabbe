"""Graph layout — lane assignment and connectors for the history tree.

Nodes are listed newest first (descending seq). That order is purely
chronological: it is not a tree walk, so consecutive rows may belong to
different branches. Each node gets a lane (depth):

- the root sits in lane 0;
- among a node's children, the one with the highest seq continues in the
  parent's lane (the most recent branch is drawn as the trunk);
- every other child moves one lane to the right.

Between two consecutive rows a connector is emitted. When the row above sits
in a deeper lane than the current one, a merge marker (``|/``) shows the
branch rejoining; otherwise a vertical line continues the lane of the row
above.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from undoviz._types import GlyphKind
    from undoviz.history.node import Node
    from undoviz.history.tree import HistoryTree


@dataclass(frozen=True, slots=True)
class Connector:
    """The line drawn above a node row.

    Attributes:
        kind: ``merge`` when a deeper lane rejoins, ``vertical`` otherwise.
        depth: Lane count to indent by (current depth for merges, the
            previous row's depth for verticals).

    """

    kind: str
    depth: int


@dataclass(frozen=True, slots=True)
class LayoutEntry:
    """One displayed node with the connector drawn before it."""

    node: Node
    depth: int
    glyph: GlyphKind
    connector: Connector | None


@dataclass(frozen=True, slots=True)
class TreeLayout:
    """Display-ready layout of a whole tree."""

    entries: tuple[LayoutEntry, ...]
    depths: dict[int, int]
    max_depth: int

    def depth_of(self, seq: int) -> int:
        return self.depths.get(seq, 0)


def assign_depths(root: Node) -> dict[int, int]:
    """Breadth-first lane assignment starting at *root* (lane 0)."""
    depths = {root.seq: 0}
    queue: deque[Node] = deque([root])
    while queue:
        node = queue.popleft()
        depth = depths[node.seq]
        ordered = sorted(node.children, key=lambda c: c.seq, reverse=True)
        for index, child in enumerate(ordered):
            if child.seq in depths:
                continue
            depths[child.seq] = depth if index == 0 else depth + 1
            queue.append(child)
    return depths


def glyph_for(node: Node, current_seq: int | None) -> GlyphKind:
    """Current state wins over saved state; everything else is a plain node."""
    if node.seq == current_seq:
        return "current"
    if node.saved_marker is not None:
        return "saved"
    return "node"


def connector_between(previous_depth: int, depth: int) -> Connector:
    if previous_depth > depth:
        return Connector(kind="merge", depth=depth)
    return Connector(kind="vertical", depth=previous_depth)


def layout_tree(tree: HistoryTree, current_seq: int | None = None) -> TreeLayout:
    """Compute lanes, display order, glyphs, and connectors for *tree*."""
    depths = assign_depths(tree.root)
    entries: list[LayoutEntry] = []
    previous_depth: int | None = None
    for node in tree.newest_first():
        depth = depths.get(node.seq, 0)
        connector = None if previous_depth is None else connector_between(previous_depth, depth)
        entries.append(
            LayoutEntry(
                node=node,
                depth=depth,
                glyph=glyph_for(node, current_seq),
                connector=connector,
            )
        )
        previous_depth = depth
    return TreeLayout(
        entries=tuple(entries),
        depths=depths,
        max_depth=max(depths.values(), default=0),
    )
