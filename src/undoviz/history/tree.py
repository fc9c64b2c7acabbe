"""HistoryTree — the built undo tree and navigation over it.

A HistoryTree is produced by :func:`undoviz.history.builder.build_tree` and
never modified afterwards. When the host reports new history, a fresh tree
is built and replaces the old one.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from undoviz.history.node import Node


class HistoryTree:
    """All nodes of one undo history plus a ``seq -> Node`` lookup.

    Args:
        nodes: Every node in creation order, root first.

    """

    __slots__ = ("_by_seq", "_newest_first", "_nodes")

    def __init__(self, nodes: list[Node]) -> None:
        if not nodes or nodes[0].seq != 0:
            msg = "a history tree must start with the root node (seq 0)"
            raise ValueError(msg)
        self._nodes = tuple(nodes)
        self._by_seq = MappingProxyType({node.seq: node for node in nodes})
        self._newest_first = tuple(sorted(nodes, key=lambda n: n.seq, reverse=True))

    @classmethod
    def empty(cls) -> HistoryTree:
        """A tree holding only the synthetic root."""
        return cls([Node(seq=0)])

    @property
    def root(self) -> Node:
        return self._nodes[0]

    @property
    def nodes(self) -> tuple[Node, ...]:
        """All nodes in creation order."""
        return self._nodes

    @property
    def nmap(self) -> Mapping[int, Node]:
        """Read-only ``seq -> Node`` mapping."""
        return self._by_seq

    @property
    def max_seq(self) -> int:
        return self._newest_first[0].seq

    def get(self, seq: int) -> Node | None:
        return self._by_seq.get(seq)

    def __getitem__(self, seq: int) -> Node:
        return self._by_seq[seq]

    def __contains__(self, seq: object) -> bool:
        return seq in self._by_seq

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def newest_first(self) -> tuple[Node, ...]:
        """All nodes by descending seq (the display order)."""
        return self._newest_first

    def path_to_root(self, seq: int) -> list[Node]:
        """The node for *seq* followed by its ancestors, ending at the root."""
        node = self._by_seq[seq]
        return [node, *node.ancestors()]

    # ------------------------------------------------------------------
    # Navigation in display order
    # ------------------------------------------------------------------

    def older(self, seq: int, count: int = 1) -> Node:
        """Move *count* rows down the display list, clamping at the root."""
        return self._step(seq, count)

    def newer(self, seq: int, count: int = 1) -> Node:
        """Move *count* rows up the display list, clamping at the newest state."""
        return self._step(seq, -count)

    def older_write(self, seq: int) -> Node | None:
        """The nearest saved state older than *seq*, if any."""
        index = self._index(seq)
        for node in self._newest_first[index + 1:]:
            if node.is_saved:
                return node
        return None

    def newer_write(self, seq: int) -> Node | None:
        """The nearest saved state newer than *seq*, if any."""
        index = self._index(seq)
        for node in reversed(self._newest_first[:index]):
            if node.is_saved:
                return node
        return None

    def _step(self, seq: int, offset: int) -> Node:
        index = self._index(seq) + offset
        index = max(0, min(len(self._newest_first) - 1, index))
        return self._newest_first[index]

    def _index(self, seq: int) -> int:
        node = self._by_seq.get(seq)
        if node is None:
            msg = f"no state with seq {seq} in history"
            raise KeyError(msg)
        return self._newest_first.index(node)
