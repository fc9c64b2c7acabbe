"""Node — one historical state of the buffer."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(slots=True, eq=False)
class Node:
    """One historical state in the undo tree.

    Nodes compare by identity: two trees built from the same change log
    hold distinct nodes. ``parent`` is assigned once by the builder.

    Attributes:
        seq: Sequence number of the state (0 for the synthetic root).
        time: Creation timestamp in seconds since the epoch (0 for the root).
        saved_marker: Write counter if this state was saved to disk.
        is_branch_head: True if this state is the tip of an open branch.
        parent: The state this one was derived from (None for the root).
        children: States derived from this one, in attachment order.

    """

    seq: int
    time: float = 0
    saved_marker: int | None = None
    is_branch_head: bool = False
    parent: Node | None = field(default=None, repr=False)
    children: list[Node] = field(default_factory=list, repr=False)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_saved(self) -> bool:
        return self.saved_marker is not None

    def add_child(self, child: Node) -> None:
        """Attach *child* under this node."""
        child.parent = self
        self.children.append(child)

    def ancestors(self) -> Iterator[Node]:
        """Yield the parent chain up to and including the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def is_ancestor_of(self, other: Node) -> bool:
        return any(a is self for a in other.ancestors())
