"""Shared type definitions for undoviz."""

from collections.abc import Callable, Sequence
from typing import Literal, TypeAlias

# Sequence number of one historical state (0 = synthetic root)
Seq: TypeAlias = int

# Ordered buffer lines at one historical state
Lines: TypeAlias = Sequence[str]

# Host accessor returning the lines at a state, or None when unavailable
SnapshotFunc: TypeAlias = Callable[[Seq], Lines | None]

# Kind of a single diff line
ChangeKind: TypeAlias = Literal["equal", "add", "delete"]

# Which glyph a rendered node receives
GlyphKind: TypeAlias = Literal["current", "saved", "node"]

# Callback returning the change count shown next to a node (inline diff)
AnnotateFunc: TypeAlias = Callable[[Seq], int]
