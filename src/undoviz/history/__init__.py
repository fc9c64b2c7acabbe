"""History layer — change-log entries, nodes, and the undo tree.

Turns the host's nested change log into a tree of historical states and
offers navigation over it.
"""

from undoviz.history.builder import build_tree
from undoviz.history.entries import ChangeLogEntry, entries_from_mappings
from undoviz.history.node import Node
from undoviz.history.tree import HistoryTree

__all__ = [
    "ChangeLogEntry",
    "HistoryTree",
    "Node",
    "build_tree",
    "entries_from_mappings",
]
