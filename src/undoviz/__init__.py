"""Undoviz — branching undo history as a tree, with diffs between any two states.

Editors keep undo history as a tree, but report it as a trunk of changes
with nested "alternate" branches. Undoviz rebuilds the tree, lays it out in
lanes, and diffs the buffer contents of any two historical states.

Quick start::

    from pathlib import Path

    from undoviz import HistorySession, RecordedHistory

    host = RecordedHistory.from_file(Path("history.json"))
    session = HistorySession(host)
    print("\\n".join(session.render_graph()))
    print("\\n".join(session.preview(3)))

Pure functions, for hosts that manage their own state::

    undoviz.build_tree(entries)              # change log -> HistoryTree
    undoviz.layout_tree(tree, current_seq)   # lanes and connectors
    undoviz.diff.diff(before, after)         # unified-diff lines

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0.dev0"
__all__ = [
    "ChangeLogEntry",
    "HistorySession",
    "HistoryTree",
    "RecordedHistory",
    "UndovizConfig",
    "__version__",
    "build_tree",
    "layout_tree",
]

_LAZY = {
    "ChangeLogEntry": "undoviz.history.entries",
    "HistorySession": "undoviz.session",
    "HistoryTree": "undoviz.history.tree",
    "RecordedHistory": "undoviz.host",
    "UndovizConfig": "undoviz.config",
    "build_tree": "undoviz.history.builder",
    "layout_tree": "undoviz.graph.layout",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import undoviz`` fast; submodules load on first attribute access.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
