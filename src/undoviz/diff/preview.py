"""Preview diffs between two nodes, using host-supplied snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING

from undoviz._errors import SnapshotError
from undoviz.diff.engine import (
    DEFAULT_CONTEXT,
    NO_CHANGES_TO_DISPLAY,
    comparison_message,
    unified_diff,
)

if TYPE_CHECKING:
    from undoviz._types import Lines, SnapshotFunc
    from undoviz.history.node import Node

CANNOT_ACCESS = "Cannot access target state"


def preview_diff(
    before: Node | None,
    after: Node | None,
    snapshot: SnapshotFunc,
    *,
    context: int = DEFAULT_CONTEXT,
) -> list[str]:
    """Diff the buffer contents of two historical states.

    Args:
        before: The older state (usually the parent of *after*).
        after: The state being previewed.
        snapshot: Host accessor returning the lines at a given seq.
        context: Context lines per hunk.

    Returns:
        Unified-diff lines headed by ``--- a/buffer (undo N)`` and
        ``+++ b/buffer (undo M)``, or a single informational line. A state
        the host cannot reproduce yields ``Cannot access target state``;
        callers show it as-is and do not retry.

    """
    if before is None or after is None:
        return [NO_CHANGES_TO_DISPLAY]

    before_lines = _read_snapshot(snapshot, before.seq)
    after_lines = _read_snapshot(snapshot, after.seq)
    if before_lines is None or after_lines is None:
        return [CANNOT_ACCESS]

    message = comparison_message(before_lines, after_lines)
    if message is not None:
        return [message]

    return [
        f"--- a/buffer (undo {before.seq})",
        f"+++ b/buffer (undo {after.seq})",
        *unified_diff(before_lines, after_lines, context),
    ]


def _read_snapshot(snapshot: SnapshotFunc, seq: int) -> Lines | None:
    try:
        return snapshot(seq)
    except SnapshotError:
        return None
