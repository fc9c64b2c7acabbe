"""Event model for session observability.

Every tree rebuild, diff, preview and graph render emits one event. All
events are frozen dataclasses with:

- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# History events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TreeBuilt:
    """A history tree was rebuilt from the host's change log.

    Attributes:
        node_count: Nodes in the new tree, root included.
        max_seq: Highest sequence number present.
        build_ms: Time spent building in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    node_count: int
    max_seq: int
    build_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Diff events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DiffComputed:
    """Two historical states were compared.

    Attributes:
        before_seq: The older state.
        after_seq: The newer state.
        added: Lines only in the newer state.
        removed: Lines only in the older state.
        hunks: Number of hunks produced.
        diff_ms: Time spent diffing in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    before_seq: int
    after_seq: int
    added: int
    removed: int
    hunks: int
    diff_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PreviewRendered:
    """A debounced preview request reached a final state.

    Attributes:
        seq: The state the preview was requested for.
        outcome: ``rendered``, ``superseded`` (cancelled by a newer request)
            or ``failed`` (the render raised).
        line_count: Lines produced (0 unless rendered).
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    seq: int
    outcome: Literal["rendered", "superseded", "failed"]
    line_count: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Graph events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GraphRendered:
    """The history graph was rendered.

    Attributes:
        rows: Output rows (connectors included, header excluded).
        max_depth: Deepest lane in the layout.
        current_seq: State drawn with the current glyph.
        mirrored: True if the graph was mirrored.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    rows: int
    max_depth: int
    current_seq: int
    mirrored: bool
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RenderProfile:
    """Per-stage timing for one graph render.

    Attributes:
        node_count: Nodes rendered.
        build_ms: Tree rebuild time (0 when the tree was fresh).
        layout_ms: Lane assignment and ordering time.
        annotate_ms: Inline change counting time.
        format_ms: Text formatting time.
        total_ms: End-to-end time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    node_count: int
    build_ms: float
    layout_ms: float
    annotate_ms: float
    format_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

HistoryEvent: TypeAlias = (
    TreeBuilt
    | DiffComputed
    | PreviewRendered
    | GraphRendered
    | RenderProfile
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
