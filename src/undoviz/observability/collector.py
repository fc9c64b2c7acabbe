"""History collector — records session activity into an EventLog.

The session calls one ``record_*`` method per operation; the collector
stamps the event and stores it.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from undoviz.diff.engine import DiffStats
from undoviz.observability.events import (
    DiffComputed,
    GraphRendered,
    HistoryEvent,
    PreviewRendered,
    TreeBuilt,
    now_ns,
)
from undoviz.observability.log import EventLog


class HistoryCollector:
    """Event collector for one or more history sessions.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: HistoryEvent) -> None:
        """Store an already-built event."""
        self._log.append(event)

    def record_build(self, node_count: int, max_seq: int, *, build_ms: float = 0.0) -> None:
        self._log.append(
            TreeBuilt(
                node_count=node_count,
                max_seq=max_seq,
                build_ms=build_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_diff(
        self,
        before_seq: int,
        after_seq: int,
        stats: DiffStats,
        *,
        diff_ms: float = 0.0,
    ) -> None:
        self._log.append(
            DiffComputed(
                before_seq=before_seq,
                after_seq=after_seq,
                added=stats.added,
                removed=stats.removed,
                hunks=stats.hunks,
                diff_ms=diff_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_preview(
        self,
        seq: int,
        *,
        superseded: bool = False,
        failed: bool = False,
        line_count: int = 0,
    ) -> None:
        if failed:
            outcome = "failed"
        elif superseded:
            outcome = "superseded"
        else:
            outcome = "rendered"
        self._log.append(
            PreviewRendered(
                seq=seq,
                outcome=outcome,
                line_count=line_count,
                timestamp_ns=now_ns(),
            )
        )

    def record_graph(
        self,
        rows: int,
        *,
        max_depth: int = 0,
        current_seq: int = 0,
        mirrored: bool = False,
    ) -> None:
        self._log.append(
            GraphRendered(
                rows=rows,
                max_depth=max_depth,
                current_seq=current_seq,
                mirrored=mirrored,
                timestamp_ns=now_ns(),
            )
        )
