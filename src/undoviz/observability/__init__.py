"""Session observability — structured events for history operations.

Records tree rebuilds, diffs, previews, and graph renders as frozen
dataclasses with nanosecond timestamps, safe to share across threads.

Quick Start:
    >>> from undoviz.observability import EventLog, HistoryCollector
    >>> log = EventLog()
    >>> collector = HistoryCollector(log)
    >>> collector.record_build(node_count=3, max_seq=2)
    >>> len(log)
    1

"""

from undoviz.observability.collector import HistoryCollector
from undoviz.observability.events import (
    DiffComputed,
    GraphRendered,
    HistoryEvent,
    PreviewRendered,
    RenderProfile,
    TreeBuilt,
    now_ns,
)
from undoviz.observability.log import EventLog
from undoviz.observability.profiler import RenderProfiler, compute_aggregate_stats

__all__ = [
    "DiffComputed",
    "EventLog",
    "GraphRendered",
    "HistoryCollector",
    "HistoryEvent",
    "PreviewRendered",
    "RenderProfile",
    "RenderProfiler",
    "TreeBuilt",
    "compute_aggregate_stats",
    "now_ns",
]
