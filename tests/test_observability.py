"""Tests for undoviz.observability — session events, log and collector."""

import threading

import pytest

from undoviz.diff.engine import DiffStats
from undoviz.observability.collector import HistoryCollector
from undoviz.observability.events import (
    DiffComputed,
    GraphRendered,
    PreviewRendered,
    TreeBuilt,
    now_ns,
)
from undoviz.observability.log import EventLog


def _built(node_count: int = 3) -> TreeBuilt:
    return TreeBuilt(node_count=node_count, max_seq=node_count - 1, build_ms=0.1, timestamp_ns=now_ns())


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEvents:
    """Events are frozen value objects."""

    def test_frozen(self) -> None:
        event = _built()
        with pytest.raises(AttributeError):
            event.node_count = 9  # type: ignore[misc]

    def test_now_ns_monotonic(self) -> None:
        first = now_ns()
        assert now_ns() >= first


# ---------------------------------------------------------------------------
# EventLog
# ---------------------------------------------------------------------------


class TestEventLog:
    """Tests for the event log store."""

    def test_append_and_len(self) -> None:
        log = EventLog()
        assert len(log) == 0
        log.append(_built())
        assert len(log) == 1

    def test_max_events_enforced(self) -> None:
        log = EventLog(max_events=5)
        for n in range(10):
            log.append(_built(n + 1))
        assert len(log) == 5
        assert log.recent(1)[0].node_count == 10  # type: ignore[union-attr]

    def test_recent_oldest_first(self) -> None:
        log = EventLog()
        log.extend([_built(n) for n in range(1, 6)])
        assert [e.node_count for e in log.recent(3)] == [3, 4, 5]  # type: ignore[union-attr]
        assert log.recent(0) == []

    def test_query_by_type_newest_first(self) -> None:
        log = EventLog()
        log.append(_built(1))
        log.append(PreviewRendered(seq=2, outcome="rendered", line_count=4, timestamp_ns=now_ns()))
        log.append(_built(2))
        results = log.query(event_type=TreeBuilt)
        assert [e.node_count for e in results] == [2, 1]  # type: ignore[union-attr]

    def test_query_by_seq(self) -> None:
        log = EventLog()
        log.append(PreviewRendered(seq=2, outcome="rendered", line_count=4, timestamp_ns=now_ns()))
        log.append(
            DiffComputed(
                before_seq=1, after_seq=2, added=1, removed=0, hunks=1,
                diff_ms=0.2, timestamp_ns=now_ns(),
            )
        )
        log.append(GraphRendered(rows=3, max_depth=0, current_seq=1, mirrored=False, timestamp_ns=now_ns()))
        assert len(log.query(seq=2)) == 2
        assert len(log.query(seq=1)) == 2
        assert log.query(seq=7) == []

    def test_query_since_and_limit(self) -> None:
        log = EventLog()
        log.append(TreeBuilt(node_count=1, max_seq=0, build_ms=0, timestamp_ns=100))
        log.append(TreeBuilt(node_count=2, max_seq=1, build_ms=0, timestamp_ns=200))
        log.append(TreeBuilt(node_count=3, max_seq=2, build_ms=0, timestamp_ns=300))
        assert len(log.query(since_ns=200)) == 2
        assert len(log.query(limit=1)) == 1

    def test_clear(self) -> None:
        log = EventLog()
        log.extend([_built(), _built()])
        assert log.clear() == 2
        assert len(log) == 0

    def test_stats(self) -> None:
        log = EventLog(max_events=50)
        log.append(_built())
        log.append(PreviewRendered(seq=1, outcome="superseded", line_count=0, timestamp_ns=now_ns()))
        stats = log.stats()
        assert stats["total"] == 2
        assert stats["max_events"] == 50
        assert stats["by_type"] == {"TreeBuilt": 1, "PreviewRendered": 1}

    def test_concurrent_appends(self) -> None:
        log = EventLog()

        def worker() -> None:
            for _ in range(200):
                log.append(_built())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 800


# ---------------------------------------------------------------------------
# HistoryCollector
# ---------------------------------------------------------------------------


class TestHistoryCollector:
    """The collector stamps and stores one event per operation."""

    def test_default_log(self) -> None:
        assert isinstance(HistoryCollector().log, EventLog)

    def test_record_build(self) -> None:
        collector = HistoryCollector()
        collector.record_build(6, 5, build_ms=1.5)
        (event,) = collector.log.recent()
        assert isinstance(event, TreeBuilt)
        assert (event.node_count, event.max_seq, event.build_ms) == (6, 5, 1.5)

    def test_record_diff(self) -> None:
        collector = HistoryCollector()
        collector.record_diff(2, 3, DiffStats(added=1, removed=1, hunks=1))
        (event,) = collector.log.query(event_type=DiffComputed)
        assert (event.before_seq, event.after_seq, event.added, event.removed) == (2, 3, 1, 1)

    def test_record_preview(self) -> None:
        collector = HistoryCollector()
        collector.record_preview(4, line_count=6)
        collector.record_preview(5, superseded=True)
        outcomes = [(e.seq, e.outcome, e.line_count) for e in collector.log.recent()]  # type: ignore[union-attr]
        assert outcomes == [(4, "rendered", 6), (5, "superseded", 0)]

    def test_record_graph(self) -> None:
        collector = HistoryCollector()
        collector.record_graph(11, max_depth=1, current_seq=5, mirrored=True)
        (event,) = collector.log.query(event_type=GraphRendered)
        assert event.mirrored is True
        assert event.current_seq == 5

    def test_record_prebuilt_event(self) -> None:
        collector = HistoryCollector()
        event = _built()
        collector.record(event)
        assert collector.log.recent() == [event]

    def test_shared_log(self) -> None:
        log = EventLog()
        HistoryCollector(log).record_build(1, 0)
        HistoryCollector(log).record_build(2, 1)
        assert len(log) == 2
