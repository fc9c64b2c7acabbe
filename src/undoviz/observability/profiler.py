"""Render profiler — how long each stage of a graph render took.

A graph render runs four stages: ``build`` (tree rebuild, zero when the
tree was fresh), ``layout``, ``annotate`` (row rendering plus inline change
counts) and ``format``. Each finished render becomes one ``RenderProfile``
event in the ``EventLog``.

Thread Safety:
    A profiler belongs to one session and is used from one thread.
    Aggregate queries go through the ``EventLog`` lock.

"""

from __future__ import annotations

import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from undoviz.observability.events import RenderProfile, now_ns

if TYPE_CHECKING:
    from undoviz.observability.log import EventLog

STAGES = ("build", "layout", "annotate", "format")


class RenderProfiler:
    """Stage timings for one graph render at a time.

    Usage::

        profiler = RenderProfiler(event_log)

        profiler.begin()
        with profiler.stage("layout"):
            ...
        profiler.finish(node_count=42)

    Timings of a stage entered several times within one render add up.
    Unknown stage names are timed but not reported.

    """

    __slots__ = ("_elapsed_ms", "_log", "_started", "_verbose")

    def __init__(self, log: EventLog, *, verbose: bool = False) -> None:
        self._log = log
        self._verbose = verbose
        self._started: float | None = None
        self._elapsed_ms: dict[str, float] = dict.fromkeys(STAGES, 0.0)

    def begin(self) -> None:
        """Reset all stages and start the render clock."""
        self._started = time.perf_counter()
        self._elapsed_ms = dict.fromkeys(STAGES, 0.0)

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        t0 = time.perf_counter()
        try:
            yield
        finally:
            spent = (time.perf_counter() - t0) * 1000
            self._elapsed_ms[name] = self._elapsed_ms.get(name, 0.0) + spent

    def elapsed_ms(self, name: str) -> float:
        return self._elapsed_ms.get(name, 0.0)

    def finish(self, *, node_count: int = 0) -> RenderProfile:
        """Close the render, log its ``RenderProfile`` and return it."""
        if self._started is None:
            total_ms = 0.0
        else:
            total_ms = (time.perf_counter() - self._started) * 1000
        self._started = None

        profile = RenderProfile(
            node_count=node_count,
            build_ms=self._elapsed_ms["build"],
            layout_ms=self._elapsed_ms["layout"],
            annotate_ms=self._elapsed_ms["annotate"],
            format_ms=self._elapsed_ms["format"],
            total_ms=total_ms,
            timestamp_ns=now_ns(),
        )
        self._log.append(profile)
        if self._verbose:
            print(_summary(profile), file=sys.stderr)
        return profile


def _summary(p: RenderProfile) -> str:
    noun = "state" if p.node_count == 1 else "states"
    stages = ", ".join(f"{name}: {getattr(p, f'{name}_ms'):.0f}ms" for name in STAGES)
    return f"  [{p.total_ms:.0f}ms] rendered {p.node_count} {noun} ({stages})"


def _nearest_rank(ordered: list[float], pct: int) -> float:
    index = min(len(ordered) * pct // 100, len(ordered) - 1)
    return round(ordered[index], 1)


def compute_aggregate_stats(log: EventLog, *, limit: int = 100) -> dict:
    """Render latency over the last *limit* profiles.

    Returns ``{"count": 0}`` when nothing was rendered yet, otherwise the
    count, total-time percentiles (p50/p95/p99, min, max) and the mean time
    of every stage.

    """
    profiles = log.query(event_type=RenderProfile, limit=limit)
    if not profiles:
        return {"count": 0}

    totals = sorted(p.total_ms for p in profiles)
    summary = {f"p{pct}": _nearest_rank(totals, pct) for pct in (50, 95, 99)}
    summary["min"] = round(totals[0], 1)
    summary["max"] = round(totals[-1], 1)
    return {
        "count": len(profiles),
        "total_ms": summary,
        "avg_by_stage_ms": {
            name: round(sum(getattr(p, f"{name}_ms") for p in profiles) / len(profiles), 1)
            for name in STAGES
        },
    }
