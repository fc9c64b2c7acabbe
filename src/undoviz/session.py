"""History session — the explicit context tying a host to its rendered tree.

A session owns everything that changes over the life of one visualized
buffer: the host, the current tree, the staleness flag, and the pending
preview. Several sessions can coexist; none of them touches module state.

Rebuild flow::

    host mutation -> mark_stale() -> next .tree access -> build_tree()
                                                        -> atomic swap

Readers holding the previous tree keep a complete, valid tree: a rebuild
never mutates it, it only replaces the session's reference.
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from undoviz._errors import UndovizError
from undoviz.config import UndovizConfig
from undoviz.diff.engine import DiffStats, count_changes
from undoviz.diff.preview import preview_diff
from undoviz.graph.layout import layout_tree
from undoviz.graph.render import (
    find_current_row,
    format_output,
    render_header,
    render_rows,
)
from undoviz.history.builder import build_tree
from undoviz.observability.collector import HistoryCollector
from undoviz.observability.log import EventLog
from undoviz.observability.profiler import RenderProfiler

if TYPE_CHECKING:
    from undoviz.history.node import Node
    from undoviz.history.tree import HistoryTree
    from undoviz.host import HistoryHost


class HistorySession:
    """Visualization state for one host buffer.

    Args:
        host: The environment supplying history and snapshots.
        config: Rendering and preview options.
        collector: Where events are recorded (a private log by default).
        label: Name shown in the graph header.

    """

    def __init__(
        self,
        host: HistoryHost,
        config: UndovizConfig | None = None,
        *,
        collector: HistoryCollector | None = None,
        label: str = "Undoviz",
    ) -> None:
        self._host = host
        self._config = config or UndovizConfig()
        self._collector = collector or HistoryCollector(EventLog(self._config.max_events))
        self._profiler = RenderProfiler(self._collector.log, verbose=self._config.verbose)
        self._label = label
        self._tree: HistoryTree | None = None
        self._stale = True
        self._debouncer = PreviewDebouncer(
            self._config.preview_delay,
            self.preview,
            collector=self._collector,
        )

    @property
    def config(self) -> UndovizConfig:
        return self._config

    @property
    def collector(self) -> HistoryCollector:
        return self._collector

    @property
    def debouncer(self) -> PreviewDebouncer:
        return self._debouncer

    @property
    def is_stale(self) -> bool:
        return self._stale

    # ------------------------------------------------------------------
    # Tree lifecycle
    # ------------------------------------------------------------------

    def mark_stale(self) -> None:
        """Host reported a mutation: rebuild on next access."""
        self._stale = True

    @property
    def tree(self) -> HistoryTree:
        """The current tree, rebuilt first if the host reported changes."""
        if self._stale or self._tree is None:
            self.rebuild()
        assert self._tree is not None
        return self._tree

    def rebuild(self) -> HistoryTree:
        """Build a fresh tree from the host's change log and swap it in."""
        t0 = time.perf_counter()
        tree = build_tree(self._host.change_log())
        build_ms = (time.perf_counter() - t0) * 1000
        self._tree = tree
        self._stale = False
        self._collector.record_build(len(tree), tree.max_seq, build_ms=build_ms)
        return tree

    def current_seq(self) -> int:
        return self._host.current_seq()

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def render_graph(self, *, include_header: bool | None = None) -> list[str]:
        """Render the header and graph as display lines."""
        profiler = self._profiler
        profiler.begin()

        with profiler.stage("build"):
            tree = self.tree

        current = self.current_seq()
        with profiler.stage("layout"):
            layout = layout_tree(tree, current)

        annotate = self._inline_change_count if self._config.inline_diff else None
        with profiler.stage("annotate"):
            rows = render_rows(layout, self._config.symbols, annotate)

        with profiler.stage("format"):
            output = format_output(rows, self._config.mirror_graph)
            show_header = self._config.header if include_header is None else include_header
            header = render_header(self._label, self._config.help) if show_header else []

        profiler.finish(node_count=len(tree))
        self._collector.record_graph(
            len(output),
            max_depth=layout.max_depth,
            current_seq=current,
            mirrored=self._config.mirror_graph,
        )
        return [*header, *output]

    def cursor_position(self) -> tuple[int, int] | None:
        """Row and column of the current glyph in :meth:`render_graph` output."""
        layout = layout_tree(self.tree, self.current_seq())
        rows = render_rows(layout, self._config.symbols)
        position = find_current_row(rows, self._config.symbols)
        if position is None:
            return None
        row, column = position
        if self._config.mirror_graph:
            width = max(len(r.graph) for r in rows)
            column = width - 1 - column
        header = render_header(self._label, self._config.help) if self._config.header else []
        return row + len(header), column

    def _inline_change_count(self, seq: int) -> int:
        node = self.tree[seq]
        return count_changes(
            preview_diff(node.parent, node, self._host.snapshot, context=self._config.context_lines)
        )

    # ------------------------------------------------------------------
    # Diffs
    # ------------------------------------------------------------------

    def preview(self, seq: int) -> list[str]:
        """Diff state *seq* against its parent (what that change did)."""
        node = self.tree.get(seq)
        return self._diff_nodes(node.parent if node else None, node)

    def diff_with_current(self, seq: int) -> list[str]:
        """Diff state *seq* against the host's live state."""
        tree = self.tree
        return self._diff_nodes(tree.get(seq), tree.get(self.current_seq()))

    def diff_states(self, before_seq: int, after_seq: int) -> list[str]:
        """Diff any two states by sequence number."""
        tree = self.tree
        return self._diff_nodes(tree.get(before_seq), tree.get(after_seq))

    def _diff_nodes(self, before: Node | None, after: Node | None) -> list[str]:
        t0 = time.perf_counter()
        lines = preview_diff(before, after, self._host.snapshot, context=self._config.context_lines)
        diff_ms = (time.perf_counter() - t0) * 1000
        if before is not None and after is not None and len(lines) > 1:
            added = sum(1 for line in lines[2:] if line.startswith("+"))
            removed = sum(1 for line in lines[2:] if line.startswith("-"))
            hunks = sum(1 for line in lines[2:] if line.startswith("@@"))
            self._collector.record_diff(
                before.seq,
                after.seq,
                DiffStats(added=added, removed=removed, hunks=hunks),
                diff_ms=diff_ms,
            )
        return lines

    def request_preview(self, seq: int) -> None:
        """Debounced :meth:`preview`; requires a running event loop."""
        if self._config.auto_preview:
            self._debouncer.request(seq)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def revert(self, seq: int) -> None:
        """Move the host to state *seq* and mark the tree stale."""
        self._host.jump_to(seq)
        self.mark_stale()

    def move(self, seq: int, steps: int) -> int:
        """Seq of the row *steps* below *seq* (negative moves up)."""
        if steps >= 0:
            return self.tree.older(seq, steps).seq
        return self.tree.newer(seq, -steps).seq

    def move_write(self, seq: int, steps: int) -> int:
        """Seq of the saved state *steps* writes away, staying put at the edge."""
        tree = self.tree
        for _ in range(abs(steps)):
            node = tree.older_write(seq) if steps > 0 else tree.newer_write(seq)
            if node is None:
                break
            seq = node.seq
        return seq


class PreviewDebouncer:
    """Run a preview only after requests have been quiet for *delay* seconds.

    A new request cancels the pending one instead of queueing behind it, so
    at most one preview computation is ever in flight. A render that raises
    ``UndovizError`` is reported on stderr and kept in ``last_error``.

    Args:
        delay: Quiescence delay in seconds.
        render: Computes the preview lines for a seq.
        on_result: Receives ``(seq, lines)`` when a preview completes.
        collector: Records rendered and superseded previews.

    """

    def __init__(
        self,
        delay: float,
        render: Callable[[int], list[str]],
        *,
        on_result: Callable[[int, list[str]], None] | None = None,
        collector: HistoryCollector | None = None,
    ) -> None:
        self._delay = delay
        self._render = render
        self._collector = collector
        self.on_result = on_result
        self._task: asyncio.Task[list[str]] | None = None
        self._pending_seq: int | None = None
        self.last_result: tuple[int, list[str]] | None = None
        self.last_error: tuple[int, UndovizError] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self, seq: int) -> asyncio.Task[list[str]]:
        """Schedule a preview of *seq*, superseding any pending request."""
        self.cancel()
        self._pending_seq = seq
        self._task = asyncio.get_running_loop().create_task(self._run(seq))
        return self._task

    def cancel(self) -> None:
        """Drop the pending request, if any."""
        if self.pending:
            assert self._task is not None
            self._task.cancel()
            if self._collector is not None and self._pending_seq is not None:
                self._collector.record_preview(self._pending_seq, superseded=True)
        self._task = None
        self._pending_seq = None

    async def flush(self) -> tuple[int, list[str]] | None:
        """Wait for the pending request and return its result."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self.last_result

    async def _run(self, seq: int) -> list[str]:
        await asyncio.sleep(self._delay)
        try:
            lines = self._render(seq)
        except UndovizError as exc:
            self.last_error = (seq, exc)
            print(f"  Preview error (state {seq}): {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_preview(seq, failed=True)
            return []
        self.last_result = (seq, lines)
        if self._collector is not None:
            self._collector.record_preview(seq, line_count=len(lines))
        if self.on_result is not None:
            self.on_result(seq, lines)
        return lines
