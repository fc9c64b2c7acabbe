"""History file watcher — turns edits of a recorded history into staleness signals.

A recorded history document stands in for an editor. When the document (or
the config file next to it) changes on disk, the watcher yields a
``HistoryChange`` so the caller can reload the host, mark the session stale,
and re-render.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from watchfiles import Change, watch

from undoviz.config_loader import CONFIG_NAMES


@dataclass(frozen=True, slots=True)
class HistoryChange:
    """A change to a watched file.

    Attributes:
        path: Absolute path of the changed file.
        kind: Type of filesystem change.
        category: ``history`` for the document, ``config`` for undoviz config.

    """

    path: Path
    kind: Literal["created", "modified", "deleted"]
    category: Literal["history", "config"]


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def categorize_change(path: Path, history_path: Path) -> Literal["history", "config"] | None:
    """Classify a changed path relative to the watched history document.

    Returns None for files undoviz does not care about.

    """
    history_path = history_path.resolve()
    path = path.resolve()
    if path == history_path:
        return "history"
    if path.parent == history_path.parent and path.name in CONFIG_NAMES:
        return "config"
    return None


class HistoryWatcher:
    """Watches a history document and its config for changes.

    Uses watchfiles on the document's directory and filters the raw events
    down to the files that affect rendering.

    Args:
        history_path: The recorded history document.
        debounce_ms: Quiet period watchfiles waits before reporting a batch.

    """

    def __init__(self, history_path: Path, *, debounce_ms: int = 300) -> None:
        self._path = history_path.resolve()
        self._debounce_ms = debounce_ms
        self._stop_event = threading.Event()

    @property
    def path(self) -> Path:
        return self._path

    def stop(self) -> None:
        """Make a running :meth:`changes` loop return."""
        self._stop_event.set()

    def changes(self) -> Iterator[list[HistoryChange]]:
        """Yield batches of relevant changes until :meth:`stop` is called."""
        self._stop_event.clear()
        for raw_changes in watch(
            self._path.parent,
            stop_event=self._stop_event,
            debounce=self._debounce_ms,
            step=100,
        ):
            batch: list[HistoryChange] = []
            for change_type, path_str in raw_changes:
                path = Path(path_str)
                category = categorize_change(path, self._path)
                if category is None:
                    continue
                kind = _CHANGE_KIND_MAP.get(change_type, "modified")
                batch.append(HistoryChange(path=path, kind=kind, category=category))
            if batch:
                yield batch
