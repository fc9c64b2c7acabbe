"""Tests for undoviz.watcher — history document change detection."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from watchfiles import Change

from undoviz.watcher import HistoryChange, HistoryWatcher, categorize_change


class TestHistoryChange:
    """Verify HistoryChange is frozen and well-behaved."""

    def test_frozen(self) -> None:
        change = HistoryChange(path=Path("/tmp/h.json"), kind="modified", category="history")
        with pytest.raises(AttributeError):
            change.kind = "created"  # type: ignore[misc]

    def test_equality(self) -> None:
        a = HistoryChange(path=Path("/h.json"), kind="modified", category="history")
        b = HistoryChange(path=Path("/h.json"), kind="modified", category="history")
        assert a == b


class TestCategorizeChange:
    """Unit tests for categorize_change()."""

    def test_history_document(self, tmp_path: Path) -> None:
        history = tmp_path / "history.json"
        assert categorize_change(history, history) == "history"

    @pytest.mark.parametrize("name", ["undoviz.yaml", "undoviz.yml", "undoviz.toml"])
    def test_config_next_to_document(self, tmp_path: Path, name: str) -> None:
        assert categorize_change(tmp_path / name, tmp_path / "history.json") == "config"

    def test_config_elsewhere_ignored(self, tmp_path: Path) -> None:
        other = tmp_path / "nested" / "undoviz.yaml"
        assert categorize_change(other, tmp_path / "history.json") is None

    def test_unrelated_file_ignored(self, tmp_path: Path) -> None:
        assert categorize_change(tmp_path / "notes.txt", tmp_path / "history.json") is None


class TestHistoryWatcher:
    """HistoryWatcher.changes with watchfiles patched out."""

    def test_filters_and_maps_changes(self, tmp_path: Path) -> None:
        history = tmp_path / "history.json"
        raw = [
            {(Change.modified, str(tmp_path / "notes.txt"))},
            {
                (Change.modified, str(history)),
                (Change.added, str(tmp_path / "undoviz.yaml")),
                (Change.deleted, str(tmp_path / "scratch.tmp")),
            },
        ]
        watcher = HistoryWatcher(history, debounce_ms=50)
        with patch("undoviz.watcher.watch", return_value=iter(raw)) as mock_watch:
            batches = list(watcher.changes())

        assert len(batches) == 1
        assert sorted((c.path.name, c.kind, c.category) for c in batches[0]) == [
            ("history.json", "modified", "history"),
            ("undoviz.yaml", "created", "config"),
        ]
        args, kwargs = mock_watch.call_args
        assert args == (tmp_path.resolve(),)
        assert kwargs["debounce"] == 50

    def test_stop(self, tmp_path: Path) -> None:
        watcher = HistoryWatcher(tmp_path / "history.json")
        with patch("undoviz.watcher.watch", return_value=iter([])) as mock_watch:
            list(watcher.changes())
        stop_event = mock_watch.call_args.kwargs["stop_event"]
        assert not stop_event.is_set()
        watcher.stop()
        assert stop_event.is_set()

    def test_path_is_resolved(self, tmp_path: Path) -> None:
        assert HistoryWatcher(tmp_path / "a" / ".." / "h.json").path == (tmp_path / "h.json").resolve()
