"""Host collaborator — where history, snapshots, and the live position come from.

The editor owning the buffer is abstracted as a :class:`HistoryHost`.
:class:`RecordedHistory` implements it from a history document, so the
graph and diffs can be produced without an editor (CLI, tests, fixtures).

History document shape (JSON or YAML)::

    entries:                  # the host's change log
      - {seq: 1, time: 1700000000}
      - {seq: 2, time: 1700000060, save: 1, alt: [{seq: 3, time: 1700000120}]}
    seq_cur: 2                # the live position
    snapshots:                # buffer lines per seq
      "1": ["hello"]
      "2": ["hello", "world"]

"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from undoviz._errors import HistoryError, SnapshotError
from undoviz.history.entries import ChangeLogEntry, entries_from_mappings, iter_entries


@runtime_checkable
class HistoryHost(Protocol):
    """What undoviz needs from the environment owning the buffer."""

    def change_log(self) -> Sequence[ChangeLogEntry]:
        """The current top-level change log."""
        ...

    def current_seq(self) -> int:
        """The host's live position in history."""
        ...

    def snapshot(self, seq: int) -> Sequence[str] | None:
        """Buffer lines at state *seq*, or None if it cannot be reproduced."""
        ...

    def jump_to(self, seq: int) -> None:
        """Move the buffer to state *seq*."""
        ...


class RecordedHistory:
    """An in-memory host replaying a recorded history document.

    Args:
        entries: The change log.
        snapshots: Buffer lines per seq. The root (seq 0) defaults to an
            empty buffer when not recorded.
        seq_cur: The live position.

    """

    __slots__ = ("_entries", "_known", "_seq_cur", "_snapshots")

    def __init__(
        self,
        entries: Sequence[ChangeLogEntry],
        snapshots: Mapping[int, Sequence[str]] | None = None,
        seq_cur: int = 0,
    ) -> None:
        self._entries = tuple(entries)
        self._snapshots = {0: (), **{int(k): tuple(v) for k, v in (snapshots or {}).items()}}
        self._known = {0} | {entry.seq for entry in iter_entries(self._entries)}
        if seq_cur not in self._known:
            msg = f"seq_cur {seq_cur} is not part of the recorded history"
            raise HistoryError(msg)
        self._seq_cur = seq_cur

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RecordedHistory:
        """Build from a parsed history document.

        Raises:
            HistoryError: The document is malformed.

        """
        if not isinstance(data, Mapping):
            msg = "history document must be a mapping"
            raise HistoryError(msg)
        entries = entries_from_mappings(data.get("entries", []))
        raw_snapshots = data.get("snapshots") or {}
        if not isinstance(raw_snapshots, Mapping):
            msg = "'snapshots' must map seq numbers to line lists"
            raise HistoryError(msg)
        snapshots: dict[int, list[str]] = {}
        for key, lines in raw_snapshots.items():
            try:
                seq = int(key)
            except (TypeError, ValueError) as exc:
                msg = f"snapshot key {key!r} is not a seq number"
                raise HistoryError(msg) from exc
            if isinstance(lines, str) or not isinstance(lines, Sequence):
                msg = f"snapshot {seq} must be a list of lines"
                raise HistoryError(msg)
            snapshots[seq] = [str(line) for line in lines]
        seq_cur = data.get("seq_cur", max((e.seq for e in entries), default=0))
        return cls(entries, snapshots, seq_cur=seq_cur)

    @classmethod
    def from_file(cls, path: Path) -> RecordedHistory:
        """Load a ``.json``, ``.yaml`` or ``.yml`` history document."""
        try:
            text = path.read_text()
        except OSError as exc:
            msg = f"cannot read {path}: {exc}"
            raise HistoryError(msg) from exc
        try:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(text) or {}
            else:
                data = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            msg = f"cannot parse {path.name}: {exc}"
            raise HistoryError(msg) from exc
        return cls.from_mapping(data)

    # ----- HistoryHost protocol -----

    def change_log(self) -> Sequence[ChangeLogEntry]:
        return self._entries

    def current_seq(self) -> int:
        return self._seq_cur

    def snapshot(self, seq: int) -> Sequence[str] | None:
        if seq not in self._known:
            msg = f"no state with seq {seq}"
            raise SnapshotError(msg)
        return self._snapshots.get(seq)

    def jump_to(self, seq: int) -> None:
        if seq not in self._known:
            msg = f"cannot jump to unknown state {seq}"
            raise HistoryError(msg)
        self._seq_cur = seq
