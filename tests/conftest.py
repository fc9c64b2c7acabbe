"""Shared test fixtures for undoviz."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from undoviz.history.entries import ChangeLogEntry, entries_from_mappings
from undoviz.host import RecordedHistory

BASE_TIME = 1_700_000_000

# Trunk 1 -> 2 -> 5, with a branch 3 -> 4 diverging after 2.
# State 2 was written to disk; the host sits at 5.
BRANCHING_DOCUMENT: dict[str, Any] = {
    "entries": [
        {"seq": 1, "time": BASE_TIME + 10},
        {
            "seq": 2,
            "time": BASE_TIME + 20,
            "save": 1,
            "alt": [
                {"seq": 3, "time": BASE_TIME + 30},
                {"seq": 4, "time": BASE_TIME + 40},
            ],
        },
        {"seq": 5, "time": BASE_TIME + 50},
    ],
    "seq_cur": 5,
    "snapshots": {
        "1": ["alpha"],
        "2": ["alpha", "beta"],
        "3": ["alpha", "gamma"],
        "4": ["alpha", "gamma", "delta"],
        "5": ["alpha", "beta", "epsilon"],
    },
}


@pytest.fixture
def branching_entries() -> list[ChangeLogEntry]:
    """Change log of the branching history."""
    return entries_from_mappings(BRANCHING_DOCUMENT["entries"])


@pytest.fixture
def branching_host() -> RecordedHistory:
    """Recorded host replaying the branching history."""
    return RecordedHistory.from_mapping(BRANCHING_DOCUMENT)


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    """The branching history written as a JSON document."""
    path = tmp_path / "history.json"
    path.write_text(json.dumps(BRANCHING_DOCUMENT))
    return path


def entry(seq: int, *alternates: ChangeLogEntry, **fields: Any) -> ChangeLogEntry:
    """Shorthand for building entries in tests."""
    return ChangeLogEntry(seq=seq, time=fields.pop("time", seq), alternates=alternates, **fields)


def parent_map(tree: Any) -> dict[int, int | None]:
    """seq -> parent seq for every node of a tree."""
    return {node.seq: node.parent.seq if node.parent else None for node in tree}
