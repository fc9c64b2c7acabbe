"""Change-log entries — the host's description of its undo history.

The host reports history as an ordered list of entries (the trunk). An entry
may carry ``alternates``: further entries that diverged from that point,
which may themselves carry alternates to any depth.

Two key spellings are accepted when parsing raw host data:

=================  ====================
host-native key    descriptive key
=================  ====================
``seq``            ``seq``
``time``           ``time``
``save``           ``saved_marker``
``curhead``        ``is_branch_head``
``alt``            ``alternates``
=================  ====================
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from undoviz._errors import HistoryError


@dataclass(frozen=True, slots=True)
class ChangeLogEntry:
    """One historical state as reported by the host.

    Attributes:
        seq: Sequence number, unique within a log.
        time: Creation timestamp in seconds since the epoch.
        saved_marker: Write counter if the state was saved to disk.
        is_branch_head: True if the host flags this state as a branch tip.
        alternates: Entries that diverged from this point, in host order.

    """

    seq: int
    time: float = 0
    saved_marker: int | None = None
    is_branch_head: bool = False
    alternates: tuple[ChangeLogEntry, ...] = field(default=())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ChangeLogEntry:
        """Parse one raw host entry, including its nested alternates.

        Nested alternates are converted with an explicit stack, so arbitrarily
        deep histories never hit the recursion limit.

        Raises:
            HistoryError: An entry (at any depth) is not a mapping or lacks
                a non-negative integer ``seq``.

        """
        # Post-order over the nesting: alternates are built before their owner.
        # Each frame is (mapping, whether its alternates were already pushed).
        built: dict[int, ChangeLogEntry] = {}
        stack: list[tuple[Mapping[str, Any], bool]] = [(data, False)]
        while stack:
            raw, expanded = stack.pop()
            alternates = _raw_alternates(raw)
            if not expanded:
                stack.append((raw, True))
                stack.extend((alt, False) for alt in reversed(alternates))
                continue
            built[id(raw)] = cls(
                seq=_parse_seq(raw),
                time=_parse_time(raw),
                saved_marker=_first_present(raw, "saved_marker", "save"),
                is_branch_head=bool(_first_present(raw, "is_branch_head", "curhead")),
                alternates=tuple(built.pop(id(alt)) for alt in alternates),
            )
        return built[id(data)]

    def walk(self) -> Iterator[ChangeLogEntry]:
        """Yield this entry and every nested alternate in preorder."""
        stack: list[ChangeLogEntry] = [self]
        while stack:
            entry = stack.pop()
            yield entry
            stack.extend(reversed(entry.alternates))


def entries_from_mappings(raw_entries: Sequence[Mapping[str, Any]]) -> list[ChangeLogEntry]:
    """Parse the host's top-level entry list."""
    if isinstance(raw_entries, (str, bytes)) or not isinstance(raw_entries, Sequence):
        msg = f"entries must be a list, got {type(raw_entries).__name__}"
        raise HistoryError(msg)
    return [ChangeLogEntry.from_mapping(_require_mapping(raw)) for raw in raw_entries]


def iter_entries(entries: Sequence[ChangeLogEntry]) -> Iterator[ChangeLogEntry]:
    """Yield every entry of a log, trunk and alternates, in preorder."""
    for entry in entries:
        yield from entry.walk()


# ---------------------------------------------------------------------------
# Raw field helpers
# ---------------------------------------------------------------------------


def _require_mapping(raw: object) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        msg = f"history entry must be a mapping, got {type(raw).__name__}"
        raise HistoryError(msg)
    return raw


def _raw_alternates(raw: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    _require_mapping(raw)
    alternates = _first_present(raw, "alternates", "alt")
    if alternates is None:
        return []
    if isinstance(alternates, (str, bytes)) or not isinstance(alternates, Sequence):
        msg = f"alternates of entry {raw.get('seq')!r} must be a list"
        raise HistoryError(msg)
    return [_require_mapping(alt) for alt in alternates]


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _parse_seq(raw: Mapping[str, Any]) -> int:
    seq = raw.get("seq")
    if isinstance(seq, bool) or not isinstance(seq, int) or seq < 0:
        msg = f"history entry needs a non-negative integer 'seq', got {seq!r}"
        raise HistoryError(msg)
    return seq


def _parse_time(raw: Mapping[str, Any]) -> float:
    value = raw.get("time", 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"entry {raw['seq']} has a non-numeric time {value!r}"
        raise HistoryError(msg)
    return value
