"""Event log — bounded, thread-safe store of session events.

Old events fall off the front of a ring buffer once ``max_events`` is
reached. Queries filter by event class, timestamp, and the history state an
event concerns (any of its ``seq``, ``before_seq``, ``after_seq`` or
``current_seq`` fields).

Thread Safety:
    Every access takes the log's ``threading.Lock``. The watcher thread and
    the main thread may record into one log concurrently. Queries copy the
    buffer under the lock and filter outside it.

"""

from collections import Counter, deque
from collections.abc import Iterable
from itertools import islice
from threading import Lock
from typing import Any

from undoviz.observability.events import HistoryEvent

_SEQ_FIELDS = ("seq", "before_seq", "after_seq", "current_seq")


class EventLog:
    """Ring buffer of ``HistoryEvent`` objects.

    Args:
        max_events: Capacity; the oldest events are dropped beyond it.

    """

    __slots__ = ("_buffer", "_guard", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._buffer: deque[HistoryEvent] = deque(maxlen=max_events)
        self._guard = Lock()

    def append(self, event: HistoryEvent) -> None:
        with self._guard:
            self._buffer.append(event)

    def extend(self, events: Iterable[HistoryEvent]) -> None:
        batch = list(events)
        with self._guard:
            self._buffer.extend(batch)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        seq: int | None = None,
        limit: int = 100,
    ) -> list[HistoryEvent]:
        """Matching events, most recent first.

        Args:
            event_type: Keep only instances of this event class.
            since_ns: Keep only events stamped at or after this time.
            seq: Keep only events about this history state.
            limit: Return at most this many events.

        """
        matches = (
            event
            for event in reversed(self._copy())
            if (event_type is None or isinstance(event, event_type))
            and event.timestamp_ns >= since_ns
            and (seq is None or _concerns(event, seq))
        )
        return list(islice(matches, max(limit, 0)))

    def recent(self, n: int = 20) -> list[HistoryEvent]:
        """The last *n* events, oldest first."""
        if n <= 0:
            return []
        return self._copy()[-n:]

    def clear(self) -> int:
        """Drop every event; returns how many were dropped."""
        with self._guard:
            dropped = len(self._buffer)
            self._buffer.clear()
        return dropped

    def __len__(self) -> int:
        with self._guard:
            return len(self._buffer)

    def stats(self) -> dict[str, Any]:
        """Event totals, overall and per event class."""
        events = self._copy()
        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": dict(Counter(type(event).__name__ for event in events)),
        }

    def _copy(self) -> list[HistoryEvent]:
        with self._guard:
            return list(self._buffer)


def _concerns(event: HistoryEvent, seq: int) -> bool:
    return any(getattr(event, name, None) == seq for name in _SEQ_FIELDS)
