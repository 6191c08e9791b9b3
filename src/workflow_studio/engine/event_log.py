from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime

from workflow_studio.graph.ids import IdGenerator, UuidIdGenerator
from workflow_studio.graph.models import LogEntry, Severity

logger = logging.getLogger(__name__)

LogListener = Callable[[LogEntry], None]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class EventLog:
    """Append-only run console.

    Entries are ordered by append order; timestamps come from the same
    monotonic sequence of appends, so the two orders agree.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._entries: list[LogEntry] = []
        self._clock = clock
        self._new_id: IdGenerator = id_generator or UuidIdGenerator()
        self._listeners: list[LogListener] = []

    def append(
        self,
        node_id: str,
        node_label: str,
        message: str,
        severity: Severity = Severity.INFO,
    ) -> LogEntry:
        entry = LogEntry(
            id=self._new_id(),
            timestamp=self._clock(),
            node_id=node_id,
            node_label=node_label,
            message=message,
            severity=Severity(severity),
        )
        self._entries.append(entry)
        for listener in list(self._listeners):
            listener(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def add_listener(self, listener: LogListener) -> Callable[[], None]:
        """Call `listener` for every future entry; returns an unsubscribe function."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(tuple(self._entries))
