"""Snapshot-based undo/redo over graph edits.

Every topology-mutating editor action calls `take_snapshot()` *before* it
mutates. Execution-time updates (status/result) never snapshot, so a run's
state is not part of undo history.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from workflow_studio.graph.model import GraphModel
from workflow_studio.graph.models import Edge, Node

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]

    @staticmethod
    def capture(graph: GraphModel) -> HistorySnapshot:
        nodes, edges = graph.snapshot()
        return HistorySnapshot(nodes=tuple(nodes), edges=tuple(edges))


class HistoryManager:
    """Two LIFO stacks of snapshots; the oldest entry is evicted past `limit`."""

    def __init__(self, graph: GraphModel, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit <= 0:
            raise ValueError("History limit must be positive")
        self._graph = graph
        self._past: deque[HistorySnapshot] = deque(maxlen=limit)
        self._future: deque[HistorySnapshot] = deque(maxlen=limit)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def depth(self) -> tuple[int, int]:
        """(past, future) stack sizes."""

        return len(self._past), len(self._future)

    def take_snapshot(self) -> None:
        self._past.append(HistorySnapshot.capture(self._graph))
        self._future.clear()
        logger.debug("Snapshot taken", extra={"past": len(self._past)})

    def undo(self) -> bool:
        if not self._past:
            return False
        previous = self._past.pop()
        self._future.append(HistorySnapshot.capture(self._graph))
        self._graph.restore(previous.nodes, previous.edges)
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        following = self._future.pop()
        self._past.append(HistorySnapshot.capture(self._graph))
        self._graph.restore(following.nodes, following.edges)
        return True

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
