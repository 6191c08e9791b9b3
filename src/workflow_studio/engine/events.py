from __future__ import annotations

from dataclasses import dataclass

from workflow_studio.graph.models import LogEntry, NodeStatus


@dataclass(frozen=True, slots=True)
class NodeStatusChanged:
    """A node moved to a new lifecycle status during a run."""

    node_id: str
    status: NodeStatus

    def to_json(self) -> dict[str, object]:
        return {"event": "status", "nodeId": self.node_id, "status": self.status.value}


@dataclass(frozen=True, slots=True)
class LogAppended:
    entry: LogEntry

    def to_json(self) -> dict[str, object]:
        return {"event": "log", **self.entry.to_json()}


ExecutionEvent = NodeStatusChanged | LogAppended
