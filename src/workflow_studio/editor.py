"""UI-facing graph edits.

Each topology-changing operation takes a history snapshot before it mutates
the graph. Malformed or premature requests (a drop without a node type, an
edit before a graph is attached) are ignored without touching the graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from workflow_studio.engine.event_log import EventLog
from workflow_studio.errors import InvalidDropPayload, MissingGraphContext
from workflow_studio.graph.history import HistoryManager
from workflow_studio.graph.model import GraphModel
from workflow_studio.graph.models import Edge, Node, NodeData, Position, Severity

logger = logging.getLogger(__name__)


class WorkflowEditor:
    def __init__(
        self,
        graph: GraphModel | None,
        history: HistoryManager | None,
        *,
        log: EventLog | None = None,
    ) -> None:
        self._graph = graph
        self._history = history
        self._log = log

    def attach(self, graph: GraphModel, history: HistoryManager) -> None:
        self._graph = graph
        self._history = history

    @property
    def graph(self) -> GraphModel:
        if self._graph is None:
            raise MissingGraphContext("No graph attached to the editor")
        return self._graph

    @property
    def history(self) -> HistoryManager:
        if self._history is None:
            raise MissingGraphContext("No history attached to the editor")
        return self._history

    def drop_node(self, payload: Mapping[str, Any]) -> Node | None:
        """Create a node from a palette drop `{type, label, position, config}`."""

        try:
            graph, history = self.graph, self.history
            node_type = str(payload.get("type") or "").strip()
            if not node_type:
                raise InvalidDropPayload("Drop payload has no node type")
            label = str(payload.get("label") or node_type)
            position = Position.model_validate(payload.get("position") or {})
            config = payload.get("config") or {}
            if not isinstance(config, Mapping):
                raise InvalidDropPayload("Drop payload config must be an object")
        except (InvalidDropPayload, MissingGraphContext, ValueError) as e:
            logger.debug("Drop ignored", extra={"reason": str(e)})
            return None

        node = Node(
            id=graph.new_node_id(),
            type=node_type,
            position=position,
            data=NodeData(label=label, config=dict(config)),
        )
        history.take_snapshot()
        graph.add_node(node)
        if self._log is not None:
            self._log.append(node.id, label, "Node added to canvas", Severity.INFO)
        return node

    def connect(self, source: str, target: str, source_handle: str | None = None) -> Edge | None:
        try:
            graph, history = self.graph, self.history
        except MissingGraphContext as e:
            logger.debug("Connect ignored", extra={"reason": str(e)})
            return None
        if graph.get_node(source) is None or graph.get_node(target) is None:
            logger.debug("Connect ignored: unknown endpoint", extra={"source": source, "target": target})
            return None

        edge = Edge(
            id=self._edge_id(graph, source, target, source_handle),
            source=source,
            target=target,
            source_handle=source_handle,
        )
        history.take_snapshot()
        graph.add_edge(edge)
        return edge

    def delete_nodes(self, node_ids: Iterable[str]) -> int:
        """Delete nodes and the edges attached to them. Returns nodes removed."""

        try:
            graph, history = self.graph, self.history
        except MissingGraphContext:
            return 0
        doomed = {node_id for node_id in node_ids if graph.get_node(node_id) is not None}
        if not doomed:
            return 0

        history.take_snapshot()
        for edge in graph.edges:
            if edge.source in doomed or edge.target in doomed:
                graph.remove_edge(edge.id)
        for node_id in doomed:
            graph.remove_node(node_id)
        return len(doomed)

    def delete_edges(self, edge_ids: Iterable[str]) -> int:
        try:
            graph, history = self.graph, self.history
        except MissingGraphContext:
            return 0
        doomed = [edge_id for edge_id in edge_ids if graph.get_edge(edge_id) is not None]
        if not doomed:
            return 0

        history.take_snapshot()
        for edge_id in doomed:
            graph.remove_edge(edge_id)
        return len(doomed)

    def begin_drag(self, node_id: str) -> bool:
        try:
            graph, history = self.graph, self.history
        except MissingGraphContext:
            return False
        if graph.get_node(node_id) is None:
            return False
        history.take_snapshot()
        return True

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Update a node position; call `begin_drag` first to make it undoable."""

        try:
            graph = self.graph
        except MissingGraphContext:
            return False
        if graph.get_node(node_id) is None:
            return False
        graph.update_node(node_id, position=Position(x=x, y=y))
        return True

    def update_config(self, node_id: str, config: Mapping[str, Any]) -> bool:
        try:
            graph, history = self.graph, self.history
        except MissingGraphContext:
            return False
        node = graph.get_node(node_id)
        if node is None:
            return False
        history.take_snapshot()
        graph.update_node_data(node_id, config={**node.data.config, **config})
        return True

    def load(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        try:
            graph, history = self.graph, self.history
        except MissingGraphContext:
            return
        history.take_snapshot()
        graph.restore(nodes, edges)

    @staticmethod
    def _edge_id(graph: GraphModel, source: str, target: str, handle: str | None) -> str:
        base = f"e{source}-{target}" + (f"-{handle}" if handle else "")
        candidate = base
        suffix = 1
        while graph.get_edge(candidate) is not None:
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate
