"""In-memory workflow graph."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from workflow_studio.graph.ids import CounterIdGenerator, IdGenerator
from workflow_studio.graph.models import Edge, Node, NodeStatus

logger = logging.getLogger(__name__)


class GraphModel:
    """Owns the node/edge collection.

    Mutations return the updated collection. A mutation that names a missing
    id is a logged no-op, never an exception: the canvas may race deletes
    against in-flight updates.
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
        *,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self._nodes: list[Node] = list(nodes)
        self._edges: list[Edge] = list(edges)
        self._new_id: IdGenerator = id_generator or CounterIdGenerator()

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes)

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._nodes)

    def new_node_id(self) -> str:
        return self._new_id()

    # -- queries ---------------------------------------------------------

    def get_node(self, node_id: str) -> Node | None:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge
        return None

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        return [e for e in self._edges if e.source == node_id]

    def incoming_targets(self) -> set[str]:
        return {e.target for e in self._edges}

    def has_cycle(self) -> bool:
        """True if any cycle is reachable through edges between existing nodes."""

        known = {n.id for n in self._nodes}
        adjacency: dict[str, list[str]] = {node_id: [] for node_id in known}
        for edge in self._edges:
            if edge.source in known and edge.target in known:
                adjacency[edge.source].append(edge.target)

        # 0 = unvisited, 1 = on stack, 2 = done
        color = dict.fromkeys(adjacency, 0)
        for root in adjacency:
            if color[root]:
                continue
            stack: list[tuple[str, int]] = [(root, 0)]
            color[root] = 1
            while stack:
                current, idx = stack[-1]
                children = adjacency[current]
                if idx < len(children):
                    stack[-1] = (current, idx + 1)
                    child = children[idx]
                    if color[child] == 1:
                        return True
                    if color[child] == 0:
                        color[child] = 1
                        stack.append((child, 0))
                else:
                    color[current] = 2
                    stack.pop()
        return False

    # -- topology mutations ----------------------------------------------

    def add_node(self, node: Node) -> list[Node]:
        if self.get_node(node.id) is not None:
            logger.warning("Duplicate node id ignored", extra={"node_id": node.id})
            return self.nodes
        self._nodes.append(node)
        return self.nodes

    def add_edge(self, edge: Edge) -> list[Edge]:
        if self.get_edge(edge.id) is not None:
            logger.warning("Duplicate edge id ignored", extra={"edge_id": edge.id})
            return self.edges
        if self.get_node(edge.source) is None or self.get_node(edge.target) is None:
            logger.warning(
                "Edge endpoint missing; edge ignored",
                extra={"edge_id": edge.id, "source": edge.source, "target": edge.target},
            )
            return self.edges
        self._edges.append(edge)
        return self.edges

    def remove_node(self, node_id: str) -> list[Node]:
        remaining = [n for n in self._nodes if n.id != node_id]
        if len(remaining) == len(self._nodes):
            logger.warning("remove_node: unknown node", extra={"node_id": node_id})
        self._nodes = remaining
        return self.nodes

    def remove_edge(self, edge_id: str) -> list[Edge]:
        remaining = [e for e in self._edges if e.id != edge_id]
        if len(remaining) == len(self._edges):
            logger.warning("remove_edge: unknown edge", extra={"edge_id": edge_id})
        self._edges = remaining
        return self.edges

    # -- data mutations --------------------------------------------------

    def update_node(self, node_id: str, **fields: Any) -> list[Node]:
        """Replace top-level node fields (e.g. `position`)."""

        return self._replace(node_id, lambda n: n.model_copy(update=fields))

    def update_node_data(self, node_id: str, **fields: Any) -> list[Node]:
        return self._replace(
            node_id, lambda n: n.model_copy(update={"data": n.data.model_copy(update=fields)})
        )

    def set_node_status(self, node_id: str, status: NodeStatus) -> list[Node]:
        return self.update_node_data(node_id, status=status)

    def set_node_result(self, node_id: str, result: str | None) -> list[Node]:
        return self.update_node_data(node_id, result=result)

    def reset_statuses(self) -> list[Node]:
        self._nodes = [
            n.model_copy(update={"data": n.data.model_copy(update={"status": NodeStatus.IDLE})})
            for n in self._nodes
        ]
        return self.nodes

    # -- whole-graph access ----------------------------------------------

    def snapshot(self) -> tuple[list[Node], list[Edge]]:
        return (
            [n.model_copy(deep=True) for n in self._nodes],
            [e.model_copy(deep=True) for e in self._edges],
        )

    def restore(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        self._nodes = [n.model_copy(deep=True) for n in nodes]
        self._edges = [e.model_copy(deep=True) for e in edges]

    def _replace(self, node_id: str, fn: Callable[[Node], Node]) -> list[Node]:
        for idx, node in enumerate(self._nodes):
            if node.id == node_id:
                self._nodes[idx] = fn(node)
                return self.nodes
        logger.warning("Update for unknown node ignored", extra={"node_id": node_id})
        return self.nodes
