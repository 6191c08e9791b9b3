from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from workflow_studio.graph.models import (
    Edge,
    Node,
    NodeData,
    NodeType,
    Position,
    dump_edges,
    dump_nodes,
)

logger = logging.getLogger(__name__)


def default_graph() -> tuple[list[Node], list[Edge]]:
    """The starter canvas: Manual Start -> Gemini AI -> Create Doc."""

    nodes = [
        Node(
            id="1",
            type=NodeType.TRIGGER_MANUAL.value,
            position=Position(x=250, y=50),
            data=NodeData(label="Manual Start", description="Click run to start"),
        ),
        Node(
            id="2",
            type=NodeType.AI_GEMINI.value,
            position=Position(x=250, y=200),
            data=NodeData(label="Gemini AI", description="Generate a creative story idea"),
        ),
        Node(
            id="3",
            type=NodeType.ACTION_G_DOCS.value,
            position=Position(x=250, y=350),
            data=NodeData(label="Create Doc", description="Save idea to Docs"),
        ),
    ]
    edges = [
        Edge(id="e1-2", source="1", target="2"),
        Edge(id="e2-3", source="2", target="3"),
    ]
    return nodes, edges


class GraphStore:
    """Persist a graph as `{"nodes": [...], "edges": [...]}` JSON."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> tuple[list[Node], list[Edge]]:
        if not self._path.exists():
            logger.info("No saved graph found, using starter graph", extra={"path": str(self._path)})
            return default_graph()

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Graph file must contain a JSON object: {self._path}")
        return parse_graph(raw)

    def save(self, nodes: list[Node], edges: list[Edge]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"nodes": dump_nodes(nodes), "edges": dump_edges(edges)}
        self._path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )


def parse_graph(raw: dict[str, object]) -> tuple[list[Node], list[Edge]]:
    """Validate an interchange payload.

    Raises:
        ValueError: If the payload is not a list of nodes and a list of edges,
            or if a node or edge id appears more than once.
    """

    nodes_raw = raw.get("nodes", [])
    edges_raw = raw.get("edges", [])
    if not isinstance(nodes_raw, list) or not isinstance(edges_raw, list):
        raise ValueError("'nodes' and 'edges' must be lists")
    try:
        nodes = [Node.model_validate(item) for item in nodes_raw]
        edges = [Edge.model_validate(item) for item in edges_raw]
    except ValidationError as e:
        raise ValueError(f"Invalid graph payload: {e}") from e

    for kind, ids in (("node", [n.id for n in nodes]), ("edge", [e.id for e in edges])):
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate {kind} ids: {', '.join(duplicates)}")
    return nodes, edges
