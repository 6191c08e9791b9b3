from __future__ import annotations

import json
from pathlib import Path

import pytest

from workflow_studio.graph.models import NodeStatus
from workflow_studio.graph.store import GraphStore, default_graph, parse_graph


def test_missing_file_loads_starter_graph(tmp_path: Path) -> None:
    store = GraphStore(tmp_path / "graph.json")

    nodes, edges = store.load()

    assert not store.exists()
    assert [n.data.label for n in nodes] == ["Manual Start", "Gemini AI", "Create Doc"]
    assert [(e.source, e.target) for e in edges] == [("1", "2"), ("2", "3")]


def test_save_then_load_keeps_results(tmp_path: Path) -> None:
    store = GraphStore(tmp_path / "nested" / "graph.json")
    nodes, edges = default_graph()
    nodes[2] = nodes[2].model_copy(
        update={
            "data": nodes[2].data.model_copy(
                update={"status": NodeStatus.SUCCESS, "result": "https://docs.google.com/x"}
            )
        }
    )

    store.save(nodes, edges)
    loaded_nodes, loaded_edges = store.load()

    assert loaded_nodes[2].data.status == NodeStatus.SUCCESS
    assert loaded_nodes[2].data.result == "https://docs.google.com/x"
    assert [e.id for e in loaded_edges] == ["e1-2", "e2-3"]


def test_saved_file_uses_camel_case_handles(tmp_path: Path) -> None:
    store = GraphStore(tmp_path / "graph.json")
    parsed = parse_graph(
        {
            "nodes": [
                {"id": "s", "type": "logic_switch", "data": {"label": "Switch"}},
                {"id": "t", "type": "action_email", "data": {"label": "Email"}},
            ],
            "edges": [{"id": "es-t", "source": "s", "target": "t", "sourceHandle": "case1"}],
        }
    )
    store.save(*parsed)

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["edges"][0]["sourceHandle"] == "case1"
    assert raw["nodes"][0]["position"] == {"x": 0.0, "y": 0.0}


def test_non_object_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "graph.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        GraphStore(path).load()


@pytest.mark.parametrize(
    "raw",
    [
        {"nodes": {}, "edges": []},
        {"nodes": [{"id": "a"}], "edges": []},
        {"nodes": [], "edges": [{"id": "e", "source": "a"}]},
    ],
)
def test_parse_graph_rejects_bad_payloads(raw) -> None:
    with pytest.raises(ValueError):
        parse_graph(raw)


@pytest.mark.parametrize(
    ("raw", "kind"),
    [
        (
            {
                "nodes": [
                    {"id": "a", "type": "action_slack", "data": {"label": "A"}},
                    {"id": "a", "type": "action_slack", "data": {"label": "A2"}},
                ],
                "edges": [],
            },
            "node",
        ),
        (
            {
                "nodes": [
                    {"id": "a", "type": "action_slack", "data": {"label": "A"}},
                    {"id": "b", "type": "action_slack", "data": {"label": "B"}},
                ],
                "edges": [
                    {"id": "e", "source": "a", "target": "b"},
                    {"id": "e", "source": "b", "target": "a"},
                ],
            },
            "edge",
        ),
    ],
)
def test_parse_graph_rejects_duplicate_ids(raw, kind: str) -> None:
    with pytest.raises(ValueError, match=f"Duplicate {kind} ids"):
        parse_graph(raw)


def test_graph_file_with_duplicate_node_ids_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "graph.json"
    node = {"id": "a", "type": "action_slack", "data": {"label": "A"}}
    path.write_text(json.dumps({"nodes": [node, node], "edges": []}), encoding="utf-8")

    with pytest.raises(ValueError, match="Duplicate node ids: a"):
        GraphStore(path).load()
