from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from workflow_studio.core.config import StudioSettings
from workflow_studio.engine.handlers import HandlerResult
from workflow_studio.llm.text_generation import OFFLINE_MARKER
from workflow_studio.server.app import create_app
from workflow_studio.studio import Studio


@pytest.fixture
def client(studio_settings: StudioSettings) -> TestClient:
    return TestClient(create_app(studio_settings))


def test_health(client: TestClient) -> None:
    health = client.get("/api/health").json()

    assert health["status"] == "ok"
    assert health["running"] is False
    assert "version" in health


def test_starter_graph_is_served(client: TestClient) -> None:
    graph = client.get("/api/graph").json()

    assert [n["id"] for n in graph["nodes"]] == ["1", "2", "3"]
    assert graph["edges"][0] == {
        "id": "e1-2",
        "source": "1",
        "target": "2",
        "sourceHandle": None,
    }


def test_run_returns_log_and_statuses(client: TestClient) -> None:
    body = client.post("/api/run").json()

    assert body["started"] is True
    assert body["log"][0]["message"] == "Starting workflow execution."
    assert body["log"][-1]["nodeId"] == "system"
    assert body["log"][-1]["severity"] == "success"
    assert {n["data"]["status"] for n in body["nodes"]} == {"success"}
    gemini = next(n for n in body["nodes"] if n["id"] == "2")
    assert OFFLINE_MARKER in gemini["data"]["result"]

    assert client.get("/api/log").json() == body["log"]
    client.delete("/api/log")
    assert client.get("/api/log").json() == []


def test_run_stream_is_ndjson(client: TestClient) -> None:
    response = client.get("/api/run/stream")

    assert response.headers["content-type"].startswith("application/x-ndjson")
    events = [json.loads(line) for line in response.text.splitlines() if line]
    kinds = {e["event"] for e in events}
    assert kinds == {"status", "log"}
    assert events[-1]["event"] == "log"
    assert events[-1]["message"] == "Workflow execution finished."


def test_edit_then_undo_redo(client: TestClient) -> None:
    assert client.get("/api/history").json() == {"canUndo": False, "canRedo": False}

    node = client.post(
        "/api/graph/nodes",
        json={"type": "math_add", "label": "Add", "position": {"x": 5, "y": 5}},
    ).json()["node"]
    edge = client.post(
        "/api/graph/edges", json={"source": "3", "target": node["id"], "sourceHandle": ""}
    ).json()["edge"]
    assert edge["sourceHandle"] is None
    assert len(client.get("/api/graph").json()["nodes"]) == 4

    client.post("/api/history/undo")
    status = client.post("/api/history/undo").json()
    assert status == {"canUndo": False, "canRedo": True}
    assert len(client.get("/api/graph").json()["nodes"]) == 3

    client.post("/api/history/redo")
    assert len(client.get("/api/graph").json()["nodes"]) == 4


def test_invalid_drop_returns_null_node(client: TestClient) -> None:
    assert client.post("/api/graph/nodes", json={"label": "no type"}).json() == {"node": None}
    assert client.get("/api/history").json()["canUndo"] is False


def test_move_and_config_unknown_node_is_404(client: TestClient) -> None:
    assert client.patch("/api/graph/nodes/zzz/position", json={"x": 1, "y": 2}).status_code == 404
    assert client.patch("/api/graph/nodes/zzz/config", json={"config": {}}).status_code == 404

    assert client.patch("/api/graph/nodes/1/position", json={"x": 1, "y": 2}).json() == {
        "moved": True
    }
    node = next(n for n in client.get("/api/graph").json()["nodes"] if n["id"] == "1")
    assert node["position"] == {"x": 1.0, "y": 2.0}


def test_delete_node_and_edge(client: TestClient) -> None:
    assert client.delete("/api/graph/edges/e2-3").json() == {"deleted": 1}
    assert client.delete("/api/graph/nodes/3").json() == {"deleted": 1}
    assert client.delete("/api/graph/nodes/3").json() == {"deleted": 0}

    graph = client.get("/api/graph").json()
    assert [e["id"] for e in graph["edges"]] == ["e1-2"]


def test_replace_graph_and_save(client: TestClient, studio_settings: StudioSettings) -> None:
    payload = {
        "nodes": [{"id": "only", "type": "math_add", "data": {"label": "Add"}}],
        "edges": [],
    }
    assert [n["id"] for n in client.put("/api/graph", json=payload).json()["nodes"]] == ["only"]

    bad = client.put("/api/graph", json={"nodes": [{"id": "x"}], "edges": []})
    assert bad.status_code == 422

    saved = client.post("/api/graph/save").json()
    assert saved["path"] == str(studio_settings.graph_path)
    stored = json.loads(studio_settings.graph_path.read_text(encoding="utf-8"))
    assert [n["id"] for n in stored["nodes"]] == ["only"]


def test_duplicate_node_ids_are_rejected(client: TestClient) -> None:
    node = {"id": "a", "type": "action_slack", "data": {"label": "A"}}
    response = client.put("/api/graph", json={"nodes": [node, node], "edges": []})

    assert response.status_code == 422
    assert "Duplicate node ids" in response.json()["detail"]
    assert [n["id"] for n in client.get("/api/graph").json()["nodes"]] == ["1", "2", "3"]
    assert client.get("/api/history").json()["canUndo"] is False


@pytest.mark.asyncio
async def test_edit_during_run_is_applied_and_run_finishes(
    studio_settings: StudioSettings,
) -> None:
    studio = Studio.from_settings(studio_settings)
    gate = asyncio.Event()

    class WaitForGate:
        async def execute(self, config: Mapping[str, Any]) -> HandlerResult:
            await gate.wait()
            return HandlerResult(output="started")

    studio.registry.register("trigger_manual", WaitForGate())
    app = create_app(studio=studio)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://studio.test") as client:
        run = asyncio.create_task(client.post("/api/run"))
        for _ in range(100):
            if studio.engine.is_running:
                break
            await asyncio.sleep(0.01)
        assert studio.engine.is_running

        deleted = await client.delete("/api/graph/nodes/2")
        moved = await client.patch("/api/graph/nodes/3/position", json={"x": 9, "y": 9})
        assert deleted.json() == {"deleted": 1}
        assert moved.json() == {"moved": True}

        gate.set()
        body = (await run).json()

    assert body["started"] is True
    assert body["log"][-1]["message"] == "Workflow execution finished."
    nodes = {n["id"]: n for n in body["nodes"]}
    assert set(nodes) == {"1", "3"}
    assert nodes["3"]["position"] == {"x": 9.0, "y": 9.0}
    assert nodes["3"]["data"]["status"] == "success"
    assert studio.engine.is_running is False


def test_clear_history(client: TestClient) -> None:
    client.delete("/api/graph/nodes/3")
    assert client.get("/api/history").json()["canUndo"] is True

    assert client.delete("/api/history").json() == {"canUndo": False, "canRedo": False}
    client.post("/api/history/undo")
    assert [n["id"] for n in client.get("/api/graph").json()["nodes"]] == ["1", "2"]
