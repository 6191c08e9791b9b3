"""FastAPI app factory.

Endpoints are thin wrappers over the editor, history and engine of one
`Studio`. The canvas UI is the expected client.

Every endpoint that touches the studio is `async def`, so graph edits and a
run's status writes all happen on the event loop thread and never interleave
inside a `GraphModel` call. Do not add sync (threadpool) endpoints here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from workflow_studio import __version__
from workflow_studio.core.config import StudioSettings
from workflow_studio.graph.models import dump_edges, dump_nodes
from workflow_studio.graph.store import parse_graph
from workflow_studio.server.models import (
    ConfigUpdateRequest,
    ConnectRequest,
    DropNodeRequest,
    GraphPayload,
    HistoryStatus,
    MoveNodeRequest,
    RunResponse,
)
from workflow_studio.studio import Studio

logger = logging.getLogger(__name__)


def create_app(settings: StudioSettings | None = None, *, studio: Studio | None = None) -> FastAPI:
    settings = settings or (studio.settings if studio is not None else StudioSettings())
    studio = studio or Studio.from_settings(settings)

    app = FastAPI(
        title="Workflow Studio",
        version=__version__,
        description="REST API over the workflow studio editor and execution engine.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.settings = settings
    app.state.studio = studio

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def graph_payload() -> dict[str, object]:
        return {"nodes": dump_nodes(studio.graph.nodes), "edges": dump_edges(studio.graph.edges)}

    def history_status() -> HistoryStatus:
        return HistoryStatus(can_undo=studio.history.can_undo, can_redo=studio.history.can_redo)

    @app.get("/api/health")
    async def health() -> dict[str, object]:
        return {"status": "ok", "version": __version__, "running": studio.engine.is_running}

    @app.get("/api/graph")
    async def get_graph() -> dict[str, object]:
        return graph_payload()

    @app.put("/api/graph")
    async def replace_graph(payload: GraphPayload) -> dict[str, object]:
        try:
            nodes, edges = parse_graph(payload.model_dump())
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        studio.editor.load(nodes, edges)
        return graph_payload()

    @app.post("/api/graph/save")
    async def save_graph() -> dict[str, str]:
        studio.save()
        return {"path": str(studio.store.path)}

    @app.post("/api/graph/nodes")
    async def drop_node(req: DropNodeRequest) -> dict[str, object]:
        node = studio.editor.drop_node(req.model_dump())
        return {"node": None if node is None else node.model_dump(mode="json", by_alias=True)}

    @app.delete("/api/graph/nodes/{node_id}")
    async def delete_node(node_id: str) -> dict[str, int]:
        return {"deleted": studio.editor.delete_nodes([node_id])}

    @app.patch("/api/graph/nodes/{node_id}/position")
    async def move_node(node_id: str, req: MoveNodeRequest) -> dict[str, bool]:
        if req.snapshot and not studio.editor.begin_drag(node_id):
            raise HTTPException(status_code=404, detail="Node not found")
        if not studio.editor.move_node(node_id, req.x, req.y):
            raise HTTPException(status_code=404, detail="Node not found")
        return {"moved": True}

    @app.patch("/api/graph/nodes/{node_id}/config")
    async def update_config(node_id: str, req: ConfigUpdateRequest) -> dict[str, bool]:
        if not studio.editor.update_config(node_id, req.config):
            raise HTTPException(status_code=404, detail="Node not found")
        return {"updated": True}

    @app.post("/api/graph/edges")
    async def connect(req: ConnectRequest) -> dict[str, object]:
        edge = studio.editor.connect(req.source, req.target, req.source_handle)
        return {"edge": None if edge is None else edge.model_dump(mode="json", by_alias=True)}

    @app.delete("/api/graph/edges/{edge_id}")
    async def delete_edge(edge_id: str) -> dict[str, int]:
        return {"deleted": studio.editor.delete_edges([edge_id])}

    @app.get("/api/history", response_model=HistoryStatus)
    async def get_history() -> HistoryStatus:
        return history_status()

    @app.delete("/api/history", response_model=HistoryStatus)
    async def clear_history() -> HistoryStatus:
        studio.history.clear()
        return history_status()

    @app.post("/api/history/undo", response_model=HistoryStatus)
    async def undo() -> HistoryStatus:
        studio.history.undo()
        return history_status()

    @app.post("/api/history/redo", response_model=HistoryStatus)
    async def redo() -> HistoryStatus:
        studio.history.redo()
        return history_status()

    @app.post("/api/run", response_model=RunResponse)
    async def run() -> RunResponse:
        started = await studio.engine.run()
        return RunResponse(
            started=started,
            log=[entry.to_json() for entry in studio.log.entries],
            nodes=dump_nodes(studio.graph.nodes),
        )

    @app.get("/api/run/stream")
    async def run_stream() -> StreamingResponse:
        async def lines() -> AsyncIterator[str]:
            async for event in studio.engine.stream():
                yield json.dumps(event.to_json(), ensure_ascii=False) + "\n"

        return StreamingResponse(lines(), media_type="application/x-ndjson")

    @app.get("/api/log")
    async def get_log() -> list[dict[str, object]]:
        return [entry.to_json() for entry in studio.log.entries]

    @app.delete("/api/log")
    async def clear_log() -> dict[str, int]:
        studio.log.clear()
        return {"entries": 0}

    return app
