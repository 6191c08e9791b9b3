"""Wiring for one workflow canvas: graph, history, log, engine and editor."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from workflow_studio.core.config import StudioSettings
from workflow_studio.editor import WorkflowEditor
from workflow_studio.engine.branching import BranchResolver
from workflow_studio.engine.engine import ExecutionEngine
from workflow_studio.engine.event_log import EventLog
from workflow_studio.engine.handlers import NodeHandlerRegistry, Pacer
from workflow_studio.graph.history import HistoryManager
from workflow_studio.graph.model import GraphModel
from workflow_studio.graph.store import GraphStore
from workflow_studio.llm.text_generation import TextGenerator

logger = logging.getLogger(__name__)


@dataclass
class Studio:
    settings: StudioSettings
    graph: GraphModel
    history: HistoryManager
    log: EventLog
    registry: NodeHandlerRegistry
    engine: ExecutionEngine
    editor: WorkflowEditor
    store: GraphStore

    @classmethod
    def from_settings(cls, settings: StudioSettings) -> Studio:
        engine_cfg = settings.engine
        rng = random.Random(engine_cfg.random_seed)
        pacer = Pacer(scale=engine_cfg.delay_scale)

        store = GraphStore(settings.graph_path)
        nodes, edges = store.load()
        graph = GraphModel(nodes, edges)
        history = HistoryManager(graph, limit=engine_cfg.history_limit)
        log = EventLog()

        registry = NodeHandlerRegistry.with_builtins(
            text_generator=TextGenerator(settings.llm, delay_scale=engine_cfg.delay_scale),
            pacer=pacer,
            rng=rng,
            default_credential=settings.llm.openai_api_key,
        )
        engine = ExecutionEngine(
            graph,
            registry,
            log=log,
            resolver=BranchResolver(rng),
            max_depth=engine_cfg.max_depth,
            visit_once=engine_cfg.visit_once,
        )
        editor = WorkflowEditor(graph, history, log=log)

        logger.info(
            "Studio initialized",
            extra={"graph_path": str(store.path), "nodes": len(graph)},
        )
        return cls(
            settings=settings,
            graph=graph,
            history=history,
            log=log,
            registry=registry,
            engine=engine,
            editor=editor,
            store=store,
        )

    def save(self) -> None:
        self.store.save(self.graph.nodes, self.graph.edges)
