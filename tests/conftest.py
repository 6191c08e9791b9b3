"""Test configuration and fixtures."""

from __future__ import annotations

import random
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from workflow_studio.core.config import EngineConfig, LLMConfig, StudioSettings
from workflow_studio.engine.engine import ExecutionEngine
from workflow_studio.engine.handlers import NodeHandlerRegistry, Pacer
from workflow_studio.graph.model import GraphModel
from workflow_studio.graph.models import Edge, Node, NodeData
from workflow_studio.llm.text_generation import TextGenerator

NodeFactory = Callable[..., Node]
EdgeFactory = Callable[..., Edge]


async def _no_wait(_seconds: float) -> None:
    return None


@pytest.fixture
def make_node() -> NodeFactory:
    def _make(
        node_id: str,
        node_type: str = "custom_step",
        label: str | None = None,
        **config: Any,
    ) -> Node:
        return Node(id=node_id, type=node_type, data=NodeData(label=label or node_id, config=config))

    return _make


@pytest.fixture
def make_edge() -> EdgeFactory:
    def _make(source: str, target: str, handle: str | None = None) -> Edge:
        edge_id = f"e{source}-{target}" + (f"-{handle}" if handle else "")
        return Edge(id=edge_id, source=source, target=target, source_handle=handle)

    return _make


@pytest.fixture
def pacer() -> Pacer:
    """A pacer that never actually waits."""
    return Pacer(sleep=_no_wait, scale=0.0)


@pytest.fixture
def text_generator() -> TextGenerator:
    """An offline text generator (no credential configured)."""
    return TextGenerator(LLMConfig(openai_api_key=None), sleep=_no_wait)


@pytest.fixture
def registry(pacer: Pacer, text_generator: TextGenerator) -> NodeHandlerRegistry:
    return NodeHandlerRegistry.with_builtins(
        text_generator=text_generator,
        pacer=pacer,
        rng=random.Random(7),
    )


@pytest.fixture
def build_engine(registry: NodeHandlerRegistry) -> Callable[..., ExecutionEngine]:
    def _build(nodes: list[Node], edges: list[Edge], **kwargs: Any) -> ExecutionEngine:
        return ExecutionEngine(GraphModel(nodes, edges), registry, **kwargs)

    return _build


@pytest.fixture
def studio_settings(tmp_path: Path) -> StudioSettings:
    """Settings that keep state in a temp dir and never wait or call out."""
    return StudioSettings(
        log_level="DEBUG",
        graph_path=tmp_path / "workflow" / "graph.json",
        llm=LLMConfig(openai_api_key=None),
        engine=EngineConfig(delay_scale=0.0, random_seed=1),
    )
