"""Workflow execution engine.

A run walks the graph depth-first from every start node, one node at a time:

- statuses are reset to idle, then each visited node goes running -> success|error
- fan-out is sequential; a target's whole subtree finishes before its sibling starts
- a failed node halts only its own branch
- converging paths re-execute shared descendants unless `visit_once` is set

Traversal works on a copy of the topology taken when the run starts. Edits made
while a run is in flight are not observed by that run; status/result writes go
to the live graph by id and are dropped for nodes deleted meanwhile.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from workflow_studio.engine.branching import BranchResolver
from workflow_studio.engine.event_log import EventLog
from workflow_studio.engine.events import ExecutionEvent, LogAppended, NodeStatusChanged
from workflow_studio.engine.handlers import NodeHandlerRegistry
from workflow_studio.graph.model import GraphModel
from workflow_studio.graph.models import LogEntry, Node, NodeStatus, Severity

logger = logging.getLogger(__name__)

SYSTEM_NODE_ID = "system"
SYSTEM_NODE_LABEL = "System"

START_MESSAGE = "Starting workflow execution."
FINISH_MESSAGE = "Workflow execution finished."
DEFAULT_MAX_DEPTH = 64

EventListener = Callable[[ExecutionEvent], None]


@dataclass
class RunState:
    """Guards against overlapping runs."""

    is_running: bool = False


class ExecutionEngine:
    def __init__(
        self,
        graph: GraphModel,
        registry: NodeHandlerRegistry,
        *,
        log: EventLog | None = None,
        resolver: BranchResolver | None = None,
        state: RunState | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        visit_once: bool = False,
    ) -> None:
        self._graph = graph
        self._registry = registry
        self._log = log or EventLog()
        self._resolver = resolver or BranchResolver()
        self._state = state or RunState()
        self._max_depth = max_depth
        self._visit_once = visit_once
        self._listeners: list[EventListener] = []
        self._log.add_listener(self._on_log_entry)

    @property
    def graph(self) -> GraphModel:
        return self._graph

    @property
    def log(self) -> EventLog:
        return self._log

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Receive status and log events; returns an unsubscribe function."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def run(self) -> bool:
        """Execute the graph once.

        Returns:
            False if a run was already in progress (nothing happened), else True.
        """
        if self._state.is_running:
            logger.debug("Run requested while another run is in progress; ignored")
            return False

        self._state.is_running = True
        try:
            self._log.clear()
            for node in self._graph.reset_statuses():
                self._emit(NodeStatusChanged(node.id, NodeStatus.IDLE))
            self._system_log(START_MESSAGE, Severity.INFO)

            topology = GraphModel(*self._graph.snapshot())
            logger.info(
                "Workflow run started",
                extra={"nodes": len(topology), "edges": len(topology.edges)},
            )

            visited: set[str] = set()
            for node in self._start_nodes(topology):
                await self._process_node(node, topology, depth=0, visited=visited)
        finally:
            self._state.is_running = False

        self._system_log(FINISH_MESSAGE, Severity.SUCCESS)
        logger.info("Workflow run finished", extra={"log_entries": len(self._log)})
        return True

    async def stream(self) -> AsyncIterator[ExecutionEvent]:
        """Run the graph, yielding status and log events as they happen.

        Yields nothing if a run is already in progress.
        """
        if self._state.is_running:
            return

        done = object()
        queue: asyncio.Queue[object] = asyncio.Queue()
        unsubscribe = self.subscribe(queue.put_nowait)
        task = asyncio.create_task(self.run())
        task.add_done_callback(lambda _t: queue.put_nowait(done))
        try:
            while True:
                item = await queue.get()
                if item is done:
                    break
                yield item  # type: ignore[misc]
        finally:
            unsubscribe()
            await task

    # -- traversal -------------------------------------------------------

    def _start_nodes(self, topology: GraphModel) -> list[Node]:
        targets = topology.incoming_targets()
        nodes = topology.nodes
        starts = [n for n in nodes if n.id not in targets]
        if starts or not nodes:
            return starts

        if topology.has_cycle():
            cause = "the graph contains a cycle"
        else:
            cause = "every node has an incoming edge from a missing node"
        self._system_log(
            f"No start node found ({cause}). Starting from the first node.",
            Severity.WARNING,
        )
        return [nodes[0]]

    async def _process_node(
        self, node: Node, topology: GraphModel, *, depth: int, visited: set[str]
    ) -> None:
        label = node.data.label
        if depth >= self._max_depth:
            self._set_status(node.id, NodeStatus.ERROR)
            self._log.append(
                node.id,
                label,
                f"Maximum traversal depth ({self._max_depth}) reached; branch halted.",
                Severity.ERROR,
            )
            return
        if self._visit_once:
            if node.id in visited:
                logger.debug("Node already executed in this run", extra={"node_id": node.id})
                return
            visited.add(node.id)

        self._set_status(node.id, NodeStatus.RUNNING)
        handler = self._registry.get(node.type)
        try:
            result = await handler.execute(dict(node.data.config))
        except Exception as e:
            logger.warning(
                "Node failed",
                extra={"node_id": node.id, "node_type": node.type, "error": str(e)},
            )
            self._set_status(node.id, NodeStatus.ERROR)
            self._log.append(node.id, label, f"Error: {e}", Severity.ERROR)
            return

        for line in result.logs:
            self._log.append(node.id, label, line.message, line.severity)
        self._graph.update_node_data(node.id, status=NodeStatus.SUCCESS, result=result.output)
        self._emit(NodeStatusChanged(node.id, NodeStatus.SUCCESS))

        selected = self._resolver.select(
            node.type, result.output, topology.outgoing_edges(node.id), node.data.config
        )
        for edge in selected:
            target = topology.get_node(edge.target)
            if target is None:
                logger.debug("Edge target missing; skipped", extra={"edge_id": edge.id})
                continue
            await self._process_node(target, topology, depth=depth + 1, visited=visited)

    # -- helpers ---------------------------------------------------------

    def _set_status(self, node_id: str, status: NodeStatus) -> None:
        self._graph.set_node_status(node_id, status)
        self._emit(NodeStatusChanged(node_id, status))

    def _system_log(self, message: str, severity: Severity) -> LogEntry:
        return self._log.append(SYSTEM_NODE_ID, SYSTEM_NODE_LABEL, message, severity)

    def _on_log_entry(self, entry: LogEntry) -> None:
        self._emit(LogAppended(entry))

    def _emit(self, event: ExecutionEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
