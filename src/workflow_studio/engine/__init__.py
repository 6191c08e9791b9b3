"""Workflow execution.

This package contains:
- the event log (run console)
- the node handler registry (per-type simulated actions)
- branch resolution for if/switch nodes
- the execution engine that walks the graph
"""

from workflow_studio.engine.branching import BranchResolver, IfBranch, LogicMode, SwitchBranch
from workflow_studio.engine.engine import ExecutionEngine, RunState
from workflow_studio.engine.event_log import EventLog
from workflow_studio.engine.events import ExecutionEvent, LogAppended, NodeStatusChanged
from workflow_studio.engine.handlers import (
    HandlerLog,
    HandlerResult,
    NodeHandler,
    NodeHandlerRegistry,
    Pacer,
)

__all__ = [
    "BranchResolver",
    "EventLog",
    "ExecutionEngine",
    "ExecutionEvent",
    "HandlerLog",
    "HandlerResult",
    "IfBranch",
    "LogAppended",
    "LogicMode",
    "NodeHandler",
    "NodeHandlerRegistry",
    "NodeStatusChanged",
    "Pacer",
    "RunState",
    "SwitchBranch",
]
