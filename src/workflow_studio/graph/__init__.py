"""Workflow graph data, persistence and edit history."""

from workflow_studio.graph.history import HistoryManager, HistorySnapshot
from workflow_studio.graph.model import GraphModel
from workflow_studio.graph.models import Edge, LogEntry, Node, NodeData, NodeStatus, NodeType, Severity

__all__ = [
    "Edge",
    "GraphModel",
    "HistoryManager",
    "HistorySnapshot",
    "LogEntry",
    "Node",
    "NodeData",
    "NodeStatus",
    "NodeType",
    "Severity",
]
