"""Workflow Studio.

Runtime half of a visual workflow-authoring tool:
- an execution engine that simulates running a graph of typed steps
- snapshot-based undo/redo over graph edits
- a small REST API and CLI over both
"""

__version__ = "0.1.0"

from workflow_studio.core.config import StudioSettings

__all__ = ["__version__", "StudioSettings"]
