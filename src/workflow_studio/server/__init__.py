"""FastAPI server adapter for workflow studio.

Design intent:
- Keep graph, history and execution logic in `workflow_studio.*`
- Keep server-specific concerns (routing, CORS, streaming) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from workflow_studio.server.app import create_app
