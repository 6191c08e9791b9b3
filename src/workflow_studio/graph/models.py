"""Interchange models for workflow graphs.

Field names on the wire follow the canvas format (camelCase, e.g.
`sourceHandle`); Python code uses snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeType(str, Enum):
    TRIGGER_MANUAL = "trigger_manual"
    TRIGGER_SCHEDULE = "trigger_schedule"
    TRIGGER_WEBHOOK = "trigger_webhook"
    ACTION_G_DOCS = "action_g_docs"
    ACTION_G_SHEETS = "action_g_sheets"
    ACTION_G_SHEETS_CREATE = "action_g_sheets_create"
    ACTION_G_CALENDAR_EVENT = "action_g_calendar_event"
    ACTION_G_FORMS_RESPONSE = "action_g_forms_response"
    ACTION_EMAIL = "action_email"
    ACTION_SLACK = "action_slack"
    ACTION_WHATSAPP = "action_whatsapp"
    ACTION_WHATSAPP_TEMPLATE = "action_whatsapp_template"
    ACTION_GITHUB_ISSUE = "action_github_issue"
    ACTION_GITHUB_ACTION = "action_github_action"
    ACTION_SCRAPE = "action_scrape"
    ACTION_HTTP_REQUEST = "action_http_request"
    LOGIC_IF = "logic_if"
    LOGIC_SWITCH = "logic_switch"
    LOGIC_DELAY = "logic_delay"
    LOGIC_ERROR_HANDLER = "logic_error_handler"
    MATH_ADD = "math_add"
    AI_GEMINI = "ai_gemini"
    UTILITY_TEXT_INPUT = "utility_text_input"
    UTILITY_FILE_UPLOAD = "utility_file_upload"
    TERMINATOR = "terminator"


class NodeStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str
    description: str | None = None
    status: NodeStatus = NodeStatus.IDLE
    config: dict[str, Any] = Field(default_factory=dict)
    result: str | None = None


class Node(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    position: Position = Field(default_factory=Position)
    data: NodeData


class Edge(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")

    @field_validator("source_handle", mode="before")
    @classmethod
    def _blank_handle_is_primary(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One line of the run console. Only `EventLog.append` creates these."""

    id: str
    timestamp: datetime
    node_id: str
    node_label: str
    message: str
    severity: Severity

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "nodeId": self.node_id,
            "nodeLabel": self.node_label,
            "message": self.message,
            "severity": self.severity.value,
        }


def dump_nodes(nodes: list[Node]) -> list[dict[str, Any]]:
    return [n.model_dump(mode="json", by_alias=True) for n in nodes]


def dump_edges(edges: list[Edge]) -> list[dict[str, Any]]:
    return [e.model_dump(mode="json", by_alias=True) for e in edges]
