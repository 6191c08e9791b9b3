"""Pydantic models for the REST server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DropNodeRequest(BaseModel):
    type: str = ""
    label: str | None = None
    position: dict[str, float] = Field(default_factory=dict)
    config: dict[str, Any] = Field(default_factory=dict)


class ConnectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")


class MoveNodeRequest(BaseModel):
    x: float
    y: float
    snapshot: bool = True


class ConfigUpdateRequest(BaseModel):
    config: dict[str, Any]


class GraphPayload(BaseModel):
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    edges: list[dict[str, Any]] = Field(default_factory=list)


class HistoryStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    can_undo: bool = Field(serialization_alias="canUndo")
    can_redo: bool = Field(serialization_alias="canRedo")


class RunResponse(BaseModel):
    started: bool
    log: list[dict[str, Any]]
    nodes: list[dict[str, Any]]
