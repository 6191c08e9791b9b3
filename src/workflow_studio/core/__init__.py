"""Core package initialization."""

from workflow_studio.core.config import EngineConfig, LLMConfig, StudioSettings

__all__ = [
    "EngineConfig",
    "LLMConfig",
    "StudioSettings",
]
