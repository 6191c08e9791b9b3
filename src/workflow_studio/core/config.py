"""Configuration for workflow studio.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Configuration for the text-generation backend.

    An empty API key is valid: the text-generation node then returns an
    offline placeholder instead of calling the provider.
    """

    provider: Literal["openai"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Override for OpenAI-compatible endpoints",
    )

    model_config = SettingsConfigDict(
        env_prefix="STUDIO_LLM_",
        env_file=".env",
        extra="ignore",
    )


class EngineConfig(BaseSettings):
    """Configuration for the execution engine."""

    delay_scale: float = Field(
        default=1.0,
        ge=0.0,
        description="Multiplier applied to simulated handler delays (0 disables waiting)",
    )
    max_depth: int = Field(
        default=64,
        gt=0,
        description="Maximum traversal depth before a branch is halted",
    )
    visit_once: bool = Field(
        default=False,
        description="Execute each node at most once per run, even on converging paths",
    )
    history_limit: int = Field(
        default=100,
        gt=0,
        description="Maximum number of undo snapshots kept",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for switch/if randomness (None = nondeterministic)",
    )

    model_config = SettingsConfigDict(
        env_prefix="STUDIO_ENGINE_",
        env_file=".env",
        extra="ignore",
    )


class StudioSettings(BaseSettings):
    """Top-level settings.

    Environment variables:
    - LOG_LEVEL            (optional)
    - STUDIO_GRAPH_PATH    (optional)
    - STUDIO_CORS_ORIGINS  (optional)
    - STUDIO_LLM_*         (see LLMConfig)
    - STUDIO_ENGINE_*      (see EngineConfig)

    Notes:
        Tests can override the env file via `StudioSettings(_env_file=path)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    graph_path: Path = Field(
        default=Path("workflow/graph.json"),
        validation_alias="STUDIO_GRAPH_PATH",
        description="Path where the workflow graph is persisted",
    )

    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="STUDIO_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )
    engine: EngineConfig = Field(
        default_factory=EngineConfig,
        description="Engine configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        populate_by_name=True,
        env_file=".env",
        extra="ignore",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
