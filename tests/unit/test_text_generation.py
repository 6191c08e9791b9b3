"""Unit tests for the text-generation adapter."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from workflow_studio.core.config import LLMConfig
from workflow_studio.llm.factory import LLMFactory
from workflow_studio.llm.openai_provider import OpenAIProvider
from workflow_studio.llm.provider import LLMProvider
from workflow_studio.llm.text_generation import (
    EMPTY_RESPONSE_TEXT,
    OFFLINE_DELAY_SECONDS,
    OFFLINE_MARKER,
    TextGenerator,
)


@pytest.mark.asyncio
async def test_offline_placeholder_waits_and_echoes_prompt() -> None:
    waited: list[float] = []

    async def record(seconds: float) -> None:
        waited.append(seconds)

    builder = Mock()
    generator = TextGenerator(LLMConfig(), sleep=record, provider_builder=builder)

    text = await generator.generate("Summarize the ticket", credential=None)

    assert text.startswith(OFFLINE_MARKER)
    assert '"Summarize the ticket"' in text
    assert waited == [OFFLINE_DELAY_SECONDS]
    builder.assert_not_called()


@pytest.mark.asyncio
async def test_credential_is_passed_to_provider() -> None:
    provider = Mock(spec=LLMProvider)
    provider.generate.return_value = "A story about a lighthouse."
    seen: list[LLMConfig] = []

    def build(config: LLMConfig) -> LLMProvider:
        seen.append(config)
        return provider

    generator = TextGenerator(LLMConfig(openai_model="gpt-test"), provider_builder=build)
    text = await generator.generate("Tell a story", credential="sk-test")

    assert text == "A story about a lighthouse."
    assert seen[0].openai_api_key == "sk-test"
    assert seen[0].openai_model == "gpt-test"
    provider.generate.assert_called_once_with("Tell a story")


@pytest.mark.asyncio
async def test_empty_response_is_replaced() -> None:
    provider = Mock(spec=LLMProvider)
    provider.generate.return_value = ""

    generator = TextGenerator(provider_builder=lambda _c: provider)
    assert await generator.generate("x", credential="sk-test") == EMPTY_RESPONSE_TEXT


@pytest.mark.asyncio
async def test_provider_failure_becomes_text() -> None:
    provider = Mock(spec=LLMProvider)
    provider.generate.side_effect = RuntimeError("quota exceeded")

    generator = TextGenerator(provider_builder=lambda _c: provider)
    text = await generator.generate("x", credential="sk-test")

    assert text == "Error generating content: quota exceeded"


def test_factory_requires_api_key() -> None:
    with pytest.raises(ValueError, match="API key"):
        LLMFactory.create(LLMConfig(openai_api_key=None))


def test_factory_builds_openai_provider() -> None:
    provider = LLMFactory.create(LLMConfig(openai_api_key="sk-test"))
    assert isinstance(provider, OpenAIProvider)
