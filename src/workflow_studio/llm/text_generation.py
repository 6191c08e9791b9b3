"""Text generation adapter used by AI nodes.

This is the one node action that talks to a real service. It never raises:
failures come back as text so the node still settles as a success.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from workflow_studio.core.config import LLMConfig
from workflow_studio.llm.factory import LLMFactory
from workflow_studio.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

OFFLINE_MARKER = "[SIMULATED AI RESPONSE]"
OFFLINE_DELAY_SECONDS = 1.0
EMPTY_RESPONSE_TEXT = "No response generated."

Sleep = Callable[[float], Awaitable[None]]
ProviderBuilder = Callable[[LLMConfig], LLMProvider]


def offline_placeholder(prompt: str) -> str:
    return (
        f"{OFFLINE_MARKER}\n\n"
        f'I have analyzed your request: "{prompt}".\n\n'
        "Since no API key was configured, this is a placeholder response showing where "
        "the generated content would appear.\n\n"
        "In a real run this would contain generated text, code, or structured data."
    )


class TextGenerator:
    """Generate text for a prompt, falling back to a placeholder when offline."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        delay_scale: float = 1.0,
        provider_builder: ProviderBuilder = LLMFactory.create,
    ) -> None:
        self._config = config or LLMConfig()
        self._sleep = sleep
        self._delay_scale = delay_scale
        self._build_provider = provider_builder

    async def generate(self, prompt: str, credential: str | None = None) -> str:
        if not credential:
            await self._sleep(OFFLINE_DELAY_SECONDS * self._delay_scale)
            return offline_placeholder(prompt)

        try:
            provider = self._build_provider(
                self._config.model_copy(update={"openai_api_key": credential})
            )
            text = await asyncio.to_thread(provider.generate, prompt)
        except Exception as e:
            logger.warning("Text generation failed", extra={"error": str(e)})
            return f"Error generating content: {e}"

        return text or EMPTY_RESPONSE_TEXT
