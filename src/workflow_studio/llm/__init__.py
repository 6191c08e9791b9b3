"""LLM package initialization."""

from workflow_studio.llm.factory import LLMFactory
from workflow_studio.llm.provider import LLMProvider
from workflow_studio.llm.text_generation import OFFLINE_MARKER, TextGenerator

__all__ = [
    "LLMFactory",
    "LLMProvider",
    "OFFLINE_MARKER",
    "TextGenerator",
]
