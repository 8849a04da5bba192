"""Provider adapters for capability execution."""

from lingo_bolt.server.llm.providers.base import LLMProvider, LLMRequest, LLMResponse, LLMUsage
from lingo_bolt.server.llm.providers.local import LocalLLMProvider
from lingo_bolt.server.llm.providers.openai import OpenAIProvider

__all__ = [
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "LLMUsage",
    "LocalLLMProvider",
    "OpenAIProvider",
]
