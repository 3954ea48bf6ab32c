"""LLM provider implementations."""

from mindwatch.core.llm.providers.anthropic import AnthropicProvider
from mindwatch.core.llm.providers.mock import MockProvider
from mindwatch.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OpenAIProvider"]
