"""LLM provider protocol — abstract interface for text-analysis calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class ProviderResponse:
    """Response from an LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for text-analysis LLM calls."""

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
) -> LLMProvider | None:
    """Create an LLM provider by name.

    Args:
        provider_name: "anthropic", "openai", "mock" or "none".
        api_key: API key for the provider.
        model: Model identifier override.

    Returns:
        An LLMProvider, or ``None`` when text analysis is disabled.
    """
    if provider_name == "none":
        return None
    if provider_name == "anthropic":
        from mindwatch.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model or "claude-sonnet-4-5-20250929")
    if provider_name == "openai":
        from mindwatch.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or "gpt-4o")
    if provider_name == "mock":
        from mindwatch.core.llm.providers.mock import MockProvider

        return MockProvider()
    raise ValueError(f"Unknown LLM provider: {provider_name}")
