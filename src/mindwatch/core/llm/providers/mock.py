"""Mock LLM provider for testing and offline runs."""

from __future__ import annotations

import asyncio

from mindwatch.core.llm.provider import ProviderResponse


class MockProvider:
    """Returns canned content, optionally after a delay or by raising.

    ``responses`` are consumed in order; once exhausted the last one repeats.
    ``fail_with`` makes every call raise, ``delay_s`` makes every call sleep,
    which lets tests exercise the timeout and outage paths.
    """

    def __init__(
        self,
        response_content: str = "Mock LLM response.",
        *,
        responses: list[str] | None = None,
        fail_with: Exception | None = None,
        delay_s: float = 0.0,
    ) -> None:
        self.responses = list(responses) if responses else [response_content]
        self.fail_with = fail_with
        self.delay_s = delay_s
        self.last_system_message: str = ""
        self.last_user_message: str = ""
        self.call_count: int = 0

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> ProviderResponse:
        self.last_system_message = system_message
        self.last_user_message = user_message
        self.call_count += 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.fail_with is not None:
            raise self.fail_with

        content = self.responses[min(self.call_count, len(self.responses)) - 1]
        return ProviderResponse(
            content=content,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(content.split()),
            model="mock",
            latency_ms=0.0,
        )
