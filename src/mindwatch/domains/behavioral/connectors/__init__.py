"""Behavioral connectors — collaborators the tools call out to."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from mindwatch.domains.behavioral.domain_logic.risk_models import (
    ActivityEntry,
    AIAssessment,
    MoodEntry,
    SleepEntry,
    TextAnalysis,
)


@runtime_checkable
class TextAnalyzer(Protocol):
    """Abstract interface for free-text and pattern analysis.

    Implementations raise ``CollaboratorUnavailableError`` when the backing
    service cannot answer; malformed answers come back as empty results.
    """

    async def analyze_mood(self, entry: MoodEntry) -> TextAnalysis:
        """Trigger labels found in a mood note."""
        ...

    async def analyze_sleep(
        self, entry: SleepEntry, history: Sequence[SleepEntry] = ()
    ) -> TextAnalysis:
        """Sleep risk-factor labels."""
        ...

    async def analyze_activity(self, entry: ActivityEntry) -> TextAnalysis:
        """Behavioral alerts plus a 0-100 risk estimate."""
        ...

    async def assess(
        self,
        mood: Sequence[MoodEntry],
        sleep: Sequence[SleepEntry],
        activity: Sequence[ActivityEntry],
    ) -> AIAssessment:
        """Aggregate assessment across the three domains."""
        ...

    @property
    def provider_name(self) -> str:
        """Label for the backing model, e.g. 'anthropic' or 'mock'."""
        ...
