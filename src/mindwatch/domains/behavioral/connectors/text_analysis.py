"""LLM-backed text analysis for mood notes, sleep and activity records.

Each call is bounded by a timeout. Provider failures and timeouts raise
``CollaboratorUnavailableError`` so the calling tool can fall back to the
rule-based result; unparseable answers are logged and treated as empty.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Sequence

from mindwatch.core.llm.provider import LLMProvider
from mindwatch.core.llm.response import (
    MalformedResponseError,
    clean_labels,
    coerce_score,
    extract_json_array,
    extract_json_object,
)
from mindwatch.core.llm.system_prompt import (
    ACTIVITY_ALERT_INSTRUCTIONS,
    ASSESSMENT_INSTRUCTIONS,
    MOOD_TRIGGER_INSTRUCTIONS,
    SLEEP_RISK_INSTRUCTIONS,
    build_full_system_prompt,
)
from mindwatch.domains.behavioral.domain_logic.errors import CollaboratorUnavailableError
from mindwatch.domains.behavioral.domain_logic.normalizers import sleep_duration_hours
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    ActivityEntry,
    AIAssessment,
    MoodEntry,
    RiskTier,
    SleepEntry,
    TextAnalysis,
)

logger = logging.getLogger(__name__)

COLLABORATOR = "text_analysis"

# Entries per domain included in the aggregate assessment prompt
ASSESSMENT_SAMPLE = 3


class TextAnalysisClient:
    """Runs behavioral analysis prompts through an LLM provider."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        timeout_s: float = 15.0,
        provider_name: str = "",
    ) -> None:
        self.provider = provider
        self.timeout_s = timeout_s
        self._provider_name = provider_name or type(provider).__name__

    @property
    def provider_name(self) -> str:
        return self._provider_name

    # ------------------------------------------------------------------
    # Domain calls
    # ------------------------------------------------------------------

    async def analyze_mood(self, entry: MoodEntry) -> TextAnalysis:
        """Return trigger labels for a mood note. Empty notes skip the call."""
        if not entry.note.strip():
            return TextAnalysis()
        content = await self._generate(
            MOOD_TRIGGER_INSTRUCTIONS,
            f"Mood: {entry.mood_value}/10\nNote: {entry.note}",
            task="mood",
        )
        try:
            labels = clean_labels(extract_json_array(content))
        except MalformedResponseError as e:
            logger.warning("Discarding mood analysis: %s", e)
            return TextAnalysis()
        return TextAnalysis(labels=tuple(labels))

    async def analyze_sleep(
        self, entry: SleepEntry, history: Sequence[SleepEntry] = ()
    ) -> TextAnalysis:
        """Return sleep risk-factor labels."""
        duration = sleep_duration_hours(entry.bedtime, entry.wake_time)
        lines = [
            "Sleep data:",
            f"- Bedtime: {entry.bedtime}",
            f"- Wake time: {entry.wake_time}",
            f"- Duration: {duration:.2f} hours",
            f"- Quality: {entry.quality_value}/10",
            f"- Interruptions: {entry.interruption_count}",
        ]
        if history:
            recent = ", ".join(h.bedtime for h in history[:7])
            lines.append(f"- Recent bedtimes: {recent}")
        content = await self._generate(SLEEP_RISK_INSTRUCTIONS, "\n".join(lines), task="sleep")
        try:
            labels = clean_labels(extract_json_array(content))
        except MalformedResponseError as e:
            logger.warning("Discarding sleep analysis: %s", e)
            return TextAnalysis()
        return TextAnalysis(labels=tuple(labels))

    async def analyze_activity(self, entry: ActivityEntry) -> TextAnalysis:
        """Return behavioral alerts and a clamped 0-100 risk estimate."""
        message = (
            "Activity data:\n"
            f"- Steps: {entry.steps}\n"
            f"- Screen time: {entry.screen_time_hours} hours\n"
            f"- Social interactions: {entry.social_interaction_count}\n"
            f"- Exercise: {entry.exercise_minutes} minutes\n"
            f"- Outdoor time: {entry.outdoor_time_hours} hours"
        )
        content = await self._generate(ACTIVITY_ALERT_INSTRUCTIONS, message, task="activity")
        try:
            parsed = extract_json_object(content)
        except MalformedResponseError as e:
            logger.warning("Discarding activity analysis: %s", e)
            return TextAnalysis()
        return TextAnalysis(
            labels=tuple(clean_labels(parsed.get("alerts"))),
            risk_estimate=coerce_score(parsed.get("riskScore")),
        )

    async def assess(
        self,
        mood: Sequence[MoodEntry],
        sleep: Sequence[SleepEntry],
        activity: Sequence[ActivityEntry],
    ) -> AIAssessment:
        """Return the aggregate assessment. Missing or garbled fields are ``None``."""
        message = (
            "Recent data (newest first):\n\n"
            f"Mood entries: {_dump(mood)}\n\n"
            f"Sleep entries: {_dump(sleep)}\n\n"
            f"Activity entries: {_dump(activity)}"
        )
        content = await self._generate(ASSESSMENT_INSTRUCTIONS, message, task="assessment")
        try:
            parsed = extract_json_object(content)
        except MalformedResponseError as e:
            logger.warning("Discarding aggregate assessment: %s", e)
            return AIAssessment()
        return parse_assessment(parsed)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _generate(self, instructions: str, user_message: str, *, task: str) -> str:
        try:
            response = await asyncio.wait_for(
                self.provider.generate(
                    system_message=build_full_system_prompt(instructions),
                    user_message=user_message,
                    max_tokens=512,
                    temperature=0.2,
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Text analysis (%s) timed out after %.1fs", task, self.timeout_s)
            raise CollaboratorUnavailableError(COLLABORATOR, f"timed out after {self.timeout_s}s") from e
        except Exception as e:
            logger.exception("Text analysis (%s) failed", task)
            raise CollaboratorUnavailableError(COLLABORATOR, str(e)) from e

        logger.info(
            "Text analysis call: task=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            task,
            response.model,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )
        return response.content


def parse_assessment(parsed: dict[str, Any]) -> AIAssessment:
    """Validate a decoded assessment object into an ``AIAssessment``."""
    risk_level = None
    raw_level = parsed.get("riskLevel")
    if isinstance(raw_level, str):
        try:
            risk_level = RiskTier(raw_level.strip().lower())
        except ValueError:
            logger.warning("Ignoring unknown riskLevel %r", raw_level)

    insights = parsed.get("insights")
    if not isinstance(insights, str) or not insights.strip():
        insights = None

    return AIAssessment(
        insights=insights.strip() if insights else None,
        risk_level=risk_level,
        overall_wellness=coerce_score(parsed.get("overallWellness")),
        mood_risk=coerce_score(parsed.get("moodRisk")),
        sleep_risk=coerce_score(parsed.get("sleepRisk")),
        activity_risk=coerce_score(parsed.get("activityRisk")),
    )


def _dump(entries: Sequence[Any]) -> str:
    rows = []
    for entry in list(entries)[:ASSESSMENT_SAMPLE]:
        row = entry.to_payload()
        row["timestamp"] = entry.timestamp.isoformat()
        rows.append(row)
    return json.dumps(rows)
