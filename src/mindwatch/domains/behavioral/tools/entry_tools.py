"""MCP tools for daily mood, sleep and activity entries.

Each tool validates and scores the entry with the rule-based normalizers,
runs keyword trigger detection, asks the text-analysis collaborator for
richer labels when one is configured, and persists the scored entry.

Invalid fields reject the single entry (code 400). A text-analysis outage
degrades to rule-based labels. A store that cannot accept the entry yields
a 503, since nothing would have been recorded.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from mindwatch.domains.behavioral.domain_logic.engine_config import EngineConfig
from mindwatch.domains.behavioral.domain_logic.errors import (
    CollaboratorUnavailableError,
    InvalidInputError,
)
from mindwatch.domains.behavioral.domain_logic.normalizers import (
    score_activity,
    score_mood,
    score_sleep,
)
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    ActivityEntry,
    DailyMetricEntry,
    Domain,
    DomainScore,
    MoodEntry,
    SleepEntry,
    TextAnalysis,
)
from mindwatch.domains.behavioral.domain_logic.trend_analyzer import analyze_trend
from mindwatch.domains.behavioral.domain_logic.trigger_detector import (
    TriggerDetector,
    merge_triggers,
)
from mindwatch.domains.behavioral.tools.common import (
    STORAGE_ERRORS,
    STORAGE_UNAVAILABLE,
    TEXT_ANALYSIS_UNAVAILABLE,
    error_response,
    invalid_input_response,
    parse_timestamp,
    stored_to_entry,
)

if TYPE_CHECKING:
    from mindwatch.core.storage.repository import BehavioralRepository
    from mindwatch.domains.behavioral.connectors import TextAnalyzer

logger = logging.getLogger(__name__)


def register_entry_tools(
    mcp: FastMCP,
    repository: BehavioralRepository,
    config: EngineConfig,
    detector: TriggerDetector,
    text_analyzer: TextAnalyzer | None = None,
) -> None:
    """Register the per-domain entry ingestion tools on the MCP server."""

    async def _analyze(
        call: Callable[[], Awaitable[TextAnalysis]],
        degraded: list[str],
    ) -> TextAnalysis:
        if text_analyzer is None:
            return TextAnalysis()
        try:
            return await call()
        except CollaboratorUnavailableError as e:
            logger.warning("Continuing with rule-based labels: %s", e)
            degraded.append(TEXT_ANALYSIS_UNAVAILABLE)
            return TextAnalysis()

    def _persist(
        entry: DailyMetricEntry,
        score: DomainScore,
        labels: list[str],
        analysis: TextAnalysis,
        degraded: list[str],
        **extra: Any,
    ) -> str:
        domain = entry.domain
        try:
            entry_id = repository.save_entry(
                domain,
                entry.timestamp,
                entry.to_payload(),
                score.sub_score,
                labels=labels,
                ai_risk_estimate=analysis.risk_estimate,
            )
        except STORAGE_ERRORS as e:
            logger.exception("Failed to persist %s entry", domain.value)
            return error_response(
                "collaborator_unavailable",
                f"Entry could not be stored: {e}",
                503,
                collaborator="record_store",
            )

        try:
            history = repository.get_score_history(domain, limit=config.history_window)
        except STORAGE_ERRORS:
            logger.exception(
                "Score history unavailable; reporting %s entry without a trend", domain.value
            )
            history = []
            if STORAGE_UNAVAILABLE not in degraded:
                degraded.append(STORAGE_UNAVAILABLE)

        trend = analyze_trend(
            [value for _, value in history],
            higher_is_better=False,
            threshold=config.trend_threshold,
        )
        result: dict[str, Any] = {
            "status": "saved",
            "entry_id": entry_id,
            "domain": domain.value,
            "timestamp": entry.timestamp.isoformat(),
            "sub_score": score.sub_score,
            "trend": trend.value,
            "history_points": len(history),
        }
        result.update(extra)
        if analysis.risk_estimate is not None:
            result["ai_risk_estimate"] = analysis.risk_estimate
        if degraded:
            result["degraded"] = degraded
        return json.dumps(result)

    @mcp.tool
    async def log_mood_entry(
        ctx: Context,
        mood_value: int,
        note: str = "",
        timestamp: str = "",
    ) -> str:
        """Record how you feel today on a 1-10 scale, with an optional note.

        Args:
            mood_value: Mood from 1 (very low) to 10 (excellent).
            note: Free-text note about the day. Scanned for emotional triggers.
            timestamp: When the mood was felt (ISO 8601). Defaults to now.
        """
        try:
            entry = MoodEntry(mood_value=mood_value, note=note, timestamp=parse_timestamp(timestamp))
            score = score_mood(entry)
        except InvalidInputError as e:
            return invalid_input_response(e)

        degraded: list[str] = []
        analysis = await _analyze(lambda: text_analyzer.analyze_mood(entry), degraded)
        triggers = merge_triggers(detector.detect(note), analysis.labels)
        logger.info("Mood entry scored: risk=%.1f, triggers=%d", score.sub_score, len(triggers))
        return _persist(entry, score, triggers, analysis, degraded, triggers=triggers)

    @mcp.tool
    async def log_sleep_entry(
        ctx: Context,
        bedtime: str,
        wake_time: str,
        quality_value: int,
        interruption_count: int = 0,
        timestamp: str = "",
    ) -> str:
        """Record last night's sleep.

        Args:
            bedtime: Time you went to bed, 24-hour 'HH:MM' (e.g., '23:30').
            wake_time: Time you woke up, 24-hour 'HH:MM' (e.g., '07:00').
            quality_value: Sleep quality from 1 (terrible) to 10 (excellent).
            interruption_count: Number of times you woke during the night.
            timestamp: Date of the night's sleep (ISO 8601). Defaults to now.
        """
        degraded: list[str] = []
        try:
            entry = SleepEntry(
                bedtime=bedtime,
                wake_time=wake_time,
                quality_value=quality_value,
                interruption_count=interruption_count,
                timestamp=parse_timestamp(timestamp),
            )
        except InvalidInputError as e:
            return invalid_input_response(e)

        # Bedtime regularity is judged against earlier nights only
        history: list[SleepEntry] = []
        try:
            stored = repository.get_entries(
                Domain.SLEEP, before=entry.timestamp, limit=config.history_window
            )
            history = [stored_to_entry(s) for s in stored]
        except STORAGE_ERRORS:
            logger.exception("Sleep history unavailable; skipping irregularity check")
            degraded.append(STORAGE_UNAVAILABLE)

        try:
            score = score_sleep(entry, history)
        except InvalidInputError as e:
            return invalid_input_response(e)

        analysis = await _analyze(lambda: text_analyzer.analyze_sleep(entry, history), degraded)
        risk_factors = merge_triggers(score.details["risk_factors"], analysis.labels)
        logger.info("Sleep entry scored: risk=%.1f, factors=%s", score.sub_score, risk_factors)
        return _persist(
            entry,
            score,
            risk_factors,
            analysis,
            degraded,
            duration_hours=score.details["duration_hours"],
            risk_factors=risk_factors,
        )

    @mcp.tool
    async def log_activity_entry(
        ctx: Context,
        steps: int,
        screen_time_hours: float,
        social_interaction_count: int,
        exercise_minutes: int,
        outdoor_time_hours: float = 0.0,
        timestamp: str = "",
    ) -> str:
        """Record today's physical and social activity.

        Args:
            steps: Step count for the day.
            screen_time_hours: Hours of recreational screen time.
            social_interaction_count: Meaningful conversations or meetups.
            exercise_minutes: Minutes of deliberate exercise.
            outdoor_time_hours: Hours spent outdoors.
            timestamp: Day of the activity (ISO 8601). Defaults to now.
        """
        try:
            entry = ActivityEntry(
                steps=steps,
                screen_time_hours=screen_time_hours,
                social_interaction_count=social_interaction_count,
                exercise_minutes=exercise_minutes,
                outdoor_time_hours=outdoor_time_hours,
                timestamp=parse_timestamp(timestamp),
            )
            score = score_activity(entry)
        except InvalidInputError as e:
            return invalid_input_response(e)

        degraded: list[str] = []
        analysis = await _analyze(lambda: text_analyzer.analyze_activity(entry), degraded)
        alerts = list(analysis.labels)
        logger.info(
            "Activity entry scored: level=%.1f (%s), risk=%.1f",
            score.details["activity_level"],
            score.details["activity_band"],
            score.sub_score,
        )
        return _persist(
            entry,
            score,
            alerts,
            analysis,
            degraded,
            activity_level=score.details["activity_level"],
            activity_band=score.details["activity_band"],
            alerts=alerts,
        )
