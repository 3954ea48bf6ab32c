"""MCP tools for risk assessment, interventions and trends.

``assess_risk`` reads each domain's recent sub-scores from the record store,
aggregates the latest one per domain into a wellness score and risk tier,
selects interventions for that tier, and persists the assessment. Every
collaborator on that path is optional: with no stored history, no text
analysis and a failing store it still returns a rule-based assessment.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from mindwatch.domains.behavioral.domain_logic.engine_config import EngineConfig
from mindwatch.domains.behavioral.domain_logic.errors import CollaboratorUnavailableError
from mindwatch.domains.behavioral.domain_logic.interventions import (
    emergency_resources_for,
    find_strategy,
    select_interventions,
)
from mindwatch.domains.behavioral.domain_logic.risk_aggregator import aggregate
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    DOMAINS,
    AIAssessment,
    Domain,
    RiskTier,
)
from mindwatch.domains.behavioral.domain_logic.trend_analyzer import TrendAnalyzer, analyze_trend
from mindwatch.domains.behavioral.tools.common import (
    STORAGE_ERRORS,
    STORAGE_UNAVAILABLE,
    TEXT_ANALYSIS_UNAVAILABLE,
    error_response,
    stored_to_entry,
)

if TYPE_CHECKING:
    from mindwatch.core.storage.repository import BehavioralRepository
    from mindwatch.domains.behavioral.connectors import TextAnalyzer

logger = logging.getLogger(__name__)


def register_assessment_tools(
    mcp: FastMCP,
    repository: BehavioralRepository,
    config: EngineConfig,
    trend_analyzer: TrendAnalyzer,
    text_analyzer: TextAnalyzer | None = None,
) -> None:
    """Register assessment, intervention and trend tools on the MCP server."""

    async def _ai_assessment(degraded: list[str]) -> AIAssessment | None:
        if text_analyzer is None:
            return None
        try:
            entries = {
                d: [stored_to_entry(s) for s in repository.get_entries(d, limit=config.history_window)]
                for d in DOMAINS
            }
        except STORAGE_ERRORS:
            logger.exception("Could not load entries for text analysis")
            return None
        if not any(entries.values()):
            return None
        try:
            return await text_analyzer.assess(
                entries[Domain.MOOD], entries[Domain.SLEEP], entries[Domain.ACTIVITY]
            )
        except CollaboratorUnavailableError as e:
            logger.warning("Assessing without text analysis: %s", e)
            degraded.append(TEXT_ANALYSIS_UNAVAILABLE)
            return None

    @mcp.tool
    async def assess_risk(ctx: Context, use_text_analysis: bool = True) -> str:
        """Compute your current wellness score, risk tier and suggested interventions.

        Uses the most recent entry in each domain (mood, sleep, activity).
        Domains without entries count as a neutral midpoint.

        Args:
            use_text_analysis: Blend in the text-analysis assessment when available.
        """
        degraded: list[str] = []
        latest: dict[Domain, float | None] = {d: None for d in DOMAINS}
        trends: dict[str, str] = {}
        previous_tier: RiskTier | None = None

        try:
            for domain in DOMAINS:
                history = repository.get_score_history(domain, limit=config.history_window)
                values = [value for _, value in history]
                latest[domain] = values[0] if values else None
                trends[domain.value] = analyze_trend(
                    values, higher_is_better=False, threshold=config.trend_threshold
                ).value
            previous = repository.get_latest_assessment()
            if previous is not None:
                previous_tier = RiskTier(previous.risk_tier)
        except STORAGE_ERRORS:
            logger.exception("Record store unavailable; assessing without history")
            degraded.append(STORAGE_UNAVAILABLE)

        ai = await _ai_assessment(degraded) if use_text_analysis else None

        assessment = aggregate(
            latest[Domain.MOOD],
            latest[Domain.SLEEP],
            latest[Domain.ACTIVITY],
            thresholds=config.thresholds,
            ai_assessment=ai,
            ai_blend_weight=config.ai_blend_weight,
            previous_tier=previous_tier,
            computed_at=datetime.now(timezone.utc),
        )
        strategies = select_interventions(assessment.risk_tier)
        resources = emergency_resources_for(strategies)

        result: dict[str, Any] = {"status": "ok", **assessment.to_dict()}
        result["assessment_id"] = None
        if STORAGE_UNAVAILABLE not in degraded:
            try:
                result["assessment_id"] = repository.save_assessment(assessment.to_dict())
            except STORAGE_ERRORS:
                logger.exception("Failed to persist risk assessment")
                degraded.append(STORAGE_UNAVAILABLE)

        result["missing_domains"] = [d.value for d in DOMAINS if latest[d] is None]
        result["trends"] = trends
        result["interventions"] = [s.to_dict() for s in strategies]
        result["emergency_resources"] = [asdict(r) for r in resources]
        if previous_tier is not None:
            result["previous_tier"] = previous_tier.value
        if degraded:
            result["degraded"] = degraded

        logger.info(
            "Risk assessed: tier=%s, wellness=%.1f, ai_assisted=%s",
            assessment.risk_tier.value,
            assessment.overall_wellness,
            assessment.ai_assisted,
        )
        return json.dumps(result)

    @mcp.tool
    async def get_interventions(ctx: Context, risk_tier: str) -> str:
        """List the intervention strategies for a risk tier.

        Args:
            risk_tier: One of 'low', 'medium', 'high'.
        """
        try:
            strategies = select_interventions(risk_tier.strip().lower())
        except ValueError:
            return error_response(
                "invalid_input",
                f"Unknown risk tier {risk_tier!r}. Valid: {[t.value for t in RiskTier]}",
                field="risk_tier",
            )
        return json.dumps({
            "status": "ok",
            "risk_tier": risk_tier.strip().lower(),
            "interventions": [s.to_dict() for s in strategies],
            "emergency_resources": [asdict(r) for r in emergency_resources_for(strategies)],
        })

    @mcp.tool
    async def record_intervention_used(ctx: Context, title: str) -> str:
        """Log that you used one of the suggested interventions.

        Args:
            title: Title of the intervention (e.g., 'Mindfulness Check-in').
        """
        found = find_strategy(title)
        if found is None:
            return error_response("invalid_input", f"Unknown intervention {title!r}", field="title")
        tier, strategy = found
        try:
            use_id = repository.record_intervention_use(strategy.title, risk_tier=tier.value)
        except STORAGE_ERRORS as e:
            logger.exception("Failed to record intervention use")
            return error_response(
                "collaborator_unavailable",
                f"Intervention use could not be stored: {e}",
                503,
                collaborator="record_store",
            )
        return json.dumps({
            "status": "saved",
            "id": use_id,
            "title": strategy.title,
            "risk_tier": tier.value,
        })

    @mcp.tool
    async def list_interventions_used(ctx: Context, days: int = 1) -> str:
        """Show interventions you logged recently.

        Args:
            days: How many days back to look (default 1, i.e. today).
        """
        if days < 1:
            return error_response("invalid_input", "days must be at least 1", field="days")
        since = _days_ago(days)
        uses = repository.get_intervention_uses(since=since)
        return json.dumps({
            "status": "ok",
            "since": since,
            "count": len(uses),
            "uses": [asdict(u) for u in uses],
        })

    @mcp.tool
    async def domain_trends(ctx: Context, domain: str = "") -> str:
        """Show the risk trend and statistics for one or all domains.

        ``direction`` describes wellbeing: a falling risk reads as 'improving'.

        Args:
            domain: 'mood', 'sleep' or 'activity'. Empty for all three.
        """
        window = config.history_window
        if not domain:
            return json.dumps({"status": "ok", "trends": trend_analyzer.compute_all_trends(limit=window)})
        try:
            target = Domain(domain.strip().lower())
        except ValueError:
            return error_response("invalid_input", f"Unknown domain {domain!r}", field="domain")
        trend = trend_analyzer.compute_domain_trend(target, limit=window)
        trend["summary"] = trend_analyzer.compute_domain_summary(target, limit=window)
        return json.dumps({"status": "ok", "trends": {target.value: trend}})

    @mcp.tool
    async def list_assessments(ctx: Context, limit: int = 7) -> str:
        """Show your most recent risk assessments, newest first.

        Args:
            limit: Maximum number of assessments to return (1-100).
        """
        limit = max(1, min(limit, 100))
        assessments = repository.get_assessments(limit=limit)
        return json.dumps({
            "status": "ok",
            "count": len(assessments),
            "assessments": [a.to_dict() for a in assessments],
        })


def _days_ago(days: int) -> str:
    start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return (start - timedelta(days=days - 1)).isoformat()
