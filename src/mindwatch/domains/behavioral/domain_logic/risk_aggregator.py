"""Risk aggregation: domain sub-scores -> overall wellness and risk tier.

The aggregator is pure. Identical inputs always produce an identical
``RiskAssessment``; persisting it is the caller's job.
"""

from __future__ import annotations

import math
from datetime import datetime

from mindwatch.domains.behavioral.domain_logic.engine_config import TierThresholds
from mindwatch.domains.behavioral.domain_logic.errors import InvalidInputError
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    DEFAULT_INSIGHTS,
    DOMAINS,
    NEUTRAL_DOMAIN_RISK,
    AIAssessment,
    Domain,
    RiskAssessment,
    RiskTier,
)


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def _resolve_risk(name: str, value: float | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInputError(name, value, "expected a finite number")
    return _clamp(float(value))


def classify_tier(
    overall_wellness: float,
    domain_risks: dict[str, float],
    thresholds: TierThresholds,
) -> RiskTier:
    """Tier from the average AND from the worst single domain.

    One acute domain is enough to escalate; two calm domains must not dilute
    it.
    """
    worst = max(domain_risks.values(), default=0.0)
    if overall_wellness < thresholds.high_wellness_below or worst >= thresholds.high_domain_at_or_above:
        return RiskTier.HIGH
    if overall_wellness < thresholds.medium_wellness_below or worst >= thresholds.medium_domain_at_or_above:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def apply_hysteresis(
    tier: RiskTier,
    previous_tier: RiskTier | None,
    overall_wellness: float,
    domain_risks: dict[str, float],
    thresholds: TierThresholds,
) -> RiskTier:
    """Hold a de-escalation back until it clears the thresholds by a margin.

    Escalations always apply immediately. With a zero margin (the default)
    the freshly classified tier is returned unchanged.
    """
    margin = thresholds.hysteresis_margin
    if previous_tier is None or margin <= 0 or tier.severity >= previous_tier.severity:
        return tier
    sticky = classify_tier(overall_wellness, domain_risks, thresholds.widened(margin))
    held = min(previous_tier.severity, sticky.severity)
    return RiskTier.from_severity(max(tier.severity, held))


def _rule_insights(tier: RiskTier, domain_risks: dict[str, float], missing: list[str]) -> str:
    worst_name, worst_value = max(domain_risks.items(), key=lambda kv: kv[1])
    parts: list[str] = []
    if tier is RiskTier.HIGH:
        parts.append(
            f"Elevated risk: {worst_name} is the most concerning area ({worst_value:.0f}/100). "
            "Please consider reaching out for support now."
        )
    elif tier is RiskTier.MEDIUM:
        parts.append(
            f"Some warning signs, mostly in {worst_name} ({worst_value:.0f}/100). "
            "A check-in with someone you trust could help."
        )
    else:
        parts.append(DEFAULT_INSIGHTS)
    if missing:
        parts.append(f"No recent data for: {', '.join(missing)}.")
    return " ".join(parts)


def aggregate(
    mood_risk: float | None = None,
    sleep_risk: float | None = None,
    activity_risk: float | None = None,
    *,
    thresholds: TierThresholds | None = None,
    ai_assessment: AIAssessment | None = None,
    ai_blend_weight: float = 0.0,
    previous_tier: RiskTier | None = None,
    computed_at: datetime | None = None,
) -> RiskAssessment:
    """Combine domain risks into an overall wellness score and risk tier.

    Args:
        mood_risk: Mood sub-score (0-100) or ``None`` if unknown.
        sleep_risk: Sleep sub-score (0-100) or ``None`` if unknown.
        activity_risk: Activity sub-score (0-100) or ``None`` if unknown.
        thresholds: Tier cut-offs; defaults to ``TierThresholds()``.
        ai_assessment: Optional validated collaborator assessment. Its domain
            risks are blended in with ``ai_blend_weight`` and its insights
            text replaces the rule-based one.
        ai_blend_weight: Weight in [0, 1] given to collaborator domain risks.
        previous_tier: Last persisted tier, used only when hysteresis is on.
        computed_at: Timestamp recorded on the assessment.

    Returns:
        A ``RiskAssessment``. Unknown domains count as a neutral 50.
    """
    thresholds = thresholds or TierThresholds()
    if not 0.0 <= ai_blend_weight <= 1.0:
        raise InvalidInputError("ai_blend_weight", ai_blend_weight, "must be within [0, 1]")

    raw = {
        Domain.MOOD: _resolve_risk("mood_risk", mood_risk),
        Domain.SLEEP: _resolve_risk("sleep_risk", sleep_risk),
        Domain.ACTIVITY: _resolve_risk("activity_risk", activity_risk),
    }

    ai_used = False
    domain_risks: dict[str, float] = {}
    missing: list[str] = []
    for domain in DOMAINS:
        value = raw[domain]
        ai_value = ai_assessment.domain_risk(domain) if ai_assessment is not None else None
        if ai_value is not None and ai_blend_weight > 0:
            ai_value = _clamp(ai_value)
            value = ai_value if value is None else (1 - ai_blend_weight) * value + ai_blend_weight * ai_value
            ai_used = True
        if value is None:
            missing.append(domain.value)
            value = NEUTRAL_DOMAIN_RISK
        domain_risks[domain.value] = value

    # Tier is classified on the same rounded values that are reported
    overall = round(_clamp(100 - sum(domain_risks.values()) / len(domain_risks)), 2)
    domain_risks = {k: round(v, 2) for k, v in domain_risks.items()}
    tier = classify_tier(overall, domain_risks, thresholds)
    tier = apply_hysteresis(tier, previous_tier, overall, domain_risks, thresholds)

    if ai_assessment is not None and ai_assessment.insights:
        insights = ai_assessment.insights
        ai_used = True
    else:
        insights = _rule_insights(tier, domain_risks, missing)

    return RiskAssessment(
        overall_wellness=overall,
        risk_tier=tier,
        domain_risks=domain_risks,
        insights=insights,
        computed_at=computed_at,
        ai_assisted=ai_used,
    )
