"""Behavioral risk models and domain constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Domain(str, Enum):
    MOOD = "mood"
    SLEEP = "sleep"
    ACTIVITY = "activity"


class TrendLabel(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def severity(self) -> int:
        return _TIER_SEVERITY[self]

    @classmethod
    def from_severity(cls, severity: int) -> RiskTier:
        for tier, value in _TIER_SEVERITY.items():
            if value == severity:
                return tier
        raise ValueError(f"No risk tier with severity {severity}")


_TIER_SEVERITY = {RiskTier.LOW: 0, RiskTier.MEDIUM: 1, RiskTier.HIGH: 2}


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

DOMAINS = [Domain.MOOD, Domain.SLEEP, Domain.ACTIVITY]

# Missing domain -> neutral midpoint, keeps the aggregator usable on partial data
NEUTRAL_DOMAIN_RISK = 50.0

DEFAULT_HISTORY_WINDOW = 7
TREND_WINDOW = 3
DEFAULT_TREND_THRESHOLD = 0.5

DEFAULT_INSIGHTS = "Continue monitoring your mental health patterns."

# Sleep penalties (points added to the 0-100 sleep risk)
SLEEP_DURATION_PENALTY = 30
SLEEP_QUALITY_PENALTY = 25
SLEEP_INTERRUPTION_PENALTY = 20
SLEEP_IRREGULARITY_PENALTY = 25

SLEEP_MIN_HOURS = 6.0
SLEEP_MAX_HOURS = 10.0
SLEEP_POOR_QUALITY_BELOW = 5
SLEEP_MAX_INTERRUPTIONS = 3
SLEEP_BEDTIME_DRIFT_HOURS = 2.0

# Activity composite: four equally weighted components of 25 points each
ACTIVITY_STEP_TARGET = 10_000
ACTIVITY_SCREEN_BUDGET_HOURS = 8.0
ACTIVITY_SOCIAL_TARGET = 5
ACTIVITY_EXERCISE_TARGET_MIN = 60


# ---------------------------------------------------------------------------
# Daily metric entries (immutable once scored)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MoodEntry:
    """A self-reported mood check-in."""

    mood_value: int  # 1-10, higher = better
    timestamp: datetime
    note: str = ""

    domain = Domain.MOOD

    def to_payload(self) -> dict[str, Any]:
        return {"mood_value": self.mood_value, "note": self.note}


@dataclass(frozen=True)
class SleepEntry:
    """One night of sleep."""

    bedtime: str  # "HH:MM"
    wake_time: str  # "HH:MM"
    quality_value: int  # 1-10
    interruption_count: int
    timestamp: datetime

    domain = Domain.SLEEP

    def to_payload(self) -> dict[str, Any]:
        return {
            "bedtime": self.bedtime,
            "wake_time": self.wake_time,
            "quality_value": self.quality_value,
            "interruption_count": self.interruption_count,
        }


@dataclass(frozen=True)
class ActivityEntry:
    """A day of physical and social activity."""

    steps: int
    screen_time_hours: float
    social_interaction_count: int
    exercise_minutes: int
    outdoor_time_hours: float
    timestamp: datetime

    domain = Domain.ACTIVITY

    def to_payload(self) -> dict[str, Any]:
        return {
            "steps": self.steps,
            "screen_time_hours": self.screen_time_hours,
            "social_interaction_count": self.social_interaction_count,
            "exercise_minutes": self.exercise_minutes,
            "outdoor_time_hours": self.outdoor_time_hours,
        }


DailyMetricEntry = MoodEntry | SleepEntry | ActivityEntry


def entry_from_payload(domain: Domain, payload: dict[str, Any], timestamp: datetime) -> DailyMetricEntry:
    """Rebuild an entry from its stored payload."""
    if domain is Domain.MOOD:
        return MoodEntry(
            mood_value=payload["mood_value"],
            note=payload.get("note", ""),
            timestamp=timestamp,
        )
    if domain is Domain.SLEEP:
        return SleepEntry(
            bedtime=payload["bedtime"],
            wake_time=payload["wake_time"],
            quality_value=payload["quality_value"],
            interruption_count=payload["interruption_count"],
            timestamp=timestamp,
        )
    return ActivityEntry(
        steps=payload["steps"],
        screen_time_hours=payload["screen_time_hours"],
        social_interaction_count=payload["social_interaction_count"],
        exercise_minutes=payload["exercise_minutes"],
        outdoor_time_hours=payload.get("outdoor_time_hours", 0.0),
        timestamp=timestamp,
    )


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainScore:
    """A single domain's 0-100 risk sub-score (higher = worse)."""

    domain: Domain
    sub_score: float
    computed_at: datetime | None = None
    details: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class RiskAssessment:
    """Aggregated wellness and risk tier for one aggregation call."""

    overall_wellness: float  # 0-100, higher = better
    risk_tier: RiskTier
    domain_risks: dict[str, float]
    insights: str = DEFAULT_INSIGHTS
    computed_at: datetime | None = None
    ai_assisted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_wellness": self.overall_wellness,
            "risk_tier": self.risk_tier.value,
            "domain_risks": dict(self.domain_risks),
            "insights": self.insights,
            "computed_at": self.computed_at.isoformat() if self.computed_at else None,
            "ai_assisted": self.ai_assisted,
        }


@dataclass(frozen=True)
class InterventionStrategy:
    """A suggested coping or support action."""

    title: str
    description: str
    action_label: str
    urgent: bool = False
    requires_emergency_resources: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "action_label": self.action_label,
            "urgent": self.urgent,
            "requires_emergency_resources": self.requires_emergency_resources,
        }


@dataclass(frozen=True)
class EmergencyResource:
    """A crisis line or service surfaced with urgent interventions."""

    name: str
    contact: str
    available: str = "24/7"


# ---------------------------------------------------------------------------
# Text-analysis collaborator results (validated on receipt)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextAnalysis:
    """Labels and an optional 0-100 risk estimate from the text collaborator."""

    labels: tuple[str, ...] = ()
    risk_estimate: float | None = None


@dataclass(frozen=True)
class AIAssessment:
    """Structured aggregate assessment returned by the text collaborator.

    Every numeric field is clamped to [0, 100] on receipt; any field may be
    missing.
    """

    insights: str | None = None
    risk_level: RiskTier | None = None
    overall_wellness: float | None = None
    mood_risk: float | None = None
    sleep_risk: float | None = None
    activity_risk: float | None = None

    def domain_risk(self, domain: Domain) -> float | None:
        return {
            Domain.MOOD: self.mood_risk,
            Domain.SLEEP: self.sleep_risk,
            Domain.ACTIVITY: self.activity_risk,
        }[domain]
