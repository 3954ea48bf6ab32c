"""Data models for the record store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StoredEntry:
    """A persisted daily entry with its computed sub-score.

    ``payload`` and ``labels`` are stored encrypted; ``sub_score`` is stored
    in the clear for history queries.
    """

    id: str
    domain: str  # 'mood', 'sleep', 'activity'
    timestamp: str  # ISO 8601
    payload: dict[str, Any]
    sub_score: float
    labels: list[str] = field(default_factory=list)
    ai_risk_estimate: float | None = None
    created_at: str = ""


@dataclass
class StoredAssessment:
    """A persisted risk assessment."""

    id: str
    timestamp: str
    overall_wellness: float
    risk_tier: str
    mood_risk: float | None = None
    sleep_risk: float | None = None
    activity_risk: float | None = None
    insights: str = ""
    ai_assisted: bool = False
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "overall_wellness": self.overall_wellness,
            "risk_tier": self.risk_tier,
            "domain_risks": {
                "mood": self.mood_risk,
                "sleep": self.sleep_risk,
                "activity": self.activity_risk,
            },
            "insights": self.insights,
            "ai_assisted": self.ai_assisted,
        }


@dataclass
class InterventionUse:
    """One row of the interventions-used log."""

    id: str
    timestamp: str
    title: str
    risk_tier: str | None = None
