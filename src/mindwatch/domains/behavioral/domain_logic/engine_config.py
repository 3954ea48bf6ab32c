"""Explicit configuration passed into the pure engine functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mindwatch.domains.behavioral.domain_logic.risk_models import (
    DEFAULT_HISTORY_WINDOW,
    DEFAULT_TREND_THRESHOLD,
)

if TYPE_CHECKING:
    from mindwatch.core.config.settings import Settings


@dataclass(frozen=True)
class TierThresholds:
    """Cut-offs for risk tier classification.

    A tier is reached when overall wellness falls below its wellness cut-off
    OR any single domain risk reaches its domain cut-off.
    """

    high_wellness_below: float = 40.0
    medium_wellness_below: float = 70.0
    high_domain_at_or_above: float = 70.0
    medium_domain_at_or_above: float = 40.0
    # 0 = every recomputation may move tiers freely
    hysteresis_margin: float = 0.0

    def __post_init__(self) -> None:
        if self.high_wellness_below > self.medium_wellness_below:
            raise ValueError("high_wellness_below must not exceed medium_wellness_below")
        if self.medium_domain_at_or_above > self.high_domain_at_or_above:
            raise ValueError("medium_domain_at_or_above must not exceed high_domain_at_or_above")
        if self.hysteresis_margin < 0:
            raise ValueError("hysteresis_margin must be non-negative")

    def widened(self, margin: float) -> TierThresholds:
        """Thresholds shifted toward the more severe tier by ``margin``."""
        return TierThresholds(
            high_wellness_below=self.high_wellness_below + margin,
            medium_wellness_below=self.medium_wellness_below + margin,
            high_domain_at_or_above=self.high_domain_at_or_above - margin,
            medium_domain_at_or_above=self.medium_domain_at_or_above - margin,
        )


@dataclass(frozen=True)
class EngineConfig:
    """Everything the engine needs, resolved up front (no ambient state)."""

    history_window: int = DEFAULT_HISTORY_WINDOW
    trend_threshold: float = DEFAULT_TREND_THRESHOLD
    thresholds: TierThresholds = field(default_factory=TierThresholds)
    ai_blend_weight: float = 0.25
    keyword_detection_enabled: bool = True

    def __post_init__(self) -> None:
        if self.history_window < 1:
            raise ValueError("history_window must be at least 1")
        if not 0.0 <= self.ai_blend_weight <= 1.0:
            raise ValueError("ai_blend_weight must be within [0, 1]")

    @classmethod
    def from_settings(cls, settings: Settings) -> EngineConfig:
        return cls(
            history_window=settings.history_window,
            trend_threshold=settings.trend_threshold,
            thresholds=TierThresholds(
                high_wellness_below=settings.tier_high_wellness,
                medium_wellness_below=settings.tier_medium_wellness,
                high_domain_at_or_above=settings.tier_high_domain,
                medium_domain_at_or_above=settings.tier_medium_domain,
                hysteresis_margin=settings.tier_hysteresis_margin,
            ),
            ai_blend_weight=settings.ai_blend_weight,
            keyword_detection_enabled=settings.keyword_detection_enabled,
        )
