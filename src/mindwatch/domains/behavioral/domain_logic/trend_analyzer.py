"""Trend detection over rolling windows of domain scores.

``analyze_trend`` is the pure core: it compares the mean of the most recent
three scores with the mean of the three before them. ``TrendAnalyzer`` wraps
it with record-store lookups and summary statistics for the trend tools.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from mindwatch.domains.behavioral.domain_logic.errors import InsufficientHistoryError
from mindwatch.domains.behavioral.domain_logic.normalizers import sleep_duration_hours
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    DEFAULT_TREND_THRESHOLD,
    DOMAINS,
    TREND_WINDOW,
    Domain,
    DomainScore,
    TrendLabel,
)

if TYPE_CHECKING:
    from mindwatch.core.storage.repository import BehavioralRepository

logger = logging.getLogger(__name__)


def _value(item: DomainScore | float) -> float:
    return item.sub_score if isinstance(item, DomainScore) else float(item)


def _window_means(values: Sequence[float], window: int) -> tuple[float, float]:
    recent = values[:window]
    older = values[window:window * 2]
    if not recent or not older:
        raise InsufficientHistoryError(
            f"need at least {window + 1} scores, got {len(values)}"
        )
    return statistics.mean(recent), statistics.mean(older)


def analyze_trend(
    history: Sequence[DomainScore | float],
    *,
    higher_is_better: bool,
    threshold: float = DEFAULT_TREND_THRESHOLD,
    window: int = TREND_WINDOW,
) -> TrendLabel:
    """Classify the direction of a domain over its recent history.

    Args:
        history: Scores for one domain, most recent first.
        higher_is_better: ``False`` for risk sub-scores, where a rising
            value means things are getting worse.
        threshold: Minimum gap between window means to count as movement.
        window: Size of the recent and older windows.

    Returns:
        ``INSUFFICIENT_DATA`` with fewer than 2 scores or an empty older
        window; otherwise ``IMPROVING``, ``DECLINING`` or ``STABLE``.
    """
    if len(history) < 2:
        return TrendLabel.INSUFFICIENT_DATA

    values = [_value(h) for h in history]
    try:
        recent_avg, older_avg = _window_means(values, window)
    except InsufficientHistoryError:
        return TrendLabel.INSUFFICIENT_DATA

    if recent_avg > older_avg + threshold:
        rising = True
    elif recent_avg < older_avg - threshold:
        rising = False
    else:
        return TrendLabel.STABLE

    if rising == higher_is_better:
        return TrendLabel.IMPROVING
    return TrendLabel.DECLINING


class TrendAnalyzer:
    """Computes domain trends and statistics from stored score history.

    Usage::

        analyzer = TrendAnalyzer(repository, threshold=0.5)
        trend = analyzer.compute_domain_trend(Domain.SLEEP, limit=7)
    """

    def __init__(
        self,
        repository: BehavioralRepository,
        *,
        threshold: float = DEFAULT_TREND_THRESHOLD,
    ) -> None:
        self._repo = repository
        self._threshold = threshold

    def compute_domain_trend(self, domain: Domain, *, limit: int = 7) -> dict[str, Any]:
        """Trend direction plus summary statistics for one domain's risk.

        Returns:
            Dict with: domain, direction, current, mean, min, max, std_dev,
            data_points. ``direction`` refers to wellbeing, so a falling
            risk reads as ``improving``.
        """
        history = self._repo.get_score_history(domain, limit=limit)
        values = [value for _, value in history]
        direction = analyze_trend(values, higher_is_better=False, threshold=self._threshold)

        if not values:
            return {
                "domain": domain.value,
                "direction": direction.value,
                "data_points": 0,
                "status": "no_data",
            }

        return {
            "domain": domain.value,
            "direction": direction.value,
            "current": round(values[0], 2),
            "mean": round(statistics.mean(values), 2),
            "min": round(min(values), 2),
            "max": round(max(values), 2),
            "std_dev": round(statistics.stdev(values), 2) if len(values) > 1 else 0.0,
            "data_points": len(values),
        }

    def compute_all_trends(self, *, limit: int = 7) -> dict[str, dict[str, Any]]:
        """Trends for every domain, keyed by domain name."""
        trends = {d.value: self.compute_domain_trend(d, limit=limit) for d in DOMAINS}
        logger.debug(
            "Computed trends: %s",
            {name: t["direction"] for name, t in trends.items()},
        )
        return trends

    def compute_domain_summary(self, domain: Domain, *, limit: int = 7) -> dict[str, Any]:
        """Averages of the raw self-reported values behind a domain's scores."""
        entries = self._repo.get_entries(domain, limit=limit)
        summary: dict[str, Any] = {"domain": domain.value, "entries": len(entries)}
        if not entries:
            return summary

        payloads = [e.payload for e in entries]
        if domain is Domain.MOOD:
            summary["average_mood"] = round(statistics.mean(p["mood_value"] for p in payloads), 1)
        elif domain is Domain.SLEEP:
            summary["average_duration_hours"] = round(
                statistics.mean(sleep_duration_hours(p["bedtime"], p["wake_time"]) for p in payloads), 1
            )
            summary["average_quality"] = round(statistics.mean(p["quality_value"] for p in payloads), 1)
        else:
            summary["average_steps"] = round(statistics.mean(p["steps"] for p in payloads))
            summary["average_screen_time_hours"] = round(
                statistics.mean(p["screen_time_hours"] for p in payloads), 1
            )
        summary["average_risk"] = round(statistics.mean(e.sub_score for e in entries), 1)
        return summary
