"""Deterministic domain normalizers: raw daily entries -> 0-100 risk sub-scores.

Each scorer validates its entry, then returns a ``DomainScore`` whose
``sub_score`` is clamped to [0, 100] (higher = more risk) and whose
``details`` carry the intermediate values and rule-based risk factors.

All formulas are deterministic — no LLM, no clock, no randomness.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from datetime import datetime

from mindwatch.domains.behavioral.domain_logic.errors import InvalidInputError
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    ACTIVITY_EXERCISE_TARGET_MIN,
    ACTIVITY_SCREEN_BUDGET_HOURS,
    ACTIVITY_SOCIAL_TARGET,
    ACTIVITY_STEP_TARGET,
    SLEEP_BEDTIME_DRIFT_HOURS,
    SLEEP_DURATION_PENALTY,
    SLEEP_INTERRUPTION_PENALTY,
    SLEEP_IRREGULARITY_PENALTY,
    SLEEP_MAX_HOURS,
    SLEEP_MAX_INTERRUPTIONS,
    SLEEP_MIN_HOURS,
    SLEEP_POOR_QUALITY_BELOW,
    SLEEP_QUALITY_PENALTY,
    ActivityEntry,
    DailyMetricEntry,
    Domain,
    DomainScore,
    MoodEntry,
    SleepEntry,
)

_TIME_OF_DAY = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------

def _require_int(name: str, value: object, lo: int, hi: int | None = None) -> int:
    # bool is an int subclass; a checkbox value is never a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(name, value, "expected an integer")
    if value < lo or (hi is not None and value > hi):
        bounds = f"[{lo}, {hi}]" if hi is not None else f">= {lo}"
        raise InvalidInputError(name, value, f"must be {bounds}")
    return value


def _require_non_negative(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(name, value, "expected a number")
    if not math.isfinite(value):
        raise InvalidInputError(name, value, "must be finite")
    if value < 0:
        raise InvalidInputError(name, value, "must be >= 0")
    return float(value)


def _require_timestamp(value: object) -> datetime:
    if not isinstance(value, datetime):
        raise InvalidInputError("timestamp", value, "expected a datetime")
    return value


def parse_time_of_day(name: str, value: object) -> tuple[int, int]:
    """Parse ``"HH:MM"`` (seconds tolerated) into ``(hour, minute)``.

    Raises:
        InvalidInputError: If the value is not a valid 24-hour time of day.
    """
    if not isinstance(value, str):
        raise InvalidInputError(name, value, "expected a 'HH:MM' string")
    match = _TIME_OF_DAY.match(value)
    if match is None:
        raise InvalidInputError(name, value, "expected a 'HH:MM' string")
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise InvalidInputError(name, value, "not a valid time of day")
    return hour, minute


# ---------------------------------------------------------------------------
# Mood
# ---------------------------------------------------------------------------

def score_mood(entry: MoodEntry) -> DomainScore:
    """Mood risk = (10 - mood_value) * 10."""
    mood = _require_int("mood_value", entry.mood_value, 1, 10)
    timestamp = _require_timestamp(entry.timestamp)
    if not isinstance(entry.note, str):
        raise InvalidInputError("note", entry.note, "expected text")

    risk = _clamp((10 - mood) * 10)
    return DomainScore(
        domain=Domain.MOOD,
        sub_score=risk,
        computed_at=timestamp,
        details={"mood_value": mood},
    )


# ---------------------------------------------------------------------------
# Sleep
# ---------------------------------------------------------------------------

def sleep_duration_hours(bedtime: str, wake_time: str) -> float:
    """Hours between bedtime and wake time, wrapping past midnight."""
    bed_h, bed_m = parse_time_of_day("bedtime", bedtime)
    wake_h, wake_m = parse_time_of_day("wake_time", wake_time)
    bed = bed_h + bed_m / 60
    wake = wake_h + wake_m / 60
    if wake < bed:
        wake += 24
    return wake - bed


def _bedtime_hour(entry: SleepEntry) -> int:
    hour, _ = parse_time_of_day("bedtime", entry.bedtime)
    return hour


def score_sleep(entry: SleepEntry, history: Sequence[SleepEntry] = ()) -> DomainScore:
    """Sleep risk as a sum of fixed penalties, clamped to [0, 100].

    Penalties:
        duration < 6h or > 10h          +30
        quality < 5 (1-10 scale)        +25
        more than 3 interruptions       +20
        bedtime hour > 2h off the mean
        bedtime hour of ``history``     +25 (skipped when history is empty)
    """
    quality = _require_int("quality_value", entry.quality_value, 1, 10)
    interruptions = _require_int("interruption_count", entry.interruption_count, 0)
    timestamp = _require_timestamp(entry.timestamp)
    duration = sleep_duration_hours(entry.bedtime, entry.wake_time)

    risk = 0
    factors: list[str] = []

    if duration < SLEEP_MIN_HOURS:
        risk += SLEEP_DURATION_PENALTY
        factors.append("Insufficient Sleep Duration")
    elif duration > SLEEP_MAX_HOURS:
        risk += SLEEP_DURATION_PENALTY
        factors.append("Excessive Sleep Duration")

    if quality < SLEEP_POOR_QUALITY_BELOW:
        risk += SLEEP_QUALITY_PENALTY
        factors.append("Poor Sleep Quality")

    if interruptions > SLEEP_MAX_INTERRUPTIONS:
        risk += SLEEP_INTERRUPTION_PENALTY
        factors.append("Frequent Sleep Interruptions")

    details: dict = {
        "duration_hours": round(duration, 4),
        "quality_value": quality,
        "interruption_count": interruptions,
    }

    if history:
        mean_bed_hour = sum(_bedtime_hour(h) for h in history) / len(history)
        drift = abs(_bedtime_hour(entry) - mean_bed_hour)
        details["mean_bedtime_hour"] = round(mean_bed_hour, 4)
        details["bedtime_drift_hours"] = round(drift, 4)
        if drift > SLEEP_BEDTIME_DRIFT_HOURS:
            risk += SLEEP_IRREGULARITY_PENALTY
            factors.append("Irregular Sleep Schedule")

    details["risk_factors"] = factors
    return DomainScore(
        domain=Domain.SLEEP,
        sub_score=_clamp(risk),
        computed_at=timestamp,
        details=details,
    )


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

def activity_level(entry: ActivityEntry) -> float:
    """Composite activity level in [0, 100] (higher = better).

    Four 25-point components: steps toward 10k, screen time under 8h,
    social interactions up to 5, exercise up to 60 minutes.
    """
    steps = _require_int("steps", entry.steps, 0)
    screen = _require_non_negative("screen_time_hours", entry.screen_time_hours)
    social = _require_int("social_interaction_count", entry.social_interaction_count, 0)
    exercise = _require_int("exercise_minutes", entry.exercise_minutes, 0)

    level = (
        min(steps / ACTIVITY_STEP_TARGET, 1) * 25
        + max(0.0, ACTIVITY_SCREEN_BUDGET_HOURS - screen) / ACTIVITY_SCREEN_BUDGET_HOURS * 25
        + min(social, ACTIVITY_SOCIAL_TARGET) / ACTIVITY_SOCIAL_TARGET * 25
        + min(exercise, ACTIVITY_EXERCISE_TARGET_MIN) / ACTIVITY_EXERCISE_TARGET_MIN * 25
    )
    return _clamp(level)


def activity_band(level: float) -> str:
    """Coarse label for an activity level."""
    if level >= 75:
        return "High"
    if level >= 50:
        return "Moderate"
    return "Low"


def score_activity(entry: ActivityEntry) -> DomainScore:
    """Activity risk = 100 - activity level."""
    _require_non_negative("outdoor_time_hours", entry.outdoor_time_hours)
    timestamp = _require_timestamp(entry.timestamp)
    level = activity_level(entry)

    return DomainScore(
        domain=Domain.ACTIVITY,
        sub_score=_clamp(100 - level),
        computed_at=timestamp,
        details={
            "activity_level": round(level, 4),
            "activity_band": activity_band(level),
            "outdoor_time_hours": float(entry.outdoor_time_hours),
        },
    )


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

def score(entry: DailyMetricEntry, *, sleep_history: Sequence[SleepEntry] = ()) -> DomainScore:
    """Score any daily entry with the normalizer for its domain.

    ``sleep_history`` is only consulted for sleep entries.
    """
    if isinstance(entry, MoodEntry):
        return score_mood(entry)
    if isinstance(entry, SleepEntry):
        return score_sleep(entry, sleep_history)
    if isinstance(entry, ActivityEntry):
        return score_activity(entry)
    raise InvalidInputError("entry", type(entry).__name__, "unknown entry type")
