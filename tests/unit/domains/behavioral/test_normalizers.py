"""Tests for the domain normalizers — raw entries to 0-100 risk sub-scores."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from mindwatch.domains.behavioral.domain_logic.errors import InvalidInputError
from mindwatch.domains.behavioral.domain_logic.normalizers import (
    activity_band,
    activity_level,
    parse_time_of_day,
    score,
    score_activity,
    score_mood,
    score_sleep,
    sleep_duration_hours,
)
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    ActivityEntry,
    Domain,
    MoodEntry,
    SleepEntry,
)

TS = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def _sleep(bedtime="23:00", wake_time="07:00", quality=7, interruptions=1) -> SleepEntry:
    return SleepEntry(
        bedtime=bedtime,
        wake_time=wake_time,
        quality_value=quality,
        interruption_count=interruptions,
        timestamp=TS,
    )


def _activity(steps=10_000, screen=0.0, social=5, exercise=60, outdoor=1.0) -> ActivityEntry:
    return ActivityEntry(
        steps=steps,
        screen_time_hours=screen,
        social_interaction_count=social,
        exercise_minutes=exercise,
        outdoor_time_hours=outdoor,
        timestamp=TS,
    )


class TestMood:
    @pytest.mark.parametrize("mood", range(1, 11))
    def test_risk_is_exact_for_every_value(self, mood):
        result = score_mood(MoodEntry(mood_value=mood, timestamp=TS))
        assert result.sub_score == (10 - mood) * 10

    def test_extremes(self):
        assert score_mood(MoodEntry(mood_value=10, timestamp=TS)).sub_score == 0
        assert score_mood(MoodEntry(mood_value=1, timestamp=TS)).sub_score == 90

    def test_score_carries_domain_and_timestamp(self):
        result = score_mood(MoodEntry(mood_value=6, timestamp=TS))
        assert result.domain is Domain.MOOD
        assert result.computed_at == TS

    @pytest.mark.parametrize("bad", [0, 11, -3])
    def test_out_of_range_rejected(self, bad):
        with pytest.raises(InvalidInputError) as exc:
            score_mood(MoodEntry(mood_value=bad, timestamp=TS))
        assert exc.value.field == "mood_value"

    def test_bool_is_not_a_mood(self):
        with pytest.raises(InvalidInputError):
            score_mood(MoodEntry(mood_value=True, timestamp=TS))

    def test_float_rejected(self):
        with pytest.raises(InvalidInputError):
            score_mood(MoodEntry(mood_value=5.5, timestamp=TS))

    def test_missing_timestamp_rejected(self):
        with pytest.raises(InvalidInputError, match="timestamp"):
            score_mood(MoodEntry(mood_value=5, timestamp=None))


class TestSleepDuration:
    def test_overnight_wraparound(self):
        assert sleep_duration_hours("23:00", "07:00") == 8.0

    def test_wake_just_before_bedtime(self):
        assert sleep_duration_hours("01:00", "00:30") == 23.5

    def test_same_day(self):
        assert sleep_duration_hours("01:30", "09:00") == 7.5

    def test_seconds_tolerated(self):
        assert parse_time_of_day("bedtime", "22:15:30") == (22, 15)

    @pytest.mark.parametrize("bad", ["25:00", "12:60", "noon", "", "7", None, 2300])
    def test_unparsable_time_rejected(self, bad):
        with pytest.raises(InvalidInputError):
            parse_time_of_day("bedtime", bad)


class TestSleepScore:
    def test_healthy_night_has_no_risk(self):
        result = score_sleep(_sleep())
        assert result.sub_score == 0
        assert result.details["risk_factors"] == []

    def test_penalties_are_additive(self):
        entry = _sleep(bedtime="02:00", wake_time="07:00", quality=3, interruptions=5)
        result = score_sleep(entry)
        assert result.details["duration_hours"] == 5.0
        assert result.sub_score == 75
        assert result.details["risk_factors"] == [
            "Insufficient Sleep Duration",
            "Poor Sleep Quality",
            "Frequent Sleep Interruptions",
        ]

    def test_no_irregularity_penalty_without_history(self):
        result = score_sleep(_sleep(bedtime="03:00", wake_time="11:00"))
        assert "mean_bedtime_hour" not in result.details
        assert result.sub_score == 0

    def test_excessive_duration(self):
        result = score_sleep(_sleep(bedtime="20:00", wake_time="08:00"))
        assert result.sub_score == 30
        assert result.details["risk_factors"] == ["Excessive Sleep Duration"]

    def test_duration_bounds_are_exclusive(self):
        assert score_sleep(_sleep(bedtime="01:00", wake_time="07:00")).sub_score == 0
        assert score_sleep(_sleep(bedtime="21:00", wake_time="07:00")).sub_score == 0

    def test_quality_five_is_not_poor(self):
        assert score_sleep(_sleep(quality=5)).sub_score == 0
        assert score_sleep(_sleep(quality=4)).sub_score == 25

    def test_three_interruptions_is_not_frequent(self):
        assert score_sleep(_sleep(interruptions=3)).sub_score == 0
        assert score_sleep(_sleep(interruptions=4)).sub_score == 20

    def test_irregular_bedtime_against_history(self):
        history = [_sleep(bedtime="22:00", wake_time="06:00") for _ in range(3)]
        result = score_sleep(_sleep(bedtime="01:00", wake_time="09:00"), history)
        # Integer bedtime hours: |1 - 22| = 21 > 2
        assert result.details["bedtime_drift_hours"] == 21
        assert result.sub_score == 25
        assert "Irregular Sleep Schedule" in result.details["risk_factors"]

    def test_regular_bedtime_against_history(self):
        history = [_sleep(bedtime="23:00"), _sleep(bedtime="22:00")]
        result = score_sleep(_sleep(bedtime="23:30"), history)
        assert result.details["mean_bedtime_hour"] == 22.5
        assert result.sub_score == 0

    def test_everything_wrong_clamps_to_100(self):
        history = [_sleep(bedtime="22:00")]
        entry = _sleep(bedtime="04:00", wake_time="06:00", quality=1, interruptions=9)
        assert score_sleep(entry, history).sub_score == 100

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"quality": 0}, "quality_value"),
            ({"quality": 11}, "quality_value"),
            ({"interruptions": -1}, "interruption_count"),
            ({"bedtime": "24:00"}, "bedtime"),
            ({"wake_time": "7am"}, "wake_time"),
        ],
    )
    def test_invalid_fields_rejected(self, kwargs, field):
        with pytest.raises(InvalidInputError) as exc:
            score_sleep(_sleep(**kwargs))
        assert exc.value.field == field


class TestActivity:
    def test_perfect_day_has_zero_risk(self):
        entry = _activity()
        assert activity_level(entry) == 100
        assert score_activity(entry).sub_score == 0

    def test_idle_day_has_full_risk(self):
        entry = _activity(steps=0, screen=12.0, social=0, exercise=0)
        assert activity_level(entry) == 0
        assert score_activity(entry).sub_score == 100

    def test_components_are_capped(self):
        entry = _activity(steps=30_000, social=20, exercise=300)
        assert activity_level(entry) == 100

    def test_half_day(self):
        entry = _activity(steps=5_000, screen=4.0, social=2, exercise=30)
        # 12.5 + 12.5 + 10 + 12.5
        assert activity_level(entry) == pytest.approx(47.5)
        result = score_activity(entry)
        assert result.sub_score == pytest.approx(52.5)
        assert result.details["activity_band"] == "Low"

    @pytest.mark.parametrize("level,band", [(100, "High"), (75, "High"), (74.9, "Moderate"), (50, "Moderate"), (49.9, "Low")])
    def test_bands(self, level, band):
        assert activity_band(level) == band

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"steps": -1}, "steps"),
            ({"screen": -0.5}, "screen_time_hours"),
            ({"screen": float("nan")}, "screen_time_hours"),
            ({"social": -2}, "social_interaction_count"),
            ({"exercise": -10}, "exercise_minutes"),
            ({"outdoor": -1.0}, "outdoor_time_hours"),
        ],
    )
    def test_negative_or_invalid_rejected(self, kwargs, field):
        with pytest.raises(InvalidInputError) as exc:
            score_activity(_activity(**kwargs))
        assert exc.value.field == field


class TestDispatcher:
    def test_routes_by_entry_type(self):
        assert score(MoodEntry(mood_value=4, timestamp=TS)).domain is Domain.MOOD
        assert score(_sleep()).domain is Domain.SLEEP
        assert score(_activity()).domain is Domain.ACTIVITY

    def test_sleep_history_only_used_for_sleep(self):
        history = [_sleep(bedtime="20:00")]
        assert score(_sleep(bedtime="23:00"), sleep_history=history).sub_score == 25

    def test_unknown_entry_rejected(self):
        with pytest.raises(InvalidInputError):
            score("not an entry")

    def test_scoring_is_deterministic(self):
        entry = _sleep(quality=2)
        assert score(entry) == score(entry)
