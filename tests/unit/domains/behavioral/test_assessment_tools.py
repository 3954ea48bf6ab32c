"""Tests for assess_risk, intervention and trend tools via the MCP client."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client

from mindwatch.core.server.app import create_app
from mindwatch.core.storage.database import BehavioralDatabase
from mindwatch.core.storage.repository import BehavioralRepository
from mindwatch.domains.behavioral.domain_logic.risk_models import AIAssessment, RiskTier


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _payload(result) -> dict:
    blocks = getattr(result, "content", result)
    return json.loads(blocks[0].text)


def _call(app, tool: str, args: dict | None = None) -> dict:
    async def _go():
        async with Client(app) as client:
            return _payload(await client.call_tool(tool, args or {}))
    return _run(_go())


@pytest.fixture
def app(behavioral_repository, stub_analyzer):
    return create_app(repository_override=behavioral_repository, text_analyzer_override=stub_analyzer)


def _seed(repo, mood=None, sleep=None, activity=None, ts="2026-03-02T08:00:00+00:00"):
    if mood is not None:
        repo.save_entry("mood", ts, {"mood_value": 5, "note": ""}, mood)
    if sleep is not None:
        repo.save_entry(
            "sleep",
            ts,
            {"bedtime": "23:00", "wake_time": "07:00", "quality_value": 7, "interruption_count": 0},
            sleep,
        )
    if activity is not None:
        repo.save_entry(
            "activity",
            ts,
            {
                "steps": 6000,
                "screen_time_hours": 4.0,
                "social_interaction_count": 2,
                "exercise_minutes": 20,
                "outdoor_time_hours": 1.0,
            },
            activity,
        )


class TestAssessRisk:
    def test_no_data_is_neutral_medium(self, app, stub_analyzer):
        data = _call(app, "assess_risk")
        assert data["status"] == "ok"
        assert data["overall_wellness"] == 50.0
        assert data["risk_tier"] == "medium"
        assert data["missing_domains"] == ["mood", "sleep", "activity"]
        assert data["emergency_resources"] == []
        assert len(data["interventions"]) == 4
        # Nothing stored, nothing to send for text analysis
        assert stub_analyzer.calls == []

    def test_low_tier(self, app, behavioral_repository):
        _seed(behavioral_repository, mood=10.0, sleep=0.0, activity=20.0)
        data = _call(app, "assess_risk")
        assert data["risk_tier"] == "low"
        assert data["overall_wellness"] == 90.0
        assert data["missing_domains"] == []
        assert data["insights"] == "Continue monitoring your mental health patterns."

    def test_one_acute_domain_escalates(self, app, behavioral_repository):
        _seed(behavioral_repository, mood=20.0, sleep=20.0, activity=75.0)
        data = _call(app, "assess_risk")
        assert data["risk_tier"] == "high"
        assert all(i["urgent"] for i in data["interventions"])
        contacts = [r["contact"] for r in data["emergency_resources"]]
        assert "988" in contacts

    def test_uses_latest_score_per_domain(self, app, behavioral_repository):
        for day in ("02-26", "02-27", "02-28"):
            _seed(behavioral_repository, mood=90.0, ts=f"2026-{day}T08:00:00+00:00")
        _seed(behavioral_repository, mood=10.0, sleep=10.0, activity=10.0)
        data = _call(app, "assess_risk")
        assert data["domain_risks"]["mood"] == 10.0
        assert data["trends"]["mood"] == "improving"

    def test_persisted_and_previous_tier(self, app, behavioral_repository):
        _seed(behavioral_repository, mood=90.0, sleep=90.0, activity=90.0)
        first = _call(app, "assess_risk")
        assert first["assessment_id"]
        assert "previous_tier" not in first

        second = _call(app, "assess_risk")
        assert second["previous_tier"] == "high"
        assert len(behavioral_repository.get_assessments()) == 2

    def test_analyzer_insights_and_blend(self, behavioral_repository, make_stub_analyzer):
        analyzer = make_stub_analyzer(
            assessment=AIAssessment(
                insights="Sleep has slipped this week.",
                risk_level=RiskTier.LOW,
                mood_risk=20.0,
            )
        )
        app = create_app(repository_override=behavioral_repository, text_analyzer_override=analyzer)
        _seed(behavioral_repository, mood=60.0, sleep=20.0, activity=20.0)
        data = _call(app, "assess_risk")
        assert analyzer.calls == ["assess"]
        assert data["insights"] == "Sleep has slipped this week."
        assert data["ai_assisted"] is True
        # Default blend weight 0.25: 0.75 * 60 + 0.25 * 20
        assert data["domain_risks"]["mood"] == 50.0
        # The collaborator's own risk level never sets the tier
        assert data["risk_tier"] == "medium"

    def test_text_analysis_can_be_skipped(self, app, behavioral_repository, stub_analyzer):
        _seed(behavioral_repository, mood=10.0)
        data = _call(app, "assess_risk", {"use_text_analysis": False})
        assert data["ai_assisted"] is False
        assert stub_analyzer.calls == []

    def test_analyzer_outage_degrades(self, behavioral_repository, make_stub_analyzer):
        app = create_app(
            repository_override=behavioral_repository,
            text_analyzer_override=make_stub_analyzer(unavailable=True),
        )
        _seed(behavioral_repository, mood=10.0, sleep=10.0, activity=10.0)
        data = _call(app, "assess_risk")
        assert data["risk_tier"] == "low"
        assert data["degraded"] == ["text_analysis_unavailable"]

    def test_storage_outage_still_assesses(self, field_encryptor, stub_analyzer):
        broken = BehavioralRepository(BehavioralDatabase(":memory:"), field_encryptor)
        app = create_app(repository_override=broken, text_analyzer_override=stub_analyzer)
        data = _call(app, "assess_risk")
        assert data["status"] == "ok"
        assert data["risk_tier"] == "medium"
        assert data["assessment_id"] is None
        assert data["degraded"] == ["storage_unavailable"]


class TestInterventionTools:
    def test_get_interventions(self, app):
        data = _call(app, "get_interventions", {"risk_tier": "High"})
        assert data["risk_tier"] == "high"
        assert data["interventions"][0]["title"] == "Immediate Professional Help"
        assert data["emergency_resources"]

    def test_unknown_tier(self, app):
        data = _call(app, "get_interventions", {"risk_tier": "critical"})
        assert data["code"] == 400
        assert data["field"] == "risk_tier"

    def test_record_and_list_used(self, app):
        saved = _call(app, "record_intervention_used", {"title": "safety planning"})
        assert saved["status"] == "saved"
        assert saved["title"] == "Safety Planning"
        assert saved["risk_tier"] == "medium"

        listed = _call(app, "list_interventions_used")
        assert listed["count"] == 1
        assert listed["uses"][0]["title"] == "Safety Planning"

    def test_record_unknown_title(self, app):
        data = _call(app, "record_intervention_used", {"title": "Nap"})
        assert data["code"] == 400


class TestTrendTools:
    def test_all_domains(self, app, behavioral_repository):
        _seed(behavioral_repository, mood=30.0)
        data = _call(app, "domain_trends")
        assert set(data["trends"]) == {"mood", "sleep", "activity"}
        assert data["trends"]["mood"]["current"] == 30.0
        assert data["trends"]["sleep"]["status"] == "no_data"

    def test_single_domain_has_summary(self, app, behavioral_repository):
        _seed(behavioral_repository, sleep=25.0)
        data = _call(app, "domain_trends", {"domain": "sleep"})
        summary = data["trends"]["sleep"]["summary"]
        assert summary["average_duration_hours"] == 8.0
        assert summary["average_quality"] == 7.0

    def test_unknown_domain(self, app):
        data = _call(app, "domain_trends", {"domain": "diet"})
        assert data["code"] == 400

    def test_list_assessments(self, app):
        _call(app, "assess_risk")
        data = _call(app, "list_assessments", {"limit": 5})
        assert data["count"] == 1
        assert data["assessments"][0]["risk_tier"] == "medium"
