"""Shared test fixtures for MindWatch tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("TRIGGER_KEYWORDS_PATH", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from mindwatch.domains.behavioral.domain_logic.errors import (  # noqa: E402
    CollaboratorUnavailableError,
)
from mindwatch.domains.behavioral.domain_logic.risk_models import (  # noqa: E402
    ActivityEntry,
    AIAssessment,
    MoodEntry,
    SleepEntry,
    TextAnalysis,
)

# ---------------------------------------------------------------------------
# Stub text analyzer
# ---------------------------------------------------------------------------

class StubTextAnalyzer:
    """TextAnalyzer double with canned answers and an optional outage.

    Suitable for injecting into create_app() for tool tests without an LLM.
    """

    def __init__(
        self,
        *,
        mood: TextAnalysis | None = None,
        sleep: TextAnalysis | None = None,
        activity: TextAnalysis | None = None,
        assessment: AIAssessment | None = None,
        unavailable: bool = False,
    ) -> None:
        self.mood = mood or TextAnalysis()
        self.sleep = sleep or TextAnalysis()
        self.activity = activity or TextAnalysis()
        self.assessment = assessment or AIAssessment()
        self.unavailable = unavailable
        self.calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return "stub"

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.unavailable:
            raise CollaboratorUnavailableError("text_analysis", "stub outage")

    async def analyze_mood(self, entry: MoodEntry) -> TextAnalysis:
        self._check("mood")
        return self.mood

    async def analyze_sleep(
        self, entry: SleepEntry, history: Sequence[SleepEntry] = ()
    ) -> TextAnalysis:
        self._check("sleep")
        return self.sleep

    async def analyze_activity(self, entry: ActivityEntry) -> TextAnalysis:
        self._check("activity")
        return self.activity

    async def assess(self, mood, sleep, activity) -> AIAssessment:
        self._check("assess")
        return self.assessment


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def behavioral_db():
    """Create an in-memory BehavioralDatabase for testing."""
    from mindwatch.core.storage.database import BehavioralDatabase

    db = BehavioralDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from mindwatch.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def behavioral_repository(behavioral_db, field_encryptor):
    """Create a BehavioralRepository backed by in-memory SQLite."""
    from mindwatch.core.storage.repository import BehavioralRepository

    return BehavioralRepository(behavioral_db, field_encryptor)


@pytest.fixture
def stub_analyzer() -> StubTextAnalyzer:
    """A text analyzer that answers with empty results."""
    return StubTextAnalyzer()


@pytest.fixture
def make_stub_analyzer():
    """Factory for StubTextAnalyzer with custom answers."""
    return StubTextAnalyzer
