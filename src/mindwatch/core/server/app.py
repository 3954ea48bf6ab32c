"""MindWatch MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from mindwatch.core.config.settings import Settings, get_settings
from mindwatch.core.llm.provider import LLMProvider, create_provider
from mindwatch.core.storage.database import BehavioralDatabase
from mindwatch.core.storage.encryption import EncryptionError, FieldEncryptor
from mindwatch.core.storage.repository import BehavioralRepository
from mindwatch.domains.behavioral.connectors import TextAnalyzer
from mindwatch.domains.behavioral.connectors.text_analysis import TextAnalysisClient
from mindwatch.domains.behavioral.domain_logic.engine_config import EngineConfig
from mindwatch.domains.behavioral.domain_logic.trend_analyzer import TrendAnalyzer
from mindwatch.domains.behavioral.domain_logic.trigger_detector import (
    TriggerDetector,
    load_keyword_table,
)
from mindwatch.domains.behavioral.prompts.behavioral_prompts import register_behavioral_prompts
from mindwatch.domains.behavioral.resources.interventions import register_intervention_resources
from mindwatch.domains.behavioral.tools.assessment_tools import register_assessment_tools
from mindwatch.domains.behavioral.tools.data_management_tools import (
    register_data_management_tools,
)
from mindwatch.domains.behavioral.tools.entry_tools import register_entry_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "MindWatch Behavioral Wellness"
SERVER_VERSION = "0.1.0"


def _build_provider(settings: Settings) -> tuple[str, LLMProvider | None]:
    """Resolve the configured provider, dropping to rule-based mode without a key."""
    name = settings.llm_provider
    if name in ("mock", "none"):
        return name, create_provider(name)
    if name == "anthropic":
        api_key, model = settings.anthropic_api_key, settings.anthropic_model
    elif name == "openai":
        api_key, model = settings.openai_api_key, settings.openai_model
    else:  # pragma: no cover
        raise ValueError(f"Unknown LLM provider: {name!r}")

    if not api_key:
        logger.warning(
            "No API key configured for provider '%s'; text analysis disabled, "
            "using rule-based scoring only",
            name,
        )
        return "none", None
    return name, create_provider(name, api_key=api_key, model=model)


def _build_repository(settings: Settings) -> BehavioralRepository:
    """Open the encrypted record store, or an in-memory one when no key is set."""
    if settings.encryption_key:
        try:
            encryptor = FieldEncryptor(settings.encryption_key)
            db = BehavioralDatabase(settings.db_path)
            db.initialize()
            logger.info(
                "Record store opened: %s (schema v%d)", settings.db_path, db.get_schema_version()
            )
            return BehavioralRepository(db, encryptor)
        except EncryptionError as exc:
            logger.error("Failed to initialize storage: %s", exc)

    logger.warning(
        "No usable ENCRYPTION_KEY — using an in-memory record store. "
        "Entries will be lost when the server stops."
    )
    db = BehavioralDatabase(":memory:")
    db.initialize()
    return BehavioralRepository(db, FieldEncryptor.ephemeral())


def create_app(
    *,
    settings_override: Settings | None = None,
    repository_override: BehavioralRepository | None = None,
    llm_provider_override: LLMProvider | None = None,
    text_analyzer_override: TextAnalyzer | None = None,
) -> FastMCP:
    """Create and configure the MindWatch MCP server.

    This is the main application factory. It:
    1. Resolves engine configuration from settings
    2. Builds the keyword trigger detector
    3. Creates the text-analysis collaborator (optional)
    4. Opens the encrypted record store
    5. Registers all tools, resources, and prompts
    """
    settings = settings_override or get_settings()
    config = EngineConfig.from_settings(settings)

    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "MindWatch — behavioral wellness server. Log daily mood, sleep and "
            "activity, then assess risk to get an overall wellness score, a "
            "low/medium/high risk tier and matching support strategies. "
            "High-tier results always include emergency resources."
        ),
    )

    # --- Trigger detection ---
    keywords = None
    if settings.trigger_keywords_path:
        keywords = load_keyword_table(settings.trigger_keywords_path)
    detector = TriggerDetector(keywords, enabled=config.keyword_detection_enabled)

    # --- Text-analysis collaborator ---
    text_analyzer: TextAnalyzer | None
    if text_analyzer_override is not None:
        text_analyzer = text_analyzer_override
        provider_name = text_analyzer.provider_name
    else:
        if llm_provider_override is not None:
            provider_name, provider = "override", llm_provider_override
        else:
            provider_name, provider = _build_provider(settings)
        text_analyzer = (
            TextAnalysisClient(
                provider,
                timeout_s=settings.text_analysis_timeout_s,
                provider_name=provider_name,
            )
            if provider is not None
            else None
        )
    logger.info("Text analysis: %s", provider_name if text_analyzer else "disabled")

    # --- Record store ---
    repository = repository_override or _build_repository(settings)
    trend_analyzer = TrendAnalyzer(repository, threshold=config.trend_threshold)

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "text_analysis": provider_name if text_analyzer else "disabled",
            "keyword_detection": detector.enabled,
            "history_window": config.history_window,
            "entries_stored": repository.count_entries(),
        }

    register_entry_tools(server, repository, config, detector, text_analyzer)
    register_assessment_tools(server, repository, config, trend_analyzer, text_analyzer)
    register_data_management_tools(server, repository)
    logger.info("Behavioral tools registered")

    # --- Register resources ---
    register_intervention_resources(server, config)

    # --- Register prompts ---
    register_behavioral_prompts(server)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
