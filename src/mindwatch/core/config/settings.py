"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """MindWatch server and engine configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: there is no auth layer in front of these tools.
    mindwatch_host: str = "127.0.0.1"
    mindwatch_port: int = 8001
    mindwatch_log_level: str = "info"
    mindwatch_allow_insecure_bind: bool = False

    # Text-analysis collaborator ("none" disables it)
    llm_provider: Literal["anthropic", "openai", "mock", "none"] = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    text_analysis_timeout_s: float = 15.0
    ai_blend_weight: float = 0.25

    # Trigger detection
    keyword_detection_enabled: bool = True
    trigger_keywords_path: str = ""

    # Engine
    history_window: int = 7
    trend_threshold: float = 0.5
    tier_high_wellness: float = 40.0
    tier_medium_wellness: float = 70.0
    tier_high_domain: float = 70.0
    tier_medium_domain: float = 40.0
    tier_hysteresis_margin: float = 0.0

    # Storage (record store)
    db_path: str = "~/.mindwatch/entries.db"
    encryption_key: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
