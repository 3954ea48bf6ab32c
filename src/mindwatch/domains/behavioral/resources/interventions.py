"""MCP Resources for intervention catalog discovery."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastmcp import FastMCP

from mindwatch.domains.behavioral.domain_logic.interventions import (
    EMERGENCY_RESOURCES,
    INTERVENTION_CATALOG,
)

if TYPE_CHECKING:
    from mindwatch.domains.behavioral.domain_logic.engine_config import EngineConfig


def register_intervention_resources(mcp: FastMCP, config: EngineConfig) -> None:
    """Register catalog and configuration resources on the MCP server."""

    @mcp.resource("interventions://catalog")
    def intervention_catalog_resource() -> str:
        """Every intervention strategy by risk tier, plus the emergency directory."""
        return json.dumps(
            {
                "tiers": {
                    tier.value: [s.to_dict() for s in strategies]
                    for tier, strategies in INTERVENTION_CATALOG.items()
                },
                "emergency_resources": [asdict(r) for r in EMERGENCY_RESOURCES],
            },
            indent=2,
        )

    @mcp.resource("config://engine")
    def engine_config_resource() -> str:
        """Active scoring configuration: history window, trend threshold, tier cut-offs."""
        return json.dumps(
            {
                "history_window": config.history_window,
                "trend_threshold": config.trend_threshold,
                "thresholds": asdict(config.thresholds),
                "ai_blend_weight": config.ai_blend_weight,
                "keyword_detection_enabled": config.keyword_detection_enabled,
            },
            indent=2,
        )
