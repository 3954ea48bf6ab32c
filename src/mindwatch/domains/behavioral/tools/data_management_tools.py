"""MCP tools for managing stored entries (listing, deletion, retention).

Self-reported mood notes and sleep records are sensitive; these tools let
the user see exactly what is stored and remove any of it.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from mindwatch.domains.behavioral.domain_logic.risk_models import Domain
from mindwatch.domains.behavioral.tools.common import error_response

if TYPE_CHECKING:
    from mindwatch.core.storage.repository import BehavioralRepository

logger = logging.getLogger(__name__)


def register_data_management_tools(mcp: FastMCP, repository: BehavioralRepository) -> None:
    """Register data management tools on the MCP server."""

    @mcp.tool
    async def list_entries(ctx: Context, domain: str = "", limit: int = 20) -> str:
        """List stored entries, newest first.

        Args:
            domain: 'mood', 'sleep' or 'activity'. Empty for all domains.
            limit: Maximum number of entries to return (1-100).
        """
        target = None
        if domain:
            try:
                target = Domain(domain.strip().lower())
            except ValueError:
                return error_response("invalid_input", f"Unknown domain {domain!r}", field="domain")
        entries = repository.get_entries(target, limit=max(1, min(limit, 100)))
        return json.dumps({
            "status": "ok",
            "count": len(entries),
            "entries": [asdict(e) for e in entries],
        })

    @mcp.tool
    async def delete_entry(ctx: Context, entry_id: str) -> str:
        """Delete one stored entry.

        Past assessments are kept; the next assessment no longer sees the entry.

        Args:
            entry_id: The UUID returned when the entry was logged.
        """
        if repository.delete_entry(entry_id):
            return json.dumps({"status": "deleted", "entry_id": entry_id})
        return json.dumps({
            "status": "not_found",
            "entry_id": entry_id,
            "message": "No entry found with that ID.",
        })

    @mcp.tool
    async def purge_old_data(ctx: Context, older_than_days: int = 365) -> str:
        """Delete entries, assessments and intervention logs older than N days.

        Args:
            older_than_days: Delete data older than this many days (default: 365).
        """
        if older_than_days < 1:
            return error_response(
                "invalid_input", "older_than_days must be at least 1.", field="older_than_days"
            )

        start_time = time.monotonic()
        count = repository.purge_before_days(older_than_days)
        elapsed_ms = (time.monotonic() - start_time) * 1000
        return json.dumps({
            "status": "purged",
            "entries_deleted": count,
            "older_than_days": older_than_days,
            "duration_ms": round(elapsed_ms, 1),
        })

    @mcp.tool
    async def delete_all_data(ctx: Context, confirm: str = "") -> str:
        """Permanently delete ALL stored entries, assessments and intervention logs.

        Args:
            confirm: Must be exactly 'DELETE_ALL' to proceed. Safety gate.
        """
        if confirm != "DELETE_ALL":
            return json.dumps({
                "status": "cancelled",
                "message": (
                    "To delete all data, call this tool with "
                    "confirm='DELETE_ALL'. This action cannot be undone."
                ),
            })

        count = repository.delete_all_data()
        return json.dumps({
            "status": "all_deleted",
            "entries_deleted": count,
            "message": "All stored data has been permanently deleted.",
        })
