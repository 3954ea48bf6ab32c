"""Shared payload helpers for the behavioral MCP tools."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any

from mindwatch.core.storage.database import DatabaseError
from mindwatch.core.storage.encryption import EncryptionError
from mindwatch.core.storage.models import StoredEntry
from mindwatch.core.storage.repository import RepositoryError
from mindwatch.domains.behavioral.domain_logic.errors import InvalidInputError
from mindwatch.domains.behavioral.domain_logic.risk_models import (
    DailyMetricEntry,
    Domain,
    entry_from_payload,
)

logger = logging.getLogger(__name__)

# Degradation reasons reported in tool results
TEXT_ANALYSIS_UNAVAILABLE = "text_analysis_unavailable"
STORAGE_UNAVAILABLE = "storage_unavailable"

# Anything the record store can raise when it is unreachable or corrupt
STORAGE_ERRORS = (DatabaseError, EncryptionError, RepositoryError, sqlite3.Error)


def error_response(kind: str, message: str, code: int = 400, **extra: Any) -> str:
    """JSON error payload; ``code`` mirrors the HTTP class (400 input, 503 collaborator)."""
    payload: dict[str, Any] = {"status": "error", "error": kind, "code": code, "message": message}
    payload.update(extra)
    return json.dumps(payload)


def invalid_input_response(exc: InvalidInputError) -> str:
    logger.info("Rejected entry: %s", exc)
    return error_response("invalid_input", str(exc), 400, field=exc.field)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; empty means now. Naive values are taken as UTC.

    Raises:
        InvalidInputError: If the value is not ISO 8601.
    """
    if not value:
        return datetime.now(timezone.utc)
    try:
        ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidInputError("timestamp", value, "expected ISO 8601") from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def stored_to_entry(stored: StoredEntry) -> DailyMetricEntry:
    """Rebuild a domain entry from a decrypted store row."""
    return entry_from_payload(
        Domain(stored.domain), stored.payload, parse_timestamp(stored.timestamp)
    )
