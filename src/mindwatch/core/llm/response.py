"""Response parsing for text-analysis LLM output.

Models are asked for bare JSON but often wrap it in prose or code fences,
so the first array or object in the content is extracted and everything
else is ignored. Nothing returned by the model is trusted: numbers are
coerced and clamped, labels are stripped and de-duplicated.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

MAX_LABELS = 10
MAX_LABEL_LENGTH = 80


class MalformedResponseError(ValueError):
    """Raised when LLM content holds no parseable JSON of the expected shape."""


def extract_json_array(content: str) -> list[Any]:
    """Return the first JSON array embedded in ``content``."""
    match = _ARRAY_RE.search(content or "")
    if not match:
        raise MalformedResponseError("No JSON array in response")
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid JSON array: {e}") from e
    if not isinstance(value, list):
        raise MalformedResponseError("Expected a JSON array")
    return value


def extract_json_object(content: str) -> dict[str, Any]:
    """Return the first JSON object embedded in ``content``."""
    match = _OBJECT_RE.search(content or "")
    if not match:
        raise MalformedResponseError("No JSON object in response")
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid JSON object: {e}") from e
    if not isinstance(value, dict):
        raise MalformedResponseError("Expected a JSON object")
    return value


def clean_labels(values: Any) -> list[str]:
    """Keep non-empty string labels, trimmed and de-duplicated case-insensitively."""
    if not isinstance(values, list):
        return []
    seen: set[str] = set()
    labels: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        label = value.strip()[:MAX_LABEL_LENGTH]
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        labels.append(label)
        if len(labels) >= MAX_LABELS:
            break
    return labels


def coerce_score(value: Any, low: float = 0.0, high: float = 100.0) -> float | None:
    """Coerce a model-supplied number into ``[low, high]``.

    Returns ``None`` for anything that is not a finite number (booleans
    included), so a missing or garbled field never becomes a zero.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return max(low, min(high, number))
