"""Keyword-based trigger detection for free-text notes.

This is a low-precision heuristic kept apart from the text-analysis
collaborator: either source can be switched off on its own, and collaborator
labels are merged with (never substituted for) the keyword labels.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TRIGGER_KEYWORDS: dict[str, str] = {
    "work": "Work Stress",
    "sleep": "Sleep Issues",
    "social": "Social Anxiety",
    "family": "Family Tension",
}

# Notes this short carry too little context for keyword matching
MIN_TEXT_LENGTH = 10


class TriggerDetector:
    """Case-insensitive substring matcher over a keyword -> label table."""

    def __init__(
        self,
        keywords: Mapping[str, str] | None = None,
        *,
        enabled: bool = True,
    ) -> None:
        table = DEFAULT_TRIGGER_KEYWORDS if keywords is None else keywords
        self._keywords = {k.lower(): v for k, v in table.items() if k.strip()}
        self.enabled = enabled

    @property
    def keywords(self) -> dict[str, str]:
        return dict(self._keywords)

    def detect(self, text: str | None) -> frozenset[str]:
        """Return the trigger labels whose keyword appears in ``text``.

        Text of 10 characters or fewer yields an empty set, as does a
        disabled detector.
        """
        if not self.enabled or not text or len(text) <= MIN_TEXT_LENGTH:
            return frozenset()
        lowered = text.lower()
        return frozenset(label for kw, label in self._keywords.items() if kw in lowered)


def merge_triggers(rule_labels: Iterable[str], external_labels: Iterable[str] = ()) -> list[str]:
    """Union of keyword and collaborator labels, de-duplicated case-insensitively.

    Keyword labels come first (sorted), then collaborator labels in the
    order received.
    """
    merged: list[str] = []
    seen: set[str] = set()
    for label in [*sorted(rule_labels), *external_labels]:
        cleaned = label.strip() if isinstance(label, str) else ""
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            merged.append(cleaned)
    return merged


def load_keyword_table(path: str | Path) -> dict[str, str]:
    """Load a keyword -> label table from YAML.

    The file is either a flat mapping or a mapping under a ``triggers`` key::

        triggers:
          work: Work Stress
          lonely: Loneliness

    Raises:
        ValueError: If the file does not contain a string -> string mapping.
    """
    path = Path(path).expanduser()
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if isinstance(data, dict) and "triggers" in data:
        data = data["triggers"]
    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in data.items()
    ):
        raise ValueError(f"Trigger keyword file must map keywords to labels: {path}")

    logger.info("Loaded %d trigger keywords from %s", len(data), path)
    return dict(data)
