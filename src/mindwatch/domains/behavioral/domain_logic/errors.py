"""Error taxonomy for the behavioral risk engine."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when an entry field is outside its declared domain.

    Rejects the single offending entry; history and other entries are
    unaffected.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class CollaboratorUnavailableError(Exception):
    """Raised when text analysis or the record store cannot be reached.

    Callers catch this at the tool boundary and fall back to rule-based
    results.
    """

    def __init__(self, collaborator: str, message: str = "") -> None:
        self.collaborator = collaborator
        super().__init__(f"{collaborator} unavailable" + (f": {message}" if message else ""))


class InsufficientHistoryError(Exception):
    """Raised internally when a trend window is empty.

    Never escapes the trend analyzer; it surfaces as
    ``TrendLabel.INSUFFICIENT_DATA``.
    """
