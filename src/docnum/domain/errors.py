"""Numbering error taxonomy.

``ConfigurationError`` and ``ExhaustedSequenceError`` reach the caller and
need explicit handling. ``PersistenceError`` is surfaced as-is because no
invariant holds without durable storage. ``RemoteUnavailableError`` never
leaves the remote client.
"""

from __future__ import annotations


class NumberingError(Exception):
    """Base class for all numbering engine errors."""

    code = "NUMBERING_ERROR"


class ConfigurationError(NumberingError):
    """A config is unusable, or a value does not match the configured shape."""

    code = "CONFIGURATION_ERROR"


class ExhaustedSequenceError(NumberingError):
    """The collision loop ran past ``max_attempts`` without a free candidate."""

    code = "SEQUENCE_EXHAUSTED"

    def __init__(self, number_type: str, attempts: int) -> None:
        super().__init__(
            f"Unable to generate a unique {number_type} number after {attempts} attempts"
        )
        self.number_type = number_type
        self.attempts = attempts


class PersistenceError(NumberingError):
    """The backing key-value store failed to read or write."""

    code = "PERSISTENCE_ERROR"


class RemoteUnavailableError(NumberingError):
    """The remote numbering authority could not produce a number."""

    code = "REMOTE_UNAVAILABLE"
