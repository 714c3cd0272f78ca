"""Error types raised by Tag Intake."""

from __future__ import annotations


class TagIntakeError(Exception):
    """Base class for Tag Intake errors."""


class UpstreamUnavailableError(TagIntakeError):
    """Raised when the dialogue responder fails, times out, or is unconfigured.

    The turn that raised it left the session untouched and can be retried
    by resending the same message.
    """


class IncompleteSlotsError(TagIntakeError):
    """Raised when a ticket is requested before all four slots are filled."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


class SessionNotFoundError(TagIntakeError):
    """Raised when an operation names a conversation that does not exist."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Conversation not found: {session_id}")


class CatalogConfigError(TagIntakeError):
    """Raised when the platform catalog source cannot be read or parsed."""
