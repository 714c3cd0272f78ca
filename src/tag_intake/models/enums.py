"""Enumerations for the Tag Intake data model."""

from enum import Enum


class Role(str, Enum):
    """Who authored a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class TagType(str, Enum):
    """The two kinds of tag a request can ask for."""

    TRACKER = "Tracker"
    VIDEO_WRAPPER = "Video Wrapper"


class Priority(str, Enum):
    """Ticket urgency. Never defaulted; only set once confirmed."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ConversationState(str, Enum):
    """Slot-filling state of a conversation.

    COLLECTING → COMPLETE once all four slots are filled.
    COMPLETE → COLLECTING only on explicit reset.
    """

    COLLECTING = "collecting"
    COMPLETE = "complete"


class ActionKind(str, Enum):
    """Affordances offered to the caller after a turn."""

    CREATE = "create"  # Only offered when the conversation is COMPLETE
    RESET = "reset"  # Always offered


class HistoryAction(str, Enum):
    """Events emitted to the history/audit sink."""

    CHAT_MESSAGE = "chat_message"
    AI_RESPONSE = "ai_response"
    ERROR = "error"
    TICKET_MATERIALIZED = "ticket_materialized"
