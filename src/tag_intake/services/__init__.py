"""Business logic services for Tag Intake."""

from tag_intake.services.conversation import (
    ConversationManager,
    SuggestedAction,
    TurnResult,
    quick_replies,
    suggested_actions,
)
from tag_intake.services.history import HistoryEvent, HistoryRecorder, InMemoryHistoryRecorder
from tag_intake.services.session_store import SessionStore
from tag_intake.services.tickets import TicketDraft, build_ticket_draft

__all__ = [
    "ConversationManager",
    "HistoryEvent",
    "HistoryRecorder",
    "InMemoryHistoryRecorder",
    "SessionStore",
    "SuggestedAction",
    "TicketDraft",
    "TurnResult",
    "build_ticket_draft",
    "quick_replies",
    "suggested_actions",
]
