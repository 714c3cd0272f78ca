"""Conversation sessions and their turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from tag_intake.models.enums import ConversationState, Role
from tag_intake.models.slots import SlotRecord


@dataclass(frozen=True)
class Turn:
    """One message in a conversation."""

    role: Role
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ConversationSession:
    """Per-conversation state owned by the session manager.

    ``turns`` is append-only and keeps the order messages were exchanged,
    so the dialogue can be replayed to the responder on every turn.
    """

    id: str
    turns: list[Turn] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]
    slots: SlotRecord = field(default_factory=SlotRecord)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def complete(self) -> bool:
        return self.slots.is_complete

    @property
    def state(self) -> ConversationState:
        return ConversationState.COMPLETE if self.complete else ConversationState.COLLECTING

    @property
    def last_assistant_turn(self) -> Turn | None:
        for turn in reversed(self.turns):
            if turn.role is Role.ASSISTANT:
                return turn
        return None

    def append_exchange(self, user_text: str, assistant_text: str) -> None:
        """Record a completed user/assistant exchange."""
        self.turns.append(Turn(role=Role.USER, text=user_text))
        self.turns.append(Turn(role=Role.ASSISTANT, text=assistant_text))

    def reset_slots(self) -> None:
        """Clear collected slots. History is kept."""
        self.slots = SlotRecord()
