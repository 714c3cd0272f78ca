"""Request and response schemas for the HTTP API.

The service layer works with dataclasses; these pydantic models are the
wire shapes, built from them at the edge.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from tag_intake.models.conversation import ConversationSession, Turn
from tag_intake.models.enums import ConversationState
from tag_intake.models.platform import Platform, PlatformDefinition
from tag_intake.models.slots import SlotRecord
from tag_intake.resolution.resolver import PlatformSuggestion
from tag_intake.services.conversation import TurnResult


class ChatRequest(BaseModel):
    """One user message, optionally continuing a conversation."""

    message: str = Field(min_length=1, max_length=2000)
    conversation_id: str | None = Field(
        default=None, description="Omit to start a new conversation"
    )


class PlatformOut(BaseModel):
    id: str
    name: str
    aliases: list[str]
    active: bool
    priority: int

    @classmethod
    def from_platform(cls, platform: Platform) -> PlatformOut:
        return cls(
            id=platform.id,
            name=platform.name,
            aliases=list(platform.aliases),
            active=platform.active,
            priority=platform.priority_rank,
        )


class SuggestionOut(BaseModel):
    id: str
    name: str
    score: float = Field(ge=0.0, le=1.0)
    aliases: list[str] = Field(default_factory=list)

    @classmethod
    def from_suggestion(cls, suggestion: PlatformSuggestion) -> SuggestionOut:
        return cls.model_validate(suggestion.to_dict())


class ResolveResponse(BaseModel):
    """Either a resolved platform or ranked suggestions, never both."""

    query: str
    platform: PlatformOut | None = None
    suggestions: list[SuggestionOut] = Field(default_factory=list)


class PlatformUpdateRequest(BaseModel):
    platforms: list[PlatformDefinition] = Field(min_length=1)
    persist: bool = Field(default=False, description="Also write the new list to the config file")


class SlotsOut(BaseModel):
    client: str | None = None
    platform_id: str | None = None
    platform: str | None = None
    platform_raw: str | None = None
    tag_type: str | None = None
    priority: str | None = None

    @classmethod
    def from_slots(cls, slots: SlotRecord) -> SlotsOut:
        return cls.model_validate(slots.to_dict())


class ActionOut(BaseModel):
    action: str
    label: str
    primary: bool = False


class TurnOut(BaseModel):
    role: str
    text: str
    created_at: datetime

    @classmethod
    def from_turn(cls, turn: Turn) -> TurnOut:
        return cls(role=turn.role.value, text=turn.text, created_at=turn.created_at)


class ChatResponse(BaseModel):
    conversation_id: str
    response: str
    extracted_data: SlotsOut
    missing_fields: list[str]
    complete: bool
    state: ConversationState
    suggested_actions: list[ActionOut]
    platform_suggestions: list[SuggestionOut] = Field(default_factory=list)
    quick_replies: list[str] = Field(default_factory=list)
    processing_time_ms: float

    @classmethod
    def from_result(cls, result: TurnResult) -> ChatResponse:
        return cls(
            conversation_id=result.session_id,
            response=result.assistant_text,
            extracted_data=SlotsOut.from_slots(result.slots),
            missing_fields=result.slots.missing,
            complete=result.complete,
            state=result.state,
            suggested_actions=[
                ActionOut(action=a.action.value, label=a.label, primary=a.primary)
                for a in result.suggested_actions
            ],
            platform_suggestions=[
                SuggestionOut.from_suggestion(s) for s in result.platform_suggestions
            ],
            quick_replies=list(result.quick_replies),
            processing_time_ms=round(result.processing_ms, 1),
        )


class ConversationOut(BaseModel):
    conversation_id: str
    state: ConversationState
    complete: bool
    extracted_data: SlotsOut
    missing_fields: list[str]
    history: list[TurnOut]
    created_at: datetime

    @classmethod
    def from_session(cls, session: ConversationSession) -> ConversationOut:
        return cls(
            conversation_id=session.id,
            state=session.state,
            complete=session.complete,
            extracted_data=SlotsOut.from_slots(session.slots),
            missing_fields=session.slots.missing,
            history=[TurnOut.from_turn(t) for t in session.turns],
            created_at=session.created_at,
        )
