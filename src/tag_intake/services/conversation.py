"""Conversation session manager: the slot-filling state machine.

One call to process_turn() is one user turn:
1. Resolve or create the session (serialized per session id)
2. Build the prompt: instructions + replayed history + new user message
3. Await the dialogue responder (the only slow step)
4. Append the user and assistant turns (append-only history)
5. Extract slots from the exchange (confirmation-gated)
6. Merge: a field confirmed this turn replaces the stored value
7. Derive completion, suggested actions and quick replies

States per session: COLLECTING -> COMPLETE (all four slots filled),
COMPLETE -> COLLECTING on reset. No timeout-driven transitions.

A turn is all-or-nothing: if the responder fails or times out, nothing
is appended or merged, and a new session is not registered.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from tag_intake.config import settings
from tag_intake.errors import SessionNotFoundError, UpstreamUnavailableError
from tag_intake.extraction.keywords import PLATFORM_SHORTLIST
from tag_intake.extraction.slot_extractor import SlotExtractor
from tag_intake.inference.prompts import TAG_INTAKE_SYSTEM_PROMPT, build_prompt
from tag_intake.inference.responder import DialogueResponder
from tag_intake.models.conversation import ConversationSession, Turn
from tag_intake.models.enums import ActionKind, ConversationState, HistoryAction, Priority, TagType
from tag_intake.models.slots import SlotRecord
from tag_intake.resolution.resolver import PlatformResolver, PlatformSuggestion
from tag_intake.services.history import HistoryEvent, HistoryRecorder, InMemoryHistoryRecorder
from tag_intake.services.session_store import SessionStore
from tag_intake.services.tickets import TicketDraft, build_ticket_draft
from tag_intake.utils.text import clean_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuggestedAction:
    """An affordance the caller can offer after a turn."""

    action: ActionKind
    label: str
    primary: bool = False


CREATE_ACTION = SuggestedAction(ActionKind.CREATE, "✓ Create Ticket", primary=True)
RESET_ACTION = SuggestedAction(ActionKind.RESET, "🔄 Start Over")


@dataclass(frozen=True)
class TurnResult:
    """What a caller sees after one processed turn."""

    session_id: str
    assistant_text: str
    """Assistant reply cleaned for display."""

    slots: SlotRecord
    complete: bool
    state: ConversationState
    suggested_actions: tuple[SuggestedAction, ...]

    platform_suggestions: tuple[PlatformSuggestion, ...] = ()
    """Ranked candidates when a confirmed platform did not resolve."""

    quick_replies: tuple[str, ...] = ()
    """Reply shortcuts for slots that are still unfilled."""

    confirmed_fields: frozenset[str] = frozenset()
    processing_ms: float = 0.0
    history: tuple[Turn, ...] = field(default=(), repr=False)


def suggested_actions(slots: SlotRecord) -> tuple[SuggestedAction, ...]:
    """Create is offered only when complete; reset always."""
    if slots.is_complete:
        return (CREATE_ACTION, RESET_ACTION)
    return (RESET_ACTION,)


def quick_replies(slots: SlotRecord) -> tuple[str, ...]:
    """Shortcut answers for the unfilled platform, tag type and priority."""
    replies: list[str] = []
    if slots.platform_id is None:
        replies.extend(PLATFORM_SHORTLIST)
    if slots.tag_type is None:
        replies.extend(t.value for t in TagType)
    if slots.priority is None:
        replies.extend(p.value for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH))
    return tuple(replies)


class ConversationManager:
    """Owns conversation sessions and runs turns against them.

    Turns for the same session id are serialized with a per-id lock; turns
    for different sessions share no mutable state and run concurrently.

    Usage:
        manager = ConversationManager(LLMResponder(), resolver)
        result = await manager.process_turn(None, "urgent Nike tracker for DV360")
        result = await manager.process_turn(result.session_id, "yes")
    """

    def __init__(
        self,
        responder: DialogueResponder,
        resolver: PlatformResolver,
        *,
        extractor: SlotExtractor | None = None,
        store: SessionStore | None = None,
        history: HistoryRecorder | None = None,
        instructions: str = TAG_INTAKE_SYSTEM_PROMPT,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            responder: Generates assistant replies.
            resolver: Platform resolver (shared, read-only per turn).
            extractor: Slot extractor (default: SlotExtractor over ``resolver``).
            store: Session store (default: a fresh in-memory store).
            history: Audit sink (default: in-memory recorder).
            instructions: System instructions placed at the top of every prompt.
            timeout_seconds: Responder timeout (default from config).
        """
        self._responder = responder
        self._resolver = resolver
        self._extractor = extractor or SlotExtractor(resolver)
        self._store = store or SessionStore()
        self._history = history or InMemoryHistoryRecorder()
        self._instructions = instructions
        self._timeout = timeout_seconds or settings.responder_timeout_seconds
        # Held or awaited locks only, with their holder + waiter count
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @property
    def responder(self) -> DialogueResponder:
        return self._responder

    @property
    def resolver(self) -> PlatformResolver:
        return self._resolver

    @property
    def history(self) -> HistoryRecorder:
        return self._history

    @property
    def store(self) -> SessionStore:
        return self._store

    # ── Turn processing ─────────────────────────────────────────────────────

    async def process_turn(self, session_id: str | None, user_text: str) -> TurnResult:
        """Run one user turn.

        Args:
            session_id: Existing or new conversation id; None starts a new one.
            user_text: The user's message.

        Returns:
            TurnResult with the reply, merged slots and completion state.

        Raises:
            UpstreamUnavailableError: The responder failed or timed out. The
                session is exactly as it was before the call.
            ValueError: ``user_text`` is blank.
        """
        user_text = user_text.strip()
        if not user_text:
            raise ValueError("Message must not be empty")

        session_id = session_id or self._new_session_id()

        async with self._session_lock(session_id):
            existing = self._store.get(session_id)
            session = existing or ConversationSession(id=session_id)

            await self._emit(session_id, HistoryAction.CHAT_MESSAGE, {"message": user_text})

            prompt = build_prompt(self._instructions, session.turns, user_text)
            start_time = time.monotonic()
            try:
                raw_reply = await self._generate(prompt)
            except UpstreamUnavailableError as e:
                logger.warning("Turn aborted for %s: %s", session_id, e)
                await self._emit(session_id, HistoryAction.ERROR, {"error": str(e)})
                raise
            processing_ms = (time.monotonic() - start_time) * 1000

            extraction = self._extractor.analyze(raw_reply, user_text)

            # Commit point: nothing above this line touched the session
            if existing is None:
                self._store.add(session)
                logger.info("Started conversation %s", session_id)
            session.append_exchange(user_text, raw_reply)
            session.slots = session.slots.merge(extraction.slots)

            result = TurnResult(
                session_id=session_id,
                assistant_text=clean_response(raw_reply),
                slots=session.slots,
                complete=session.complete,
                state=session.state,
                suggested_actions=suggested_actions(session.slots),
                platform_suggestions=extraction.platform_suggestions,
                quick_replies=quick_replies(session.slots),
                confirmed_fields=extraction.confirmed_fields,
                processing_ms=processing_ms,
                history=tuple(session.turns),
            )

        await self._emit(
            session_id,
            HistoryAction.AI_RESPONSE,
            {
                "extracted_data": extraction.slots.to_dict(),
                "confirmed_fields": sorted(extraction.confirmed_fields),
                "complete": result.complete,
                "processing_time_ms": round(processing_ms, 1),
            },
        )
        return result

    async def _generate(self, prompt: str) -> str:
        """Call the responder, mapping every failure to UpstreamUnavailableError."""
        try:
            return await asyncio.wait_for(self._responder.generate(prompt), timeout=self._timeout)
        except UpstreamUnavailableError:
            raise
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailableError(
                f"Dialogue responder timed out after {self._timeout:g}s"
            ) from e
        except Exception as e:
            raise UpstreamUnavailableError(f"Dialogue responder failed: {e}") from e

    # ── Session operations ──────────────────────────────────────────────────

    def get_session(self, session_id: str) -> ConversationSession:
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def get_conversation(self, session_id: str) -> list[Turn]:
        """Replay a conversation's turns in order."""
        return list(self.get_session(session_id).turns)

    async def reset(self, session_id: str) -> ConversationSession:
        """Clear the session's slots (history is kept); back to COLLECTING."""
        async with self._session_lock(session_id):
            session = self.get_session(session_id)
            session.reset_slots()
            logger.info("Reset slots for conversation %s", session_id)
            return session

    async def materialize_ticket(self, session_id: str) -> TicketDraft:
        """Produce the ticket draft for a complete conversation.

        Raises:
            SessionNotFoundError: Unknown session id.
            IncompleteSlotsError: Not all slots are filled; carries ``missing``.
        """
        async with self._session_lock(session_id):
            session = self.get_session(session_id)
            draft = build_ticket_draft(session, self._resolver.catalog)

        await self._emit(session_id, HistoryAction.TICKET_MATERIALIZED, draft.to_dict())
        return draft

    # ── Internals ───────────────────────────────────────────────────────────

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncIterator[None]:
        """Serialize work on one session id.

        The lock is dropped once nobody holds or waits for it, so unknown ids
        and failed first turns leave nothing behind.
        """
        entry = self._locks.get(session_id)
        lock, users = entry if entry is not None else (asyncio.Lock(), 0)
        self._locks[session_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[session_id]
            if users == 1:
                del self._locks[session_id]
            else:
                self._locks[session_id] = (lock, users - 1)

    @staticmethod
    def _new_session_id() -> str:
        return f"conv_{uuid4().hex}"

    async def _emit(self, session_id: str, action: HistoryAction, data: dict[str, Any]) -> None:
        try:
            await self._history.record(HistoryEvent(session_id=session_id, action=action, data=data))
        except Exception as e:
            logger.warning("History sink failed to record %s for %s: %s", action.value, session_id, e)
