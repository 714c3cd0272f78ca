"""Keyed store of conversation sessions."""

from __future__ import annotations

from collections.abc import Iterator

from tag_intake.models.conversation import ConversationSession


class SessionStore:
    """In-process map of session id → ConversationSession.

    Owned by the ConversationManager, which serializes every mutation per
    session id. Eviction and persistence belong to whatever replaces this
    store in a deployment.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}

    def get(self, session_id: str) -> ConversationSession | None:
        return self._sessions.get(session_id)

    def add(self, session: ConversationSession) -> None:
        if session.id in self._sessions:
            raise ValueError(f"Session already exists: {session.id}")
        self._sessions[session.id] = session

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ConversationSession]:
        return iter(list(self._sessions.values()))
