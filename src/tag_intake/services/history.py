"""History/audit events emitted per turn.

The sink is fire-and-forget from the conversation's point of view: the
manager logs and ignores any failure to record an event.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from tag_intake.models.enums import HistoryAction


@dataclass(frozen=True)
class HistoryEvent:
    """One audit event for a conversation."""

    session_id: str
    action: HistoryAction
    data: dict[str, Any] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "action": self.action.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


class HistoryRecorder(Protocol):
    """Receives audit events. Implementations may be slow or fail."""

    async def record(self, event: HistoryEvent) -> None: ...


class InMemoryHistoryRecorder:
    """Keeps events per session, in emission order."""

    def __init__(self) -> None:
        self._events: defaultdict[str, list[HistoryEvent]] = defaultdict(list)

    async def record(self, event: HistoryEvent) -> None:
        self._events[event.session_id].append(event)

    def events(self, session_id: str) -> list[HistoryEvent]:
        return list(self._events.get(session_id, []))

    def all(self) -> list[HistoryEvent]:
        merged = [event for events in self._events.values() for event in events]
        return sorted(merged, key=lambda e: e.timestamp)
