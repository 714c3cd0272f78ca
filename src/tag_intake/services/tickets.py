"""Ticket drafts handed to an external ticket store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from tag_intake.errors import IncompleteSlotsError
from tag_intake.models.conversation import ConversationSession, Turn
from tag_intake.models.enums import Priority, TagType
from tag_intake.models.slots import SLOT_NAMES
from tag_intake.resolution.catalog import PlatformCatalog


@dataclass(frozen=True)
class TicketDraft:
    """Finalized slots of a complete conversation, ready to persist."""

    session_id: str
    client: str
    platform_id: str
    platform_name: str
    tag_type: TagType
    priority: Priority
    conversation: tuple[Turn, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "client": self.client,
            "platform_id": self.platform_id,
            "platform": self.platform_name,
            "tag_type": self.tag_type.value,
            "priority": self.priority.value,
            "conversation": [
                {"role": turn.role.value, "text": turn.text} for turn in self.conversation
            ],
            "created_at": self.created_at.isoformat(),
        }


def build_ticket_draft(session: ConversationSession, catalog: PlatformCatalog) -> TicketDraft:
    """Materialize a ticket draft from a complete session.

    The platform is looked up again in the current catalog so the draft
    carries today's canonical name. A platform removed by a catalog update
    counts as missing.

    Raises:
        IncompleteSlotsError: If any slot is unfilled. No draft is produced.
    """
    slots = session.slots
    platform = catalog.get(slots.platform_id) if slots.platform_id else None
    client, tag_type, priority = slots.client, slots.tag_type, slots.priority

    if platform is None or client is None or tag_type is None or priority is None:
        present = {"client": client, "platform": platform, "tag_type": tag_type, "priority": priority}
        raise IncompleteSlotsError([name for name in SLOT_NAMES if present[name] is None])

    return TicketDraft(
        session_id=session.id,
        client=client,
        platform_id=platform.id,
        platform_name=platform.name,
        tag_type=tag_type,
        priority=priority,
        conversation=tuple(session.turns),
    )
