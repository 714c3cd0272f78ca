"""The four-slot record a tag request converges on."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from tag_intake.models.enums import Priority, TagType

# Slot names in the order the dialogue collects them
SLOT_NAMES: tuple[str, ...] = ("client", "platform", "tag_type", "priority")


@dataclass(frozen=True)
class SlotRecord:
    """Client, platform, tag type and priority for one request.

    Every field is optional. Values only arrive through confirmation-gated
    extraction, never from an ambient keyword mention.
    """

    client: str | None = None

    platform_id: str | None = None
    """Resolved catalog id. The platform slot counts as filled only when set."""

    platform_name: str | None = None
    """Canonical display name of the resolved platform."""

    platform_raw: str | None = None
    """Platform text as extracted, kept for feedback when it does not resolve."""

    tag_type: TagType | None = None
    priority: Priority | None = None

    def _slot_value(self, name: str) -> Any:
        if name == "platform":
            return self.platform_id
        return getattr(self, name)

    @property
    def missing(self) -> list[str]:
        """Slot names still unfilled, in collection order."""
        return [name for name in SLOT_NAMES if self._slot_value(name) is None]

    @property
    def is_complete(self) -> bool:
        return not self.missing

    @property
    def is_empty(self) -> bool:
        return all(self._slot_value(name) is None for name in SLOT_NAMES) and (
            self.platform_raw is None
        )

    def merge(self, update: SlotRecord) -> SlotRecord:
        """Overlay the non-null fields of ``update`` onto this record.

        A field present in ``update`` was confirmed again this turn, so it
        replaces the stored value (user corrections win). Null fields in
        ``update`` never clear a stored value.
        """
        merged = self
        if update.client is not None:
            merged = replace(merged, client=update.client)
        if update.platform_id is not None:
            merged = replace(
                merged,
                platform_id=update.platform_id,
                platform_name=update.platform_name,
                platform_raw=update.platform_raw,
            )
        elif update.platform_raw is not None:
            merged = replace(merged, platform_raw=update.platform_raw)
        if update.tag_type is not None:
            merged = replace(merged, tag_type=update.tag_type)
        if update.priority is not None:
            merged = replace(merged, priority=update.priority)
        return merged

    def to_dict(self) -> dict[str, Any]:
        return {
            "client": self.client,
            "platform_id": self.platform_id,
            "platform": self.platform_name,
            "platform_raw": self.platform_raw,
            "tag_type": self.tag_type.value if self.tag_type else None,
            "priority": self.priority.value if self.priority else None,
        }
