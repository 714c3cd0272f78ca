"""Data models for Tag Intake."""

from tag_intake.models.conversation import ConversationSession, Turn
from tag_intake.models.enums import (
    ActionKind,
    ConversationState,
    HistoryAction,
    Priority,
    Role,
    TagType,
)
from tag_intake.models.platform import Platform, PlatformCatalogConfig, PlatformDefinition
from tag_intake.models.slots import SLOT_NAMES, SlotRecord

__all__ = [
    "ActionKind",
    "ConversationSession",
    "ConversationState",
    "HistoryAction",
    "Platform",
    "PlatformCatalogConfig",
    "PlatformDefinition",
    "Priority",
    "Role",
    "SLOT_NAMES",
    "SlotRecord",
    "TagType",
    "Turn",
]
