"""Platform entities and their configuration payload."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import AliasChoices, BaseModel, Field

# Platforms without an explicit rank sort after every ranked one
DEFAULT_PRIORITY_RANK = 999


@dataclass(frozen=True)
class Platform:
    """A canonical advertising platform.

    Immutable once built into a catalog, so it can be shared across
    concurrent turns without locking.
    """

    id: str
    name: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    priority_rank: int = DEFAULT_PRIORITY_RANK
    active: bool = True

    @property
    def names(self) -> tuple[str, ...]:
        """Canonical name followed by every alias."""
        return (self.name, *self.aliases)


class PlatformDefinition(BaseModel):
    """One raw entry of the platform catalog source."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    aliases: list[str] = Field(default_factory=list)
    active: bool = True
    priority: int = Field(
        default=DEFAULT_PRIORITY_RANK,
        validation_alias=AliasChoices("priority", "priority_rank", "priorityRank"),
        description="Lower is preferred when suggestion scores tie",
    )

    def to_platform(self) -> Platform:
        return Platform(
            id=self.id,
            name=self.name,
            aliases=tuple(self.aliases),
            priority_rank=self.priority,
            active=self.active,
        )

    @classmethod
    def from_platform(cls, platform: Platform) -> PlatformDefinition:
        return cls(
            id=platform.id,
            name=platform.name,
            aliases=list(platform.aliases),
            active=platform.active,
            priority=platform.priority_rank,
        )


class PlatformCatalogConfig(BaseModel):
    """The full catalog source payload."""

    platforms: list[PlatformDefinition] = Field(default_factory=list)
