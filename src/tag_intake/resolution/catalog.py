"""Platform catalog: canonical platforms and their alias index.

The catalog is built once (at start, or on a hot update) and never mutated
afterwards. Updates build a new catalog and swap the reference, so readers
never need a lock.

Alias index rules:
- Keys are normalize_key() of the canonical name and of every alias
- Only active platforms are indexed (inactive ones are listed, never matched)
- A key claimed by two platforms goes to the last-registered one (logged)
- A repeated platform id replaces the earlier definition (logged)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from tag_intake.errors import CatalogConfigError
from tag_intake.models.platform import Platform, PlatformCatalogConfig, PlatformDefinition
from tag_intake.resolution.similarity import normalize_key

logger = logging.getLogger(__name__)


# Built-in fallback used when the config source is unreadable. Covers the
# platforms the dialogue offers plus the long-standing social/retail ones.
# Meta is kept but inactive: the dialogue never offers it as a platform.
DEFAULT_PLATFORMS: tuple[PlatformDefinition, ...] = (
    PlatformDefinition(
        id="google-dv360",
        name="Google DV360",
        aliases=["DV360", "Google Display", "GDN", "Display & Video 360"],
        priority=1,
    ),
    PlatformDefinition(
        id="trade-desk",
        name="The Trade Desk",
        aliases=["TTD", "TradeDesk", "Trade Desk"],
        priority=2,
    ),
    PlatformDefinition(
        id="xandr",
        name="Xandr",
        aliases=["AppNexus", "Xandr Invest", "Xandr Monetize", "Microsoft Advertising"],
        priority=3,
    ),
    PlatformDefinition(
        id="google-ad-manager",
        name="Google Ad Manager",
        aliases=["GAM", "DFP", "DoubleClick", "DoubleClick for Publishers"],
        priority=4,
    ),
    PlatformDefinition(
        id="amazon",
        name="Amazon DSP",
        aliases=["Amazon", "Amazon Advertising", "Amazon Ads", "AAP"],
        priority=5,
    ),
    PlatformDefinition(id="criteo", name="Criteo", aliases=["Criteo Ads"], priority=6),
    PlatformDefinition(id="taboola", name="Taboola", aliases=["Taboola Ads"], priority=7),
    PlatformDefinition(id="outbrain", name="Outbrain", aliases=["Outbrain Amplify"], priority=8),
    PlatformDefinition(
        id="tiktok",
        name="TikTok Ads",
        aliases=["TikTok", "TikTok for Business"],
        priority=9,
    ),
    PlatformDefinition(
        id="linkedin",
        name="LinkedIn Ads",
        aliases=["LinkedIn", "LinkedIn Campaign Manager"],
        priority=10,
    ),
    PlatformDefinition(id="snapchat", name="Snapchat", aliases=["Snap", "Snapchat Ads"], priority=11),
    PlatformDefinition(id="pinterest", name="Pinterest", aliases=["Pinterest Ads"], priority=12),
    PlatformDefinition(id="reddit", name="Reddit", aliases=["Reddit Ads"], priority=13),
    PlatformDefinition(
        id="meta",
        name="Meta",
        aliases=["Facebook", "Meta Ads", "FB", "Instagram Ads"],
        active=False,
        priority=14,
    ),
)


class PlatformCatalog:
    """Immutable set of canonical platforms with a normalized alias index.

    Usage:
        catalog = PlatformCatalog.build(definitions)
        platform = catalog.lookup_exact("Display & Video 360")
        ranked = catalog.all(active_only=True)
    """

    def __init__(self, platforms: Iterable[Platform]) -> None:
        by_id: dict[str, Platform] = {}
        for platform in platforms:
            if platform.id in by_id:
                logger.warning(
                    "Duplicate platform id %r: %r replaces %r",
                    platform.id, platform.name, by_id[platform.id].name,
                )
            by_id[platform.id] = platform

        self._by_id = by_id
        self._platforms = tuple(by_id.values())
        self._alias_index = self._build_alias_index(self._platforms)

    @classmethod
    def build(cls, definitions: Iterable[PlatformDefinition]) -> PlatformCatalog:
        """Build a catalog from raw platform definitions."""
        return cls(definition.to_platform() for definition in definitions)

    @classmethod
    def defaults(cls) -> PlatformCatalog:
        """Build the catalog from the built-in fallback list."""
        return cls.build(DEFAULT_PLATFORMS)

    @staticmethod
    def _build_alias_index(platforms: tuple[Platform, ...]) -> dict[str, Platform]:
        index: dict[str, Platform] = {}
        for platform in platforms:
            if not platform.active:
                continue
            for name in platform.names:
                key = normalize_key(name)
                if not key:
                    continue
                existing = index.get(key)
                if existing is not None and existing.id != platform.id:
                    logger.warning(
                        "Alias %r of %r already maps to %r; last registered wins",
                        name, platform.id, existing.id,
                    )
                index[key] = platform
        return index

    def lookup_exact(self, value: str) -> Platform | None:
        """Find the active platform whose name or alias normalizes to ``value``."""
        key = normalize_key(value)
        if not key:
            return None
        return self._alias_index.get(key)

    def get(self, platform_id: str) -> Platform | None:
        """Find a platform (active or not) by id."""
        return self._by_id.get(platform_id)

    def all(self, active_only: bool = True) -> list[Platform]:
        """Platforms ordered by priority rank (registration order on ties)."""
        platforms = [p for p in self._platforms if p.active or not active_only]
        return sorted(platforms, key=lambda p: p.priority_rank)

    def definitions(self) -> list[PlatformDefinition]:
        """Round-trip the catalog back to its source payload."""
        return [PlatformDefinition.from_platform(p) for p in self._platforms]

    @property
    def alias_count(self) -> int:
        return len(self._alias_index)

    def __len__(self) -> int:
        return len(self._platforms)

    def __iter__(self):
        return iter(self._platforms)


def read_catalog_config(path: Path) -> list[PlatformDefinition]:
    """Read and validate a catalog source file.

    Raises:
        CatalogConfigError: If the file is missing, unreadable, not JSON,
            or does not match the catalog payload shape.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogConfigError(f"Cannot read platform config {path}: {e}") from e

    try:
        config = PlatformCatalogConfig.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise CatalogConfigError(f"Invalid platform config {path}: {e}") from e

    return config.platforms


def save_catalog_config(path: Path, definitions: Iterable[PlatformDefinition]) -> None:
    """Write a catalog payload back to ``path``."""
    config = PlatformCatalogConfig(platforms=list(definitions))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2) + "\n", encoding="utf-8")


def load_catalog(path: Path) -> PlatformCatalog:
    """Build the catalog from ``path``, falling back to the built-in defaults.

    Resolution must never be left without platforms, so an unreadable,
    invalid, or empty source degrades to DEFAULT_PLATFORMS.
    """
    try:
        definitions = read_catalog_config(path)
    except CatalogConfigError as e:
        logger.warning("%s; using built-in default platforms", e)
        return PlatformCatalog.defaults()

    if not any(d.active for d in definitions):
        logger.warning("Platform config %s has no active platforms; using defaults", path)
        return PlatformCatalog.defaults()

    catalog = PlatformCatalog.build(definitions)
    logger.info(
        "Loaded %d platforms with %d aliases from %s",
        len(catalog), catalog.alias_count, path,
    )
    return catalog
