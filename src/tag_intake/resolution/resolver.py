"""Fuzzy platform resolution.

Algorithm overview:
1. Normalize the raw input (normalize_key)
2. Exact alias lookup in the catalog (HIGHEST PRIORITY)
   - A registered name/alias always wins, whatever other platforms score
3. Fuzzy scoring against every active platform
   - Best similarity over canonical name and all aliases, per platform
4. Decision
   - resolve(): accept the best platform only if score > T_accept (0.8)
   - suggest(): keep platforms with score > T_suggest (0.3), ranked by
     score desc, then priority rank asc, truncated to the limit

T_accept is strict because a wrong platform silently corrupts a ticket;
T_suggest is loose so near-miss typos still get useful candidates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from tag_intake.config import settings
from tag_intake.models.platform import Platform, PlatformDefinition
from tag_intake.resolution.catalog import PlatformCatalog, save_catalog_config
from tag_intake.resolution.similarity import normalize_key, similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformSuggestion:
    """A candidate platform with its best similarity score."""

    platform: Platform
    score: float

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.platform.id,
            "name": self.platform.name,
            "score": round(self.score, 4),
            "aliases": list(self.platform.aliases),
        }


@dataclass(frozen=True)
class ResolutionResult:
    """Either one resolved platform or ranked suggestions, never both."""

    platform: Platform | None = None
    suggestions: tuple[PlatformSuggestion, ...] = ()

    def __post_init__(self) -> None:
        if self.platform is not None and self.suggestions:
            raise ValueError("ResolutionResult carries a platform or suggestions, not both")

    @property
    def resolved(self) -> bool:
        return self.platform is not None

    @property
    def ambiguous(self) -> bool:
        """Unresolved, but with candidates worth offering."""
        return self.platform is None and bool(self.suggestions)


class PlatformResolver:
    """Resolves free-text platform names to catalog platforms.

    Holds a reference to an immutable catalog; update_platforms() swaps in
    a freshly built one, so concurrent readers see either the old or the
    new catalog, never a partial one.

    Usage:
        resolver = PlatformResolver(load_catalog(path))
        platform = resolver.resolve("dv360")
        candidates = resolver.suggest("trad desk", limit=3)
    """

    def __init__(
        self,
        catalog: PlatformCatalog,
        *,
        accept_threshold: float | None = None,
        min_suggestion_score: float | None = None,
        suggestion_limit: int | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            catalog: Platform catalog to resolve against.
            accept_threshold: Fuzzy acceptance threshold (default from config).
            min_suggestion_score: Suggestion floor (default from config).
            suggestion_limit: Default number of suggestions (default from config).
        """
        self._catalog = catalog
        self._t_accept = (
            accept_threshold
            if accept_threshold is not None
            else settings.resolution_accept_threshold
        )
        self._t_suggest = (
            min_suggestion_score
            if min_suggestion_score is not None
            else settings.suggestion_min_score
        )
        self._limit = (
            suggestion_limit if suggestion_limit is not None else settings.suggestion_limit
        )

    @property
    def catalog(self) -> PlatformCatalog:
        return self._catalog

    def resolve(self, raw: str | None) -> Platform | None:
        """Resolve raw text to a single platform, or None if inconclusive."""
        if not raw:
            return None

        key = normalize_key(raw)
        if not key:
            return None

        exact = self._catalog.lookup_exact(key)
        if exact is not None:
            return exact

        scored = self._score_all(key)
        if not scored:
            return None

        best = min(scored, key=lambda s: (-s.score, s.platform.priority_rank))
        logger.debug(
            "Fuzzy best for %r: %s (%.3f, threshold %.2f)",
            raw, best.platform.id, best.score, self._t_accept,
        )
        if best.score > self._t_accept:
            return best.platform
        return None

    def suggest(self, raw: str | None, limit: int | None = None) -> list[PlatformSuggestion]:
        """Rank platforms similar to ``raw``.

        Returns:
            Up to ``limit`` suggestions with score > the suggestion floor,
            ordered by score descending then priority rank ascending.
        """
        if not raw:
            return []

        key = normalize_key(raw)
        if not key:
            return []

        candidates = [s for s in self._score_all(key) if s.score > self._t_suggest]
        candidates.sort(key=lambda s: (-s.score, s.platform.priority_rank))
        return candidates[: self._limit if limit is None else limit]

    def resolve_or_suggest(self, raw: str | None, limit: int | None = None) -> ResolutionResult:
        """Resolve ``raw``; on a miss, fall back to ranked suggestions."""
        platform = self.resolve(raw)
        if platform is not None:
            return ResolutionResult(platform=platform)
        return ResolutionResult(suggestions=tuple(self.suggest(raw, limit)))

    def _score_all(self, key: str) -> list[PlatformSuggestion]:
        """Best similarity per active platform over its name and aliases."""
        results: list[PlatformSuggestion] = []
        for platform in self._catalog.all(active_only=True):
            best = max(
                (similarity(key, normalize_key(name)) for name in platform.names),
                default=0.0,
            )
            results.append(PlatformSuggestion(platform=platform, score=best))
        return results

    def update_platforms(
        self,
        definitions: Iterable[PlatformDefinition],
        *,
        persist_path: Path | None = None,
    ) -> PlatformCatalog:
        """Replace the whole catalog and rebuild the alias index.

        Args:
            definitions: The complete new platform list.
            persist_path: If given, also write the payload to this file.

        Returns:
            The newly installed catalog.
        """
        definitions = list(definitions)
        catalog = PlatformCatalog.build(definitions)
        if persist_path is not None:
            save_catalog_config(persist_path, definitions)
        self._catalog = catalog
        logger.info(
            "Updated platforms: %d loaded (%d active)",
            len(catalog), len(catalog.all(active_only=True)),
        )
        return catalog
