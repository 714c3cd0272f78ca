"""Confirmation-gated slot extraction.

The extractor reads the latest exchange (assistant reply + user message)
and returns a partial SlotRecord. Two gates apply:

1. Turn gate: the assistant text must carry confirmation intent
   (CONFIRMATION_MARKERS). Without it the result is all-null, however many
   keywords the user typed. This stops a field from being locked in while
   the dialogue is still asking about it.
2. Field gate: each slot is only extracted if its own marker ("client:",
   "platform:", "tag type:", "priority:") appears in the assistant text, so
   a turn may confirm a subset of the slots.

For each gated field the text on the assistant's marker line is searched
first, then the combined user + assistant text. The marker line reflects
what is being confirmed right now, which lets corrections ("Platform: The
Trade Desk") win over stale mentions elsewhere in the exchange.

Errors while extracting one field are logged and leave that field null.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from tag_intake.extraction.client import ClientMatcher, HeuristicClientMatcher
from tag_intake.extraction.keywords import (
    CONFIRMATION_MARKERS,
    FIELD_MARKERS,
    PLATFORM_KEYWORDS,
    PRIORITY_KEYWORDS,
    TAG_TYPE_KEYWORDS,
    first_keyword_match,
    match_keyword_groups,
)
from tag_intake.models.slots import SlotRecord
from tag_intake.resolution.resolver import PlatformResolver, PlatformSuggestion

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MARKER_PATTERNS: dict[str, re.Pattern[str]] = {
    name: re.compile("|".join(re.escape(m) for m in markers), re.IGNORECASE)
    for name, markers in FIELD_MARKERS.items()
}

_ANY_MARKER = re.compile(
    "|".join(
        re.escape(m)
        for m in sorted(
            (m for markers in FIELD_MARKERS.values() for m in markers), key=len, reverse=True
        )
    ),
    re.IGNORECASE,
)

# Decoration trimmed from both ends of a marker line value
_LINE_STRIP = " \t*_-–—•✓✔☑:.,;!?\"'"


def has_confirmation(assistant_text: str) -> bool:
    """True if the assistant turn signals confirmation or summary intent."""
    lowered = assistant_text.lower()
    return any(marker in lowered for marker in CONFIRMATION_MARKERS)


def marker_line(assistant_text: str, slot: str) -> str | None:
    """Return the value following a slot marker, or None if the marker is absent.

    The value runs to the end of the line or to the next slot marker,
    whichever comes first, so one-line summaries split correctly:

        >>> marker_line("Client: Nike ✓ Platform: Google DV360 ✓", "client")
        'Nike'
        >>> marker_line("Which platform?", "platform") is None
        True

    A present marker with nothing after it yields "".
    """
    match = _MARKER_PATTERNS[slot].search(assistant_text)
    if match is None:
        return None

    rest = assistant_text[match.end():].split("\n", 1)[0]
    next_marker = _ANY_MARKER.search(rest)
    if next_marker is not None:
        rest = rest[: next_marker.start()]
    return rest.strip(_LINE_STRIP)


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of extracting one exchange."""

    slots: SlotRecord = field(default_factory=SlotRecord)
    """Partial record: only fields confirmed in this exchange are set."""

    confirmation_detected: bool = False

    confirmed_fields: frozenset[str] = frozenset()
    """Slot names whose value was extracted this turn."""

    platform_suggestions: tuple[PlatformSuggestion, ...] = ()
    """Ranked candidates when a confirmed platform did not resolve."""


class SlotExtractor:
    """Extracts slots from a confirmed exchange.

    Usage:
        extractor = SlotExtractor(resolver)
        record = extractor.extract(assistant_text, user_text)
    """

    def __init__(
        self,
        resolver: PlatformResolver,
        *,
        client_matcher: ClientMatcher | None = None,
        platform_keywords: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            resolver: Canonicalizes the platform candidate.
            client_matcher: Client name strategy (default: HeuristicClientMatcher).
            platform_keywords: Platform pre-filter table (default: PLATFORM_KEYWORDS).
        """
        self._resolver = resolver
        self._client_matcher = client_matcher or HeuristicClientMatcher()
        self._platform_keywords = platform_keywords or PLATFORM_KEYWORDS

    def extract(self, assistant_text: str, user_text: str) -> SlotRecord:
        """Return the partial slot record confirmed by this exchange."""
        return self.analyze(assistant_text, user_text).slots

    def analyze(self, assistant_text: str, user_text: str) -> ExtractionResult:
        """Extract slots plus the feedback the session manager needs."""
        if not has_confirmation(assistant_text):
            return ExtractionResult()

        combined = f"{user_text} {assistant_text}"
        record = SlotRecord()
        confirmed: set[str] = set()
        suggestions: tuple[PlatformSuggestion, ...] = ()

        line = marker_line(assistant_text, "client")
        if line is not None:
            client = self._guarded(
                "client",
                lambda: self._client_matcher.match(
                    line=line or None, combined=combined, user_text=user_text
                ),
            )
            if client:
                record = record.merge(SlotRecord(client=client))
                confirmed.add("client")

        line = marker_line(assistant_text, "platform")
        if line is not None:
            platform_record, suggestions = self._guarded(
                "platform", lambda: self._extract_platform(line, combined)
            ) or (SlotRecord(), ())
            record = record.merge(platform_record)
            if platform_record.platform_id is not None:
                confirmed.add("platform")

        line = marker_line(assistant_text, "tag_type")
        if line is not None:
            tag_type = self._guarded(
                "tag_type", lambda: self._match_first(line, combined, TAG_TYPE_KEYWORDS)
            )
            if tag_type is not None:
                record = record.merge(SlotRecord(tag_type=tag_type))
                confirmed.add("tag_type")

        line = marker_line(assistant_text, "priority")
        if line is not None:
            priority = self._guarded(
                "priority", lambda: self._match_first(line, combined, PRIORITY_KEYWORDS)
            )
            if priority is not None:
                record = record.merge(SlotRecord(priority=priority))
                confirmed.add("priority")

        if confirmed:
            logger.debug("Confirmed slots this turn: %s", sorted(confirmed))

        return ExtractionResult(
            slots=record,
            confirmation_detected=True,
            confirmed_fields=frozenset(confirmed),
            platform_suggestions=suggestions,
        )

    def _extract_platform(
        self, line: str, combined: str
    ) -> tuple[SlotRecord, tuple[PlatformSuggestion, ...]]:
        """Find the platform being confirmed and canonicalize it via the resolver.

        Candidates are searched on the marker line, then the combined text.
        Without a candidate the marker line itself is resolved. Text that
        does not resolve leaves the slot null and only yields suggestions.
        """
        candidate = self._platform_candidate(line) or self._platform_candidate(combined)
        raw = candidate or line
        if not raw:
            return SlotRecord(), ()

        result = self._resolver.resolve_or_suggest(raw)
        if result.platform is None:
            return SlotRecord(platform_raw=raw), result.suggestions

        return (
            SlotRecord(
                platform_id=result.platform.id,
                platform_name=result.platform.name,
                platform_raw=raw,
            ),
            (),
        )

    def _platform_candidate(self, text: str) -> str | None:
        """First catalog name or alias in ``text``, then the keyword table.

        The catalog is read on every call so hot updates apply to the next turn.
        """
        if not text:
            return None
        for platform in self._resolver.catalog.all(active_only=True):
            name = first_keyword_match(text, platform.names)
            if name is not None:
                return name
        for canonical, keywords in self._platform_keywords.items():
            if first_keyword_match(text, keywords) is not None:
                return canonical
        return None

    @staticmethod
    def _match_first(
        line: str, combined: str, groups: Sequence[tuple[T, tuple[str, ...]]]
    ) -> T | None:
        for text in (line, combined):
            if text:
                value = match_keyword_groups(text, groups)
                if value is not None:
                    return value
        return None

    @staticmethod
    def _guarded(slot: str, fn: Callable[[], T]) -> T | None:
        try:
            return fn()
        except Exception:
            logger.exception("Extraction of %r failed; leaving it unset", slot)
            return None
