"""Keyword tables used by the slot extractor.

All tables are ordered: the first group that matches wins. Keywords are
matched case-insensitively on whole words, so "sap" does not fire inside
"asap" and "gam" does not fire inside "instagram".
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import TypeVar

from tag_intake.models.enums import Priority, TagType

T = TypeVar("T")

# Any of these in the assistant turn means it is confirming or summarizing
CONFIRMATION_MARKERS: tuple[str, ...] = (
    "confirm",
    "summarize",
    "summary",
    "ready to create",
    "✓",
    "✔",
    "☑",
)

# Per-field markers; longer markers first so "tag type:" wins over "type:"
FIELD_MARKERS: dict[str, tuple[str, ...]] = {
    "client": ("client:", "account:"),
    "platform": ("platform:",),
    "tag_type": ("tag type:", "type:"),
    "priority": ("priority:",),
}

# (keyword, display name). "sncf connect" precedes "sncf".
KNOWN_BRANDS: tuple[tuple[str, str], ...] = (
    ("nike", "Nike"),
    ("sap", "SAP"),
    ("cofidis", "Cofidis"),
    ("sncf connect", "SNCF Connect"),
    ("sncf", "SNCF"),
    ("l'oréal", "L'Oréal"),
    ("l'oreal", "L'Oréal"),
    ("loreal", "L'Oréal"),
    ("renault", "Renault"),
    ("carrefour", "Carrefour"),
    ("adidas", "Adidas"),
    ("puma", "Puma"),
)

# Tokens never taken as a client name by the capitalized-word fallback
CLIENT_STOPWORDS: frozenset[str] = frozenset({"I", "A", "The", "For", "On", "To"})

# Phrases that point at a platform without being one of its catalog names
# or aliases. Checked after the live catalog; the hit goes to the resolver.
PLATFORM_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Google DV360": ("dv360", "google dv360", "display & video", "display and video"),
    "Google Ad Manager": ("gam", "google ad manager", "dfp", "doubleclick"),
    "The Trade Desk": ("trade desk", "ttd", "the trade desk", "tradedesk"),
    "Xandr": ("xandr", "appnexus", "microsoft advertising"),
    "Amazon": ("amazon", "amazon dsp", "amazon ads"),
    "Criteo": ("criteo",),
    "Taboola": ("taboola",),
    "Outbrain": ("outbrain",),
}

TAG_TYPE_KEYWORDS: tuple[tuple[TagType, tuple[str, ...]], ...] = (
    (TagType.TRACKER, ("tracker", "tracking")),
    (TagType.VIDEO_WRAPPER, ("video wrapper", "wrapper", "video tag")),
)

PRIORITY_KEYWORDS: tuple[tuple[Priority, tuple[str, ...]], ...] = (
    (Priority.HIGH, ("high", "urgent", "asap")),
    (Priority.LOW, ("low", "when possible", "no rush")),
    (Priority.MEDIUM, ("medium", "normal")),
)

# Quick replies offered for each unfilled slot
PLATFORM_SHORTLIST: tuple[str, ...] = (
    "Google DV360",
    "The Trade Desk",
    "Xandr",
    "Google Ad Manager",
)


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", re.IGNORECASE)


def contains_keyword(text: str, keyword: str) -> bool:
    """Whole-word, case-insensitive containment."""
    return _keyword_pattern(keyword).search(text) is not None


def first_keyword_match(text: str, keywords: Iterable[str]) -> str | None:
    """Return the first keyword (in table order) contained in ``text``."""
    for keyword in keywords:
        if contains_keyword(text, keyword):
            return keyword
    return None


def match_keyword_groups(
    text: str, groups: Sequence[tuple[T, tuple[str, ...]]]
) -> T | None:
    """Return the value of the first group with a keyword in ``text``."""
    for value, keywords in groups:
        if first_keyword_match(text, keywords) is not None:
            return value
    return None
