"""Client (brand) name matching.

Kept behind the ClientMatcher protocol so the heuristic below can be
replaced by a real named-entity approach without touching the extractor
or the session manager.

HeuristicClientMatcher, in order:
1. Known brand list, on the assistant's client line, then on the combined text
2. First capitalized non-stopword token of the user's raw message
3. The value on the assistant's client line, as written

Step 2 is a known source of false positives (sentence-initial words,
acronyms such as platform names). It only runs once the assistant turn
carries a client marker.
"""

from __future__ import annotations

import string
from typing import Protocol

from tag_intake.extraction.keywords import CLIENT_STOPWORDS, KNOWN_BRANDS, contains_keyword

_TOKEN_STRIP = string.punctuation + "“”‘’«»"


class ClientMatcher(Protocol):
    """Picks the client name for a turn whose assistant text confirms one."""

    def match(self, *, line: str | None, combined: str, user_text: str) -> str | None:
        """Return the client name, or None if nothing usable was found.

        Args:
            line: Text following the assistant's client marker, if any.
            combined: User text and assistant text joined.
            user_text: The user's raw message.
        """
        ...


class HeuristicClientMatcher:
    """Known-brand lookup with a capitalized-word fallback."""

    def __init__(
        self,
        known_brands: tuple[tuple[str, str], ...] = KNOWN_BRANDS,
        stopwords: frozenset[str] = CLIENT_STOPWORDS,
    ) -> None:
        self._known_brands = known_brands
        self._stopwords = stopwords

    def match(self, *, line: str | None, combined: str, user_text: str) -> str | None:
        for text in (line, combined):
            if text:
                brand = self._known_brand(text)
                if brand is not None:
                    return brand

        token = self._capitalized_token(user_text)
        if token is not None:
            return token

        return line or None

    def _known_brand(self, text: str) -> str | None:
        for keyword, display in self._known_brands:
            if contains_keyword(text, keyword):
                return display
        return None

    def _capitalized_token(self, user_text: str) -> str | None:
        for word in user_text.split():
            token = word.strip(_TOKEN_STRIP)
            if len(token) > 2 and token[0].isupper() and token not in self._stopwords:
                return token
        return None
