"""String normalization and edit-distance similarity for platform names.

Similarity regimes (both inputs normalized first):
- identical keys: 1.0
- one key contained in the other: SUBSTRING_SCORE (0.9)
- otherwise: (len(longer) - levenshtein) / len(longer)

The substring bonus sits below an exact key match but above most edit
distance scores, so partial names like "Trade Desk" inside "The Trade Desk"
resolve confidently.
"""

from __future__ import annotations

import re
import unicodedata

# Score for a key that is a strict substring of the other key
SUBSTRING_SCORE = 0.9

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_key(value: str) -> str:
    """Normalize a platform name or alias to its lookup key.

    - Unicode NFKD, combining marks dropped ("é" -> "e")
    - Lowercase
    - Every character outside [a-z0-9] removed

    Examples:
        "Display & Video 360" -> "displayvideo360"
        "display-video-360"   -> "displayvideo360"
        "  DV360 "            -> "dv360"

    Idempotent: normalize_key(normalize_key(s)) == normalize_key(s).
    """
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped.lower())


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost insertion, deletion and substitution.

    Classic dynamic-programming recurrence, keeping only two rows.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(
                    min(
                        previous[j - 1] + 1,  # substitution
                        current[j - 1] + 1,  # insertion
                        previous[j] + 1,  # deletion
                    )
                )
        previous = current

    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Compute similarity between two normalized keys.

    Returns a value in [0, 1] where 1 is identical. Symmetric in its
    arguments. Callers are expected to pass keys from normalize_key().
    """
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)

    if not longer:
        return 1.0

    if longer == shorter:
        return 1.0

    if shorter in longer:
        return SUBSTRING_SCORE

    distance = levenshtein_distance(a, b)
    return max(0.0, (len(longer) - distance) / len(longer))
