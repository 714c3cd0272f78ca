"""Text helpers for assistant replies."""

from __future__ import annotations

import re

_TAG = re.compile(r"<[^>]*>")
_CODE_BLOCK = re.compile(r"```[\s\S]*?```")


def clean_response(text: str) -> str:
    """Prepare an assistant reply for display.

    - XML/HTML-like tags removed
    - Fenced code blocks removed
    - Surrounding whitespace trimmed

    Extraction and history keep the raw text; only the displayed copy
    is cleaned.
    """
    cleaned = _TAG.sub("", text)
    cleaned = _CODE_BLOCK.sub("", cleaned)
    return cleaned.strip()
