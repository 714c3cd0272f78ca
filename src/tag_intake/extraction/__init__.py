"""Slot extraction module.

Main entry point:
    from tag_intake.extraction import SlotExtractor

    extractor = SlotExtractor(resolver)
    record = extractor.extract(assistant_text, user_text)
"""

from tag_intake.extraction.client import ClientMatcher, HeuristicClientMatcher
from tag_intake.extraction.slot_extractor import (
    ExtractionResult,
    SlotExtractor,
    has_confirmation,
    marker_line,
)

__all__ = [
    "ClientMatcher",
    "ExtractionResult",
    "HeuristicClientMatcher",
    "SlotExtractor",
    "has_confirmation",
    "marker_line",
]
