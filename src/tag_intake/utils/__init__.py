"""Utility modules for Tag Intake."""

from tag_intake.utils.log import configure_logging
from tag_intake.utils.text import clean_response

__all__ = [
    "clean_response",
    "configure_logging",
]
