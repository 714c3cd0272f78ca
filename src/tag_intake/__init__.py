"""Tag Intake: conversational collection of ad-tag requests."""

__version__ = "0.1.0"
