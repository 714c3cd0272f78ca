"""Shared pytest fixtures for Tag Intake tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable

import pytest

from tag_intake.resolution.catalog import PlatformCatalog
from tag_intake.resolution.resolver import PlatformResolver
from tag_intake.services.conversation import ConversationManager
from tag_intake.services.history import InMemoryHistoryRecorder

SUMMARY_NIKE = (
    "Excellent! Let me confirm everything:\n"
    "- Client: Nike ✓\n"
    "- Platform: Google DV360 ✓\n"
    "- Tag Type: Tracker ✓\n"
    "- Priority: High ✓\n"
    "\n"
    "Ready to create this ticket?"
)


class ScriptedResponder:
    """DialogueResponder fake that replays canned replies in order.

    Records every prompt it receives. Raises IndexError when the script
    runs out, which the manager treats like any responder failure.
    """

    def __init__(self, replies: Iterable[str] = (), *, delay: float = 0.0) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.delay = delay
        self.configured = True

    def push(self, *replies: str) -> None:
        self.replies.extend(replies)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.replies.pop(0)


@pytest.fixture
def catalog() -> PlatformCatalog:
    """Catalog built from the built-in default platforms."""
    return PlatformCatalog.defaults()


@pytest.fixture
def resolver(catalog: PlatformCatalog) -> PlatformResolver:
    return PlatformResolver(
        catalog, accept_threshold=0.8, min_suggestion_score=0.3, suggestion_limit=5
    )


@pytest.fixture
def responder() -> ScriptedResponder:
    return ScriptedResponder()


@pytest.fixture
def history() -> InMemoryHistoryRecorder:
    return InMemoryHistoryRecorder()


MakeManager = Callable[..., ConversationManager]


@pytest.fixture
def make_manager(
    resolver: PlatformResolver, history: InMemoryHistoryRecorder
) -> MakeManager:
    """Factory fixture for ConversationManager over a scripted responder."""

    def _make(
        responder: ScriptedResponder | None = None,
        *,
        timeout_seconds: float = 5.0,
        **kwargs,
    ) -> ConversationManager:
        kwargs.setdefault("history", history)
        return ConversationManager(
            responder or ScriptedResponder(),
            resolver,
            timeout_seconds=timeout_seconds,
            **kwargs,
        )

    return _make


@pytest.fixture
def manager(make_manager: MakeManager, responder: ScriptedResponder) -> ConversationManager:
    return make_manager(responder)
