"""FastAPI application for Tag Intake."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from tag_intake import __version__
from tag_intake.config import settings
from tag_intake.errors import IncompleteSlotsError, SessionNotFoundError, UpstreamUnavailableError
from tag_intake.inference.responder import LLMResponder
from tag_intake.resolution.catalog import load_catalog
from tag_intake.resolution.resolver import PlatformResolver
from tag_intake.schemas import (
    ChatRequest,
    ChatResponse,
    ConversationOut,
    PlatformOut,
    PlatformUpdateRequest,
    ResolveResponse,
    SuggestionOut,
)
from tag_intake.services.conversation import ConversationManager

logger = logging.getLogger(__name__)


def create_app(manager: ConversationManager | None = None) -> FastAPI:
    """Build the API app.

    Args:
        manager: Pre-built conversation manager (tests inject one with a
            scripted responder). If None, the lifespan builds the catalog,
            resolver and LLM responder from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if manager is None:
            catalog = load_catalog(settings.platforms_config_path)
            app.state.manager = ConversationManager(LLMResponder(), PlatformResolver(catalog))
        else:
            app.state.manager = manager
        yield

    app = FastAPI(
        title="Tag Intake",
        description="Conversational intake of ad-tag requests",
        version=__version__,
        lifespan=lifespan,
    )

    # httpx ASGITransport does not run lifespan events
    if manager is not None:
        app.state.manager = manager

    @app.exception_handler(UpstreamUnavailableError)
    async def upstream_unavailable(request: Request, exc: UpstreamUnavailableError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc), "retryable": True})

    @app.exception_handler(IncompleteSlotsError)
    async def incomplete_slots(request: Request, exc: IncompleteSlotsError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc), "missing": exc.missing})

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request: Request, exc: SessionNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    def get_manager(request: Request) -> ConversationManager:
        return request.app.state.manager

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        """Health check endpoint."""
        mgr = get_manager(request)
        return {
            "status": "ok",
            "version": __version__,
            "platforms": len(mgr.resolver.catalog.all(active_only=True)),
            "responder_configured": bool(getattr(mgr.responder, "configured", True)),
        }

    @app.get("/api/platforms", response_model=list[PlatformOut])
    async def list_platforms(request: Request, active_only: bool = True) -> list[PlatformOut]:
        catalog = get_manager(request).resolver.catalog
        return [PlatformOut.from_platform(p) for p in catalog.all(active_only=active_only)]

    @app.get("/api/platforms/resolve", response_model=ResolveResponse)
    async def resolve_platform(
        request: Request,
        q: str = Query(min_length=1, max_length=200),
    ) -> ResolveResponse:
        result = get_manager(request).resolver.resolve_or_suggest(q)
        if result.platform is not None:
            return ResolveResponse(query=q, platform=PlatformOut.from_platform(result.platform))
        return ResolveResponse(
            query=q, suggestions=[SuggestionOut.from_suggestion(s) for s in result.suggestions]
        )

    @app.put("/api/platforms", response_model=list[PlatformOut])
    async def update_platforms(request: Request, body: PlatformUpdateRequest) -> list[PlatformOut]:
        if not any(d.active for d in body.platforms):
            raise HTTPException(status_code=422, detail="At least one platform must be active")
        persist_path = settings.platforms_config_path if body.persist else None
        catalog = get_manager(request).resolver.update_platforms(
            body.platforms, persist_path=persist_path
        )
        return [PlatformOut.from_platform(p) for p in catalog.all(active_only=False)]

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat(request: Request, body: ChatRequest) -> ChatResponse:
        try:
            result = await get_manager(request).process_turn(body.conversation_id, body.message)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return ChatResponse.from_result(result)

    @app.get("/api/conversations/{conversation_id}", response_model=ConversationOut)
    async def get_conversation(request: Request, conversation_id: str) -> ConversationOut:
        session = get_manager(request).get_session(conversation_id)
        return ConversationOut.from_session(session)

    @app.post("/api/conversations/{conversation_id}/reset", response_model=ConversationOut)
    async def reset_conversation(request: Request, conversation_id: str) -> ConversationOut:
        session = await get_manager(request).reset(conversation_id)
        return ConversationOut.from_session(session)

    @app.post("/api/conversations/{conversation_id}/ticket")
    async def create_ticket(request: Request, conversation_id: str) -> dict[str, Any]:
        draft = await get_manager(request).materialize_ticket(conversation_id)
        logger.info("Ticket drafted for conversation %s", conversation_id)
        return draft.to_dict()

    return app


app = create_app()
