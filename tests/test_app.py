"""Tests for the FastAPI application."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
from conftest import SUMMARY_NIKE, ScriptedResponder
from httpx import ASGITransport, AsyncClient

from tag_intake import __version__
from tag_intake.app import create_app
from tag_intake.errors import UpstreamUnavailableError

ASK_CLIENT = "So this is for Nike, correct?"


@pytest.fixture
async def client(make_manager, responder) -> AsyncIterator[AsyncClient]:
    app = create_app(make_manager(responder))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _chat(client: AsyncClient, message: str, conversation_id: str | None = None):
    payload = {"message": message}
    if conversation_id:
        payload["conversation_id"] = conversation_id
    return await client.post("/api/chat", json=payload)


async def test_health(client) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "version": __version__,
        "platforms": 13,
        "responder_configured": True,
    }


class TestPlatformEndpoints:
    """Test catalog endpoints."""

    async def test_list_active(self, client):
        response = await client.get("/api/platforms")
        assert response.status_code == 200
        platforms = response.json()
        assert platforms[0]["id"] == "google-dv360"
        assert "meta" not in {p["id"] for p in platforms}

    async def test_list_all(self, client):
        response = await client.get("/api/platforms", params={"active_only": "false"})
        assert len(response.json()) == 14

    async def test_resolve(self, client):
        response = await client.get("/api/platforms/resolve", params={"q": "trad desk"})
        body = response.json()
        assert body["platform"]["id"] == "trade-desk"
        assert body["suggestions"] == []

    async def test_resolve_suggestions(self, client):
        response = await client.get("/api/platforms/resolve", params={"q": "trde"})
        body = response.json()
        assert body["platform"] is None
        assert "trade-desk" in [s["id"] for s in body["suggestions"]]

    async def test_resolve_requires_query(self, client):
        response = await client.get("/api/platforms/resolve")
        assert response.status_code == 422

    async def test_update_platforms(self, client):
        response = await client.put("/api/platforms", json={
            "platforms": [{"id": "acme", "name": "Acme DSP", "aliases": ["Acme"], "priority": 1}]
        })
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == ["acme"]

        resolved = await client.get("/api/platforms/resolve", params={"q": "acme"})
        assert resolved.json()["platform"]["name"] == "Acme DSP"

    async def test_update_rejects_all_inactive(self, client):
        response = await client.put("/api/platforms", json={
            "platforms": [{"id": "off", "name": "Off", "active": False}]
        })
        assert response.status_code == 422


class TestChatEndpoints:
    """Test the conversation endpoints."""

    async def test_conversation_flow(self, client, responder):
        responder.push(ASK_CLIENT, SUMMARY_NIKE)

        first = await _chat(client, "urgent Nike tracker for DV360")
        assert first.status_code == 200
        body = first.json()
        assert body["response"] == ASK_CLIENT
        assert body["complete"] is False
        assert body["state"] == "collecting"
        assert body["missing_fields"] == ["client", "platform", "tag_type", "priority"]

        second = await _chat(client, "yes", body["conversation_id"])
        body = second.json()
        assert body["complete"] is True
        assert body["extracted_data"]["platform"] == "Google DV360"
        assert body["extracted_data"]["priority"] == "High"
        assert [a["action"] for a in body["suggested_actions"]] == ["create", "reset"]

        ticket = await client.post(f"/api/conversations/{body['conversation_id']}/ticket")
        assert ticket.status_code == 200
        assert ticket.json()["platform_id"] == "google-dv360"
        assert ticket.json()["client"] == "Nike"

    @pytest.mark.parametrize("message", ["", "x" * 2001])
    async def test_message_length_validated(self, client, message):
        response = await _chat(client, message)
        assert response.status_code == 422

    async def test_upstream_unavailable(self, make_manager):
        responder = AsyncMock()
        responder.generate.side_effect = UpstreamUnavailableError("not configured")
        app = create_app(make_manager(responder))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await _chat(client, "hello")

        assert response.status_code == 503
        assert response.json()["retryable"] is True

    async def test_exhausted_script_is_503(self, client):
        response = await _chat(client, "hello")
        assert response.status_code == 503

    async def test_get_conversation(self, client, responder):
        responder.push(ASK_CLIENT)
        conversation_id = (await _chat(client, "hi")).json()["conversation_id"]

        response = await client.get(f"/api/conversations/{conversation_id}")

        assert response.status_code == 200
        history = response.json()["history"]
        assert [t["role"] for t in history] == ["user", "assistant"]
        assert history[0]["text"] == "hi"

    async def test_unknown_conversation(self, client):
        assert (await client.get("/api/conversations/conv_nope")).status_code == 404
        assert (await client.post("/api/conversations/conv_nope/reset")).status_code == 404
        assert (await client.post("/api/conversations/conv_nope/ticket")).status_code == 404

    async def test_reset(self, client, responder):
        responder.push(ASK_CLIENT, SUMMARY_NIKE)
        conversation_id = (await _chat(client, "hi")).json()["conversation_id"]
        await _chat(client, "yes", conversation_id)

        response = await client.post(f"/api/conversations/{conversation_id}/reset")

        body = response.json()
        assert body["state"] == "collecting"
        assert body["extracted_data"]["client"] is None
        assert len(body["history"]) == 4

    async def test_ticket_incomplete(self, client, responder):
        responder.push(ASK_CLIENT)
        conversation_id = (await _chat(client, "hi")).json()["conversation_id"]

        response = await client.post(f"/api/conversations/{conversation_id}/ticket")

        assert response.status_code == 409
        assert response.json()["missing"] == ["client", "platform", "tag_type", "priority"]
