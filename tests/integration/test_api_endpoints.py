"""
Integration Tests - HTTP API

Drives the FastAPI app in-process through httpx. The lifespan does not
run under ASGITransport, so the module-level services in havyn.main
are swapped for in-memory ones.
"""

import httpx
import pytest

import havyn.main as main
from havyn.api.middleware.error_handler import CORRELATION_HEADER
from havyn.domain.enums.crisis_severity import CrisisSeverity
from havyn.infrastructure.llm import LLMProviderError, RateLimitError
from havyn.services.prompt import DEGRADED_REPLY, RATE_LIMIT_REPLY
from havyn.services.safety.risk_classifier import crisis_response

from tests.fakes import FakeLLMProvider


@pytest.fixture
def llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest.fixture
async def client(monkeypatch, orchestrator, store, supervisor, llm):
    monkeypatch.setattr(main, "_orchestrator", orchestrator)
    monkeypatch.setattr(main, "_user_store", store)
    monkeypatch.setattr(main, "_supervisor", supervisor)
    monkeypatch.setattr(main, "_llm_provider", llm)

    transport = httpx.ASGITransport(app=main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_readiness_reports_components(self, client):
        response = await client.get("/api/v1/health/ready")

        body = response.json()
        assert response.status_code == 200
        assert body["components"]["alert_supervisor"] is True
        assert body["components"]["llm_configured"] is True
        assert "database" in body["components"]

    async def test_root(self, client):
        response = await client.get("/")

        assert response.json()["status"] == "operational"

    async def test_metrics(self, client):
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "havyn_messages_classified_total" in response.text


class TestChat:

    async def test_normal_message(self, client, llm, email_client, supervisor):
        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": "Hi, how are you?"},
        )
        await supervisor.drain()

        body = response.json()
        assert response.status_code == 200
        assert body["response"] == llm.reply
        assert body["severity"] == "none"
        assert body["escalated"] is False
        assert body["support_message"] is None
        assert email_client.calls == []

    async def test_history_is_passed_to_model(self, client, llm):
        await client.post(
            "/api/v1/chat/message",
            json={
                "user_id": "user-1",
                "message": "And today?",
                "history": [
                    {"role": "user", "content": "Yesterday was rough"},
                    {"role": "assistant", "content": "I'm sorry, tell me more."},
                ],
            },
        )

        _, history, message = llm.requests[0]
        assert [turn.role for turn in history] == ["user", "assistant"]
        assert message == "And today?"

    async def test_crisis_message_escalates(self, client, email_client, supervisor, store):
        response = await client.post(
            "/api/v1/chat/message",
            json={
                "user_id": "user-1",
                "message": "I want to die",
                "location": {"lat": 19.076, "lng": 72.8777},
            },
        )

        body = response.json()
        assert response.status_code == 200
        assert body["is_crisis"] is True
        assert body["severity"] == "high"
        assert body["escalated"] is True
        assert body["matched_signals"] == ["want to die"]
        assert body["support_message"] == crisis_response(CrisisSeverity.HIGH)

        await supervisor.drain()

        assert email_client.sent_to() == ["guardian@example.com"]
        assert "https://www.google.com/maps?q=19.076,72.8777" in email_client.sent[0].html
        assert store.location_writes[0][0] == "user-1"

    async def test_long_crisis_message_is_screened(self, client, email_client, supervisor):
        message = "I have been thinking for a long time. " * 110 + "I want to kill myself"
        assert len(message) > 4000

        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": message},
        )
        await supervisor.drain()

        body = response.json()
        assert response.status_code == 200
        assert body["severity"] == "high"
        assert body["escalated"] is True
        assert email_client.sent_to() == ["guardian@example.com"]

    async def test_rate_limited(self, client, llm):
        llm.error = RateLimitError("fake", retry_after_seconds=30)

        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": "Hi"},
        )

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"
        assert response.json()["response"] == RATE_LIMIT_REPLY
        assert response.json()["retry_after"] == 30

    async def test_model_failure_uses_fallback(self, client, llm):
        llm.error = LLMProviderError("upstream down", provider="fake")

        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": "Hi"},
        )

        assert response.status_code == 200
        assert response.json()["response"] == DEGRADED_REPLY

    async def test_model_failure_on_crisis_still_alerts(self, client, llm, email_client, supervisor):
        """Screening and the alert do not depend on the model answering."""
        llm.error = LLMProviderError("upstream down", provider="fake")

        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": "I want to die"},
        )
        await supervisor.drain()

        assert response.json()["response"] == crisis_response(CrisisSeverity.HIGH)
        assert email_client.sent_to() == ["guardian@example.com"]

    async def test_empty_message_rejected(self, client):
        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": ""},
        )

        assert response.status_code == 422


class TestSafetyAlert:

    async def test_alert_acknowledged(self, client, email_client, supervisor):
        response = await client.post(
            "/api/v1/safety/alert",
            json={"user_id": "user-1", "crisis_snippet": "I want to die"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Safety alert initiated",
            "status": "processing",
            "no_guardian": False,
        }

        await supervisor.drain()
        assert email_client.sent_to() == ["guardian@example.com"]

    async def test_unknown_user_reports_no_guardian(self, client, email_client, supervisor):
        response = await client.post(
            "/api/v1/safety/alert",
            json={"user_id": "ghost", "crisis_snippet": "I want to die"},
        )
        await supervisor.drain()

        assert response.status_code == 200
        assert response.json()["no_guardian"] is True
        assert email_client.calls == []

    async def test_store_outage_still_acknowledges(self, client, store):
        store.fail_reads = True

        response = await client.post(
            "/api/v1/safety/alert",
            json={"user_id": "user-1", "crisis_snippet": "I want to die"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "processing"
        assert response.json()["no_guardian"] is True


class TestLocation:

    async def test_save_then_get(self, client):
        saved = await client.post(
            "/api/v1/user/location",
            json={"user_id": "user-1", "lat": 12.9716, "lng": 77.5946},
        )
        fetched = await client.get("/api/v1/user/location", params={"user_id": "user-1"})

        assert saved.status_code == 200
        assert saved.json()["success"] is True
        assert saved.json()["message"] == "Location saved successfully"
        assert fetched.json()["cached"] is True
        assert fetched.json()["lat"] == 12.9716
        assert fetched.json()["lng"] == 77.5946

    async def test_nothing_cached(self, client):
        response = await client.get("/api/v1/user/location", params={"user_id": "user-1"})

        assert response.status_code == 200
        assert response.json()["cached"] is False
        assert response.json()["message"] == "No cached location available"

    @pytest.mark.parametrize("lat,lng", [(0.0, 0.0), (95.0, 10.0)])
    async def test_invalid_coordinates(self, client, store, lat, lng):
        response = await client.post(
            "/api/v1/user/location",
            json={"user_id": "user-1", "lat": lat, "lng": lng},
        )

        assert response.status_code == 400
        assert store.location_writes == []

    async def test_unknown_user(self, client):
        response = await client.post(
            "/api/v1/user/location",
            json={"user_id": "ghost", "lat": 12.9716, "lng": 77.5946},
        )

        assert response.status_code == 404


class TestErrorHandling:

    async def test_correlation_id_generated(self, client):
        response = await client.get("/api/v1/health")

        assert response.headers[CORRELATION_HEADER]

    async def test_correlation_id_echoed(self, client):
        response = await client.get("/api/v1/health", headers={CORRELATION_HEADER: "req-42"})

        assert response.headers[CORRELATION_HEADER] == "req-42"

    async def test_unhandled_error_is_sanitized(self, client, orchestrator, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(orchestrator, "handle_message", broken)

        response = await client.post(
            "/api/v1/chat/message",
            json={"user_id": "user-1", "message": "Hi"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert "secret internals" not in response.text
        assert response.headers[CORRELATION_HEADER] == response.json()["correlation_id"]
