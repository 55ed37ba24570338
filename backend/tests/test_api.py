"""
HTTP surface tests: validation, chat, search, feedback and health endpoints.
The assistant dependency is overridden with fakes; the conversation log uses a temporary SQLite file.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeGenerationService, FakeSearchClient

import doc_assistant.main as main_module
from doc_assistant.main import app, get_assistant
from doc_assistant.services.assistant.assistant_service import DocAssistantService
from doc_assistant.services.assistant.retriever import DocSearchOrchestrator


@pytest.fixture
def search_client(campaign_hits):
    return FakeSearchClient(campaign_hits)


@pytest.fixture
def generation():
    return FakeGenerationService(text="Send a `POST` request to create the campaign.")


@pytest.fixture
def client(search_client, generation):
    """TestClient with the assistant built from fakes (real conversation log)."""
    assistant = DocAssistantService(
        search=DocSearchOrchestrator(search_client=search_client),
        generation_service=generation,
    )
    app.dependency_overrides[get_assistant] = lambda: assistant
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestChatEndpoint:
    """POST /api/ai/chat"""

    def test_chat_returns_camel_case_response(self, client):
        """A normal question returns the composed answer with verified links."""
        response = client.post(
            "/api/ai/chat",
            json={
                "message": "How do I create a campaign?",
                "context": {
                    "currentPage": "/getting-started/before-you-begin/",
                    "pageTitle": "Before You Begin",
                    "headings": ["Prerequisites"],
                    "conversationHistory": [],
                },
            },
        )
        assert response.status_code == 200
        data = response.json()

        assert data["queryIntent"] == "create"
        assert data["fallback"] is False
        assert data["structuredLinks"]["primary"]["url"] == "/quickstart-guides/create-a-campaign-quickstart/"
        assert data["links"][0] == data["structuredLinks"]["primary"]
        assert data["conversationRecordId"] > 0
        assert data["actions"][0]["tool"] == "navigate"
        assert "specialCategory" in data
        assert "conversationId" in data

    def test_oversized_message_rejected(self, client, search_client):
        """Over-long messages are a 400 and never reach search."""
        response = client.post("/api/ai/chat", json={"message": "x" * 2001})

        assert response.status_code == 400
        assert response.json()["detail"] == "Message must be 2000 characters or less"
        assert search_client.calls == []

    def test_empty_message_rejected(self, client):
        """Blank messages are a 400."""
        response = client.post("/api/ai/chat", json={"message": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Message cannot be empty"

    def test_generation_down_is_not_an_error(self, client, generation):
        """A failed generator still yields a 200 with the fallback answer."""
        generation.fail = True
        response = client.post("/api/ai/chat", json={"message": "update campaign status"})

        assert response.status_code == 200
        data = response.json()
        assert data["fallback"] is True
        assert "Update Campaign Status" in data["response"]


class TestSearchEndpoint:
    """POST /api/ai/search"""

    def test_search_results(self, client):
        """Results, summary and totalCount are returned."""
        response = client.post(
            "/api/ai/search",
            json={"query": "campaign", "filters": {"category": ["quickstart"]}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["totalCount"] >= 1
        assert data["results"][0]["isRecommended"] is True
        assert all(r["category"] == "quickstart" for r in data["results"])
        assert data["summary"]

    def test_empty_query_rejected(self, client):
        """Blank queries are a 400."""
        assert client.post("/api/ai/search", json={"query": ""}).status_code == 400


class TestEndpointRegistryApi:
    """GET /api/endpoints*"""

    def test_list(self, client):
        """Categories and grouped endpoints."""
        data = client.get("/api/endpoints", params={"category": "reports"}).json()
        assert "campaigns" in data["categories"]
        assert [e["path"] for e in data["endpoints"]["reports"]] == [
            "/api/v3/ra/report/execute",
            "/api/v3/ra/report/schedule",
        ]

    def test_search(self, client):
        """Scored matches, best first."""
        data = client.get("/api/endpoints/search", params={"q": "pause campaign"}).json()
        assert data["results"][0]["path"] == "/api/v3/campaign/status"
        assert data["results"][0]["score"] == 20

    def test_search_blank_query_rejected(self, client):
        assert client.get("/api/endpoints/search", params={"q": "  "}).status_code == 400

    def test_info(self, client):
        """Path lookups return the detail view; unknown paths are a 404."""
        ok = client.get("/api/endpoints/info", params={"endpoint": "/api/v3/campaign/{id}", "method": "GET"})
        assert ok.json()["endpoint"]["pathParams"] == ["id"]
        missing = client.get("/api/endpoints/info", params={"endpoint": "/api/v9/unknown"})
        assert missing.status_code == 404


class TestFeedbackEndpoint:
    """POST /api/feedback"""

    def _record_id(self, client):
        return client.post("/api/ai/chat", json={"message": "How do I create a campaign?"}).json()[
            "conversationRecordId"
        ]

    def test_thumbs_up(self, client):
        """Feedback attaches to a logged answer."""
        record_id = self._record_id(client)
        response = client.post(
            "/api/feedback",
            json={"conversationRecordId": record_id, "rating": "thumbs_up", "page": "/guidelines/"},
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_thumbs_down_requires_reason(self, client):
        """thumbs_down without a reason code is a 400."""
        record_id = self._record_id(client)
        response = client.post("/api/feedback", json={"conversationRecordId": record_id, "rating": "thumbs_down"})
        assert response.status_code == 400

    def test_unknown_record(self, client):
        """Feedback for a record that does not exist is a 404."""
        response = client.post("/api/feedback", json={"conversationRecordId": 987654, "rating": "thumbs_up"})
        assert response.status_code == 404

    def test_reason_codes(self, client):
        """The reason-code table is exposed for the widget."""
        data = client.get("/api/feedback/reason-codes").json()
        assert "not_helpful" in data["reasonCodes"]


class TestHealth:
    """Liveness and readiness."""

    def test_health(self, client):
        """Health reports the tables version the engine was built with."""
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["tablesVersion"] == data["initialization"]["tablesVersion"]

    def test_ready_degraded(self, client, monkeypatch):
        """An unreachable generation server is a 503 naming the offline router."""
        monkeypatch.setattr(main_module, "check_generation_health", lambda timeout=None: False)
        response = client.get("/api/health/ready")
        assert response.status_code == 503
        assert response.json()["fallback"] == "offline-router"

    def test_ready(self, client, monkeypatch):
        """A healthy generation server is ready."""
        monkeypatch.setattr(main_module, "check_generation_health", lambda timeout=None: True)
        assert client.get("/api/health/ready").json()["status"] == "ready"
