"""
API endpoint registry tests: lookup order, keyword scoring, listing, prompt rendering.
"""

import pytest

from doc_assistant.exceptions import EndpointNotFound
from doc_assistant.services.assistant.endpoint_registry import EndpointRegistry, endpoint_as_dict
from doc_assistant.services.assistant.knowledge import ApiEndpoint, _validate_endpoints


@pytest.fixture
def registry(tables):
    return EndpointRegistry(tables)


class TestLookup:
    """get_endpoint"""

    def test_exact_method_and_path(self, registry):
        """Method is case-insensitive."""
        endpoint = registry.get_endpoint("/api/v3/campaign/{id}", "get")
        assert endpoint.key == "GET:/api/v3/campaign/{id}"

    def test_path_only(self, registry):
        """Without a method the first registered operation on the path is returned."""
        assert registry.get_endpoint("/api/v3/campaign").key == "POST:/api/v3/campaign"

    def test_partial_path(self, registry):
        """A longer path containing a registered one still resolves."""
        endpoint = registry.get_endpoint("/api/v3/ra/report/execute?format=csv")
        assert endpoint.summary == "Execute a report"

    def test_unknown_path(self, registry):
        """Nothing registered, nothing returned."""
        assert registry.get_endpoint("/nope/") is None
        assert registry.get_endpoint("") is None


class TestSearch:
    """Keyword search scoring."""

    def test_best_match_first(self, registry):
        """Description words count, so 'pause' lifts the status endpoint above other campaign operations."""
        matches = registry.search("pause campaign")
        assert matches[0].endpoint.key == "PUT:/api/v3/campaign/status"
        assert matches[0].score == 20
        assert all(m.score <= matches[0].score for m in matches)

    def test_short_and_unknown_terms(self, registry):
        """Terms under three characters are ignored; unknown words match nothing."""
        assert registry.search("a b") == []
        assert registry.search("xyzzy") == []

    def test_limit(self, registry):
        """Results are capped."""
        assert len(registry.search("campaign", limit=2)) == 2


class TestListingAndInfo:
    """Tool-style views used by the HTTP surface."""

    def test_categories_sorted(self, registry):
        assert registry.categories() == [
            "audiences", "campaigns", "conversions", "creatives", "dashboard", "inventory", "reports",
        ]
        assert len(registry) == 18

    def test_list_one_category(self, registry):
        """A category filter returns only that group."""
        listing = registry.list_endpoints("campaigns")
        assert list(listing) == ["campaigns"]
        assert len(listing["campaigns"]) == 5
        assert listing["campaigns"][0] == {
            "method": "POST",
            "path": "/api/v3/campaign",
            "summary": "Create a new campaign",
            "docPage": "/guidelines/campaign-api/#create-a-campaign",
        }

    def test_list_unknown_category_is_empty(self, registry):
        assert registry.list_endpoints("nope") == {"nope": []}

    def test_info_for_keywords_searches(self, registry):
        """Without a slash the argument is a search query."""
        info = registry.get_api_info("budget")
        assert info["results"][0]["path"] == "/api/v3/campaign/budget"

    def test_info_for_path(self, registry):
        """A path returns the full detail view."""
        info = registry.get_api_info("/api/v3/campaign/status", "PUT")
        assert info["endpoint"]["requiredFields"] == ["campaignIds", "status"]
        assert info["endpoint"]["requiresAuth"] is True

    def test_info_for_unknown_path(self, registry):
        with pytest.raises(EndpointNotFound):
            registry.get_api_info("/api/v9/unknown")


def test_prompt_context(registry):
    """Matches render as one line each, with required fields and path parameters."""
    text = registry.prompt_context("Get creative details")
    lines = text.splitlines()
    assert lines[0] == "Relevant API endpoints:"
    assert lines[1] == "- GET /api/v3/creative/{id}: Get creative details"
    assert "  Path parameters: id" in lines
    assert registry.prompt_context("xyzzy") == ""


def test_endpoint_detail_view_keys(registry):
    """The detail view carries the full metadata in camelCase."""
    data = endpoint_as_dict(registry.get_endpoint("/api/v3/conversion/add"))
    assert set(data) == {
        "method", "path", "summary", "docPage", "description", "category",
        "tags", "requiredFields", "pathParams", "requiresAuth",
    }


def test_duplicate_endpoint_rejected():
    """The table loader refuses two entries for the same method and path."""
    endpoint = ApiEndpoint("GET", "/api/x", "X", "X.", "misc", "/guidelines/x-api/")
    with pytest.raises(ValueError):
        _validate_endpoints((endpoint, endpoint))


def test_endpoint_outside_docs_rejected():
    """Every endpoint must point at a documentation page."""
    endpoint = ApiEndpoint("GET", "/api/x", "X", "X.", "misc", "/internal/x/")
    with pytest.raises(ValueError):
        _validate_endpoints((endpoint,))
