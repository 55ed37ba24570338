"""
Agent action tests: documentation path whitelist and highlight term extraction.
"""

import pytest

from doc_assistant.services.assistant.actions import (
    MAX_HIGHLIGHT_TERMS,
    build_actions,
    extract_highlight_terms,
    is_valid_doc_path,
)
from doc_assistant.services.assistant.types import LinkEntry, StructuredLinks


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/guidelines/campaign-api/", True),
        ("guidelines/campaign-api/", True),
        ("/quickstart-guides/create-a-campaign-quickstart/#step-1", True),
        ("/migration-guides", True),
        ("/admin/", False),
        ("https://evil.example.com/guidelines/", False),
        ("/guidelinesx/", False),
        ("/guidelines/../admin", False),
        ("/guidelines/campaign-api/../../admin/#x", False),
        ("/guidelines/./campaign-api/", True),
        ("", False),
        (None, False),
    ],
)
def test_doc_path_whitelist(path, expected):
    """Only whitelisted documentation prefixes are navigable."""
    assert is_valid_doc_path(path) is expected


def test_highlight_terms_from_backticks_quotes_and_api_words():
    """Backticked, quoted and known API terms are collected once each, in that order."""
    text = 'Send a `PATCH` request with `campaignId` and the "Authorization" header.'
    assert extract_highlight_terms(text) == ["PATCH", "campaignId", "Authorization"]


def test_highlight_terms_capped():
    """No more than five terms."""
    text = "`alpha` `bravo` `charlie` `delta` `echo` `foxtrot`"
    assert len(extract_highlight_terms(text)) == MAX_HIGHLIGHT_TERMS


def test_quoted_paths_ignored():
    """Quoted strings containing a slash are not highlight terms."""
    assert extract_highlight_terms('Open "/guidelines/x"') == []


def test_build_actions_navigate_then_highlight():
    """Navigate to the primary base url, then highlight."""
    links = StructuredLinks(primary=LinkEntry("Campaign API", "/guidelines/campaign-api/#status", "guidelines"))
    actions = build_actions(links, "Use `PATCH`.")
    assert actions == [
        {"tool": "navigate", "params": {"path": "/guidelines/campaign-api/"}, "status": "pending"},
        {"tool": "highlight", "params": {"terms": ["PATCH"]}, "status": "pending"},
    ]


def test_build_actions_rejects_unlisted_primary():
    """A primary outside the whitelist produces no navigate action."""
    links = StructuredLinks(primary=LinkEntry("Blog", "/blog/post/", "reference"))
    assert build_actions(links, "plain text") == []
