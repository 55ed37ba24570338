"""
Response composer tests: each cleanup step, pipeline idempotency, link block.
"""

import pytest

from doc_assistant.services.assistant.response_composer import (
    CLEANUP_PIPELINE,
    clean_generated_text,
    compose_response,
    strip_bare_urls,
    strip_html_links,
    strip_markdown_links,
    strip_orphan_titles,
    strip_reference_phrases,
)
from doc_assistant.services.assistant.types import LinkEntry, StructuredLinks

MESSY_SAMPLES = [
    "Use the [Campaign API](https://docs.example.com/docs/guidelines/campaign-api/) to create a campaign.",
    "Send a POST request.\n\n**Related Resources:**\n- \nCampaign API Guide\n- [Reports](/guidelines/reports-api/)",
    "Authenticate first (https://example.com/login). Then create the campaign. For more details, see the Campaign API guide.",
    "Steps:\n1. Create\n2. Launch   it\n\n\n\nPlease refer to /guidelines/campaign-api/ for more.",
    "(( ))  Done. Check out the docs. Visit the quickstart.",
    "Start here: [[Campaign API](/guidelines/campaign-api/)](/internal/admin-page).",
    "![[logo](a.png)](b.png) [see [1]](x) and [[[deep](/a)](/b)](/c)",
    "Use the <a href=\"https://evil.example.com/x\">Campaign API</a> now. <A HREF='/x'>Open",
]


def test_markdown_links_reduced_to_text():
    """[title](url) keeps only the title."""
    assert strip_markdown_links("Use the [Campaign API](/guidelines/campaign-api/).") == "Use the Campaign API."


def test_bare_urls_and_doc_paths_removed():
    """Absolute urls and bare documentation paths disappear, with their empty parentheses."""
    text = strip_bare_urls("Authenticate (https://example.com/oauth) via /quickstart-guides/auth/ now.")
    assert "http" not in text
    assert "/quickstart-guides/" not in text
    assert "()" not in text


def test_orphan_titles_removed():
    """Bold-only lines, section labels, empty bullets and bare page titles go."""
    text = "Steps below.\n**Related Resources:**\n- \nCampaign API Guide\nDone."
    assert strip_orphan_titles(text) == "Steps below.\nDone."


def test_trailing_reference_sentences_removed():
    """'For more details, see ...' endings are dropped repeatedly."""
    text = "Create the campaign first. For more details, see the Campaign API guide. Check out the quickstart."
    assert strip_reference_phrases(text) == "Create the campaign first."


def test_reference_sentence_in_middle_is_kept():
    """Only trailing references are removed."""
    text = "See the status field. It must be active."
    assert strip_reference_phrases(text) == text


@pytest.mark.parametrize("sample", MESSY_SAMPLES)
def test_pipeline_is_idempotent(sample):
    """Cleaning already-clean text changes nothing."""
    once = clean_generated_text(sample)
    assert clean_generated_text(once) == once


@pytest.mark.parametrize("name,step", CLEANUP_PIPELINE)
def test_each_step_is_idempotent(name, step):
    """Every named step is idempotent on its own."""
    for sample in MESSY_SAMPLES:
        once = step(sample)
        assert step(once) == once, name


def test_compose_appends_only_verified_links():
    """Generator urls are stripped; the recommended and related links come from StructuredLinks."""
    links = StructuredLinks(
        primary=LinkEntry("Create a Campaign", "/quickstart-guides/create-a-campaign-quickstart/", "quickstart"),
        related={"guidelines": [LinkEntry("Campaign API", "/guidelines/campaign-api/", "guidelines")]},
    )
    prose = "Create it with a POST. See [this page](https://evil.example.com/phish)."
    result = compose_response(prose, links)

    assert "evil.example.com" not in result
    assert result.startswith("Create it with a POST.")
    assert "**Recommended:** [Create a Campaign](/quickstart-guides/create-a-campaign-quickstart/)" in result
    assert "**Related resources:**" in result
    assert "- API Guidelines:" in result
    assert "  - [Campaign API](/guidelines/campaign-api/)" in result


def test_compose_without_links_is_prose_only():
    """No links, no link block."""
    assert compose_response("Just an answer.", StructuredLinks()) == "Just an answer."


def test_nested_markdown_links_cannot_reassemble():
    """An outer link target never survives once its inner link is reduced."""
    text = "Start here: [[Campaign API](/guidelines/campaign-api/)](/internal/admin-page)."
    assert strip_markdown_links(text) == "Start here: Campaign API."
    assert clean_generated_text(text) == "Start here: Campaign API."


def test_link_target_with_bracketed_title_dropped():
    """A title that keeps brackets still loses its target."""
    assert strip_markdown_links("Read [see [1]](/internal/x) first.") == "Read [see [1]] first."


def test_html_links_reduced_to_text():
    """<a href> markup keeps only its text, whatever the casing; stray tags go too."""
    assert strip_html_links('Use the <a href="https://evil.example.com/x">Campaign API</a> now.') == (
        "Use the Campaign API now."
    )
    assert strip_html_links("<A HREF='/x'>Open") == "Open"


def test_compose_drops_generator_links_in_any_syntax():
    """Neither nested markdown nor html links reach the final answer."""
    prose = (
        "Start here: [[Campaign API](/guidelines/campaign-api/)](/internal/admin-page). "
        'Or use <a href="https://evil.example.com/x">this page</a>.'
    )
    result = compose_response(prose, StructuredLinks())

    assert "/internal/admin-page" not in result
    assert "evil.example.com" not in result
    assert "<a" not in result
    assert result.startswith("Start here: Campaign API.")
