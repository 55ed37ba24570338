"""
Link builder tests: primary selection, reference injection, dedup and bucket caps.
"""

import itertools

from conftest import make_doc, ranked

from doc_assistant.services.assistant.link_builder import (
    build_structured_links,
    clean_title,
    find_reference_page,
    resolve_title,
)


def _all_urls(links):
    return [entry.url for entry in links.flatten()]


def test_quickstart_primary_injects_reference_page():
    """The mapped Campaign API page is the first related entry even when search never returned it."""
    quickstart = make_doc(
        "/quickstart-guides/create-a-campaign-quickstart/",
        "quickstart",
        hierarchy_title="Create a Campaign",
    )
    links = build_structured_links(ranked(quickstart))

    assert links.primary.url == "/quickstart-guides/create-a-campaign-quickstart/"
    assert links.primary.title == "Create a Campaign"
    assert list(links.related) == ["guidelines"]
    assert links.related["guidelines"][0].url == "/guidelines/campaign-api/"
    assert links.related["guidelines"][0].title == "Campaign API"


def test_quickstart_primary_only_relates_to_guidelines():
    """Other quickstarts and tutorials are skipped; the injected page is not repeated."""
    docs = ranked(
        make_doc("/quickstart-guides/create-a-campaign-quickstart/", "quickstart"),
        make_doc("/quickstart-guides/upload-a-creative-quickstart/", "quickstart"),
        make_doc("/guidelines/campaign-api/#create-a-campaign", "guidelines", section_title="Campaign API"),
        make_doc("/tutorials/customer-guide/", "tutorials"),
        make_doc("/guidelines/bid-model-api/", "guidelines", hierarchy_title="Bid Model API"),
    )
    links = build_structured_links(docs)

    assert list(links.related) == ["guidelines"]
    assert [e.url for e in links.related["guidelines"]] == [
        "/guidelines/campaign-api/",
        "/guidelines/bid-model-api/",
    ]


def test_primary_url_has_fragment_stripped():
    """The primary link points at the page, not the section."""
    links = build_structured_links(ranked(make_doc("/guidelines/campaign-api/#list-campaigns", "guidelines")))
    assert links.primary.url == "/guidelines/campaign-api/"


def test_buckets_follow_first_seen_order_and_cap_at_three():
    """Related buckets appear in first-seen order and hold at most three links."""
    docs = ranked(
        make_doc("/guidelines/campaign-api/", "guidelines"),
        make_doc("/getting-started/platform-overview/", "reference"),
        *[make_doc(f"/guidelines/extra-{i}-api/", "guidelines") for i in range(5)],
        make_doc("/getting-started/rest-api-reference/", "reference"),
    )
    links = build_structured_links(docs)

    assert list(links.related) == ["reference", "guidelines"]
    assert len(links.related["guidelines"]) == 3
    assert len(links.related["reference"]) == 2


def test_no_duplicate_base_urls_for_any_input():
    """Primary and related never share a base url, whatever the ranking."""
    pool = [
        make_doc("/quickstart-guides/create-a-campaign-quickstart/", "quickstart"),
        make_doc("/guidelines/campaign-api/", "guidelines"),
        make_doc("/guidelines/campaign-api/#update-campaign-status", "guidelines"),
        make_doc("/guidelines/campaign-api/#create-a-campaign", "guidelines"),
        make_doc("/tutorials/deal-guide/", "tutorials"),
        make_doc("/guidelines/inventory-api/", "guidelines"),
        make_doc("/getting-started/before-you-begin/", "reference"),
    ]
    for order in itertools.permutations(pool, 5):
        links = build_structured_links(ranked(*order))
        urls = _all_urls(links)
        assert len(urls) == len(set(urls))
        assert all(len(bucket) <= 3 for bucket in links.related.values())


def test_empty_ranking_has_no_primary():
    """Nothing ranked, nothing linked."""
    links = build_structured_links([])
    assert links.primary is None
    assert links.related == {}
    assert links.is_empty


class TestTitles:
    """Title resolution priority."""

    def test_section_title_first(self):
        """An explicit section title wins over everything else."""
        doc = make_doc(
            "/guidelines/campaign-api/#x",
            "guidelines",
            title="Raw | Site",
            section_title="Campaign API",
            hierarchy_title="Other",
            display_category="API Guidelines",
        )
        assert resolve_title(doc) == "Campaign API"

    def test_display_category_before_raw_title(self):
        """Without hierarchy titles the display category is used."""
        doc = make_doc("/guidelines/", "guidelines", title="Guidelines | Docs", display_category="API Guidelines")
        assert resolve_title(doc) == "API Guidelines"

    def test_raw_title_cleaned(self):
        """Site suffixes after ' | ' or ' - ' are trimmed."""
        assert clean_title("Campaign API | IQM Docs") == "Campaign API"
        assert clean_title("Reports API - Developer Portal") == "Reports API"
        doc = make_doc("/guidelines/reports-api/", "guidelines", title="Reports API - Developer Portal")
        assert resolve_title(doc) == "Reports API"


def test_reference_lookup_for_tutorials():
    """Tutorial paths have reference pairs too; unknown paths have none."""
    assert find_reference_page("/tutorials/deal-guide/").url == "/guidelines/inventory-api/"
    assert find_reference_page("/quickstart-guides/unknown/") is None
