"""
Search term extraction tests.
"""

from doc_assistant.services.assistant.search_terms import extract_search_terms


def test_filler_words_dropped_and_entity_expanded():
    """The canonical campaign question becomes a compact API search."""
    assert extract_search_terms("How do I create a campaign?") == "create campaign api"


def test_only_first_entity_is_expanded():
    """Later entity tokens stay as typed."""
    assert extract_search_terms("campaign creative report") == "campaign api creative report"


def test_punctuation_and_case_removed():
    """Commas, exclamation marks and capitals are normalized away."""
    assert extract_search_terms("Upload CREATIVES, please!") == "upload creative api"


def test_single_character_tokens_dropped():
    """Stray single letters do not reach the index."""
    assert extract_search_terms("x campaign y") == "campaign api"


def test_all_stop_words_returns_original_query():
    """If filtering empties the list, the raw query is searched instead."""
    assert extract_search_terms("How do I?") == "How do I?"


def test_no_entity_leaves_tokens_unchanged():
    """Queries without an entity token are only filtered."""
    assert extract_search_terms("What is pacing?") == "pacing"
