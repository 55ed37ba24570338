"""Normalize a free-text question into a compact search string for the documentation index."""
from __future__ import annotations

import re

from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables

_PUNCTUATION = re.compile(r"[^\w\s]")


def extract_search_terms(query: str, tables: KnowledgeTables | None = None) -> str:
    """
    Lowercase, strip punctuation, drop stop words and single characters, then expand
    the first token found in the entity table. Later entity tokens are left as-is.
    Returns the original query if nothing survives filtering.
    """
    tables = tables or load_knowledge_tables()
    cleaned = _PUNCTUATION.sub("", (query or "").lower())
    tokens = [
        t for t in cleaned.split()
        if len(t) > 1 and t not in tables.stop_words
    ]
    if not tokens:
        return query

    for i, token in enumerate(tokens):
        expansion = tables.entity_expansions.get(token)
        if expansion:
            tokens[i] = expansion
            break
    return " ".join(tokens)
