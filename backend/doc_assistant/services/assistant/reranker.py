"""
Intent-aware relevance reranking.

Every candidate starts from the base score and collects independent additive
adjustments (category priority, path boost, advanced-track penalty,
low-priority penalty, anchor boost). Adjustments stack. The sort is stable, so
equal totals keep the order the search index returned.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence, Set

from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.types import CandidateDocument, IntentResult, RankedDocument

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s-]")


def query_tokens(query: str) -> Set[str]:
    return set(_NON_WORD.sub(" ", (query or "").lower()).replace("-", " ").split())


def category_priority(doc: CandidateDocument, intent: IntentResult, tables: KnowledgeTables) -> int:
    priority = tables.category_priority.get((intent.intent, doc.category))
    if priority is None and doc.display_category:
        priority = tables.category_priority.get((intent.intent, doc.display_category))
    return priority or 0


def path_boost(doc: CandidateDocument, intent: IntentResult, tables: KnowledgeTables) -> int:
    url = doc.url.lower()
    return sum(boost for boost_intent, marker, boost in tables.path_boosts
               if boost_intent == intent.intent and marker in url)


def advanced_penalty(doc: CandidateDocument, tables: KnowledgeTables) -> int:
    haystack = f"{doc.title} {doc.url}".lower()
    if any(marker in haystack for marker in tables.advanced_markers):
        return tables.advanced_penalty
    return 0


def low_priority_penalty(doc: CandidateDocument, intent: IntentResult, tables: KnowledgeTables) -> int:
    if doc.category in tables.low_priority_categories and not intent.special_category:
        return tables.low_priority_penalty
    return 0


def anchor_boost(doc: CandidateDocument, tokens: Set[str], tables: KnowledgeTables) -> int:
    """Leaf-level section whose anchor slug is fully named by the query."""
    if not doc.anchor or doc.hierarchy_depth < tables.leaf_depth:
        return 0
    slug_tokens = [t for t in doc.anchor.lower().split("-") if len(t) > 1]
    if slug_tokens and all(t in tokens for t in slug_tokens):
        return tables.anchor_boost
    return 0


def score_document(
    doc: CandidateDocument,
    intent: IntentResult,
    tokens: Set[str] | None = None,
    tables: KnowledgeTables | None = None,
) -> int:
    tables = tables or load_knowledge_tables()
    return (
        tables.base_score
        + category_priority(doc, intent, tables)
        + path_boost(doc, intent, tables)
        + advanced_penalty(doc, tables)
        + low_priority_penalty(doc, intent, tables)
        + anchor_boost(doc, tokens or set(), tables)
    )


def rerank(
    candidates: Iterable[CandidateDocument],
    intent: IntentResult,
    query: str = "",
    tables: KnowledgeTables | None = None,
) -> List[RankedDocument]:
    """Score and order candidates by intent score, highest first; ties keep input order."""
    tables = tables or load_knowledge_tables()
    tokens = query_tokens(query)
    ranked = [RankedDocument(doc, score_document(doc, intent, tokens, tables)) for doc in candidates]
    ranked.sort(key=lambda r: r.intent_score, reverse=True)
    if ranked:
        logger.debug(
            "Reranked %d candidates; top=%s (%d)",
            len(ranked),
            ranked[0].document.url,
            ranked[0].intent_score,
        )
    return ranked


def top_documents(ranked: Sequence[RankedDocument], keep: int) -> List[RankedDocument]:
    return list(ranked[:keep])
