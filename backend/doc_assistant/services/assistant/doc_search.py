"""
Taxonomy search over the static documentation catalog.

Scores every catalog entry against the query, applies category/topic/complexity
filters and asks the generation collaborator for a one-sentence summary of the
best results. When generation is unavailable the summary comes from a template.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from doc_assistant.config import settings
from doc_assistant.exceptions import GenerationUnavailable, InvalidQueryError
from doc_assistant.services.assistant.knowledge import CatalogEntry, KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.prompts import (
    FALLBACK_SUMMARY_TEMPLATE,
    NO_RESULTS_SUMMARY,
    SEARCH_SUMMARY_TEMPLATE,
    SUMMARY_STOP_MARKERS,
)
from doc_assistant.services.generation_service import TextGenerationService

logger = logging.getLogger(__name__)

TITLE_MATCH_SCORE = 10
KEYWORD_MATCH_SCORE = 3
PARTIAL_MATCH_SCORE = 1
MAX_RESULTS = 10
SUMMARY_TOP_N = 3


@dataclass(frozen=True)
class CatalogFilters:
    category: Tuple[str, ...] = ()
    topic: Tuple[str, ...] = ()
    complexity: Tuple[str, ...] = ()

    def accepts(self, entry: CatalogEntry) -> bool:
        return (
            (not self.category or entry.category in self.category)
            and (not self.topic or entry.topic in self.topic)
            and (not self.complexity or entry.complexity in self.complexity)
        )


@dataclass(frozen=True)
class CatalogHit:
    entry: CatalogEntry
    score: int
    is_recommended: bool = False


@dataclass
class CatalogSearchResult:
    results: List[CatalogHit] = field(default_factory=list)
    summary: str = ""
    total_count: int = 0


def score_entry(entry: CatalogEntry, query: str) -> int:
    lowered = query.lower()
    score = 0
    if lowered in entry.title.lower():
        score += TITLE_MATCH_SCORE
    score += KEYWORD_MATCH_SCORE * sum(1 for kw in entry.keywords if kw in lowered or lowered in kw)
    for word in lowered.split():
        if len(word) > 2:
            score += PARTIAL_MATCH_SCORE * sum(1 for kw in entry.keywords if word in kw)
    return score


def rank_catalog(
    query: str,
    filters: CatalogFilters | None = None,
    tables: KnowledgeTables | None = None,
) -> List[CatalogHit]:
    """All matching entries, best first (stable), the first flagged as recommended."""
    tables = tables or load_knowledge_tables()
    filters = filters or CatalogFilters()
    scored = []
    for entry in tables.doc_catalog:
        if not filters.accepts(entry):
            continue
        score = score_entry(entry, query)
        if score > 0:
            scored.append(CatalogHit(entry, score))
    scored.sort(key=lambda h: h.score, reverse=True)
    if scored:
        scored[0] = CatalogHit(scored[0].entry, scored[0].score, is_recommended=True)
    return scored


def fallback_summary(query: str, top: Sequence[CatalogHit]) -> str:
    if not top:
        return f'No results found for "{query}".'
    best = top[0].entry
    return FALLBACK_SUMMARY_TEMPLATE.format(
        query=query,
        title=best.title,
        complexity=best.complexity,
        kind="quickstart" if best.category == "quickstart" else "guide",
    )


class DocCatalogSearch:
    """Companion search: catalog ranking plus a generated recommendation sentence."""

    def __init__(
        self,
        generation_service: Optional[TextGenerationService] = None,
        tables: KnowledgeTables | None = None,
    ):
        self._generation = generation_service or TextGenerationService()
        self._tables = tables or load_knowledge_tables()

    def summarize(self, query: str, top: Sequence[CatalogHit]) -> str:
        if not top:
            return NO_RESULTS_SUMMARY.format(query=query)
        listing = "\n".join(
            f"{i}. {hit.entry.title} ({hit.entry.category}, {hit.entry.complexity})"
            for i, hit in enumerate(top, 1)
        )
        prompt = SEARCH_SUMMARY_TEMPLATE.format(query=query, results=listing)
        try:
            return self._generation.generate(
                prompt,
                temperature=settings.summary_temperature,
                max_tokens=settings.summary_max_tokens,
                stop=SUMMARY_STOP_MARKERS,
                timeout=settings.summary_timeout_seconds,
            )
        except GenerationUnavailable as exc:
            logger.warning("Search summary generation failed; using template: %s", exc)
            return fallback_summary(query, top)

    def search(self, query: str, filters: CatalogFilters | None = None) -> CatalogSearchResult:
        if not query or not query.strip():
            raise InvalidQueryError("Search query cannot be empty")
        query = query.strip()
        ranked = rank_catalog(query, filters, self._tables)
        summary = self.summarize(query, ranked[:SUMMARY_TOP_N])
        logger.info(
            "Catalog search returned %d matches",
            len(ranked),
            extra={"search_terms": query, "num_hits": len(ranked)},
        )
        return CatalogSearchResult(results=ranked[:MAX_RESULTS], summary=summary, total_count=len(ranked))
