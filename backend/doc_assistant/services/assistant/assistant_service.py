"""
Documentation assistant: orchestrates routing and composition for one question.

classify intent → extract search terms → search (oversampled) → rerank →
build verified links → generate → compose. Search failure continues without
context; generation failure hands the whole answer to the offline fallback router.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from doc_assistant.config import settings
from doc_assistant.exceptions import GenerationUnavailable, InvalidQueryError
from doc_assistant.models import (
    ChatContext,
    ChatResponse,
    Link,
    SearchFilters,
    SearchResponse,
    SearchResultItem,
    StructuredLinksModel,
)
from doc_assistant.services.assistant.actions import build_actions
from doc_assistant.services.assistant.doc_search import CatalogFilters, DocCatalogSearch
from doc_assistant.services.assistant.endpoint_registry import EndpointRegistry
from doc_assistant.services.assistant.fallback_router import FallbackRouter
from doc_assistant.services.assistant.intent_classifier import classify_intent
from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.link_builder import build_structured_links
from doc_assistant.services.assistant.prompt_builder import (
    HistoryTurn,
    PageContext,
    build_prompt_sections,
    render_prompt,
)
from doc_assistant.services.assistant.prompts import ANSWER_STOP_MARKERS
from doc_assistant.services.assistant.reranker import rerank, top_documents
from doc_assistant.services.assistant.response_composer import compose_response
from doc_assistant.services.assistant.retriever import DocSearchOrchestrator
from doc_assistant.services.assistant.search_terms import extract_search_terms
from doc_assistant.services.assistant.types import LinkEntry, StructuredLinks
from doc_assistant.services.generation_service import TextGenerationService
from doc_assistant.services.logging_service import LoggingService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssistantInitialization:
    """Snapshot of what the engine was built with; created once per service instance."""

    tables_version: str
    search_enabled: bool
    generation_enabled: bool
    initialized_at: datetime

    def as_dict(self) -> dict:
        return {
            "tablesVersion": self.tables_version,
            "searchEnabled": self.search_enabled,
            "generationEnabled": self.generation_enabled,
            "initializedAt": self.initialized_at.isoformat() + "Z",
        }


def _link_model(entry: LinkEntry) -> Link:
    return Link(title=entry.title, url=entry.url, category=entry.category)


def _links_model(links: StructuredLinks) -> StructuredLinksModel:
    return StructuredLinksModel(
        primary=_link_model(links.primary) if links.primary else None,
        related={label: [_link_model(e) for e in entries] for label, entries in links.related.items()},
    )


def _page_context(context: Optional[ChatContext]) -> Optional[PageContext]:
    if context is None:
        return None
    return PageContext(path=context.current_page, title=context.page_title, headings=tuple(context.headings))


def _history(context: Optional[ChatContext]) -> List[HistoryTurn]:
    if context is None:
        return []
    return [HistoryTurn(role=t.role, content=t.content) for t in context.conversation_history]


class DocAssistantService:
    """
    Owns the engine collaborators and the knowledge tables for the process.
    Constructed once (FastAPI lifespan) and handed to request handlers.
    """

    def __init__(
        self,
        search: Optional[DocSearchOrchestrator] = None,
        generation_service: Optional[TextGenerationService] = None,
        logging_service: Optional[LoggingService] = None,
        tables: Optional[KnowledgeTables] = None,
    ):
        self._tables = tables or load_knowledge_tables()
        self._search = search or DocSearchOrchestrator()
        self._generation = generation_service or TextGenerationService()
        self._logging = logging_service or LoggingService()
        self._router = FallbackRouter(self._tables)
        self._catalog = DocCatalogSearch(self._generation, self._tables)
        self._endpoints = EndpointRegistry(self._tables)
        self.initialization = AssistantInitialization(
            tables_version=self._tables.version,
            search_enabled=self._search.enabled,
            generation_enabled=self._generation.enabled,
            initialized_at=datetime.utcnow(),
        )
        logger.info(
            "Documentation assistant initialized (search=%s, generation=%s)",
            self.initialization.search_enabled,
            self.initialization.generation_enabled,
            extra={"tables_version": self._tables.version},
        )

    @property
    def tables(self) -> KnowledgeTables:
        return self._tables

    @property
    def endpoints(self) -> EndpointRegistry:
        return self._endpoints

    def validate_message(self, message: Optional[str]) -> str:
        if not message or not message.strip():
            raise InvalidQueryError("Message cannot be empty")
        if len(message) > settings.max_message_length:
            raise InvalidQueryError(f"Message must be {settings.max_message_length} characters or less")
        return message.strip()

    async def process_message(
        self,
        message: str,
        context: Optional[ChatContext] = None,
        conversation_id: Optional[str] = None,
    ) -> ChatResponse:
        """Answer one question. Never fails because a collaborator is down."""
        message = self.validate_message(message)
        cid = conversation_id or str(uuid.uuid4())

        # 1. Intent and search terms
        intent = classify_intent(message, self._tables)
        terms = extract_search_terms(message, self._tables)
        logger.info(
            "Intent classified",
            extra={
                "conversation_id": cid,
                "user_query": message,
                "intent": intent.intent.value,
                "special_category": intent.special_category,
                "search_terms": terms,
            },
        )

        # 2. Retrieval (empty on failure) → rerank → verified links
        # Search and generation clients are blocking; keep them off the event loop
        candidates = await asyncio.to_thread(self._search.search, terms, settings.search_hit_limit)
        ranked = top_documents(rerank(candidates, intent, message, self._tables), settings.ranked_keep)
        links = build_structured_links(ranked, self._tables)

        # 3. Generation, or the offline router when generation is unavailable
        sections = build_prompt_sections(
            message,
            ranked,
            _page_context(context),
            _history(context),
            max_context_chars=settings.max_context_chars,
            history_turns=settings.history_turns_in_prompt,
            endpoint_context=self._endpoints.prompt_context(message),
        )
        fallback_used = False
        try:
            prose = await asyncio.to_thread(
                self._generation.generate,
                render_prompt(sections),
                temperature=settings.generation_temperature,
                max_tokens=settings.generation_max_tokens,
                stop=ANSWER_STOP_MARKERS,
                timeout=settings.generation_timeout_seconds,
            )
        except GenerationUnavailable as exc:
            logger.warning(
                "Generation unavailable; using offline fallback router: %s",
                exc,
                extra={"conversation_id": cid, "fallback_reason": "generation_unavailable"},
            )
            answer = self._router.route(
                message,
                reason="generation_unavailable",
                first_question=not (context and context.conversation_history),
            )
            response_text, links, actions = answer.response, answer.links, answer.actions
            fallback_used = True
        else:
            if links.is_empty:
                links = self._router.links_for_query(message)
            response_text = compose_response(prose, links, self._tables)
            actions = build_actions(links, prose, self._tables)

        # 4. Log and respond
        primary_url = links.primary.url if links.primary else None
        related_count = sum(len(v) for v in links.related.values())
        logger.info(
            f"Chat completed | intent={intent.intent.value} hits={len(candidates)} "
            f"ranked={len(ranked)} fallback={fallback_used}",
            extra={
                "conversation_id": cid,
                "user_query": message,
                "intent": intent.intent.value,
                "num_hits": len(candidates),
                "num_ranked": len(ranked),
                "retrieval_used": bool(ranked),
                "primary_url": primary_url,
                "related_count": related_count,
                "fallback_used": fallback_used,
                "response_length": len(response_text),
                "tables_version": self._tables.version,
            },
        )
        conversation_record_id = await self._logging.log_conversation(
            conversation_id=cid,
            user_message=message,
            assistant_response=response_text,
            query_intent=intent.intent.value,
            special_category=intent.special_category,
            fallback_used=fallback_used,
            primary_url=primary_url,
            current_page=context.current_page if context else None,
        )

        return ChatResponse(
            response=response_text,
            actions=actions,
            links=[_link_model(e) for e in links.flatten()],
            structured_links=_links_model(links),
            query_intent=intent.intent.value,
            special_category=intent.special_category,
            fallback=fallback_used,
            conversation_id=cid,
            conversation_record_id=conversation_record_id,
        )

    def search_docs(self, query: str, filters: Optional[SearchFilters] = None) -> SearchResponse:
        """Companion taxonomy search over the documentation catalog."""
        catalog_filters = CatalogFilters(
            category=tuple(filters.category),
            topic=tuple(filters.topic),
            complexity=tuple(filters.complexity),
        ) if filters else None
        result = self._catalog.search(query, catalog_filters)
        return SearchResponse(
            results=[
                SearchResultItem(
                    path=hit.entry.path,
                    title=hit.entry.title,
                    category=hit.entry.category,
                    topic=hit.entry.topic,
                    complexity=hit.entry.complexity,
                    score=hit.score,
                    is_recommended=hit.is_recommended,
                )
                for hit in result.results
            ],
            summary=result.summary,
            total_count=result.total_count,
        )
