"""Query routing and response composition: intent, search terms, reranking, links, composition, offline fallback."""
from doc_assistant.services.assistant.assistant_service import AssistantInitialization, DocAssistantService
from doc_assistant.services.assistant.intent_classifier import classify_intent
from doc_assistant.services.assistant.search_terms import extract_search_terms
from doc_assistant.services.assistant.retriever import DocSearchOrchestrator
from doc_assistant.services.assistant.reranker import rerank
from doc_assistant.services.assistant.link_builder import build_structured_links
from doc_assistant.services.assistant.response_composer import compose_response
from doc_assistant.services.assistant.fallback_router import FallbackRouter
from doc_assistant.services.assistant.endpoint_registry import EndpointRegistry
from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables

__all__ = [
    "AssistantInitialization",
    "DocAssistantService",
    "classify_intent",
    "extract_search_terms",
    "DocSearchOrchestrator",
    "rerank",
    "build_structured_links",
    "compose_response",
    "FallbackRouter",
    "EndpointRegistry",
    "KnowledgeTables",
    "load_knowledge_tables",
]
