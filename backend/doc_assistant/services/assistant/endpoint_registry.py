"""
API endpoint registry.

Lookup, listing and keyword search over the static endpoint table in
knowledge.API_ENDPOINTS. Search scoring per query term (terms shorter than
three characters are ignored): summary +8, path +6, description or tags +3.
Ties keep table order. prompt_context renders the best matches as a compact
block for the answer prompt.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from doc_assistant.exceptions import EndpointNotFound
from doc_assistant.services.assistant.knowledge import ApiEndpoint, KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.prompts import (
    ENDPOINT_CONTEXT_HEADER,
    ENDPOINT_PATH_PARAMS_TEMPLATE,
    ENDPOINT_REQUIRED_TEMPLATE,
)

logger = logging.getLogger(__name__)

SUMMARY_MATCH_SCORE = 8
PATH_MATCH_SCORE = 6
TEXT_MATCH_SCORE = 3
MIN_TERM_LENGTH = 3
DEFAULT_SEARCH_LIMIT = 5
PROMPT_ENDPOINT_LIMIT = 3

_TERM = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class EndpointMatch:
    endpoint: ApiEndpoint
    score: int


def search_terms(query: str) -> List[str]:
    return [t for t in _TERM.findall((query or "").lower()) if len(t) >= MIN_TERM_LENGTH]


def score_endpoint(endpoint: ApiEndpoint, terms: List[str]) -> int:
    summary = endpoint.summary.lower()
    path = endpoint.path.lower()
    text = " ".join((endpoint.description, *endpoint.tags)).lower()
    score = 0
    for term in terms:
        if term in summary:
            score += SUMMARY_MATCH_SCORE
        if term in path:
            score += PATH_MATCH_SCORE
        if term in text:
            score += TEXT_MATCH_SCORE
    return score


def endpoint_as_dict(endpoint: ApiEndpoint, detailed: bool = True) -> Dict[str, Any]:
    """camelCase view of an endpoint for API responses."""
    data: Dict[str, Any] = {
        "method": endpoint.method,
        "path": endpoint.path,
        "summary": endpoint.summary,
        "docPage": endpoint.doc_page,
    }
    if detailed:
        data.update(
            description=endpoint.description,
            category=endpoint.category,
            tags=list(endpoint.tags),
            requiredFields=list(endpoint.required_fields),
            pathParams=list(endpoint.path_params),
            requiresAuth=endpoint.requires_auth,
        )
    return data


class EndpointRegistry:
    """Read-only view over the endpoint table, indexed by key and category."""

    def __init__(self, tables: KnowledgeTables | None = None):
        self._tables = tables or load_knowledge_tables()
        self._by_key: Dict[str, ApiEndpoint] = {e.key: e for e in self._tables.api_endpoints}
        self._by_category: Dict[str, List[ApiEndpoint]] = {}
        for endpoint in self._tables.api_endpoints:
            self._by_category.setdefault(endpoint.category, []).append(endpoint)

    def __len__(self) -> int:
        return len(self._by_key)

    def categories(self) -> List[str]:
        return sorted(self._by_category)

    def by_category(self, category: str) -> List[ApiEndpoint]:
        return list(self._by_category.get((category or "").strip().lower(), []))

    def get_endpoint(self, path: str, method: Optional[str] = None) -> Optional[ApiEndpoint]:
        """Exact method+path, then path alone (first registered method), then partial path containment."""
        path = (path or "").strip()
        if not path:
            return None
        if method:
            found = self._by_key.get(f"{method.strip().upper()}:{path}")
            if found:
                return found
        endpoints = self._tables.api_endpoints
        for endpoint in endpoints:
            if endpoint.path == path:
                return endpoint
        for endpoint in endpoints:
            if endpoint.path in path or path in endpoint.path:
                return endpoint
        return None

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[EndpointMatch]:
        terms = search_terms(query)
        if not terms:
            return []
        matches = [EndpointMatch(e, score_endpoint(e, terms)) for e in self._tables.api_endpoints]
        matches = [m for m in matches if m.score > 0]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit]

    def get_api_info(self, endpoint: str, method: Optional[str] = None) -> Dict[str, Any]:
        """Full detail for a path; a term without "/" is treated as a search query instead."""
        endpoint = (endpoint or "").strip()
        if "/" not in endpoint:
            return {"results": [endpoint_as_dict(m.endpoint, detailed=False) for m in self.search(endpoint)]}
        found = self.get_endpoint(endpoint, method)
        if found is None:
            raise EndpointNotFound(f"No API endpoint matches {endpoint!r}")
        return {"endpoint": endpoint_as_dict(found)}

    def list_endpoints(self, category: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Endpoints grouped by category; a single group when a category is given."""
        if category:
            return {category: [endpoint_as_dict(e, detailed=False) for e in self.by_category(category)]}
        return {
            name: [endpoint_as_dict(e, detailed=False) for e in self._by_category[name]]
            for name in self.categories()
        }

    def prompt_context(self, query: str, limit: int = PROMPT_ENDPOINT_LIMIT) -> str:
        """Best endpoint matches as prompt text; empty when nothing matches."""
        matches = self.search(query, limit)
        if not matches:
            return ""
        lines = [ENDPOINT_CONTEXT_HEADER]
        for match in matches:
            endpoint = match.endpoint
            lines.append(f"- {endpoint.method} {endpoint.path}: {endpoint.summary}")
            if endpoint.required_fields:
                lines.append(ENDPOINT_REQUIRED_TEMPLATE.format(fields=", ".join(endpoint.required_fields)))
            if endpoint.path_params:
                lines.append(ENDPOINT_PATH_PARAMS_TEMPLATE.format(params=", ".join(endpoint.path_params)))
        logger.debug("Endpoint context: %d matches", len(matches))
        return "\n".join(lines)
