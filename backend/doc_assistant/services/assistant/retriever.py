"""
Keyword retrieval against the documentation index in Azure AI Search.

The index holds one record per documentation page or section with the fields
url, anchor, content, hierarchy_lvl0..hierarchy_lvl2, category, topic and type.
Hits are oversampled (search_hit_limit) so the reranker has material to reorder.
Any search failure is reported as "no results"; the chat continues without context.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional

from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import AzureError
from azure.search.documents import SearchClient

from doc_assistant.config import settings
from doc_assistant.exceptions import SearchUnavailable
from doc_assistant.services.assistant.types import CandidateDocument

logger = logging.getLogger(__name__)

SELECT_FIELDS = [
    "url",
    "anchor",
    "content",
    "hierarchy_lvl0",
    "hierarchy_lvl1",
    "hierarchy_lvl2",
    "category",
    "topic",
    "type",
]

SNIPPET_LENGTH = 200

_SCHEME_AND_HOST = re.compile(r"^https?://[^/]+", re.IGNORECASE)
_API_GUIDE = re.compile(r"/guidelines/([a-z0-9]+(?:-[a-z0-9]+)*?)-api\b")

# Path prefix → category label
PATH_CATEGORIES = (
    ("/quickstart-guides/", "quickstart"),
    ("/guidelines/", "guidelines"),
    ("/tutorials/", "tutorials"),
    ("/getting-started/", "reference"),
    ("/migration-guides/", "migration"),
    ("/political-vertical/", "political"),
    ("/healthcare-vertical/", "healthcare"),
)

# Substring of the path → topic id, checked in order
PATH_TOPICS = (
    ("campaign", "campaign"),
    ("creative", "creative"),
    ("asset", "creative"),
    ("audience", "audience"),
    ("report", "reports"),
    ("insights", "reports"),
    ("dashboard", "reports"),
    ("conversion", "conversion"),
    ("inventory", "inventory"),
    ("deal", "inventory"),
    ("finance", "finance"),
    ("auth", "user"),
    ("user", "user"),
    ("customer", "user"),
    ("workspace", "user"),
)


def _get_search_client() -> SearchClient:
    """Client for the documentation index. Single attempt, bounded by search_timeout_seconds."""
    if not settings.azure_search_endpoint or not settings.azure_search_key:
        raise SearchUnavailable("Azure AI Search is not configured (azure_search_endpoint, azure_search_key)")
    return SearchClient(
        endpoint=settings.azure_search_endpoint,
        index_name=settings.azure_search_index_name,
        credential=AzureKeyCredential(settings.azure_search_key),
        connection_timeout=settings.search_timeout_seconds,
        read_timeout=settings.search_timeout_seconds,
        retry_total=0,
    )


def search_configured() -> bool:
    return bool(settings.azure_search_endpoint and settings.azure_search_key)


def clean_url(url: str, anchor: Optional[str] = None) -> str:
    """Site-relative path without the /docs prefix, with #anchor appended when not already present."""
    path = _SCHEME_AND_HOST.sub("", url or "")
    if path.startswith("/docs/"):
        path = path[len("/docs"):]
    if not path.startswith("/"):
        path = "/" + path
    if anchor and "#" not in path:
        path = f"{path}#{anchor}"
    return path


def truncate_content(text: str, max_length: int = SNIPPET_LENGTH) -> str:
    if not text or len(text) <= max_length:
        return text or ""
    cut = text[:max_length]
    last_space = cut.rfind(" ")
    if last_space > 0:
        cut = cut[:last_space]
    return cut + "..."


def derive_category(path: str) -> str:
    for prefix, category in PATH_CATEGORIES:
        if prefix in path:
            return category
    return "reference"


def derive_topic(path: str) -> str:
    lowered = path.lower()
    match = _API_GUIDE.search(lowered)
    if match:
        return match.group(1)
    for marker, topic in PATH_TOPICS:
        if marker in lowered:
            return topic
    return "general"


def transform_hit(hit: Mapping[str, Any]) -> CandidateDocument:
    """
    Map one raw index record to a CandidateDocument.
    Raises KeyError when the record has no url; optional fields are simply omitted.
    """
    raw_url = hit["url"]
    if not raw_url:
        raise KeyError("url")
    anchor = hit.get("anchor") or None
    url = clean_url(raw_url, anchor)

    lvl0 = hit.get("hierarchy_lvl0") or None
    lvl1 = hit.get("hierarchy_lvl1") or None
    lvl2 = hit.get("hierarchy_lvl2") or None
    depth = 2 if lvl2 else 1 if lvl1 else 0

    return CandidateDocument(
        url=url,
        title=lvl2 or lvl1 or lvl0 or "Untitled",
        category=hit.get("category") or derive_category(url),
        topic=hit.get("topic") or derive_topic(url),
        content=truncate_content(hit.get("content") or ""),
        section_title=lvl1 if lvl2 else None,
        hierarchy_title=lvl1,
        display_category=lvl0 or "Documentation",
        anchor=anchor,
        hierarchy_depth=depth,
        score=float(hit.get("@search.score") or 0.0),
    )


class DocSearchOrchestrator:
    """Issue the retrieval call and convert every failure into an empty result."""

    def __init__(self, search_client: SearchClient | None = None, hit_limit: int | None = None):
        self._client = search_client
        self._hit_limit = hit_limit if hit_limit is not None else settings.search_hit_limit

    @property
    def enabled(self) -> bool:
        return self._client is not None or search_configured()

    def _client_or_create(self) -> SearchClient:
        if self._client is None:
            self._client = _get_search_client()
        return self._client

    def fetch(self, query: str, hit_limit: int | None = None, filter_expr: Optional[str] = None) -> List[CandidateDocument]:
        """Run the search. Raises SearchUnavailable on any transport or payload failure."""
        top = hit_limit if hit_limit is not None else self._hit_limit
        client = self._client_or_create()
        try:
            results: Iterable[Mapping[str, Any]] = client.search(
                search_text=query,
                top=top,
                filter=filter_expr,
                select=SELECT_FIELDS,
            )
            docs = [transform_hit(r) for r in results]
        except AzureError as exc:
            raise SearchUnavailable(f"Search request failed: {exc}") from exc
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise SearchUnavailable(f"Malformed search payload: {exc!r}") from exc
        return docs[:top]

    def search(self, query: str, hit_limit: int | None = None, filter_expr: Optional[str] = None) -> List[CandidateDocument]:
        """Ordered candidates for the query, or [] when search is unavailable."""
        try:
            docs = self.fetch(query, hit_limit, filter_expr)
        except SearchUnavailable as exc:
            logger.warning(
                "Search unavailable; continuing without retrieval context: %s",
                exc,
                extra={"search_terms": query, "error": type(exc.__cause__ or exc).__name__},
            )
            return []
        logger.info("Search returned %d hits", len(docs), extra={"search_terms": query, "num_hits": len(docs)})
        return docs
