"""
Offline fallback routing.

Used when search or generation is unavailable. Answers come only from the
static route table, so this component needs no network and cannot fail.

Matching: the strict authentication pattern is checked first. Otherwise every
route whose keyword occurs as a substring of the lowercased query is a
candidate; the longest matched keyword wins and ties go to the route
registered first. No match yields the generic entry-point answer.

A first question about API details that lands on a reference route (and
not on an onboarding topic) is prefixed with a short authentication reminder.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from doc_assistant.services.assistant.actions import build_actions
from doc_assistant.services.assistant.knowledge import (
    FallbackRoute,
    KnowledgeTables,
    RouteLink,
    load_knowledge_tables,
)
from doc_assistant.services.assistant.prompts import AUTH_REMINDER
from doc_assistant.services.assistant.types import LinkEntry, StructuredLinks

logger = logging.getLogger(__name__)

LIMITED_MODE_NOTICE = (
    "_The assistant is running in limited mode right now, so this answer points you to the "
    "most relevant documentation instead of a full explanation._"
)
GENERIC_INTRO = (
    "I couldn't match your question to a specific guide. "
    "Here are some good places to start:"
)


@dataclass(frozen=True)
class RouteMatch:
    route: FallbackRoute
    keyword: str


@dataclass
class FallbackAnswer:
    response: str
    links: StructuredLinks
    actions: List[Dict[str, Any]] = field(default_factory=list)
    route: Optional[FallbackRoute] = None
    matched_keyword: Optional[str] = None


def _bucket(links: Iterable[RouteLink], limit: int) -> Dict[str, List[LinkEntry]]:
    related: Dict[str, List[LinkEntry]] = {}
    for link in links:
        bucket = related.setdefault(link.category, [])
        if len(bucket) < limit:
            bucket.append(LinkEntry(link.title, link.url, link.category))
    return related


def _mentions_any(text: str, markers: Iterable[str]) -> bool:
    # Word-start match: "auth" covers "authentication", "my" does not match "anatomy"
    return any(re.search(rf"(?<!\w){re.escape(marker)}", text) for marker in markers)


def _related_lines(links: StructuredLinks) -> List[str]:
    return [f"- [{e.title}]({e.url})" for entries in links.related.values() for e in entries]


class FallbackRouter:
    """Pure lookup over the static route table."""

    def __init__(self, tables: KnowledgeTables | None = None):
        self._tables = tables or load_knowledge_tables()
        self._auth = re.compile(self._tables.auth_pattern, re.IGNORECASE)

    def match(self, query: str) -> Optional[RouteMatch]:
        text = (query or "").lower()
        auth = self._auth.search(text)
        if auth:
            return RouteMatch(self._tables.auth_route, auth.group(0))

        best: Optional[RouteMatch] = None
        for route in self._tables.fallback_routes:
            for keyword in route.keywords:
                if keyword in text and (best is None or len(keyword) > len(best.keyword)):
                    best = RouteMatch(route, keyword)
        return best

    def links_for(self, route: FallbackRoute) -> StructuredLinks:
        return StructuredLinks(
            primary=LinkEntry(route.title, route.url, route.category),
            related=_bucket(route.related, self._tables.related_bucket_limit),
        )

    def generic_links(self) -> StructuredLinks:
        return StructuredLinks(
            primary=None,
            related=_bucket(self._tables.generic_suggestions, self._tables.related_bucket_limit),
        )

    def links_for_query(self, query: str) -> StructuredLinks:
        """Table-sourced links for a query; used when live search found nothing; generic suggestions when no route matches."""
        found = self.match(query)
        return self.links_for(found.route) if found else self.generic_links()

    def needs_auth_reminder(self, query: str, first_question: bool) -> bool:
        """First question, asks about API details, and is not about onboarding, workflows or earlier turns."""
        if not first_question:
            return False
        text = (query or "").lower()
        if self._auth.search(text) or not _mentions_any(text, self._tables.api_detail_markers):
            return False
        return not any(
            _mentions_any(text, markers)
            for markers in (
                self._tables.foundation_markers,
                self._tables.workflow_markers,
                self._tables.follow_up_markers,
            )
        )

    def route(
        self, query: str, reason: str = "generation_unavailable", first_question: bool = False
    ) -> FallbackAnswer:
        found = self.match(query)
        if found is None:
            links = self.generic_links()
            lines = [GENERIC_INTRO, *_related_lines(links), "", LIMITED_MODE_NOTICE]
            logger.info("Fallback router: no route matched", extra={"fallback_reason": reason, "fallback_used": True})
            return FallbackAnswer(response="\n".join(lines), links=links, actions=build_actions(links, "", self._tables))

        links = self.links_for(found.route)
        parts = []
        if found.route.detail and self.needs_auth_reminder(query, first_question):
            parts.append(AUTH_REMINDER)
        parts.append(
            f"Based on your question, I recommend checking the **[{found.route.title}]({found.route.url})** guide."
        )
        related = _related_lines(links)
        if related:
            parts.append("\n".join(["**Related resources:**", *related]))
        parts.append(LIMITED_MODE_NOTICE)
        logger.info(
            "Fallback router matched %r",
            found.keyword,
            extra={
                "route_url": found.route.url,
                "matched_keyword": found.keyword,
                "fallback_reason": reason,
                "fallback_used": True,
            },
        )
        return FallbackAnswer(
            response="\n\n".join(parts),
            links=links,
            actions=build_actions(links, "", self._tables),
            route=found.route,
            matched_keyword=found.keyword,
        )
