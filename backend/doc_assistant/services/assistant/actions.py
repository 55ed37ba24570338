"""Agent actions attached to an answer: navigate to the primary page and highlight key terms."""
from __future__ import annotations

import posixpath
import re
from typing import Any, Dict, List, Optional

from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.types import StructuredLinks, base_url

MAX_HIGHLIGHT_TERMS = 5

_BACKTICK_TERM = re.compile(r"`([^`]{3,49})`")
_QUOTED_TERM = re.compile(r"\"([^\"/]{3,29})\"")


def is_valid_doc_path(path: Optional[str], tables: KnowledgeTables | None = None) -> bool:
    """True when the path, with any ".." segments resolved, sits under a whitelisted documentation prefix."""
    if not path:
        return False
    tables = tables or load_knowledge_tables()
    normalized = path if path.startswith("/") else "/" + path
    normalized = posixpath.normpath(base_url(normalized))
    return any(
        normalized.startswith(prefix) or normalized == prefix.rstrip("/")
        for prefix in tables.valid_doc_prefixes
    )


def extract_highlight_terms(text: str, tables: KnowledgeTables | None = None) -> List[str]:
    tables = tables or load_knowledge_tables()
    terms: List[str] = []

    def add(term: str) -> None:
        term = term.strip()
        if term and term not in terms:
            terms.append(term)

    for match in _BACKTICK_TERM.finditer(text or ""):
        add(match.group(1))
    for match in _QUOTED_TERM.finditer(text or ""):
        add(match.group(1))
    for api_term in tables.api_highlight_terms:
        if re.search(rf"(?<!\w){re.escape(api_term)}(?!\w)", text or ""):
            add(api_term)
    return terms[:MAX_HIGHLIGHT_TERMS]


def navigate_action(path: str) -> Dict[str, Any]:
    return {"tool": "navigate", "params": {"path": path}, "status": "pending"}


def highlight_action(terms: List[str]) -> Dict[str, Any]:
    return {"tool": "highlight", "params": {"terms": terms}, "status": "pending"}


def build_actions(
    links: StructuredLinks,
    generated_text: str = "",
    tables: KnowledgeTables | None = None,
) -> List[Dict[str, Any]]:
    """Navigate to the primary page (whitelisted paths only), then highlight terms from the prose."""
    tables = tables or load_knowledge_tables()
    actions: List[Dict[str, Any]] = []
    if links.primary and is_valid_doc_path(links.primary.url, tables):
        actions.append(navigate_action(base_url(links.primary.url)))
    terms = extract_highlight_terms(generated_text, tables)
    if terms:
        actions.append(highlight_action(terms))
    return actions
