"""
Build the answer prompt as an ordered list of named sections.

Section order is fixed: system, retrieved-context, api-endpoints, page-context,
history, current-turn. Empty sections are left out. render_prompt turns the sections
into a single Mistral-instruct prompt string.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from doc_assistant.services.assistant.prompts import (
    CONTEXT_TRUNCATED_NOTE,
    DOC_ASSISTANT_SYSTEM_PROMPT,
    HISTORY_HEADER,
    NO_CONTEXT_NOTE,
    PAGE_CONTEXT_TEMPLATE,
    PAGE_HEADINGS_TEMPLATE,
    RETRIEVED_CONTEXT_HEADER,
)
from doc_assistant.services.assistant.types import RankedDocument

logger = logging.getLogger(__name__)

SECTION_ORDER = ("system", "retrieved-context", "api-endpoints", "page-context", "history", "current-turn")

SNIPPET_CHARS = 500
MAX_HEADINGS = 5
DEFAULT_MAX_CONTEXT_CHARS = 6000
DEFAULT_HISTORY_TURNS = 4


@dataclass(frozen=True)
class PromptSection:
    name: str
    content: str


@dataclass(frozen=True)
class HistoryTurn:
    role: str
    content: str


@dataclass(frozen=True)
class PageContext:
    path: Optional[str] = None
    title: Optional[str] = None
    headings: Tuple[str, ...] = ()


def build_context_block(documents: Sequence[RankedDocument], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS) -> str:
    """Each ranked document as "### title" followed by its snippet; truncated to max_chars overall."""
    if not documents:
        return NO_CONTEXT_NOTE
    parts = []
    for item in documents:
        doc = item.document
        snippet = (doc.content or "")[:SNIPPET_CHARS]
        parts.append(f"### {doc.title}\n{snippet}".rstrip())
    context = "\n\n".join(parts)
    if len(context) > max_chars:
        context = context[:max_chars] + "\n\n" + CONTEXT_TRUNCATED_NOTE
        logger.debug("Prompt context truncated to %d chars", max_chars)
    return f"{RETRIEVED_CONTEXT_HEADER}\n\n{context}"


def build_page_context(page: Optional[PageContext]) -> str:
    if page is None or not (page.title or page.path):
        return ""
    text = PAGE_CONTEXT_TEMPLATE.format(page=page.title or page.path)
    headings = [h for h in page.headings if h][:MAX_HEADINGS]
    if headings:
        text += PAGE_HEADINGS_TEMPLATE.format(headings=", ".join(headings))
    return text


def build_history(history: Sequence[HistoryTurn], turns: int = DEFAULT_HISTORY_TURNS) -> str:
    recent = list(history)[-turns:] if turns > 0 else []
    if not recent:
        return ""
    lines = [HISTORY_HEADER]
    for turn in recent:
        speaker = "User" if turn.role == "user" else "Assistant"
        lines.append(f"{speaker}: {turn.content}")
    return "\n".join(lines)


def build_prompt_sections(
    user_message: str,
    documents: Sequence[RankedDocument] = (),
    page: Optional[PageContext] = None,
    history: Sequence[HistoryTurn] = (),
    *,
    max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
    history_turns: int = DEFAULT_HISTORY_TURNS,
    system_prompt: str = DOC_ASSISTANT_SYSTEM_PROMPT,
    endpoint_context: str = "",
) -> Tuple[PromptSection, ...]:
    contents = {
        "system": system_prompt,
        "retrieved-context": build_context_block(documents, max_context_chars),
        "api-endpoints": (endpoint_context or "").strip(),
        "page-context": build_page_context(page),
        "history": build_history(history, history_turns),
        "current-turn": (user_message or "").strip(),
    }
    return tuple(PromptSection(name, contents[name]) for name in SECTION_ORDER if contents[name])


def render_prompt(sections: Sequence[PromptSection]) -> str:
    """<s>[INST] section\\n\\nsection ... [/INST]"""
    body = "\n\n".join(s.content for s in sections)
    return f"<s>[INST] {body} [/INST]"
