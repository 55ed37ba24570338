"""
Final answer assembly.

Generated prose runs through CLEANUP_PIPELINE, an ordered list of named
string -> string steps. Each step is idempotent, so the whole pipeline is too.
Afterwards the only links in the text are the ones appended from StructuredLinks.
"""
from __future__ import annotations

import re
from typing import Callable, List, Tuple

from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.types import StructuredLinks

_MARKDOWN_LINK = re.compile(r"!?\[([^\[\]]*)\]\(([^()]*)\)")
_HTML_LINK = re.compile(r"<a\b[^>]*>(.*?)</a\s*>", re.IGNORECASE | re.DOTALL)
_HTML_ANCHOR_TAG = re.compile(r"</?a\b[^>]*>", re.IGNORECASE)
_LINK_TARGET = re.compile(r"\]\([^()]*\)")
_BARE_URL = re.compile(r"<?https?://[^\s)>\]]+>?")
_BARE_DOC_PATH = re.compile(
    r"(?<![\w/])/(?:docs/)?(?:getting-started|guidelines|quickstart-guides|tutorials|"
    r"migration-guides|political-vertical|healthcare-vertical)(?:/[\w#.-]*)*/?"
)
_EMPTY_PARENS = re.compile(r"\(\s*\)")
_BOLD_ONLY_LINE = re.compile(r"^\s*(?:[-*]\s+)?\*\*[^*]+\*\*:?\s*$")
_SECTION_LABEL_LINE = re.compile(
    r"^\s*(?:#+\s*)?(?:\*\*)?(?:related resources|recommended|references|sources|see also|useful links)"
    r"(?:\*\*)?\s*:?(?:\*\*)?\s*$",
    re.IGNORECASE,
)
_EMPTY_BULLET = re.compile(r"^\s*(?:[-*•]|\d+\.)\s*$")
_TITLE_FRAGMENT = re.compile(
    r"^\s*(?:[-*•]\s+)?[A-Z][\w /&-]{0,60}\b(?:API|Guide|Quickstart|Tutorial|Reference|Documentation|Docs)\s*$"
)
_REFERENCE_SENTENCE = re.compile(
    r"^(?:for (?:more|further) (?:details|information)[^,]*,\s*)?(?:please\s+)?"
    r"(?:see|refer to|check out|visit|consult|read)\b",
    re.IGNORECASE,
)
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_TRAILING_SPACES = re.compile(r"[ \t]+$", re.MULTILINE)
_INLINE_SPACES = re.compile(r"(?<=\S)[ \t]{2,}")
_BLANK_RUNS = re.compile(r"\n{3,}")


def _until_stable(text: str, step: Callable[[str], str]) -> str:
    previous = None
    while text != previous:
        previous, text = text, step(text)
    return text


def strip_html_links(text: str) -> str:
    """<a href="...">title</a> -> title; stray anchor tags are dropped."""
    return _until_stable(text, lambda t: _HTML_ANCHOR_TAG.sub("", _HTML_LINK.sub(lambda m: m.group(1), t)))


def _unlink_once(text: str) -> str:
    reduced = _MARKDOWN_LINK.sub(lambda m: m.group(1), text)
    if reduced != text:
        return reduced
    # Link targets whose title kept brackets, e.g. "[see [1]](x)"
    return _LINK_TARGET.sub("]", text)


def strip_markdown_links(text: str) -> str:
    """[title](url) -> title, innermost first so nested links cannot reassemble. Image syntax is reduced the same way."""
    return _until_stable(text, _unlink_once)


def strip_bare_urls(text: str) -> str:
    text = _BARE_URL.sub("", text)
    text = _BARE_DOC_PATH.sub("", text)
    while _EMPTY_PARENS.search(text):
        text = _EMPTY_PARENS.sub("", text)
    return text


def strip_orphan_titles(text: str) -> str:
    """Remove lines that are only a heading, a section label, an empty bullet or a bare page title."""
    kept = []
    for line in text.split("\n"):
        if (
            _BOLD_ONLY_LINE.match(line)
            or _SECTION_LABEL_LINE.match(line)
            or _EMPTY_BULLET.match(line)
            or _TITLE_FRAGMENT.match(line)
        ):
            continue
        kept.append(line)
    return "\n".join(kept)


def strip_reference_phrases(text: str) -> str:
    """Drop trailing "see ..." / "refer to ..." sentences; the appended links replace them."""
    paragraphs = text.rstrip().split("\n")
    while paragraphs:
        sentences = _SENTENCE_SPLIT.split(paragraphs[-1].strip())
        while sentences and _REFERENCE_SENTENCE.match(sentences[-1].lstrip("-*• ").strip()):
            sentences.pop()
        last = " ".join(sentences).strip()
        if last:
            paragraphs[-1] = last
            break
        paragraphs.pop()
    return "\n".join(paragraphs)


def collapse_whitespace(text: str) -> str:
    text = _TRAILING_SPACES.sub("", text)
    text = _INLINE_SPACES.sub(" ", text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


CLEANUP_PIPELINE: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ("strip_html_links", strip_html_links),
    ("strip_markdown_links", strip_markdown_links),
    ("strip_bare_urls", strip_bare_urls),
    ("strip_orphan_titles", strip_orphan_titles),
    ("strip_reference_phrases", strip_reference_phrases),
    ("collapse_whitespace", collapse_whitespace),
)


def clean_generated_text(text: str) -> str:
    for _name, step in CLEANUP_PIPELINE:
        text = step(text)
    return text


def render_links(links: StructuredLinks, tables: KnowledgeTables | None = None) -> str:
    """Markdown block for the primary and related links. Empty when there are no links."""
    tables = tables or load_knowledge_tables()
    parts: List[str] = []
    if links.primary:
        parts.append(f"**Recommended:** [{links.primary.title}]({links.primary.url})")
    related = [(label, entries) for label, entries in links.related.items() if entries]
    if related:
        lines = ["**Related resources:**"]
        for label, entries in related:
            lines.append(f"- {tables.category_display_names.get(label, label.title())}:")
            lines.extend(f"  - [{e.title}]({e.url})" for e in entries)
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


def compose_response(prose: str, links: StructuredLinks, tables: KnowledgeTables | None = None) -> str:
    body = clean_generated_text(prose or "")
    link_block = render_links(links, tables)
    return "\n\n".join(p for p in (body, link_block) if p)
