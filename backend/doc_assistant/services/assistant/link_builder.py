"""
Turn ranked documents into deduplicated, categorized navigation links.

The first ranked document becomes the primary link. Quickstarts and tutorials
additionally pull in their paired reference page and only ever relate to
reference ("guidelines") material. No base url appears twice, and every related
bucket holds at most RELATED_BUCKET_LIMIT entries.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from doc_assistant.services.assistant.knowledge import KnowledgeTables, RouteLink, load_knowledge_tables
from doc_assistant.services.assistant.types import (
    CandidateDocument,
    LinkEntry,
    RankedDocument,
    StructuredLinks,
    base_url,
)

logger = logging.getLogger(__name__)

TITLE_SEPARATORS = (" | ", " - ")


def clean_title(title: str) -> str:
    """Drop site suffixes such as "Campaign API | Docs"."""
    cleaned = title or ""
    for separator in TITLE_SEPARATORS:
        cleaned = cleaned.split(separator, 1)[0]
    return cleaned.strip()


def resolve_title(doc: CandidateDocument) -> str:
    return (
        doc.section_title
        or doc.hierarchy_title
        or doc.display_category
        or clean_title(doc.title)
        or doc.base_url
    )


def find_reference_page(url: str, tables: KnowledgeTables | None = None) -> Optional[RouteLink]:
    """Reference page paired with a quickstart or tutorial path, if one is registered."""
    tables = tables or load_knowledge_tables()
    for fragment, target in tables.reference_correspondence:
        if fragment in url:
            return target
    return None


def build_structured_links(
    ranked: Sequence[RankedDocument],
    tables: KnowledgeTables | None = None,
) -> StructuredLinks:
    tables = tables or load_knowledge_tables()
    links = StructuredLinks()
    if not ranked:
        return links

    primary_doc = ranked[0].document
    links.primary = LinkEntry(resolve_title(primary_doc), primary_doc.base_url, primary_doc.category)
    seen = {links.primary.url}
    guided = primary_doc.category in tables.guided_categories
    limit = tables.related_bucket_limit

    if guided:
        reference = find_reference_page(primary_doc.url, tables)
        if reference and base_url(reference.url) not in seen:
            links.related.setdefault(tables.reference_label, []).append(
                LinkEntry(reference.title, base_url(reference.url), tables.reference_label)
            )
            seen.add(base_url(reference.url))

    for item in ranked[1:]:
        doc = item.document
        url = doc.base_url
        if url in seen:
            continue
        if guided and doc.category != tables.reference_label:
            continue
        bucket = links.related.setdefault(doc.category, [])
        if len(bucket) >= limit:
            continue
        bucket.append(LinkEntry(resolve_title(doc), url, doc.category))
        seen.add(url)

    links.related = {label: entries for label, entries in links.related.items() if entries}
    logger.debug(
        "Built links: primary=%s related=%d",
        links.primary.url,
        sum(len(v) for v in links.related.values()),
    )
    return links
