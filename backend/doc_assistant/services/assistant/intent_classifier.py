"""
Rule-based intent classification.
Outputs one of create | update | get | conceptual | specific, plus the special-category flag.
Rules are checked in order and the first match wins; anything unmatched is a "get".
"""
from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Pattern, Tuple

from doc_assistant.services.assistant.knowledge import KnowledgeTables, load_knowledge_tables
from doc_assistant.services.assistant.types import Intent, IntentResult

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _phrase_pattern(phrases: Tuple[str, ...]) -> Pattern[str]:
    """Compile one alternation matching any phrase on word boundaries."""
    alternatives = "|".join(re.escape(p) for p in sorted(phrases, key=len, reverse=True))
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)")


def _rules(tables: KnowledgeTables):
    return (
        (tables.special_markers, Intent.SPECIFIC, True),
        (tables.create_verbs, Intent.CREATE, False),
        (tables.update_verbs, Intent.UPDATE, False),
        (tables.get_verbs, Intent.GET, False),
        (tables.conceptual_markers, Intent.CONCEPTUAL, False),
    )


def classify_intent(query: str, tables: KnowledgeTables | None = None) -> IntentResult:
    """Classify a user query. Pure: identical input always yields an identical result."""
    tables = tables or load_knowledge_tables()
    text = (query or "").lower()
    if not text.strip():
        return IntentResult(Intent.GET)

    for phrases, intent, special in _rules(tables):
        if _phrase_pattern(phrases).search(text):
            return IntentResult(intent, special_category=special)
    return IntentResult(Intent.GET)
