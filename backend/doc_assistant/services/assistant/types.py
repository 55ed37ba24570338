"""
Per-request value types used by the routing and composition engine.
Created and discarded per request; none of them are mutated after construction.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Intent(str, Enum):
    """User's underlying goal."""

    CREATE = "create"
    UPDATE = "update"
    GET = "get"
    CONCEPTUAL = "conceptual"
    SPECIFIC = "specific"


# Closed set of documentation categories
CATEGORIES: Tuple[str, ...] = (
    "quickstart",
    "guidelines",
    "tutorials",
    "reference",
    "migration",
    "political",
    "healthcare",
)


@dataclass(frozen=True)
class IntentResult:
    intent: Intent
    special_category: bool = False


@dataclass(frozen=True)
class CandidateDocument:
    """A documentation page or section returned by the search collaborator."""

    url: str
    title: str
    category: str
    topic: str = "general"
    content: str = ""
    section_title: Optional[str] = None
    hierarchy_title: Optional[str] = None
    display_category: Optional[str] = None
    anchor: Optional[str] = None
    hierarchy_depth: int = 0
    score: float = 0.0

    @property
    def base_url(self) -> str:
        return base_url(self.url)


@dataclass(frozen=True)
class RankedDocument:
    document: CandidateDocument
    intent_score: int


def base_url(url: str) -> str:
    """URL with any in-page fragment removed."""
    return (url or "").split("#", 1)[0]


@dataclass(frozen=True)
class LinkEntry:
    title: str
    url: str
    category: str


@dataclass
class StructuredLinks:
    """Verified navigation links: one primary page plus related pages bucketed by category label."""

    primary: Optional[LinkEntry] = None
    related: Dict[str, List[LinkEntry]] = field(default_factory=dict)

    def flatten(self) -> List[LinkEntry]:
        """Primary first, then related entries in bucket order."""
        links = [self.primary] if self.primary else []
        for entries in self.related.values():
            links.extend(entries)
        return links

    @property
    def is_empty(self) -> bool:
        return self.primary is None and not any(self.related.values())
