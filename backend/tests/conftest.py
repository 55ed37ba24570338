"""
Shared fixtures: in-memory fakes for the search index and text generation,
and a throwaway SQLite database for the conversation log.
"""

import os
import tempfile
import time

_DB_DIR = tempfile.mkdtemp(prefix="doc-assistant-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/conversations.db"
os.environ["AZURE_SEARCH_ENDPOINT"] = ""
os.environ["AZURE_SEARCH_KEY"] = ""

import pytest  # noqa: E402

from doc_assistant.exceptions import GenerationUnavailable  # noqa: E402
from doc_assistant.services.assistant.knowledge import load_knowledge_tables  # noqa: E402
from doc_assistant.services.assistant.types import (  # noqa: E402
    CandidateDocument,
    Intent,
    IntentResult,
    RankedDocument,
)


class FakeSearchClient:
    """Stands in for azure.search.documents.SearchClient."""

    def __init__(self, hits=None, error=None):
        self.hits = hits or []
        self.error = error
        self.calls = []

    def search(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return iter(self.hits)


class FakeGenerationService:
    """Returns canned text, or raises GenerationUnavailable when constructed with fail=True. Blocks for delay seconds."""

    def __init__(self, text="Generated answer.", fail=False, delay=0.0):
        self.text = text
        self.fail = fail
        self.delay = delay
        self.prompts = []
        self.enabled = not fail

    def generate(self, prompt, **kwargs):
        self.prompts.append((prompt, kwargs))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise GenerationUnavailable("generation server unreachable")
        return self.text


class FakeLoggingService:
    def __init__(self):
        self.records = []

    async def log_conversation(self, **kwargs):
        self.records.append(kwargs)
        return len(self.records)


def make_hit(path, lvl0="Documentation", lvl1=None, lvl2=None, anchor=None, content="", **extra):
    """Raw index record as returned by the documentation index."""
    hit = {
        "url": f"https://docs.example.com/docs{path}",
        "anchor": anchor,
        "content": content,
        "hierarchy_lvl0": lvl0,
        "hierarchy_lvl1": lvl1,
        "hierarchy_lvl2": lvl2,
        "@search.score": 1.0,
    }
    hit.update(extra)
    return hit


def make_doc(url, category, title=None, **kwargs):
    return CandidateDocument(url=url, title=title or url.strip("/").split("/")[-1], category=category, **kwargs)


def ranked(*docs):
    return [RankedDocument(doc, 100) for doc in docs]


@pytest.fixture
def tables():
    return load_knowledge_tables()


@pytest.fixture
def create_intent():
    return IntentResult(Intent.CREATE)


@pytest.fixture
def campaign_hits():
    """Quickstart, reference and an anchored section for campaign questions."""
    return [
        make_hit(
            "/guidelines/campaign-api/",
            lvl0="API Guidelines",
            lvl1="Campaign API",
            content="Manage campaigns with the Campaign API.",
        ),
        make_hit(
            "/quickstart-guides/create-a-campaign-quickstart/",
            lvl0="Quickstart Guides",
            lvl1="Create a Campaign",
            content="Create your first campaign in five steps.",
        ),
        make_hit(
            "/guidelines/campaign-api/",
            lvl0="API Guidelines",
            lvl1="Campaign API",
            lvl2="Create a Campaign",
            anchor="create-a-campaign",
            content="POST /api/v3/campaign creates a campaign.",
        ),
        make_hit(
            "/guidelines/creative-api/",
            lvl0="API Guidelines",
            lvl1="Creative API",
            content="Attach creatives to campaigns.",
        ),
    ]


@pytest.fixture
def fake_logging():
    return FakeLoggingService()
