"""
Prompt assembly tests: section order, omission of empty sections, bounds.
"""

from conftest import make_doc, ranked

from doc_assistant.services.assistant.prompt_builder import (
    HistoryTurn,
    PageContext,
    SECTION_ORDER,
    build_prompt_sections,
    render_prompt,
)
from doc_assistant.services.assistant.prompts import CONTEXT_TRUNCATED_NOTE, NO_CONTEXT_NOTE


def _names(sections):
    return [s.name for s in sections]


def test_minimal_prompt_sections():
    """Without page context or history only system, context and the question remain."""
    sections = build_prompt_sections("How do I create a campaign?")
    assert _names(sections) == ["system", "retrieved-context", "current-turn"]
    assert sections[1].content == NO_CONTEXT_NOTE
    assert sections[-1].content == "How do I create a campaign?"


def test_full_prompt_section_order():
    """All six sections appear in the fixed order."""
    sections = build_prompt_sections(
        "And how do I pause it?",
        ranked(make_doc("/guidelines/campaign-api/", "guidelines", title="Campaign API", content="Use PATCH.")),
        PageContext(path="/guidelines/campaign-api/", title="Campaign API", headings=("Create", "Update")),
        [HistoryTurn("user", "How do I create a campaign?"), HistoryTurn("assistant", "Use POST.")],
        endpoint_context="Relevant API endpoints:\n- PUT /api/v3/campaign/status: Update campaign status",
    )
    assert tuple(_names(sections)) == SECTION_ORDER
    assert "### Campaign API\nUse PATCH." in sections[1].content
    assert sections[2].content.startswith("Relevant API endpoints:")
    assert sections[3].content == 'Context: The user is viewing "Campaign API". Page sections: Create, Update.'
    assert sections[4].content.splitlines() == [
        "Recent conversation:",
        "User: How do I create a campaign?",
        "Assistant: Use POST.",
    ]


def test_history_keeps_last_turns():
    """Only the most recent turns are included."""
    history = [HistoryTurn("user" if i % 2 == 0 else "assistant", f"turn {i}") for i in range(6)]
    sections = build_prompt_sections("next", history=history, history_turns=4)
    history_text = dict((s.name, s.content) for s in sections)["history"]
    assert "turn 0" not in history_text
    assert "turn 1" not in history_text
    assert "turn 5" in history_text


def test_page_path_used_without_title_and_headings_capped():
    """The path stands in for a missing title; at most five headings are listed."""
    page = PageContext(path="/tutorials/deal-guide/", headings=tuple(f"H{i}" for i in range(8)))
    content = dict((s.name, s.content) for s in build_prompt_sections("q", page=page))["page-context"]
    assert '"/tutorials/deal-guide/"' in content
    assert "H4" in content
    assert "H5" not in content


def test_context_truncated():
    """Retrieved context is bounded."""
    docs = ranked(*[
        make_doc(f"/guidelines/doc-{i}/", "guidelines", title=f"Doc {i}", content="x" * 400)
        for i in range(5)
    ])
    content = dict((s.name, s.content) for s in build_prompt_sections("q", docs, max_context_chars=300))[
        "retrieved-context"
    ]
    assert content.endswith(CONTEXT_TRUNCATED_NOTE)


def test_render_mistral_format():
    """Sections are joined by blank lines inside one [INST] block."""
    prompt = render_prompt(build_prompt_sections("What is pacing?"))
    assert prompt.startswith("<s>[INST] You are an AI assistant")
    assert prompt.endswith("\n\nWhat is pacing? [/INST]")
