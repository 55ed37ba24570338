"""
Prompts for answer generation and search summaries.
Centralized so they can be tuned without touching business logic.
"""

# ---------------------------------------------------------------------------
# Answer generation (Mistral instruct format; rendered by prompt_builder)
# Verified links are appended after generation, so the model must not write any.
# ---------------------------------------------------------------------------
DOC_ASSISTANT_SYSTEM_PROMPT = """You are an AI assistant for a programmatic advertising API documentation site.

Answer in this order of priority:
1. Foundations first: every API call requires authentication and a valid workspace (organizationId/workspaceId).
2. Proven patterns: point new users to quickstart guides, then to the detailed API guidelines.
3. The user's situation: relate the answer to the page they are viewing and to earlier questions.
4. Details last: endpoints, parameters and field names.

Rules:
- Be concise. Answer directly without preamble such as "Great question".
- Do not repeat authentication reminders on follow-up questions.
- Use only the documentation excerpts provided. Do not invent endpoints, fields or API behaviour.
- Do NOT write links, URLs or page paths. Verified links are added to your answer automatically.
- Do not end with "see ..." or "refer to ..." sentences.
- Put code identifiers such as `campaignId` in backticks."""

RETRIEVED_CONTEXT_HEADER = "Relevant documentation excerpts:"
NO_CONTEXT_NOTE = "(No documentation excerpts were found for this question. Answer from the rules above and keep it general.)"
CONTEXT_TRUNCATED_NOTE = "[Context truncated.]"

PAGE_CONTEXT_TEMPLATE = 'Context: The user is viewing "{page}".'
PAGE_HEADINGS_TEMPLATE = " Page sections: {headings}."

HISTORY_HEADER = "Recent conversation:"

ANSWER_STOP_MARKERS = ("</s>", "[INST]", "\nUser:")

# ---------------------------------------------------------------------------
# Search summary (companion search endpoint)
# ---------------------------------------------------------------------------
SEARCH_SUMMARY_TEMPLATE = """<s>[INST] You are a documentation assistant. The user searched for "{query}".
The top results are:
{results}

Write a one-sentence summary recommending the best starting point. Be concise and helpful. [/INST]"""

SUMMARY_STOP_MARKERS = ("</s>", "[INST]")

NO_RESULTS_SUMMARY = 'No results found for "{query}". Try a different search term or browse the documentation categories.'
FALLBACK_SUMMARY_TEMPLATE = (
    'For "{query}", I recommend starting with the **{title}** guide. '
    "This {complexity}-level {kind} covers the essentials you need."
)

# ---------------------------------------------------------------------------
# API endpoint context (registry matches for the question)
# ---------------------------------------------------------------------------
ENDPOINT_CONTEXT_HEADER = "Relevant API endpoints:"
ENDPOINT_REQUIRED_TEMPLATE = "  Required fields: {fields}"
ENDPOINT_PATH_PARAMS_TEMPLATE = "  Path parameters: {params}"

# ---------------------------------------------------------------------------
# Offline fallback answers
# ---------------------------------------------------------------------------
AUTH_REMINDER = (
    "**Quick note:** Make sure you've completed "
    "[authentication setup](/quickstart-guides/authentication-quickstart-guide/) first. "
    "It's required for all API calls."
)
