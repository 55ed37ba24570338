"""Data models for API requests and responses. Field names are camelCase on the wire."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional, List, Literal


QueryIntent = Literal["create", "update", "get", "conceptual", "specific"]


class ApiModel(BaseModel):
    """Accepts camelCase or snake_case input, serializes camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatTurn(ApiModel):
    """Single prior message in the conversation."""
    role: str  # "user" or "assistant"
    content: str


class ChatContext(ApiModel):
    """What the user is looking at, plus recent conversation (most recent last)."""
    current_page: Optional[str] = None
    page_title: Optional[str] = None
    headings: List[str] = Field(default_factory=list)
    conversation_history: List[ChatTurn] = Field(default_factory=list)


class ChatRequest(ApiModel):
    """Request model for chat endpoint."""
    message: str
    context: Optional[ChatContext] = None
    conversation_id: Optional[str] = None


class AgentAction(ApiModel):
    """Client-side action suggested alongside the answer."""
    tool: Literal["navigate", "highlight"]
    params: Dict[str, Any]
    status: str = "pending"


class Link(ApiModel):
    title: str
    url: str
    category: str


class StructuredLinksModel(ApiModel):
    primary: Optional[Link] = None
    related: Dict[str, List[Link]] = Field(default_factory=dict)


class ChatResponse(ApiModel):
    """Response model for chat endpoint."""
    response: str
    actions: List[AgentAction] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)  # primary first, then related in bucket order
    structured_links: StructuredLinksModel = Field(default_factory=StructuredLinksModel)
    query_intent: QueryIntent
    special_category: bool = False
    fallback: bool = False
    conversation_id: str
    conversation_record_id: Optional[int] = None  # ID of the conversation record for feedback


class SearchFilters(ApiModel):
    category: List[str] = Field(default_factory=list)
    topic: List[str] = Field(default_factory=list)
    complexity: List[str] = Field(default_factory=list)


class SearchRequest(ApiModel):
    """Request model for the taxonomy search endpoint."""
    query: str
    filters: Optional[SearchFilters] = None


class SearchResultItem(ApiModel):
    path: str
    title: str
    category: str
    topic: str
    complexity: str
    score: int
    is_recommended: bool = False


class SearchResponse(ApiModel):
    results: List[SearchResultItem] = Field(default_factory=list)
    summary: str
    total_count: int


# Feedback reason codes for thumbs down
FEEDBACK_REASON_CODES = {
    "incorrect_information": "Incorrect or inaccurate information",
    "not_helpful": "Response was not helpful",
    "incomplete_answer": "Answer was incomplete",
    "broken_link": "Recommended link was wrong or broken",
    "outdated_docs": "Documentation is outdated",
    "off_topic": "Response was off-topic",
    "other": "Other reason"
}


class FeedbackRequest(ApiModel):
    """Request model for feedback endpoint."""
    conversation_record_id: int = Field(..., description="ID of the conversation record to provide feedback on")
    rating: Literal["thumbs_up", "thumbs_down"] = Field(..., description="Feedback rating")
    reason_code: Optional[str] = Field(None, description="Reason code for thumbs down (required if rating is thumbs_down)")
    notes: Optional[str] = Field(None, description="Optional additional notes")
    page: Optional[str] = Field(None, description="Documentation page the feedback was given on")


class FeedbackResponse(ApiModel):
    """Response model for feedback endpoint."""
    success: bool
    message: str
    conversation_record_id: int
