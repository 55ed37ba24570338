"""FastAPI application main file."""
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from doc_assistant.models import (
    ChatRequest,
    ChatResponse,
    FeedbackRequest,
    FeedbackResponse,
    FEEDBACK_REASON_CODES,
    SearchRequest,
    SearchResponse,
)
from doc_assistant.services.assistant import DocAssistantService
from doc_assistant.services.assistant.endpoint_registry import endpoint_as_dict
from doc_assistant.services.feedback_service import FeedbackService
from doc_assistant.services.generation_service import check_generation_health
from doc_assistant.database.db import init_db, dispose_db
from doc_assistant.config import settings
from doc_assistant.exceptions import EndpointNotFound, InvalidQueryError
from doc_assistant.logging_config import configure_logging
import logging
from datetime import datetime
from contextlib import asynccontextmanager

configure_logging(
    log_level=settings.log_level,
    app_insights_connection_string=settings.app_insights_connection_string,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup: database, then the single assistant instance shared by all requests
    await init_db()
    app.state.assistant = DocAssistantService()
    yield
    await dispose_db()


app = FastAPI(
    title="Documentation Assistant API",
    description="Answers API documentation questions with verified links",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

feedback_service = FeedbackService()


def get_assistant(request: Request) -> DocAssistantService:
    """The assistant built at startup."""
    return request.app.state.assistant


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Documentation Assistant API",
        "version": "1.0.0",
    }


@app.get("/api/health")
async def health_check(assistant: DocAssistantService = Depends(get_assistant)):
    """Liveness plus the engine's initialization snapshot."""
    return {
        "status": "healthy",
        "service": "doc-assistant",
        "tablesVersion": assistant.initialization.tables_version,
        "initialization": assistant.initialization.as_dict(),
    }


@app.get("/api/health/ready")
def readiness_check():
    """Readiness of the generation server. Chat still answers (offline router) when this is degraded."""
    timestamp = datetime.utcnow().isoformat() + "Z"
    if check_generation_health(settings.health_check_timeout_seconds):
        return {"status": "ready", "backend": "connected", "timestamp": timestamp}
    return JSONResponse(
        status_code=503,
        content={
            "status": "degraded",
            "backend": "unavailable",
            "fallback": "offline-router",
            "timestamp": timestamp,
        },
    )


@app.post("/api/ai/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, assistant: DocAssistantService = Depends(get_assistant)):
    """
    Answer a documentation question.

    Args:
        request: ChatRequest with the message and optional page/conversation context

    Returns:
        ChatResponse with the composed answer, verified links and suggested actions
    """
    try:
        if not request.message or not request.message.strip():
            raise HTTPException(status_code=400, detail="Message cannot be empty")

        if len(request.message) > settings.max_message_length:
            raise HTTPException(
                status_code=400,
                detail=f"Message must be {settings.max_message_length} characters or less"
            )

        logger.info(
            "Chat request received",
            extra={
                "conversation_id": request.conversation_id or "new",
                "user_query": request.message,
                "message_length": len(request.message)
            }
        )

        response = await assistant.process_message(
            message=request.message,
            context=request.context,
            conversation_id=request.conversation_id,
        )

        logger.info(
            "Chat response generated",
            extra={
                "conversation_id": response.conversation_id,
                "conversation_record_id": response.conversation_record_id,
                "intent": response.query_intent,
                "fallback_used": response.fallback,
                "response_length": len(response.response)
            }
        )

        return response

    except HTTPException:
        raise
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(
            "Error in chat endpoint",
            extra={"error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/api/ai/search", response_model=SearchResponse)
def search(request: SearchRequest, assistant: DocAssistantService = Depends(get_assistant)):
    """Taxonomy search across the documentation catalog with a one-sentence recommendation."""
    try:
        if not request.query or not request.query.strip():
            raise HTTPException(status_code=400, detail="Query cannot be empty")
        return assistant.search_docs(request.query, request.filters)
    except HTTPException:
        raise
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(
            "Error in search endpoint",
            extra={"search_terms": request.query, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.get("/api/endpoints")
def list_api_endpoints(
    category: Optional[str] = None,
    assistant: DocAssistantService = Depends(get_assistant),
):
    """Registered API endpoints grouped by category."""
    registry = assistant.endpoints
    return {
        "categories": registry.categories(),
        "endpoints": registry.list_endpoints(category),
    }


@app.get("/api/endpoints/search")
def search_api_endpoints(
    q: str = Query(..., description="Keywords matched against summary, path, description and tags"),
    limit: int = Query(5, ge=1, le=20),
    assistant: DocAssistantService = Depends(get_assistant),
):
    """Keyword search over the endpoint registry."""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty")
    matches = assistant.endpoints.search(q, limit)
    return {
        "query": q,
        "results": [{**endpoint_as_dict(m.endpoint, detailed=False), "score": m.score} for m in matches],
    }


@app.get("/api/endpoints/info")
def get_api_endpoint_info(
    endpoint: str = Query(..., description="Endpoint path, or keywords to search for"),
    method: Optional[str] = None,
    assistant: DocAssistantService = Depends(get_assistant),
):
    """Full detail for one endpoint path; keywords without a slash return search results."""
    if not endpoint.strip():
        raise HTTPException(status_code=400, detail="Endpoint cannot be empty")
    try:
        return assistant.endpoints.get_api_info(endpoint, method)
    except EndpointNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/api/feedback", response_model=FeedbackResponse)
async def submit_feedback(request: FeedbackRequest):
    """
    Submit feedback for an answer.

    Args:
        request: FeedbackRequest with rating, reasonCode (for thumbs_down), optional notes and page

    Returns:
        FeedbackResponse indicating success or failure
    """
    try:
        if request.rating == "thumbs_down" and not request.reason_code:
            raise HTTPException(
                status_code=400,
                detail="reasonCode is required when rating is 'thumbs_down'"
            )

        if request.reason_code and request.reason_code not in FEEDBACK_REASON_CODES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid reasonCode. Must be one of: {list(FEEDBACK_REASON_CODES.keys())}"
            )

        success = await feedback_service.submit_feedback(
            conversation_record_id=request.conversation_record_id,
            rating=request.rating,
            reason_code=request.reason_code,
            notes=request.notes,
            page=request.page,
        )

        if not success:
            raise HTTPException(
                status_code=404,
                detail=f"Conversation record {request.conversation_record_id} not found"
            )

        return FeedbackResponse(
            success=True,
            message="Feedback submitted successfully",
            conversation_record_id=request.conversation_record_id
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            "Error in feedback endpoint",
            extra={
                "conversation_record_id": request.conversation_record_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.get("/api/feedback/reason-codes")
async def get_feedback_reason_codes():
    """Get available feedback reason codes for thumbs down."""
    return {
        "reasonCodes": FEEDBACK_REASON_CODES
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
