"""Service for logging answered questions to the database."""
from doc_assistant.database.db import AsyncSessionLocal
from doc_assistant.database.models import Conversation
from typing import Optional
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class LoggingService:
    """Service for logging conversations."""

    async def log_conversation(
        self,
        conversation_id: str,
        user_message: str,
        assistant_response: str,
        query_intent: Optional[str] = None,
        special_category: bool = False,
        fallback_used: bool = False,
        primary_url: Optional[str] = None,
        current_page: Optional[str] = None,
    ) -> int:
        """
        Log a conversation turn to the database.

        Args:
            conversation_id: Client conversation identifier
            user_message: User's question
            assistant_response: Composed answer
            query_intent: Classified intent (create, update, get, conceptual, specific)
            special_category: Whether the query targeted vertical or migration content
            fallback_used: Whether the offline fallback router produced the answer
            primary_url: Recommended page, if any
            current_page: Page the user was viewing

        Returns:
            ID of the created conversation record (for feedback), or 0 if logging failed
        """
        try:
            async with AsyncSessionLocal() as session:
                conversation = Conversation(
                    conversation_id=conversation_id,
                    user_message=user_message,
                    assistant_response=assistant_response,
                    query_intent=query_intent,
                    special_category=special_category,
                    fallback_used=fallback_used,
                    primary_url=primary_url,
                    current_page=current_page,
                    timestamp=datetime.utcnow()
                )
                session.add(conversation)
                await session.flush()  # Flush to get the ID
                record_id = conversation.id
                await session.commit()
                logger.info(
                    "Conversation logged to database",
                    extra={
                        "conversation_id": conversation_id,
                        "conversation_record_id": record_id,
                        "intent": query_intent,
                        "fallback_used": fallback_used,
                        "primary_url": primary_url,
                    }
                )
                return record_id
        except Exception as e:
            logger.error(f"Error logging conversation: {str(e)}", extra={"conversation_id": conversation_id})
            # Logging failures never break the chat
            return 0
