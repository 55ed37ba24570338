"""Service for handling user feedback on answers."""
from doc_assistant.database.db import AsyncSessionLocal
from doc_assistant.database.models import Conversation
from sqlalchemy import select
from typing import Optional
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class FeedbackService:
    """Service for managing user feedback."""

    async def submit_feedback(
        self,
        conversation_record_id: int,
        rating: str,
        reason_code: Optional[str] = None,
        notes: Optional[str] = None,
        page: Optional[str] = None,
    ) -> bool:
        """
        Attach feedback to a logged conversation.

        Returns:
            True if feedback was recorded, False if the record does not exist or the write failed
        """
        try:
            async with AsyncSessionLocal() as session:
                result = await session.execute(
                    select(Conversation).where(Conversation.id == conversation_record_id)
                )
                conversation = result.scalar_one_or_none()

                if not conversation:
                    logger.warning(f"Conversation record {conversation_record_id} not found")
                    return False

                conversation.feedback_rating = rating
                conversation.feedback_reason_code = reason_code
                conversation.feedback_notes = notes
                conversation.feedback_page = page
                conversation.feedback_timestamp = datetime.utcnow()

                await session.commit()

                logger.info(
                    "Feedback submitted",
                    extra={
                        "conversation_record_id": conversation_record_id,
                        "feedback_rating": rating,
                        "feedback_reason_code": reason_code,
                        "intent": conversation.query_intent,
                    }
                )
                return True

        except Exception as e:
            logger.error(
                f"Error submitting feedback: {str(e)}",
                extra={"conversation_record_id": conversation_record_id},
                exc_info=True
            )
            return False
