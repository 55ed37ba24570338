"""Database models for the conversation log."""
from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class Conversation(Base):
    """One answered question, with the routing decision behind it and any user feedback."""
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(String, index=True, nullable=False)
    user_message = Column(Text, nullable=False)
    assistant_response = Column(Text, nullable=False)
    query_intent = Column(String, nullable=True)
    special_category = Column(Boolean, default=False)
    fallback_used = Column(Boolean, default=False)
    primary_url = Column(String, nullable=True)
    current_page = Column(String, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Feedback from the docs widget
    feedback_rating = Column(String, nullable=True)  # "thumbs_up" or "thumbs_down"
    feedback_reason_code = Column(String, nullable=True)
    feedback_timestamp = Column(DateTime, nullable=True)
    feedback_notes = Column(Text, nullable=True)
    feedback_page = Column(String, nullable=True)

    def __repr__(self):
        return f"<Conversation(id={self.id}, conversation_id={self.conversation_id}, intent={self.query_intent}, feedback={self.feedback_rating})>"
