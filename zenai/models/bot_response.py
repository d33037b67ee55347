"""BotResponse model: assistant side of a turn, including failed attempts."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from zenai.db import Base
from zenai.models.mixins import utcnow


class BotResponse(Base):
    """
    Reply generated for a UserQuery.

    A row with error_message set records a turn the LLM failed to answer;
    slack_message_ts links the row to the Slack message reactions arrive on.
    """

    __tablename__ = "bot_responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    query_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_queries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False, default="")
    slack_message_ts = Column(String(32), nullable=True, index=True)
    tokens_used = Column(Integer, nullable=True)
    model_used = Column(String(128), nullable=True)
    processing_time_ms = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    query = relationship("UserQuery", back_populates="responses")
    reactions = relationship(
        "MessageReaction",
        back_populates="response",
        cascade="all, delete-orphan",
        order_by="MessageReaction.created_at",
    )
