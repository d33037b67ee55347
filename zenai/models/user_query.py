"""UserQuery model: one row per user prompt in a conversation."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from zenai.db import Base
from zenai.models.mixins import utcnow


class UserQuery(Base):
    """User side of a turn. source_ts is the Slack ts of the triggering message."""

    __tablename__ = "user_queries"

    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "source_ts", name="uq_user_queries_source_message"
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    conversation_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=False)
    source_ts = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="queries")
    responses = relationship(
        "BotResponse",
        back_populates="query",
        cascade="all, delete-orphan",
        order_by="BotResponse.created_at",
    )
