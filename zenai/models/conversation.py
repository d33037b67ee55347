"""Conversation model: the continuity scope for history and title generation."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from zenai.db import Base
from zenai.models.mixins import TimestampMixin

STATUS_ACTIVE = "active"
STATUS_ARCHIVED = "archived"


class Conversation(Base, TimestampMixin):
    """
    One row per logical conversation of a user in a channel.

    thread_ts is set only for conversations bound to a Slack thread; un-threaded
    conversations (thread_ts NULL) are continued by the most recently updated one.
    """

    __tablename__ = "conversations"

    __table_args__ = (
        Index(
            "ix_conversations_user_channel_thread",
            "user_id",
            "channel_id",
            "thread_ts",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    platform = Column(String(32), nullable=False, default="slack")
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    channel_id = Column(String(64), nullable=False)
    thread_ts = Column(String(32), nullable=True)
    title = Column(String(256), nullable=True)
    status = Column(String(16), nullable=False, default=STATUS_ACTIVE)

    user = relationship("User", back_populates="conversations")
    queries = relationship(
        "UserQuery",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="UserQuery.created_at",
    )
