"""MessageReaction model: emoji reactions users leave on bot responses."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from zenai.db import Base
from zenai.models.mixins import utcnow


class MessageReaction(Base):
    __tablename__ = "message_reactions"

    __table_args__ = (
        UniqueConstraint(
            "response_id",
            "reactor_id",
            "reaction_name",
            name="uq_message_reactions_response_reactor_name",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    response_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("bot_responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reactor_id = Column(String(64), nullable=False)
    reaction_name = Column(String(128), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    response = relationship("BotResponse", back_populates="reactions")
