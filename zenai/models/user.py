"""User model: one row per chat-platform account that has talked to the bot."""

from __future__ import annotations

import uuid

from sqlalchemy import JSON, Column, String, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from zenai.db import Base
from zenai.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Platform user, identified by (platform, platform_user_id)."""

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("platform", "platform_user_id", name="uq_users_platform_user"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    platform = Column(String(32), nullable=False, default="slack")
    platform_user_id = Column(String(64), nullable=False, index=True)
    username = Column(String(256), nullable=True)
    display_name = Column(String(256), nullable=True)
    email = Column(String(320), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    platform_metadata = Column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=True, default=dict
    )

    conversations = relationship(
        "Conversation",
        back_populates="user",
        cascade="all, delete-orphan",
    )
