"""Pydantic schemas for conversations, history and stats."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

Role = Literal["user", "assistant"]


class ReactionRef(BaseModel):
    """A reaction left on an assistant message."""

    reactor_id: str
    emoji_name: str


class HistoryMessage(BaseModel):
    """One replayable message of a conversation, chronological order."""

    role: Role
    content: str
    created_at: Optional[datetime] = None
    reactions: list[ReactionRef] = Field(default_factory=list)

    @property
    def reaction_names(self) -> list[str]:
        return [r.emoji_name for r in self.reactions]


class ConversationRead(BaseModel):
    """Conversation for API responses."""

    id: UUID
    user_id: UUID
    platform: str
    channel_id: str
    thread_ts: Optional[str] = None
    title: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConversationHistoryRead(BaseModel):
    conversation: ConversationRead
    messages: list[HistoryMessage]


class ConversationStats(BaseModel):
    """Counts shown by /clear, /delete and /stats."""

    query_count: int = 0
    response_count: int = 0
    reaction_count: int = 0


class UserStats(BaseModel):
    total_conversations: int = 0
    total_queries: int = 0
    total_responses: int = 0
    total_reactions: int = 0


class UserStatsRead(BaseModel):
    slack_user_id: str
    stats: UserStats
