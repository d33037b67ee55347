"""Conversation CRUD, continuity lookups and stats."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from zenai.models.bot_response import BotResponse
from zenai.models.conversation import STATUS_ACTIVE, STATUS_ARCHIVED, Conversation
from zenai.models.message_reaction import MessageReaction
from zenai.models.mixins import utcnow
from zenai.models.user_query import UserQuery
from zenai.schemas.conversation import ConversationStats, UserStats


class ConversationService:
    def __init__(self, db: DBSession) -> None:
        self.db = db

    def get_conversation(self, conversation_id: UUID) -> Optional[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .first()
        )

    def get_user_conversations(self, user_id: UUID) -> List[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
            .all()
        )

    def find_thread_conversation(
        self, user_id: UUID, channel_id: str, thread_ts: str
    ) -> Optional[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(
                Conversation.user_id == user_id,
                Conversation.channel_id == channel_id,
                Conversation.thread_ts == thread_ts,
                Conversation.status == STATUS_ACTIVE,
            )
            .first()
        )

    def find_latest_unthreaded(
        self, user_id: UUID, channel_id: str
    ) -> Optional[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(
                Conversation.user_id == user_id,
                Conversation.channel_id == channel_id,
                Conversation.thread_ts.is_(None),
                Conversation.status == STATUS_ACTIVE,
            )
            .order_by(Conversation.updated_at.desc())
            .first()
        )

    def find_by_query_source_ts(
        self, user_id: UUID, channel_id: str, source_ts: str
    ) -> Optional[Conversation]:
        """Active conversation holding the user's message posted at source_ts."""
        return (
            self.db.query(Conversation)
            .join(UserQuery, UserQuery.conversation_id == Conversation.id)
            .filter(
                Conversation.user_id == user_id,
                Conversation.channel_id == channel_id,
                Conversation.status == STATUS_ACTIVE,
                UserQuery.source_ts == source_ts,
            )
            .first()
        )

    def create_conversation(
        self,
        user_id: UUID,
        channel_id: str,
        thread_ts: Optional[str] = None,
        platform: str = "slack",
        now: Optional[datetime] = None,
    ) -> Conversation:
        now = now or utcnow()
        conversation = Conversation(
            user_id=user_id,
            platform=platform,
            channel_id=channel_id,
            thread_ts=thread_ts,
            title=None,
            status=STATUS_ACTIVE,
            created_at=now,
            updated_at=now,
        )
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def touch(
        self, conversation: Conversation, now: Optional[datetime] = None
    ) -> Conversation:
        conversation.updated_at = now or utcnow()
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def update_title(self, conversation_id: UUID, title: str) -> Optional[Conversation]:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return None
        conversation.title = title
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def archive(self, conversation_id: UUID) -> bool:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return False
        conversation.status = STATUS_ARCHIVED
        self.db.commit()
        return True

    def delete_conversation(self, conversation_id: UUID) -> bool:
        """Hard delete; queries, responses and reactions go with it."""
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            return False
        self.db.delete(conversation)
        self.db.commit()
        return True

    def get_stats(self, conversation_id: UUID) -> ConversationStats:
        query_count = (
            self.db.query(func.count(UserQuery.id))
            .filter(UserQuery.conversation_id == conversation_id)
            .scalar()
        )
        response_count = (
            self.db.query(func.count(BotResponse.id))
            .join(UserQuery, BotResponse.query_id == UserQuery.id)
            .filter(UserQuery.conversation_id == conversation_id)
            .scalar()
        )
        reaction_count = (
            self.db.query(func.count(MessageReaction.id))
            .join(BotResponse, MessageReaction.response_id == BotResponse.id)
            .join(UserQuery, BotResponse.query_id == UserQuery.id)
            .filter(UserQuery.conversation_id == conversation_id)
            .scalar()
        )
        return ConversationStats(
            query_count=query_count or 0,
            response_count=response_count or 0,
            reaction_count=reaction_count or 0,
        )

    def get_user_stats(self, user_id: UUID) -> UserStats:
        conversations = (
            self.db.query(func.count(Conversation.id))
            .filter(Conversation.user_id == user_id)
            .scalar()
        )
        queries = (
            self.db.query(func.count(UserQuery.id))
            .join(Conversation, UserQuery.conversation_id == Conversation.id)
            .filter(Conversation.user_id == user_id)
            .scalar()
        )
        responses = (
            self.db.query(func.count(BotResponse.id))
            .join(UserQuery, BotResponse.query_id == UserQuery.id)
            .join(Conversation, UserQuery.conversation_id == Conversation.id)
            .filter(Conversation.user_id == user_id)
            .scalar()
        )
        reactions = (
            self.db.query(func.count(MessageReaction.id))
            .join(BotResponse, MessageReaction.response_id == BotResponse.id)
            .join(UserQuery, BotResponse.query_id == UserQuery.id)
            .join(Conversation, UserQuery.conversation_id == Conversation.id)
            .filter(Conversation.user_id == user_id)
            .scalar()
        )
        return UserStats(
            total_conversations=conversations or 0,
            total_queries=queries or 0,
            total_responses=responses or 0,
            total_reactions=reactions or 0,
        )
