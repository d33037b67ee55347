"""Queries, responses and reactions of a conversation."""

from __future__ import annotations

import logging
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession, selectinload

from zenai.models.bot_response import BotResponse
from zenai.models.conversation import Conversation
from zenai.models.message_reaction import MessageReaction
from zenai.models.user_query import UserQuery
from zenai.schemas.conversation import HistoryMessage, ReactionRef

logger = logging.getLogger(__name__)

_RESPONSE_FIELDS = (
    "slack_message_ts",
    "tokens_used",
    "model_used",
    "processing_time_ms",
    "error_message",
)


class MessageService:
    def __init__(self, db: DBSession) -> None:
        self.db = db

    def get_query_by_source(
        self, conversation_id: UUID, source_ts: str
    ) -> Optional[UserQuery]:
        return (
            self.db.query(UserQuery)
            .filter(
                UserQuery.conversation_id == conversation_id,
                UserQuery.source_ts == source_ts,
            )
            .first()
        )

    def append_user_message(
        self,
        conversation_id: UUID,
        content: str,
        source_ts: Optional[str] = None,
    ) -> UserQuery:
        """Store a user prompt. A second call for the same Slack message returns the first row."""
        if source_ts:
            existing = self.get_query_by_source(conversation_id, source_ts)
            if existing is not None:
                return existing

        query = UserQuery(
            conversation_id=conversation_id, content=content, source_ts=source_ts
        )
        self.db.add(query)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = (
                self.get_query_by_source(conversation_id, source_ts)
                if source_ts
                else None
            )
            if existing is None:
                raise
            return existing
        self.db.refresh(query)
        return query

    def append_assistant_message(
        self, query_id: UUID, content: str, **metadata: Any
    ) -> BotResponse:
        unknown = set(metadata) - set(_RESPONSE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown response fields: {sorted(unknown)}")
        response = BotResponse(query_id=query_id, content=content or "", **metadata)
        self.db.add(response)
        self.db.commit()
        self.db.refresh(response)
        return response

    def set_response_message_ts(
        self, response_id: UUID, slack_message_ts: str
    ) -> Optional[BotResponse]:
        response = (
            self.db.query(BotResponse).filter(BotResponse.id == response_id).first()
        )
        if response is None:
            return None
        response.slack_message_ts = slack_message_ts
        self.db.commit()
        self.db.refresh(response)
        return response

    def find_response_by_message_ts(
        self, slack_message_ts: str, channel_id: Optional[str] = None
    ) -> Optional[BotResponse]:
        """Response shown as Slack message `slack_message_ts`, optionally within one channel."""
        query = self.db.query(BotResponse).filter(
            BotResponse.slack_message_ts == slack_message_ts
        )
        if channel_id is not None:
            query = (
                query.join(UserQuery, BotResponse.query_id == UserQuery.id)
                .join(Conversation, UserQuery.conversation_id == Conversation.id)
                .filter(Conversation.channel_id == channel_id)
            )
        return query.first()

    def get_history(self, conversation_id: UUID, limit: int = 20) -> List[HistoryMessage]:
        """
        Replayable history of the newest `limit` queries, oldest first.

        Each query yields a user message followed by its successful responses;
        failed or empty responses are left out.
        """
        queries = (
            self.db.query(UserQuery)
            .options(
                selectinload(UserQuery.responses).selectinload(BotResponse.reactions)
            )
            .filter(UserQuery.conversation_id == conversation_id)
            .order_by(UserQuery.created_at.desc())
            .limit(limit)
            .all()
        )

        messages: List[HistoryMessage] = []
        for query in reversed(queries):
            messages.append(
                HistoryMessage(
                    role="user", content=query.content, created_at=query.created_at
                )
            )
            for response in query.responses:
                if response.error_message or not response.content:
                    continue
                messages.append(
                    HistoryMessage(
                        role="assistant",
                        content=response.content,
                        created_at=response.created_at,
                        reactions=[
                            ReactionRef(
                                reactor_id=r.reactor_id, emoji_name=r.reaction_name
                            )
                            for r in response.reactions
                        ],
                    )
                )
        return messages

    def record_reaction(
        self, response_id: UUID, reactor_id: str, reaction_name: str
    ) -> bool:
        """Returns False when the same reaction was already recorded."""
        exists = (
            self.db.query(MessageReaction)
            .filter(
                MessageReaction.response_id == response_id,
                MessageReaction.reactor_id == reactor_id,
                MessageReaction.reaction_name == reaction_name,
            )
            .first()
        )
        if exists is not None:
            return False
        self.db.add(
            MessageReaction(
                response_id=response_id,
                reactor_id=reactor_id,
                reaction_name=reaction_name,
            )
        )
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.debug("Reaction %s already recorded on %s", reaction_name, response_id)
            return False
        return True

    def remove_reaction(
        self, response_id: UUID, reactor_id: str, reaction_name: str
    ) -> bool:
        deleted = (
            self.db.query(MessageReaction)
            .filter(
                MessageReaction.response_id == response_id,
                MessageReaction.reactor_id == reactor_id,
                MessageReaction.reaction_name == reaction_name,
            )
            .delete()
        )
        self.db.commit()
        return deleted > 0
