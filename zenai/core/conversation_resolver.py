"""
Maps an inbound message to the logical conversation it continues.

Threads are their own conversations, unless the thread hangs off a message the
user already sent in a conversation. Outside a thread, the user's most recently
updated active conversation in the channel is continued until it is archived.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session as DBSession

from zenai.models.conversation import Conversation
from zenai.models.mixins import utcnow
from zenai.services.conversation_service import ConversationService

logger = logging.getLogger(__name__)


def effective_thread_ts(ts: str, thread_ts: Optional[str]) -> Optional[str]:
    """A message whose thread_ts is its own ts is a thread root, not a reply."""
    if thread_ts is None or thread_ts == ts:
        return None
    return thread_ts


class ConversationResolver:
    def __init__(
        self,
        db: DBSession,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._conversations = ConversationService(db)
        self._clock = clock

    def resolve(
        self,
        user_id: UUID,
        channel_id: str,
        thread_ts: Optional[str] = None,
    ) -> Conversation:
        if thread_ts is not None:
            conversation = self._conversations.find_thread_conversation(
                user_id, channel_id, thread_ts
            )
            if conversation is not None:
                return conversation
            # A thread opened under one of the user's own messages continues
            # the conversation that message belongs to.
            conversation = self._conversations.find_by_query_source_ts(
                user_id, channel_id, thread_ts
            )
            if conversation is not None:
                return self._conversations.touch(conversation, now=self._clock())
        else:
            conversation = self._conversations.find_latest_unthreaded(
                user_id, channel_id
            )
            if conversation is not None:
                return self._conversations.touch(conversation, now=self._clock())

        conversation = self._conversations.create_conversation(
            user_id, channel_id, thread_ts=thread_ts, now=self._clock()
        )
        logger.info(
            "Started conversation %s for user %s in %s (thread %s)",
            conversation.id,
            user_id,
            channel_id,
            thread_ts,
        )
        return conversation

    def find_current(self, user_id: UUID, channel_id: str) -> Optional[Conversation]:
        return self._conversations.find_latest_unthreaded(user_id, channel_id)
