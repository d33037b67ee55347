"""
Background handler for mentions and direct messages.

Runs after the webhook has been acknowledged. Mute check, malformed-content
check, placeholder, conversation resolution, history, LLM call, persistence
and final edit happen here; the admission ticket is released on every path.
"""

from __future__ import annotations

import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from zenai.adapters.base import PostedMessage
from zenai.commands.base_slack import BaseSlackCommand
from zenai.constants import replies
from zenai.core.admission import AdmissionTicket
from zenai.core.context_window import build_prompt
from zenai.core.conversation_resolver import ConversationResolver, effective_thread_ts
from zenai.schemas.events import MentionEvent, MessageEvent
from zenai.services.conversation_service import ConversationService
from zenai.services.message_service import MessageService
from zenai.services.user_service import UserService
from zenai.workers.llm import CompletionResult

MENTION_PATTERN = re.compile(r"<@.*?>")


def strip_mentions(text: str) -> str:
    return MENTION_PATTERN.sub("", text or "").strip()


class HandleMessageCommand(BaseSlackCommand):
    async def execute(self, event: MessageEvent, ticket: AdmissionTicket) -> None:
        """Process one admitted message event. Never raises."""
        self._placeholder: Optional[PostedMessage] = None
        with self.state.admission.hold(ticket):
            try:
                await self._process(event)
            except Exception:
                self.logger.exception(
                    "Unexpected error handling %s from %s", event.kind, event.user_id
                )
                try:
                    await self.deliver(
                        event.channel_id,
                        replies.UNEXPECTED_ERROR,
                        self._placeholder,
                        self._reply_thread(event),
                    )
                except Exception:
                    self.logger.exception("Failed to send error reply")

    def _reply_thread(self, event: MessageEvent) -> Optional[str]:
        # Top-level messages are answered in the channel.
        return event.thread_ts

    def _history_limit(self, event: MessageEvent) -> int:
        if isinstance(event, MentionEvent):
            return self.settings.mention_history_limit
        return self.settings.dm_history_limit

    async def _process(self, event: MessageEvent) -> None:
        if self.state.mutes.is_muted(event.user_id):
            self.logger.info("User %s is muted, ignoring %s", event.user_id, event.kind)
            return

        channel = event.channel_id
        thread_ts = self._reply_thread(event)

        if event.has_files:
            await self.adapter.post_message(
                channel, replies.FILES_UNSUPPORTED, thread_ts=thread_ts
            )
            return

        text = strip_mentions(event.text)
        if not text:
            if isinstance(event, MentionEvent):
                await self.adapter.post_message(
                    channel, replies.EMPTY_MENTION, thread_ts=thread_ts
                )
            return

        llm = self.state.llm
        if not llm.is_configured:
            await self.adapter.post_message(
                channel, replies.AI_NOT_CONFIGURED, thread_ts=thread_ts
            )
            return

        placeholder = await self.adapter.post_message(
            channel, replies.THINKING, thread_ts=thread_ts
        )
        self._placeholder = placeholder

        profile = None
        with self.state.session_factory() as db:
            if UserService(db).get_by_platform_id(event.user_id) is None:
                profile = await self.adapter.get_user_info(event.user_id)

        with self.state.session_factory() as db:
            try:
                user = UserService(db).get_or_create_user(event.user_id, profile)
                conversation = ConversationResolver(db).resolve(
                    user.id, channel, effective_thread_ts(event.ts, event.thread_ts)
                )
                messages = MessageService(db)
                history = messages.get_history(
                    conversation.id, limit=self._history_limit(event)
                )
            except SQLAlchemyError:
                db.rollback()
                self.logger.exception("Database error preparing %s", event.kind)
                await self.deliver(channel, replies.DATABASE_ERROR, placeholder, thread_ts)
                return

            prompt = build_prompt(
                history, text, self.settings.context_full_history_threshold
            )
            self.logger.info(
                "Calling LLM for conversation %s with %d history messages",
                conversation.id,
                len(history),
            )
            result = await llm.complete(prompt)

            try:
                response = self._record_turn(
                    messages, conversation.id, text, event.ts, result, placeholder
                )
            except SQLAlchemyError:
                db.rollback()
                self.logger.exception("Database error saving turn for %s", conversation.id)
                await self.deliver(channel, replies.DATABASE_ERROR, placeholder, thread_ts)
                return

            if not result.ok:
                await self.deliver(
                    channel,
                    replies.LLM_ERROR.format(error=result.error),
                    placeholder,
                    thread_ts,
                )
                return

            shown_ts = await self.deliver(channel, result.text, placeholder, thread_ts)
            if shown_ts and shown_ts != response.slack_message_ts:
                messages.set_response_message_ts(response.id, shown_ts)

            if conversation.title is None:
                title = await llm.generate_title(text)
                ConversationService(db).update_title(conversation.id, title)
                self.logger.info("Titled conversation %s: %s", conversation.id, title)

    def _record_turn(
        self,
        messages: MessageService,
        conversation_id,
        text: str,
        source_ts: str,
        result: CompletionResult,
        placeholder: Optional[PostedMessage],
    ):
        query = messages.append_user_message(conversation_id, text, source_ts)
        return messages.append_assistant_message(
            query.id,
            result.text,
            slack_message_ts=placeholder.ts if placeholder else None,
            tokens_used=result.tokens_used,
            model_used=self.state.llm.model_name,
            processing_time_ms=result.processing_time_ms,
            error_message=result.error,
        )
