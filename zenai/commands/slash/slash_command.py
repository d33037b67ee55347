"""Slash commands: conversation management and mute control, answered ephemerally."""

from __future__ import annotations

from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from zenai.commands.base_slack import BaseSlackCommand
from zenai.core.app_state import AppState
from zenai.core.conversation_resolver import ConversationResolver
from zenai.models.conversation import Conversation
from zenai.schemas.slack import SlashCommandPayload
from zenai.services.conversation_service import ConversationService
from zenai.services.user_service import UserService

HELP_TEXT = """🤖 *Zen-AI Bot Commands*

*Available Commands:*
• `/clear` - Archive the current conversation; your next message starts fresh
• `/new-chat` - Start a fresh conversation
• `/delete` - Delete the current conversation and its history (`/delete confirm`)
• `/mute` - Stop the bot from answering you (`/mute off` to undo)
• `/unmute` - Let the bot answer you again
• `/stats` - Show your usage statistics
• `/help` - Show this help message

*Features:*
✅ Multi-language support (responds in your language)
✅ Conversation history and context
✅ Emoji reaction sentiment analysis
✅ Works in channels and DMs

Need help? Just @mention me with your question! 💬"""

NO_CONVERSATION = "ℹ️ There is no active conversation in this channel."
UNMUTE_ARGUMENTS = ("off", "unmute")


def ephemeral(text: str) -> dict[str, Any]:
    return {"response_type": "ephemeral", "text": text}


class SlashCommand(BaseSlackCommand):
    def __init__(self, state: AppState, db: Session) -> None:
        super().__init__(state)
        self.db = db
        self.conversation_service = ConversationService(db)
        self._handlers: dict[str, Callable[[SlashCommandPayload], dict[str, Any]]] = {
            "/clear": self._clear,
            "/new-chat": self._new_chat,
            "/delete": self._delete,
            "/mute": self._mute,
            "/unmute": self._unmute,
            "/stats": self._stats,
            "/help": self._help,
        }

    def execute(self, payload: SlashCommandPayload) -> dict[str, Any]:
        command = payload.command.strip().lower()
        handler = self._handlers.get(command)
        if handler is None:
            available = ", ".join(f"`{name}`" for name in self._handlers)
            return ephemeral(
                f"❓ Unknown command `{payload.command}`. Available commands: {available}"
            )
        self.logger.info("Slash command %s from %s", command, payload.user_id)
        return handler(payload)

    def _current_conversation(
        self, payload: SlashCommandPayload
    ) -> Optional[Conversation]:
        user = UserService(self.db).get_by_platform_id(payload.user_id)
        if user is None:
            return None
        return ConversationResolver(self.db).find_current(user.id, payload.channel_id)

    def _clear(self, payload: SlashCommandPayload) -> dict[str, Any]:
        conversation = self._current_conversation(payload)
        if conversation is None:
            return ephemeral(NO_CONVERSATION)
        stats = self.conversation_service.get_stats(conversation.id)
        self.conversation_service.archive(conversation.id)
        return ephemeral(
            "🧹 Conversation cleared. "
            f"{stats.query_count} messages and {stats.response_count} responses were "
            "archived and will no longer be used as context. "
            "Your next message starts a new conversation."
        )

    def _new_chat(self, payload: SlashCommandPayload) -> dict[str, Any]:
        user = UserService(self.db).get_or_create_user(payload.user_id)
        current = ConversationResolver(self.db).find_current(user.id, payload.channel_id)
        if current is not None:
            self.conversation_service.archive(current.id)
        self.conversation_service.create_conversation(user.id, payload.channel_id)
        return ephemeral(
            "✨ Started a new conversation. Previous messages will not be used as context."
        )

    def _delete(self, payload: SlashCommandPayload) -> dict[str, Any]:
        conversation = self._current_conversation(payload)
        if conversation is None:
            return ephemeral(NO_CONVERSATION)
        stats = self.conversation_service.get_stats(conversation.id)
        if payload.argument != "confirm":
            return ephemeral(
                "⚠️ This will permanently delete the current conversation:\n"
                f"• {stats.query_count} messages\n"
                f"• {stats.response_count} responses\n"
                f"• {stats.reaction_count} reactions\n\n"
                "Run `/delete confirm` to continue."
            )
        self.conversation_service.delete_conversation(conversation.id)
        return ephemeral(
            "🗑️ Conversation deleted: "
            f"{stats.query_count} messages, {stats.response_count} responses and "
            f"{stats.reaction_count} reactions were removed."
        )

    def _mute(self, payload: SlashCommandPayload) -> dict[str, Any]:
        if payload.argument in UNMUTE_ARGUMENTS:
            return self._unmute(payload)
        self.state.mutes.mute(payload.user_id)
        return ephemeral(
            "🔇 I won't respond to your messages anymore. Use `/unmute` to turn me back on."
        )

    def _unmute(self, payload: SlashCommandPayload) -> dict[str, Any]:
        if not self.state.mutes.unmute(payload.user_id):
            return ephemeral("🔊 You were not muted.")
        return ephemeral("🔊 I'll respond to your messages again.")

    def _stats(self, payload: SlashCommandPayload) -> dict[str, Any]:
        user = UserService(self.db).get_by_platform_id(payload.user_id)
        if user is None:
            return ephemeral("📊 No conversations yet. Mention me to get started!")
        totals = self.conversation_service.get_user_stats(user.id)
        lines = [
            "📊 *Your Zen-AI statistics*",
            f"• {totals.total_conversations} conversations",
            f"• {totals.total_queries} messages",
            f"• {totals.total_responses} responses",
            f"• {totals.total_reactions} reactions",
        ]
        current = ConversationResolver(self.db).find_current(user.id, payload.channel_id)
        if current is not None:
            stats = self.conversation_service.get_stats(current.id)
            lines.append(
                f"\nCurrent conversation: {stats.query_count} messages, "
                f"{stats.response_count} responses, {stats.reaction_count} reactions"
            )
        return ephemeral("\n".join(lines))

    def _help(self, payload: SlashCommandPayload) -> dict[str, Any]:
        return ephemeral(HELP_TEXT)
