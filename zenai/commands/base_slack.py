"""
Base command for Slack-related operations.

Provides a shared way to obtain a configured SlackAdapter and the collaborators
every Slack command works with.
"""

from __future__ import annotations

import logging
from typing import Optional

from zenai.adapters.base import PostedMessage
from zenai.adapters.slack import SlackAdapter
from zenai.config import get_settings
from zenai.core.app_state import AppState


class BaseSlackCommand:
    def __init__(self, state: AppState) -> None:
        self.state = state
        self.settings = state.settings
        self.logger = logging.getLogger(self.__class__.__module__)

    @staticmethod
    def get_slack_adapter() -> Optional[SlackAdapter]:
        """Return configured SlackAdapter or None if Slack is disabled."""
        settings = get_settings()
        if not settings.slack_enabled or not settings.slack_bot_token:
            return None
        return SlackAdapter(
            bot_token=settings.slack_bot_token,
            signing_secret=settings.slack_signing_secret,
        )

    @property
    def adapter(self) -> SlackAdapter:
        if self.state.adapter is None:
            raise RuntimeError("Slack integration is not configured or disabled")
        return self.state.adapter

    async def deliver(
        self,
        channel: str,
        text: str,
        placeholder: Optional[PostedMessage] = None,
        thread_ts: Optional[str] = None,
    ) -> Optional[str]:
        """
        Edit the placeholder into `text`, or post `text` when there is no
        placeholder or the edit fails. Returns the ts of the message showing it.
        """
        if placeholder is not None:
            if await self.adapter.update_message(placeholder.channel, placeholder.ts, text):
                return placeholder.ts
            self.logger.info("Placeholder %s could not be edited, posting reply", placeholder.ts)
        posted = await self.adapter.post_message(channel, text, thread_ts=thread_ts)
        return posted.ts if posted else None
