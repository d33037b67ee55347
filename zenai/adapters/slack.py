"""
Slack platform adapter.

Parsing turns Events API payloads into the typed events of
zenai.schemas.events; delivery goes through slack_sdk's AsyncWebClient.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from slack_sdk.errors import SlackApiError
from slack_sdk.signature import SignatureVerifier
from slack_sdk.web.async_client import AsyncWebClient

from zenai.adapters.base import BasePlatformAdapter, PostedMessage
from zenai.schemas.events import (
    DirectMessageEvent,
    MentionEvent,
    ReactionAddedEvent,
    ReactionRemovedEvent,
    SlackEvent,
)

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 39500
SLACKBOT_USER_ID = "USLACKBOT"
IGNORED_MESSAGE_SUBTYPES = frozenset({"bot_message", "message_changed", "message_deleted"})
FILE_SUBTYPES = frozenset({"file_share", "bot_message"})


def truncate_for_slack(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return (
        text[:limit]
        + f"\n\n...\n\n_⚠️ Response truncated ({len(text)} characters). "
        "The full response was too long for Slack's message limit._"
    )


def has_file_content(event: Mapping[str, Any]) -> bool:
    """Files, attachments or file-share subtypes; the bot only handles plain text."""
    if event.get("files") or event.get("attachments"):
        return True
    if event.get("subtype") in FILE_SUBTYPES:
        return True
    return "uploaded a file" in (event.get("text") or "")


def _require(event: Mapping[str, Any], *fields: str) -> None:
    missing = [f for f in fields if not event.get(f)]
    if missing:
        raise ValueError(
            f"Slack {event.get('type')} event missing required fields: {missing}"
        )


class SlackAdapter(BasePlatformAdapter):
    """Slack adapter: verify request signatures, parse events, post and edit messages."""

    def __init__(
        self,
        bot_token: Optional[str],
        signing_secret: Optional[str] = None,
        client: Optional[AsyncWebClient] = None,
    ) -> None:
        self._bot_token = bot_token
        self._signing_secret = signing_secret
        self._client = client

    def _get_client(self) -> AsyncWebClient:
        if self._client is None:
            self._client = AsyncWebClient(token=self._bot_token)
        return self._client

    def verify_webhook(
        self, body: Union[str, bytes], headers: Optional[Mapping[str, str]] = None
    ) -> bool:
        """Check X-Slack-Signature against the signing secret (5 minute timestamp window)."""
        if not self._signing_secret:
            logger.warning("Slack signing secret not configured, skipping verification")
            return True
        verifier = SignatureVerifier(signing_secret=self._signing_secret)
        return verifier.is_valid_request(body, dict(headers or {}))

    def parse_webhook(self, raw_event: dict[str, Any]) -> Optional[SlackEvent]:
        event_type = raw_event.get("type")
        if event_type == "app_mention":
            return self._parse_mention(raw_event)
        if event_type == "message":
            return self._parse_direct_message(raw_event)
        if event_type in ("reaction_added", "reaction_removed"):
            return self._parse_reaction(raw_event)
        logger.debug("Ignoring Slack event type %s", event_type)
        return None

    def _parse_mention(self, event: dict[str, Any]) -> Optional[MentionEvent]:
        if event.get("bot_id"):
            return None
        _require(event, "user", "channel", "ts")
        return MentionEvent(
            user_id=event["user"],
            channel_id=event["channel"],
            ts=event["ts"],
            thread_ts=event.get("thread_ts"),
            client_msg_id=event.get("client_msg_id"),
            text=event.get("text") or "",
            has_files=has_file_content(event),
        )

    def _parse_direct_message(self, event: dict[str, Any]) -> Optional[DirectMessageEvent]:
        if event.get("subtype") in IGNORED_MESSAGE_SUBTYPES or event.get("bot_id"):
            return None
        if event.get("channel_type") != "im":
            return None
        _require(event, "user", "channel", "ts")
        return DirectMessageEvent(
            user_id=event["user"],
            channel_id=event["channel"],
            ts=event["ts"],
            thread_ts=event.get("thread_ts"),
            client_msg_id=event.get("client_msg_id"),
            text=event.get("text") or "",
            has_files=has_file_content(event),
        )

    def _parse_reaction(
        self, event: dict[str, Any]
    ) -> Optional[Union[ReactionAddedEvent, ReactionRemovedEvent]]:
        user = event.get("user")
        if not user or user == SLACKBOT_USER_ID:
            return None
        item = event.get("item") or {}
        if item.get("type") != "message":
            return None
        if not item.get("channel") or not item.get("ts") or not event.get("reaction"):
            raise ValueError("Slack reaction event missing item channel, ts or reaction")
        cls = ReactionAddedEvent if event["type"] == "reaction_added" else ReactionRemovedEvent
        return cls(
            user_id=user,
            reaction=event["reaction"],
            item_channel_id=item["channel"],
            item_ts=item["ts"],
            event_ts=event.get("event_ts") or item["ts"],
        )

    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Optional[PostedMessage]:
        send_kw: dict[str, Any] = {"channel": channel, "text": truncate_for_slack(text)}
        if thread_ts:
            send_kw["thread_ts"] = thread_ts
        try:
            response = await self._get_client().chat_postMessage(**send_kw)
        except SlackApiError as exc:
            logger.error("Failed to post Slack message: %s", exc.response.get("error"))
            return None
        ts = response.get("ts")
        if not ts:
            return None
        return PostedMessage(channel=response.get("channel") or channel, ts=ts)

    async def update_message(self, channel: str, ts: str, text: str) -> bool:
        try:
            await self._get_client().chat_update(
                channel=channel, ts=ts, text=truncate_for_slack(text)
            )
        except SlackApiError as exc:
            logger.warning("Failed to update Slack message %s: %s", ts, exc.response.get("error"))
            return False
        return True

    async def get_user_info(self, user_id: str) -> Optional[dict[str, Any]]:
        """Profile fields for UserService.get_or_create_user, None if the lookup fails."""
        try:
            response = await self._get_client().users_info(user=user_id)
        except SlackApiError as exc:
            logger.warning("Failed to fetch Slack user %s: %s", user_id, exc.response.get("error"))
            return None
        user = response.get("user") or {}
        profile = user.get("profile") or {}
        return {
            "username": user.get("name"),
            "display_name": profile.get("display_name") or user.get("real_name"),
            "email": profile.get("email"),
            "avatar_url": profile.get("image_72"),
            "metadata": {"team_id": user.get("team_id"), "tz": user.get("tz")},
        }
