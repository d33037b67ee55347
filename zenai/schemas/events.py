"""
Typed inbound events.

The Slack adapter validates raw webhook events into one of these variants, so
admission, routing and handlers never inspect untyped payload fields.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class _MessageEventBase(BaseModel):
    user_id: str
    channel_id: str
    ts: str
    thread_ts: Optional[str] = None
    client_msg_id: Optional[str] = None
    text: str = ""
    has_files: bool = False

    model_config = {"frozen": True}

    @property
    def lock_key(self) -> tuple[str, str]:
        return (self.user_id, self.channel_id)


class MentionEvent(_MessageEventBase):
    """@mention of the bot in a channel (Slack app_mention)."""

    kind: Literal["mention"] = "mention"

    def dedupe_keys(self) -> tuple[str, ...]:
        keys = (f"{self.user_id}-{self.ts}", f"{self.channel_id}-{self.ts}")
        if self.client_msg_id:
            return (self.client_msg_id,) + keys
        return keys


class DirectMessageEvent(_MessageEventBase):
    """Message in a DM with the bot (Slack message.im)."""

    kind: Literal["direct_message"] = "direct_message"

    def dedupe_keys(self) -> tuple[str, ...]:
        key = f"dm-{self.user_id}-{self.ts}"
        if self.client_msg_id:
            return (self.client_msg_id, key)
        return (key,)


class _ReactionEventBase(BaseModel):
    user_id: str
    reaction: str
    item_channel_id: str
    item_ts: str
    event_ts: str

    model_config = {"frozen": True}

    @property
    def lock_key(self) -> None:
        # Reactions never resolve a conversation or call the LLM, so they do not
        # serialize against the user's in-flight messages.
        return None


class ReactionAddedEvent(_ReactionEventBase):
    kind: Literal["reaction_added"] = "reaction_added"

    def dedupe_keys(self) -> tuple[str, ...]:
        return (f"reaction_added-{self.user_id}-{self.event_ts}",)


class ReactionRemovedEvent(_ReactionEventBase):
    kind: Literal["reaction_removed"] = "reaction_removed"

    def dedupe_keys(self) -> tuple[str, ...]:
        return (f"reaction_removed-{self.user_id}-{self.event_ts}",)


MessageEvent = Union[MentionEvent, DirectMessageEvent]
ReactionEvent = Union[ReactionAddedEvent, ReactionRemovedEvent]

SlackEvent = Annotated[
    Union[MentionEvent, DirectMessageEvent, ReactionAddedEvent, ReactionRemovedEvent],
    Field(discriminator="kind"),
]

slack_event_adapter: TypeAdapter[SlackEvent] = TypeAdapter(SlackEvent)
