"""
Slack Events API payload schemas.

Matches the outer envelope Slack POSTs to the events endpoint and the form
fields it sends for slash commands. The inner event stays a raw dict here and
is narrowed into the typed event union by the Slack adapter.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

URL_VERIFICATION = "url_verification"
EVENT_CALLBACK = "event_callback"


class SlackEventEnvelope(BaseModel):
    """Events API envelope (root object)."""

    type: str
    token: Optional[str] = None
    challenge: Optional[str] = None
    team_id: Optional[str] = None
    api_app_id: Optional[str] = None
    event_id: Optional[str] = None
    event_time: Optional[int] = None
    event: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "allow"}


class SlashCommandPayload(BaseModel):
    """Form-encoded slash command request."""

    command: str
    text: str = ""
    user_id: str
    channel_id: str
    team_id: Optional[str] = None
    user_name: Optional[str] = None
    response_url: Optional[str] = None
    trigger_id: Optional[str] = None

    model_config = {"extra": "allow"}

    @property
    def argument(self) -> str:
        """Command text normalized for matching (e.g. 'confirm', 'off')."""
        return (self.text or "").strip().lower()
