"""
Command to handle Slack Events API deliveries.

Answers the URL verification handshake, verifies the request signature, parses
the event, runs admission and schedules the matching handler as a background
task. Slack gets its 200 before any slow work starts.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import BackgroundTasks, HTTPException, Request
from pydantic import ValidationError

from zenai.commands.base_slack import BaseSlackCommand
from zenai.commands.events.handle_message_command import HandleMessageCommand
from zenai.commands.events.handle_reaction_command import HandleReactionCommand
from zenai.schemas.events import MentionEvent, DirectMessageEvent
from zenai.schemas.slack import EVENT_CALLBACK, URL_VERIFICATION, SlackEventEnvelope

ACK = {"ok": True}


class SlackEventsCommand(BaseSlackCommand):
    async def execute(
        self, request: Request, background_tasks: BackgroundTasks
    ) -> dict[str, Any]:
        """
        Acknowledge one Events API delivery.

        Raises:
            HTTPException: 400 on a non-JSON body, 503 if Slack is disabled,
                403 on an invalid signature.
        """
        body = await request.body()
        try:
            payload = json.loads(body or b"{}")
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Invalid JSON body") from e

        if payload.get("type") == URL_VERIFICATION:
            return {"challenge": payload.get("challenge")}

        if self.state.adapter is None:
            raise HTTPException(
                status_code=503,
                detail="Slack integration is not configured or disabled",
            )
        if not self.adapter.verify_webhook(body, dict(request.headers)):
            raise HTTPException(status_code=403, detail="Invalid Slack signature")

        try:
            envelope = SlackEventEnvelope.model_validate(payload)
        except ValidationError:
            self.logger.warning("Malformed Slack envelope: %s", payload)
            return ACK
        if envelope.type != EVENT_CALLBACK:
            return ACK

        try:
            event = self.adapter.parse_webhook(envelope.event)
        except (ValueError, ValidationError) as e:
            self.logger.warning("Slack event parse error: %s", e)
            return ACK
        if event is None:
            return ACK

        decision = self.state.admission.admit(event)
        if not decision.admitted:
            self.logger.info(
                "Not processing %s from %s: %s",
                event.kind,
                event.user_id,
                decision.status.value,
            )
            return ACK

        if isinstance(event, (MentionEvent, DirectMessageEvent)):
            handler = HandleMessageCommand(self.state)
        else:
            handler = HandleReactionCommand(self.state)
        background_tasks.add_task(handler.execute, event, decision.ticket)
        return ACK
