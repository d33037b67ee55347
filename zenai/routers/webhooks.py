"""
Webhook routes for inbound Slack requests.

Slack POSTs Events API deliveries and slash commands here. Both are verified
with the app's signing secret; events are acknowledged immediately and
processed in the background.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from zenai.commands.slash.slash_command import SlashCommand
from zenai.commands.webhooks.slack_events_command import SlackEventsCommand
from zenai.core.app_state import AppState
from zenai.db import get_db
from zenai.routers.utils.dependencies import get_app_state
from zenai.schemas.slack import SlashCommandPayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/slack/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    state: AppState = Depends(get_app_state),
) -> dict[str, Any]:
    """Receive Slack Events API deliveries. Always 200 once the request is verified."""
    return await SlackEventsCommand(state).execute(request, background_tasks)


@router.post("/slack/commands")
async def slack_commands(
    request: Request,
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Receive slash commands (form-encoded) and answer ephemerally."""
    if state.adapter is None:
        raise HTTPException(
            status_code=503,
            detail="Slack integration is not configured or disabled",
        )
    body = await request.body()
    if not state.adapter.verify_webhook(body, dict(request.headers)):
        raise HTTPException(status_code=403, detail="Invalid Slack signature")
    form = dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
    try:
        payload = SlashCommandPayload.model_validate(form)
    except ValidationError as e:
        logger.warning("Invalid slash command payload: %s", e)
        raise HTTPException(status_code=400, detail="Invalid slash command") from e
    return SlashCommand(state, db).execute(payload)
