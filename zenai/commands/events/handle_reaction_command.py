"""Background handler for reactions left on bot responses."""

from __future__ import annotations

import random
from typing import Optional

from zenai.commands.base_slack import BaseSlackCommand
from zenai.core.admission import AdmissionTicket
from zenai.core.app_state import AppState
from zenai.core.sentiment import reaction_reply
from zenai.schemas.events import ReactionAddedEvent, ReactionEvent
from zenai.services.message_service import MessageService


class HandleReactionCommand(BaseSlackCommand):
    def __init__(self, state: AppState, rng: Optional[random.Random] = None) -> None:
        super().__init__(state)
        self._rng = rng

    async def execute(self, event: ReactionEvent, ticket: AdmissionTicket) -> None:
        with self.state.admission.hold(ticket):
            try:
                await self._process(event)
            except Exception:
                self.logger.exception(
                    "Error handling %s %s from %s", event.kind, event.reaction, event.user_id
                )

    async def _process(self, event: ReactionEvent) -> None:
        with self.state.session_factory() as db:
            messages = MessageService(db)
            response = messages.find_response_by_message_ts(
                event.item_ts, event.item_channel_id
            )
            if response is None:
                self.logger.debug("Reaction on %s is not on a bot response", event.item_ts)
                return
            if isinstance(event, ReactionAddedEvent):
                messages.record_reaction(response.id, event.user_id, event.reaction)
            else:
                messages.remove_reaction(response.id, event.user_id, event.reaction)
            self.logger.info(
                "%s %s by %s on response %s",
                event.kind,
                event.reaction,
                event.user_id,
                response.id,
            )

        if not isinstance(event, ReactionAddedEvent):
            return
        if self.state.mutes.is_muted(event.user_id):
            return
        if not self.settings.reaction_replies_enabled:
            return

        reply = reaction_reply(event.reaction, self._rng)
        await self.adapter.post_message(event.item_channel_id, reply)
