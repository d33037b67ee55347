"""Tests for HandleReactionCommand."""

import random

import pytest

from zenai.commands.events.handle_reaction_command import HandleReactionCommand
from zenai.core.sentiment import POSITIVE_REPLIES
from zenai.models.message_reaction import MessageReaction


def admit(app_state, event):
    decision = app_state.admission.admit(event)
    assert decision.admitted
    return decision.ticket


@pytest.mark.asyncio
async def test_reaction_added_is_recorded_and_answered(
    db, app_state, slack_adapter, setup_turns, reaction_added_event
):
    command = HandleReactionCommand(app_state, rng=random.Random(3))
    await command.execute(reaction_added_event, admit(app_state, reaction_added_event))

    response = setup_turns[1][1]
    reactors = {
        (r.reactor_id, r.reaction_name)
        for r in db.query(MessageReaction).filter(MessageReaction.response_id == response.id)
    }
    assert ("U0ALICE", "+1") in reactors

    channel, text = slack_adapter.post_message.await_args.args
    assert channel == "C0GENERAL"
    assert text in POSITIVE_REPLIES


@pytest.mark.asyncio
async def test_reaction_removed_deletes_row_without_reply(
    db, app_state, slack_adapter, setup_turns, reaction_added_event, reaction_removed_event
):
    await HandleReactionCommand(app_state).execute(
        reaction_added_event, admit(app_state, reaction_added_event)
    )
    slack_adapter.post_message.reset_mock()

    await HandleReactionCommand(app_state).execute(
        reaction_removed_event, admit(app_state, reaction_removed_event)
    )

    assert (
        db.query(MessageReaction)
        .filter(MessageReaction.reactor_id == "U0ALICE")
        .count()
        == 0
    )
    slack_adapter.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_reaction_on_unknown_message_is_ignored(
    db, app_state, slack_adapter, reaction_added_event
):
    await HandleReactionCommand(app_state).execute(
        reaction_added_event, admit(app_state, reaction_added_event)
    )
    assert db.query(MessageReaction).count() == 0
    slack_adapter.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_reaction_in_other_channel_with_same_ts_is_ignored(
    db, app_state, slack_adapter, setup_turns, reaction_added_event
):
    elsewhere = reaction_added_event.model_copy(update={"item_channel_id": "C0RANDOM"})
    await HandleReactionCommand(app_state).execute(elsewhere, admit(app_state, elsewhere))

    response = setup_turns[1][1]
    assert (
        db.query(MessageReaction)
        .filter(
            MessageReaction.response_id == response.id,
            MessageReaction.reactor_id == "U0ALICE",
        )
        .count()
        == 0
    )
    slack_adapter.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_muted_user_reaction_recorded_silently(
    db, app_state, slack_adapter, setup_turns, reaction_added_event
):
    app_state.mutes.mute("U0ALICE")
    await HandleReactionCommand(app_state).execute(
        reaction_added_event, admit(app_state, reaction_added_event)
    )
    assert db.query(MessageReaction).filter(MessageReaction.reactor_id == "U0ALICE").count() == 1
    slack_adapter.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_reaction_replies_can_be_disabled(
    app_state, slack_adapter, setup_turns, reaction_added_event
):
    app_state.settings.reaction_replies_enabled = False
    await HandleReactionCommand(app_state).execute(
        reaction_added_event, admit(app_state, reaction_added_event)
    )
    slack_adapter.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_errors_are_logged_and_ticket_released(
    app_state, slack_adapter, setup_turns, reaction_added_event
):
    slack_adapter.post_message.side_effect = RuntimeError("slack down")
    ticket = admit(app_state, reaction_added_event)

    await HandleReactionCommand(app_state).execute(reaction_added_event, ticket)

    assert app_state.admission.entry(ticket.keys[0]).state.value == "completed"
