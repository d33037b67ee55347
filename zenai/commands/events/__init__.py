"""Background handlers for admitted Slack events."""

from zenai.commands.events.handle_message_command import HandleMessageCommand
from zenai.commands.events.handle_reaction_command import HandleReactionCommand

__all__ = ["HandleMessageCommand", "HandleReactionCommand"]
