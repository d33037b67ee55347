"""Webhook command handlers."""

from zenai.commands.base_slack import BaseSlackCommand
from zenai.commands.webhooks.slack_events_command import SlackEventsCommand

__all__ = ["BaseSlackCommand", "SlackEventsCommand"]
