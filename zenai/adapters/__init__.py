"""Platform adapters for chat integrations."""

from zenai.adapters.base import BasePlatformAdapter, PostedMessage
from zenai.adapters.slack import SlackAdapter

__all__ = ["BasePlatformAdapter", "PostedMessage", "SlackAdapter"]
