"""In-memory registry of users the bot must not answer."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class MuteRegistry:
    """
    Process-wide set of muted platform user ids.

    Not persisted: mutes are lost on restart. Toggled only by /mute and /unmute.
    """

    def __init__(self) -> None:
        self._muted: set[str] = set()

    def mute(self, user_id: str) -> None:
        self._muted.add(user_id)
        logger.info("User %s muted", user_id)

    def unmute(self, user_id: str) -> bool:
        """Unmute the user. Returns True if the user was muted."""
        if user_id not in self._muted:
            return False
        self._muted.discard(user_id)
        logger.info("User %s unmuted", user_id)
        return True

    def is_muted(self, user_id: str) -> bool:
        return user_id in self._muted

    def muted_users(self) -> list[str]:
        return sorted(self._muted)
