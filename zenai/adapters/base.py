"""
Platform adapter interface.

Adapters encapsulate platform-specific parsing and delivery and hand the core
typed events, so admission and handlers never touch raw payloads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class PostedMessage:
    """Location of a message the bot posted; ts doubles as its id."""

    channel: str
    ts: str


class BasePlatformAdapter(ABC):
    """Contract for platform adapters."""

    @abstractmethod
    def parse_webhook(self, raw_event: dict[str, Any]) -> Optional[Any]:
        """Parse a raw event into a typed event, None when it should be ignored. Raise if malformed."""
        ...

    @abstractmethod
    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Optional[PostedMessage]:
        ...

    @abstractmethod
    async def update_message(self, channel: str, ts: str, text: str) -> bool:
        ...

    def verify_webhook(
        self, body: Union[str, bytes], headers: Optional[Mapping[str, str]] = None
    ) -> bool:
        """Return True if the request came from the platform or verification is not configured."""
        return True
