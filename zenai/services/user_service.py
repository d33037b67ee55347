"""User lookup and creation keyed by platform identity."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from zenai.models.user import User

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("username", "display_name", "email", "avatar_url")


class UserService:
    def __init__(self, db: DBSession) -> None:
        self.db = db

    def get_by_platform_id(
        self, platform_user_id: str, platform: str = "slack"
    ) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(
                User.platform == platform,
                User.platform_user_id == platform_user_id,
            )
            .first()
        )

    def get_or_create_user(
        self,
        platform_user_id: str,
        profile: Optional[Dict[str, Any]] = None,
        platform: str = "slack",
    ) -> User:
        """
        Return the user for a platform id, creating it on first contact.

        Two deliveries for a brand-new user can race on the insert; the loser
        gets an IntegrityError, rolls back and reads the winner's row.
        """
        user = self.get_by_platform_id(platform_user_id, platform)
        if user is not None:
            return user

        profile = dict(profile or {})
        user = User(
            platform=platform,
            platform_user_id=platform_user_id,
            platform_metadata=profile.pop("metadata", None) or {},
            **{k: profile.get(k) for k in _PROFILE_FIELDS},
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("User %s created concurrently, re-reading", platform_user_id)
            existing = self.get_by_platform_id(platform_user_id, platform)
            if existing is None:
                raise
            return existing
        self.db.refresh(user)
        logger.info("Created user %s (%s)", platform_user_id, platform)
        return user
