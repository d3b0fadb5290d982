"""User self-service: handles and public profiles."""

import logging

from ..models.user import PublicProfile, UserRecord
from ..storage import Database, HandleTaken
from ..telemetry import TelemetryEvents, track_event

logger = logging.getLogger(__name__)


class UserManager:
    """Handle claims and profile lookups on top of the identity store."""

    def __init__(self, db: Database):
        self.db = db

    async def claim_handle(self, subject_id: str, handle: str) -> UserRecord:
        """Set or change the caller's handle.

        Re-claiming the caller's own handle in a different letter case is
        allowed; the unique index on lower(handle) only excludes other users.

        Args:
            subject_id: Subject id of the verified caller
            handle: Requested handle, already validated against HANDLE_PATTERN

        Returns:
            The updated user record

        Raises:
            HandleTaken: If another user holds the handle
            LookupError: If the caller has no user record
        """
        try:
            user = await self.db.set_user_handle(subject_id, handle)
        except HandleTaken:
            track_event(TelemetryEvents.HANDLE_CONFLICT, {"subject_id": subject_id})
            logger.info(f"Handle {handle!r} already taken; requested by {subject_id}")
            raise

        if user is None:
            raise LookupError(f"No user record for {subject_id}")

        track_event(TelemetryEvents.HANDLE_CLAIMED, {"subject_id": subject_id, "handle": handle})
        logger.info(f"User {subject_id} claimed handle {handle!r}")
        return user

    async def is_handle_available(self, handle: str) -> bool:
        """True if no user holds the handle, compared case-insensitively."""
        return await self.db.find_user_by_handle(handle) is None

    async def get_public_profile(self, subject_id: str) -> PublicProfile | None:
        user = await self.db.get_user(subject_id)
        if user is None:
            return None
        return PublicProfile(
            subject_id=user.subject_id,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            handle=user.handle,
        )
