"""Upsert-on-login of user records."""

import logging

from ..models.user import UserRecord
from ..telemetry import TelemetryEvents, track_event
from .identity import Claims
from .store import IdentityStore

logger = logging.getLogger(__name__)


class IdentityMaterializer:
    """Creates or refreshes the user record behind a verified identity."""

    def __init__(self, store: IdentityStore):
        self.store = store

    async def materialize(self, claims: Claims) -> UserRecord:
        """Create or refresh the record for claims.subject_id.

        Delegates to a single atomic upsert so that concurrent logins of the
        same subject converge on one record. Only login-derived fields are
        written; handle and created_at are left as they are.

        Raises:
            StoreUnavailable: If the identity store cannot be reached
        """
        user = await self.store.upsert_user(
            subject_id=claims.subject_id,
            display_name=claims.display_name,
            email=claims.email,
            avatar_url=claims.avatar_url,
        )

        track_event(
            TelemetryEvents.USER_MATERIALIZED,
            {"subject_id": user.subject_id, "first_seen": user.created_at == user.last_seen_at},
        )
        logger.debug(f"Materialized user {user.subject_id}")
        return user
