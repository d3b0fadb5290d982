"""Interface of the identity store as seen by the auth layer."""

from typing import Protocol

from ..models.user import UserRecord


class IdentityStore(Protocol):
    """User lookups and the login upsert.

    Implementations raise storage.StoreUnavailable when the backing store
    cannot be reached.
    """

    async def get_user(self, subject_id: str) -> UserRecord | None: ...

    async def upsert_user(
        self, subject_id: str, display_name: str, email: str, avatar_url: str
    ) -> UserRecord: ...

    async def find_user_by_handle(self, handle: str) -> UserRecord | None: ...

    async def find_user_by_email(self, email: str) -> UserRecord | None: ...
