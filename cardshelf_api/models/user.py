"""User data models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

HANDLE_PATTERN = r"^[A-Za-z0-9_.-]{3,30}$"


class UserRecord(BaseModel):
    """Durable identity record, one per identity-provider subject.

    Login-derived fields (display_name, email, avatar_url, last_seen_at) are
    overwritten on every verified request. handle and created_at are never
    touched by login.
    """

    subject_id: str = Field(..., description="Identity provider 'sub' claim")
    display_name: str = ""
    email: str = ""
    avatar_url: str = ""
    handle: str | None = Field(default=None, description="Public handle used in profile URLs")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_seen_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PublicProfile(BaseModel):
    """Subset of a user record that anyone may read."""

    subject_id: str
    display_name: str = ""
    avatar_url: str = ""
    handle: str | None = None


class HandleClaimRequest(BaseModel):
    """Request to set or change the caller's handle."""

    handle: str = Field(..., pattern=HANDLE_PATTERN, description="3-30 of A-Z a-z 0-9 _ . -")


class HandleAvailabilityResponse(BaseModel):
    handle: str
    available: bool
