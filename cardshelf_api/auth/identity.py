"""
Per-request identity values.

Claims are what a verified token says about the caller. An
AuthenticationOutcome is what the authorization guard attached to the
request: either the materialized user record or an anonymous marker.
Neither value is ever persisted or shared between requests.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models.user import UserRecord
from .errors import VerificationError


@dataclass(frozen=True)
class Claims:
    """Identity claims extracted from a verified bearer token."""

    subject_id: str
    display_name: str = ""
    email: str = ""
    avatar_url: str = ""

    @classmethod
    def from_token_payload(cls, payload: dict[str, Any]) -> Claims:
        """Map raw token claims (OIDC / Firebase names) onto Claims."""
        return cls(
            subject_id=str(payload.get("sub") or payload.get("user_id") or ""),
            display_name=payload.get("name") or "",
            email=(payload.get("email") or "").strip().lower(),
            avatar_url=payload.get("picture") or "",
        )


@dataclass(frozen=True)
class Authenticated:
    """The request carries a verified, materialized identity."""

    user: UserRecord

    @property
    def subject_id(self) -> str:
        return self.user.subject_id

    is_authenticated = True


@dataclass(frozen=True)
class Anonymous:
    """No usable credentials. reason is kept for logging only."""

    reason: VerificationError | None = None

    is_authenticated = False


AuthenticationOutcome = Authenticated | Anonymous
