"""Error taxonomy for identity resolution and authorization."""


class VerificationError(Exception):
    """Base exception for bearer-token verification failures.

    Subtypes are kept apart for logging and telemetry. Callers of the
    authorization guards only ever see "unauthenticated" or "anonymous".
    """

    reason = "verification_failed"


class MalformedHeader(VerificationError):
    """Authorization header is missing or not of the form 'Bearer <token>'."""

    reason = "malformed_header"


class InvalidOrExpiredToken(VerificationError):
    """The identity provider rejected the token."""

    reason = "invalid_or_expired_token"


class ProviderUnavailable(VerificationError):
    """The identity provider could not be reached or did not answer in time."""

    reason = "provider_unavailable"


class OwnerNotFound(Exception):
    """Owner resolution matched a branch whose target does not exist."""

    detail = "Owner not found"


class HandleNotFound(OwnerNotFound):
    """No user carries the requested handle."""

    detail = "User not found"

    def __init__(self, handle: str):
        super().__init__(f"No user with handle {handle!r}")
        self.handle = handle


class TemplateOwnerMissing(OwnerNotFound):
    """The reserved template account does not exist in the identity store."""

    detail = "Template user not found"
