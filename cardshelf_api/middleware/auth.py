"""Authorization guards for bearer-token identities.

Two guards share one pipeline (verify -> materialize):

- require_auth: credential failures end the request with 401.
- optional_auth: credential failures downgrade the request to anonymous.

Both attach the outcome to request.state.auth. Store failures are never
credential failures and surface as 500 from either guard.
"""

import logging

from fastapi import Depends, HTTPException, Query, Request

from ..auth import (
    Anonymous,
    Authenticated,
    AuthenticationOutcome,
    IdentityMaterializer,
    OwnerNotFound,
    OwnerQuery,
    OwnerResolver,
    TokenVerifier,
    VerificationError,
)
from ..models.user import UserRecord
from ..storage import StoreUnavailable
from ..telemetry import TelemetryEvents, bind_user, track_event, track_exception

logger = logging.getLogger(__name__)

UNAUTHENTICATED = "Unauthenticated"
STORE_UNAVAILABLE = "Identity store unavailable"


def get_verifier(request: Request) -> TokenVerifier:
    """Dependency returning the TokenVerifier built at start-up."""
    return request.app.state.verifier


def get_materializer(request: Request) -> IdentityMaterializer:
    """Dependency returning the IdentityMaterializer built at start-up."""
    return request.app.state.materializer


def get_owner_resolver(request: Request) -> OwnerResolver:
    """Dependency returning the OwnerResolver built at start-up."""
    return request.app.state.resolver


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=UNAUTHENTICATED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _store_unavailable(e: StoreUnavailable) -> HTTPException:
    logger.error(f"Identity store unavailable: {e}", exc_info=True)
    track_exception(e, {"component": "identity_store"})
    track_event(TelemetryEvents.DATABASE_ERROR, {"error_type": type(e).__name__})
    return HTTPException(status_code=500, detail=STORE_UNAVAILABLE)


class AuthGuard:
    """FastAPI dependency that authenticates the caller.

    Args:
        strict: Reject requests without valid credentials (401) instead of
            treating them as anonymous
    """

    def __init__(self, strict: bool):
        self.strict = strict

    async def __call__(
        self,
        request: Request,
        verifier: TokenVerifier = Depends(get_verifier),
        materializer: IdentityMaterializer = Depends(get_materializer),
    ) -> AuthenticationOutcome:
        raw_header = request.headers.get("Authorization")

        if raw_header is None and not self.strict:
            outcome: AuthenticationOutcome = Anonymous()
            request.state.auth = outcome
            return outcome

        try:
            claims = await verifier.verify(raw_header)
        except VerificationError as e:
            return self._reject(request, e)

        try:
            user = await materializer.materialize(claims)
        except StoreUnavailable as e:
            raise _store_unavailable(e) from e

        bind_user(user.subject_id)
        track_event(
            TelemetryEvents.AUTHENTICATION_SUCCEEDED,
            {"subject_id": user.subject_id, "strict": self.strict},
        )

        outcome = Authenticated(user)
        request.state.auth = outcome
        return outcome

    def _reject(self, request: Request, error: VerificationError) -> Anonymous:
        """Fail the request (strict) or downgrade it to anonymous (optional)."""
        properties = {
            "reason": error.reason,
            "endpoint": request.url.path,
            "method": request.method,
        }

        if self.strict:
            logger.info(f"Rejected request to {request.url.path}: {error.reason} ({error})")
            track_event(TelemetryEvents.AUTHENTICATION_FAILED, properties)
            raise _unauthenticated() from error

        logger.info(f"Treating request to {request.url.path} as anonymous: {error.reason}")
        track_event(TelemetryEvents.AUTHENTICATION_DOWNGRADED, properties)

        outcome = Anonymous(reason=error)
        request.state.auth = outcome
        return outcome


require_auth = AuthGuard(strict=True)
optional_auth = AuthGuard(strict=False)


async def get_current_user(outcome: Authenticated = Depends(require_auth)) -> UserRecord:
    """Dependency for endpoints that act on the caller's own record."""
    return outcome.user


async def get_current_owner(outcome: Authenticated = Depends(require_auth)) -> str:
    """Owner id for mutations: always the verified caller, never a query parameter."""
    return outcome.subject_id


async def get_read_owner(
    owner: str | None = Query(None, description="'template' to read the showcase collection"),
    handle: str | None = Query(None, description="Public handle whose collection to read"),
    outcome: AuthenticationOutcome = Depends(optional_auth),
    resolver: OwnerResolver = Depends(get_owner_resolver),
) -> str:
    """Owner id for public reads, computed by the OwnerResolver.

    Raises:
        HTTPException: 404 if the selected owner does not exist, 500 if the
            store cannot be reached
    """
    try:
        return await resolver.resolve(OwnerQuery(owner=owner, handle=handle), outcome)
    except OwnerNotFound as e:
        logger.info(f"Owner not found: {e}")
        raise HTTPException(status_code=404, detail=e.detail) from e
    except StoreUnavailable as e:
        raise _store_unavailable(e) from e
