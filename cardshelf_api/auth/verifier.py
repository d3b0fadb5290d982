"""Bearer-token verification."""

import asyncio
import logging

from .errors import InvalidOrExpiredToken, MalformedHeader, ProviderUnavailable
from .identity import Claims
from .providers import TokenProvider

logger = logging.getLogger(__name__)


def extract_bearer_token(raw_header_value: str | None) -> str:
    """Return the token from 'Bearer <token>' or raise MalformedHeader."""
    if not raw_header_value:
        raise MalformedHeader("Missing Authorization header")

    scheme, _, token = raw_header_value.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MalformedHeader("Authorization header must be 'Bearer <token>'")
    return token


class TokenVerifier:
    """Validates Authorization header values against the identity provider.

    Raises one of MalformedHeader, InvalidOrExpiredToken or
    ProviderUnavailable; never touches the identity store.
    """

    def __init__(self, provider: TokenProvider, timeout_seconds: float = 5.0):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def verify(self, raw_header_value: str | None) -> Claims:
        token = extract_bearer_token(raw_header_value)

        try:
            payload = await asyncio.wait_for(
                self.provider.decode(token), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ProviderUnavailable(
                f"Identity provider did not answer within {self.timeout_seconds}s"
            ) from e

        claims = Claims.from_token_payload(payload)
        if not claims.subject_id:
            raise InvalidOrExpiredToken("Token missing 'sub' claim")

        return claims

    async def close(self) -> None:
        await self.provider.close()
