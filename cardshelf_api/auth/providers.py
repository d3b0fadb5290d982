"""
Token providers: the external identity provider seen through one call.

A provider turns a raw bearer token into its decoded claims payload or raises
InvalidOrExpiredToken / ProviderUnavailable. Two implementations:

- JWKSTokenProvider: RS256 tokens signed by an OIDC-style issuer (Firebase
  Authentication by default). Keys are fetched lazily over HTTP and cached.
- SharedSecretTokenProvider: HS256 tokens signed with settings.secret_key, for
  local development and tests.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Protocol

import httpx
import jwt

from ..config import Settings
from .errors import InvalidOrExpiredToken, ProviderUnavailable

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    async def decode(self, token: str) -> dict[str, Any]: ...

    async def close(self) -> None: ...


def _decode_verified(
    token: str,
    key: Any,
    algorithm: str,
    issuer: str | None,
    audience: str | None,
) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[algorithm],
            issuer=issuer,
            audience=audience,
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidOrExpiredToken("Token has expired") from e
    except jwt.InvalidIssuerError as e:
        raise InvalidOrExpiredToken(f"Issuer mismatch: {e}") from e
    except jwt.InvalidAudienceError as e:
        raise InvalidOrExpiredToken(f"Audience mismatch: {e}") from e
    except jwt.InvalidTokenError as e:
        raise InvalidOrExpiredToken(f"Invalid token: {e}") from e


class SharedSecretTokenProvider:
    """HS256 verification against a shared secret."""

    def __init__(self, secret: str, issuer: str | None = None, audience: str | None = None):
        self._secret = secret
        self._issuer = issuer
        self._audience = audience

    async def decode(self, token: str) -> dict[str, Any]:
        return _decode_verified(token, self._secret, "HS256", self._issuer, self._audience)

    async def close(self) -> None:
        return None


class JWKSTokenProvider:
    """
    RS256 verification against a JWKS endpoint.

    Keys are fetched on first use and reused for cache_seconds. An unknown
    kid triggers one refresh, since the issuer may have rotated its keys, but
    at most once per min_refresh_seconds. Lookups and refreshes are
    serialized so concurrent requests on a cold cache share one fetch.
    """

    def __init__(
        self,
        jwks_url: str,
        issuer: str | None,
        audience: str | None,
        cache_seconds: int = 3600,
        min_refresh_seconds: float = 60,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.jwks_url = jwks_url
        self.issuer = issuer
        self.audience = audience
        self.cache_seconds = cache_seconds
        self.min_refresh_seconds = min_refresh_seconds
        self._client = http_client or httpx.AsyncClient()
        self._lock = asyncio.Lock()
        self._keys: dict[str, jwt.PyJWK] | None = None
        self._fetched_at = 0.0
        self._last_attempt_at: float | None = None

    async def decode(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise InvalidOrExpiredToken(f"Invalid token header: {e}") from e

        if header.get("alg") != "RS256":
            raise InvalidOrExpiredToken(f"Unexpected signing algorithm: {header.get('alg')}")

        kid = header.get("kid")
        if not kid:
            raise InvalidOrExpiredToken("Token header missing 'kid'")

        signing_key = await self._get_signing_key(kid)
        return _decode_verified(token, signing_key.key, "RS256", self.issuer, self.audience)

    async def _get_signing_key(self, kid: str) -> jwt.PyJWK:
        async with self._lock:
            expired = (time.monotonic() - self._fetched_at) > self.cache_seconds
            if self._keys is None or expired:
                await self._refresh_keys()

            if kid not in self._keys and self._may_force_refresh():
                # Key not found; maybe keys rotated. Try one refresh.
                await self._refresh_keys()

            if kid not in self._keys:
                raise InvalidOrExpiredToken(f"Signing key not found for kid: {kid}")

            return self._keys[kid]

    def _may_force_refresh(self) -> bool:
        if self._last_attempt_at is None:
            return True
        return (time.monotonic() - self._last_attempt_at) >= self.min_refresh_seconds

    async def _refresh_keys(self) -> None:
        """Fetch the JWKS document and rebuild the kid -> key map."""
        self._last_attempt_at = time.monotonic()
        logger.info(f"Fetching JWKS from {self.jwks_url}")
        try:
            response = await self._client.get(self.jwks_url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch JWKS: {e}")
            raise ProviderUnavailable(f"Failed to fetch JWKS: {e}") from e

        keys: dict[str, jwt.PyJWK] = {}
        for key_data in data.get("keys", []):
            kid = key_data.get("kid")
            if not kid:
                continue
            try:
                keys[kid] = jwt.PyJWK(key_data)
            except jwt.PyJWTError as e:
                logger.warning(f"Failed to construct key for kid={kid}: {e}")

        if not keys:
            raise ProviderUnavailable("JWKS response contains no usable keys")

        self._keys = keys
        self._fetched_at = time.monotonic()
        logger.info(f"Cached {len(keys)} signing keys")

    async def close(self) -> None:
        await self._client.aclose()


def build_token_provider(settings: Settings) -> TokenProvider:
    """Pick the provider matching settings.jwt_algorithm."""
    if settings.jwt_algorithm.upper() == "HS256":
        logger.warning("Using HS256 shared-secret token verification (development mode)")
        return SharedSecretTokenProvider(
            settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )

    jwks_url = settings.get_jwks_url()
    if not jwks_url:
        raise ValueError("RS256 token verification requires JWKS_URL or FIREBASE_PROJECT_ID")

    return JWKSTokenProvider(
        jwks_url,
        issuer=settings.get_jwt_issuer(),
        audience=settings.get_jwt_audience(),
        cache_seconds=settings.jwks_cache_seconds,
        min_refresh_seconds=settings.jwks_min_refresh_seconds,
    )
