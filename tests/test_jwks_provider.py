"""Tests for the JWKS (RS256) token provider."""

import asyncio
import json
import time

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from cardshelf_api.auth import (
    InvalidOrExpiredToken,
    JWKSTokenProvider,
    ProviderUnavailable,
    SharedSecretTokenProvider,
    build_token_provider,
)
from cardshelf_api.config import FIREBASE_JWKS_URL, Settings

JWKS_URL = "https://keys.test/jwks.json"
ISSUER = "https://securetoken.google.com/cardshelf-test"
AUDIENCE = "cardshelf-test"


def _generate_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _jwk(private_key, kid: str) -> dict:
    data = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
    data.update({"kid": kid, "alg": "RS256", "use": "sig"})
    return data


def _sign(private_key, kid: str, **overrides) -> str:
    now = int(time.time())
    payload = {
        "sub": "u1",
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + 3600,
        **overrides,
    }
    return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": kid})


class JWKSServer:
    """Serves a mutable key set and counts fetches."""

    def __init__(self, *keys: dict, status_code: int = 200, delay: float = 0.0):
        self.keys = list(keys)
        self.status_code = status_code
        self.delay = delay
        self.fetches = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.fetches += 1
        await asyncio.sleep(self.delay)
        assert str(request.url) == JWKS_URL
        return httpx.Response(self.status_code, json={"keys": self.keys})

    def provider(
        self, cache_seconds: int = 3600, min_refresh_seconds: float = 60
    ) -> JWKSTokenProvider:
        return JWKSTokenProvider(
            JWKS_URL,
            issuer=ISSUER,
            audience=AUDIENCE,
            cache_seconds=cache_seconds,
            min_refresh_seconds=min_refresh_seconds,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture(scope="module")
def signing_key():
    return _generate_key()


@pytest.mark.asyncio
async def test_valid_token_decoded(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()

    payload = await provider.decode(_sign(signing_key, "k1", email="a@example.com"))

    assert payload["sub"] == "u1"
    assert payload["email"] == "a@example.com"
    await provider.close()


@pytest.mark.asyncio
async def test_keys_are_cached(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()

    await provider.decode(_sign(signing_key, "k1"))
    await provider.decode(_sign(signing_key, "k1", sub="u2"))

    assert server.fetches == 1
    await provider.close()


@pytest.mark.asyncio
async def test_expired_cache_refetches(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider(cache_seconds=0)

    await provider.decode(_sign(signing_key, "k1"))
    time.sleep(0.01)
    await provider.decode(_sign(signing_key, "k1"))

    assert server.fetches == 2
    await provider.close()


@pytest.mark.asyncio
async def test_rotated_key_picked_up_with_one_refresh(signing_key):
    """A token signed with a kid not yet cached triggers a single refetch."""
    rotated_key = _generate_key()
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider(min_refresh_seconds=0)

    await provider.decode(_sign(signing_key, "k1"))
    server.keys.append(_jwk(rotated_key, "k2"))

    payload = await provider.decode(_sign(rotated_key, "k2", sub="u2"))

    assert payload["sub"] == "u2"
    assert server.fetches == 2
    await provider.close()


@pytest.mark.asyncio
async def test_unknown_kid_rejected(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(_sign(signing_key, "missing"))
    await provider.close()


@pytest.mark.asyncio
async def test_concurrent_cold_start_fetches_once(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"), delay=0.01)
    provider = server.provider()
    tokens = [_sign(signing_key, "k1", sub=f"u{i}") for i in range(20)]

    payloads = await asyncio.gather(*(provider.decode(token) for token in tokens))

    assert [p["sub"] for p in payloads] == [f"u{i}" for i in range(20)]
    assert server.fetches == 1
    await provider.close()


@pytest.mark.asyncio
async def test_unknown_kids_do_not_refetch_within_min_interval(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider(min_refresh_seconds=60)

    await provider.decode(_sign(signing_key, "k1"))
    for i in range(10):
        with pytest.raises(InvalidOrExpiredToken):
            await provider.decode(_sign(signing_key, f"made-up-{i}"))

    assert server.fetches == 1
    await provider.close()


@pytest.mark.asyncio
async def test_unknown_kid_refetches_after_min_interval(signing_key):
    rotated_key = _generate_key()
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider(min_refresh_seconds=0.05)

    await provider.decode(_sign(signing_key, "k1"))
    server.keys.append(_jwk(rotated_key, "k2"))

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(_sign(rotated_key, "k2"))
    assert server.fetches == 1

    await asyncio.sleep(0.06)
    payload = await provider.decode(_sign(rotated_key, "k2", sub="u2"))

    assert payload["sub"] == "u2"
    assert server.fetches == 2
    await provider.close()


@pytest.mark.asyncio
async def test_token_signed_by_other_key_rejected(signing_key):
    """Right kid, wrong private key: signature check fails."""
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(_sign(_generate_key(), "k1"))
    await provider.close()


@pytest.mark.asyncio
async def test_wrong_issuer_and_audience_rejected(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(_sign(signing_key, "k1", iss="https://securetoken.google.com/other"))

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(_sign(signing_key, "k1", aud="other"))
    await provider.close()


@pytest.mark.asyncio
async def test_expired_token_rejected(signing_key):
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(_sign(signing_key, "k1", exp=int(time.time()) - 60))
    await provider.close()


@pytest.mark.asyncio
async def test_hs256_token_rejected_without_fetch(signing_key):
    """Algorithm confusion: a symmetric token never reaches the key set."""
    server = JWKSServer(_jwk(signing_key, "k1"))
    provider = server.provider()
    token = jwt.encode({"sub": "u1", "exp": int(time.time()) + 60}, "secret", algorithm="HS256")

    with pytest.raises(InvalidOrExpiredToken):
        await provider.decode(token)

    assert server.fetches == 0
    await provider.close()


@pytest.mark.asyncio
async def test_jwks_endpoint_error_is_unavailable(signing_key):
    server = JWKSServer(status_code=503)
    provider = server.provider()

    with pytest.raises(ProviderUnavailable):
        await provider.decode(_sign(signing_key, "k1"))
    await provider.close()


@pytest.mark.asyncio
async def test_network_error_is_unavailable(signing_key):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = JWKSTokenProvider(
        JWKS_URL,
        issuer=ISSUER,
        audience=AUDIENCE,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(ProviderUnavailable):
        await provider.decode(_sign(signing_key, "k1"))
    await provider.close()


@pytest.mark.asyncio
async def test_empty_key_set_is_unavailable(signing_key):
    server = JWKSServer()
    provider = server.provider()

    with pytest.raises(ProviderUnavailable):
        await provider.decode(_sign(signing_key, "k1"))
    await provider.close()


def test_build_provider_hs256():
    provider = build_token_provider(Settings(jwt_algorithm="HS256", secret_key="s"))

    assert isinstance(provider, SharedSecretTokenProvider)


def test_build_provider_firebase_defaults():
    provider = build_token_provider(
        Settings(jwt_algorithm="RS256", firebase_project_id="cardshelf-test", jwks_url=None)
    )

    assert isinstance(provider, JWKSTokenProvider)
    assert provider.jwks_url == FIREBASE_JWKS_URL
    assert provider.issuer == ISSUER
    assert provider.audience == AUDIENCE


def test_build_provider_rs256_requires_key_source():
    with pytest.raises(ValueError):
        build_token_provider(
            Settings(jwt_algorithm="RS256", firebase_project_id=None, jwks_url=None)
        )
