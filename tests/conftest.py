"""Pytest configuration and fixtures."""

import os

# Set test environment variables BEFORE importing anything that loads settings
# This ensures tests verify HS256 tokens against a known secret
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["TEMPLATE_OWNER_EMAIL"] = "template@cardshelf.local"
os.environ["TELEMETRY_ENABLED"] = "false"

import httpx
import pytest
import pytest_asyncio
from fakes import TEMPLATE_EMAIL, TEMPLATE_SUBJECT, InMemoryDatabase
from httpx import ASGITransport, AsyncClient

from cardshelf_api.config import settings

# Verify settings are correct for tests
assert settings.jwt_algorithm == "HS256", "Test setup failed: jwt_algorithm should be HS256"
assert settings.secret_key == "test-secret-key", "Test setup failed: unexpected secret_key"


@pytest.fixture(autouse=True)
def clean_dev_logs():
    """Start every test with an empty telemetry buffer."""
    from cardshelf_api.telemetry import clear_dev_logs

    clear_dev_logs()
    yield
    clear_dev_logs()


@pytest.fixture
def store() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest_asyncio.fixture
async def template_user(store):
    """The reserved showcase account."""
    return await store.upsert_user(TEMPLATE_SUBJECT, "Showcase", TEMPLATE_EMAIL, "")


@pytest.fixture
def verifier():
    from cardshelf_api.auth import SharedSecretTokenProvider, TokenVerifier

    return TokenVerifier(SharedSecretTokenProvider(settings.secret_key), timeout_seconds=1.0)


@pytest.fixture
def rawg_handler():
    """Request handler behind the suggestion client's mock transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": []})

    return handler


@pytest_asyncio.fixture
async def suggestion_client(rawg_handler):
    from cardshelf_api.core import SuggestionClient

    client = SuggestionClient(
        api_key="test-rawg-key",
        base_url="https://rawg.test/api",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(rawg_handler)),
    )
    yield client
    await client.close()


@pytest.fixture
def app(store, verifier, suggestion_client):
    """Application wired to the in-memory store.

    ASGITransport does not run the lifespan, so the components it would
    build are attached here.
    """
    from cardshelf_api.auth import IdentityMaterializer, OwnerResolver
    from cardshelf_api.main import create_app

    test_app = create_app()
    test_app.state.db = store
    test_app.state.verifier = verifier
    test_app.state.materializer = IdentityMaterializer(store)
    test_app.state.resolver = OwnerResolver.default(store, TEMPLATE_EMAIL)
    test_app.state.suggestions = suggestion_client
    return test_app


@pytest_asyncio.fixture
async def client(app):
    """Create test client against the in-memory application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        timeout=5.0,
    ) as test_client:
        yield test_client
