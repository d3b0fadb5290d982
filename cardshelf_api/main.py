"""Main FastAPI application for the Cardshelf service."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from .api import (
    cards_router,
    categories_router,
    health_router,
    suggestions_router,
    users_router,
)
from .auth import IdentityMaterializer, OwnerResolver, TokenVerifier, build_token_provider
from .config import settings
from .core import SuggestionClient
from .middleware.auth import STORE_UNAVAILABLE
from .storage import StoreUnavailable, create_database
from .telemetry import (
    TelemetryEvents,
    TelemetryMiddleware,
    flush_telemetry,
    initialize_telemetry,
    track_event,
    track_exception,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown."""
    # Startup
    logger.info("Starting Cardshelf service...")
    logger.info(f"Service version: {app.version}")
    logger.info(f"Host: {settings.service_host}:{settings.service_port}")

    initialize_telemetry()
    logger.info("Telemetry initialized")

    db = create_database()
    try:
        await db.connect()
        logger.info("Database initialized")
    except StoreUnavailable as e:
        # Requests retry the connect; /health reports degraded meanwhile
        logger.error(f"Database unavailable at startup: {e}")

    verifier = TokenVerifier(
        build_token_provider(settings),
        timeout_seconds=settings.token_verify_timeout_seconds,
    )
    suggestions = SuggestionClient.from_settings(settings)

    app.state.db = db
    app.state.verifier = verifier
    app.state.materializer = IdentityMaterializer(db)
    app.state.resolver = OwnerResolver.default(db, settings.template_owner_email)
    app.state.suggestions = suggestions

    track_event(TelemetryEvents.APP_STARTED, {"version": app.version})
    logger.info("Cardshelf service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Cardshelf service...")
    track_event(TelemetryEvents.APP_STOPPED, {"version": app.version})

    flush_telemetry()
    logger.info("Telemetry flushed")

    await suggestions.close()
    await verifier.close()
    await db.disconnect()
    logger.info("Cardshelf service stopped")


async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    """Database failures inside handlers become a generic 500."""
    logger.error(f"Store unavailable during {request.method} {request.url.path}: {exc}")
    track_exception(exc, {"endpoint": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content={"detail": STORE_UNAVAILABLE})


def create_app() -> FastAPI:
    """Build the application with middleware and routers.

    Components (database, verifier, materializer, resolver, suggestion client)
    are attached to app.state by the lifespan.
    """
    application = FastAPI(
        title="Cardshelf API",
        description="""
REST API for tracking collections of titles ("cards") grouped into categories.

## Ownership

Reads are public. `GET /api/cards` and `GET /api/categories` return the
collection of:

1. the showcase account, with `owner=template`
2. the user with the given public handle, with `handle=<h>`
3. the caller, when a valid bearer token is sent
4. the showcase account otherwise

Writes always act on the caller's own collection and require a bearer token.

## API Endpoints

### Cards
- `GET /api/cards` - List cards of the resolved owner
- `POST /api/cards` - Create card
- `GET /api/cards/{id}` - Get card
- `PUT /api/cards/{id}` - Update card
- `DELETE /api/cards/{id}` - Delete card

### Categories
- `GET /api/categories` - List categories of the resolved owner
- `POST /api/categories` - Create category
- `PUT /api/categories/{id}` - Rename category
- `DELETE /api/categories/{id}` - Delete category

### Users
- `GET /api/users/me` - Caller's record
- `POST /api/users/handle` - Claim a handle
- `GET /api/users/handle-available` - Check a handle
- `GET /api/users/by-subject/{id}` - Public profile

### Suggestions
- `GET /api/suggestions` - Title suggestions from RAWG
""",
        version="0.4.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    application.add_exception_handler(StoreUnavailable, store_unavailable_handler)

    # Telemetry middleware (first, to capture all requests)
    application.add_middleware(TelemetryMiddleware)

    # CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Trusted host middleware (security)
    if settings.service_host != "0.0.0.0":
        application.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=[settings.service_host, "localhost", "127.0.0.1"],
        )

    # Register routers
    application.include_router(health_router)
    application.include_router(cards_router)
    application.include_router(categories_router)
    application.include_router(users_router)
    application.include_router(suggestions_router)

    return application


app = create_app()


def main() -> None:
    """Main entry point for running the service."""
    import uvicorn

    uvicorn.run(
        "cardshelf_api.main:app",
        host=settings.service_host,
        port=settings.service_port,
        workers=settings.service_workers,
        log_level=settings.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
