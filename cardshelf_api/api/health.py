"""Health check and version endpoints."""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends

from .. import __version__
from ..models import HealthResponse, VersionResponse
from ..storage import Database, StoreUnavailable, get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Track service start time
_start_time = time.time()


def _format_uptime(seconds_total: float) -> str:
    days, seconds_remaining = divmod(int(seconds_total), 86400)
    hours, seconds_remaining = divmod(seconds_remaining, 3600)
    minutes, seconds = divmod(seconds_remaining, 60)
    return f"Days: {days}, Hours: {hours}, Minutes: {minutes}, Seconds: {seconds}"


@router.get("/health", response_model=HealthResponse)
async def health_check(db: Database = Depends(get_db)) -> HealthResponse:
    """Health check endpoint. Reports "degraded" while the database is unreachable."""
    db_connected = False
    try:
        db_connected = await db.ping()
    except StoreUnavailable as e:
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="healthy" if db_connected else "degraded",
        version=__version__,
        uptime=_format_uptime(time.time() - _start_time),
        database_connected=db_connected,
    )


@router.get("/version", response_model=VersionResponse)
async def get_version() -> VersionResponse:
    """Get version information."""
    return VersionResponse(service_version=__version__)


@router.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with service information."""
    return {
        "service": "Cardshelf API",
        "version": __version__,
        "description": "REST API for card and category collections",
        "docs": "/docs",
        "health": "/health",
    }
