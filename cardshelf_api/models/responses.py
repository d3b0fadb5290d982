"""Response models shared across endpoints."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class Suggestion(BaseModel):
    """Title suggestion from the external catalogue."""

    title: str
    image: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime: str
    database_connected: bool


class VersionResponse(BaseModel):
    """Version information response."""

    service_version: str
