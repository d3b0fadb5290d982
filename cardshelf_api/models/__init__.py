"""Data models for the Cardshelf service."""

from .card import Card, CardCreateRequest, CardListResponse, CardUpdateRequest
from .category import (
    Category,
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryUpdateRequest,
)
from .responses import HealthResponse, MessageResponse, Suggestion, VersionResponse
from .user import (
    HANDLE_PATTERN,
    HandleAvailabilityResponse,
    HandleClaimRequest,
    PublicProfile,
    UserRecord,
)

__all__ = [
    # Card models
    "Card",
    "CardCreateRequest",
    "CardUpdateRequest",
    "CardListResponse",
    # Category models
    "Category",
    "CategoryCreateRequest",
    "CategoryUpdateRequest",
    "CategoryListResponse",
    # User models
    "UserRecord",
    "PublicProfile",
    "HandleClaimRequest",
    "HandleAvailabilityResponse",
    "HANDLE_PATTERN",
    # Response models
    "MessageResponse",
    "Suggestion",
    "HealthResponse",
    "VersionResponse",
]
