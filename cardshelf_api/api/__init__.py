"""API endpoints for the Cardshelf service."""

from .cards import router as cards_router
from .categories import router as categories_router
from .health import router as health_router
from .suggestions import router as suggestions_router
from .users import router as users_router

__all__ = [
    "cards_router",
    "categories_router",
    "users_router",
    "suggestions_router",
    "health_router",
]
