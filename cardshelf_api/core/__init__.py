"""Core business logic for cards, categories, users and suggestions."""

from .card_manager import CardManager
from .category_manager import CategoryManager
from .suggestion_client import SuggestionClient, SuggestionError, SuggestionsNotConfigured
from .user_manager import UserManager

__all__ = [
    "CardManager",
    "CategoryManager",
    "UserManager",
    "SuggestionClient",
    "SuggestionError",
    "SuggestionsNotConfigured",
]
