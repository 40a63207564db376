"""Suggestion request handling with cache and fallback chain."""

from .defaults import DEFAULT_SUGGESTIONS, default_suggestions
from .seeds import SeedCatalog, SeedDataError, SeedEntry, SeedKey
from .service import SuggestionRequestHandler, create_suggestion_handler

__all__ = [
    "DEFAULT_SUGGESTIONS",
    "default_suggestions",
    "SeedCatalog",
    "SeedDataError",
    "SeedEntry",
    "SeedKey",
    "SuggestionRequestHandler",
    "create_suggestion_handler",
]
