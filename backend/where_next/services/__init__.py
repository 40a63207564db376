"""Where Next Services.

Service layer components:
- Cache: suggestion request normalization and cache keys
- AI Reasoning: OpenAI (primary) + Groq + Gemini for trip suggestions
- Suggestions: cache-first request handling with seeded/default fallback
"""

from .cache import CacheKeyBuilder, NormalizedSuggestionParams
from .ai_reasoning import (
    GeminiTripService,
    GroqTripService,
    OpenAITripService,
    SuggestionGenerationError,
    TripSuggestionService,
    create_ai_service,
)
from .suggestions import (
    SeedCatalog,
    SeedDataError,
    SuggestionRequestHandler,
    create_suggestion_handler,
)

__all__ = [
    # Cache
    "CacheKeyBuilder",
    "NormalizedSuggestionParams",
    # AI reasoning
    "GeminiTripService",
    "GroqTripService",
    "OpenAITripService",
    "SuggestionGenerationError",
    "TripSuggestionService",
    "create_ai_service",
    # Suggestions
    "SeedCatalog",
    "SeedDataError",
    "SuggestionRequestHandler",
    "create_suggestion_handler",
]
