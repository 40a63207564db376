"""AI trip suggestions via OpenAI (primary), Groq or Gemini."""

from .service import (
    GeminiTripService,
    GroqTripService,
    OpenAITripService,
    SuggestionGenerationError,
    TripSuggestionService,
    create_ai_service,
)

__all__ = [
    "GeminiTripService",
    "GroqTripService",
    "OpenAITripService",
    "SuggestionGenerationError",
    "TripSuggestionService",
    "create_ai_service",
]
