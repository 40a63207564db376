"""Where Next data models."""

from .core import (
    AppError,
    CacheStats,
    CacheStatsResponse,
    ErrorCode,
    HotelBand,
    PriceBand,
    SuggestionRecord,
    SuggestionResponse,
    SuggestionSource,
    Weather,
)

__all__ = [
    "AppError",
    "CacheStats",
    "CacheStatsResponse",
    "ErrorCode",
    "HotelBand",
    "PriceBand",
    "SuggestionRecord",
    "SuggestionResponse",
    "SuggestionSource",
    "Weather",
]
