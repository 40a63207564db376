"""Core data models for Where Next.

This module contains the Pydantic models used throughout the application
for representing destination suggestions, cache statistics and API errors.

Wire format is camelCase (``estimatedTotal``, ``hitRate``) to match the web
client; Python attribute names are snake_case. Models accept either form.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in API error envelopes."""

    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Structured error returned to API clients."""

    code: ErrorCode = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Technical error message")
    user_message: str = Field(..., description="Message safe to show to users")


class SuggestionSource(str, Enum):
    """Which strategy produced a suggestions response."""

    CACHE = "cache"
    AI = "ai"
    FALLBACK = "fallback"
    DEFAULT_FALLBACK = "default_fallback"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Weather(_WireModel):
    """Typical weather at the destination for the travel dates."""

    temp: Optional[float] = Field(None, description="Temperature in Celsius")
    condition: Optional[str] = None
    icon: Optional[str] = None


class PriceBand(_WireModel):
    """Min/max price range in USD."""

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)


class HotelBand(PriceBand):
    """Nightly hotel price range plus style and neighborhood."""

    style: Optional[str] = None
    area: Optional[str] = None


class SuggestionRecord(_WireModel):
    """A single destination suggestion.

    Only ``destination`` and ``estimated_total`` are required; everything
    else is optional because AI output is not guaranteed to be complete.
    """

    id: Optional[str] = None
    destination: str = Field(..., min_length=1, description="'City, Country'")
    country: Optional[str] = None
    city: Optional[str] = None
    fit_score: Optional[float] = Field(None, alias="fitScore", ge=0, le=100)
    description: Optional[str] = None
    weather: Optional[Weather] = None
    crowd_level: Optional[str] = Field(None, alias="crowdLevel")
    seasonality: Optional[str] = None
    estimated_total: float = Field(
        ..., alias="estimatedTotal", ge=0, description="Estimated trip total in USD"
    )
    flight_band: Optional[PriceBand] = Field(None, alias="flightBand")
    hotel_band: Optional[HotelBand] = Field(None, alias="hotelBand")
    highlights: list[str] = Field(default_factory=list)
    why_it_fits: Optional[str] = Field(None, alias="whyItFits")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # AI providers return ids as numbers about half the time
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class CacheStats(_WireModel):
    """Snapshot of suggestion cache hit/miss counters."""

    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    hit_rate: float = Field(..., alias="hitRate", ge=0, le=1)


class SuggestionResponse(_WireModel):
    """Response model for the suggestions endpoint.

    ``error`` is only set when every generation strategy failed; the
    suggestions list is still populated with the hardcoded defaults.
    """

    suggestions: list[SuggestionRecord]
    source: SuggestionSource
    cache_stats: Optional[CacheStats] = Field(None, alias="cacheStats")
    error: Optional[str] = None


class CacheStatsResponse(CacheStats):
    """Cache statistics plus current occupancy."""

    size: int = Field(..., ge=0)
    capacity: int = Field(..., ge=1)
