"""Suggestion cache keys."""

from .service import (
    BUDGET_BUCKET_SIZE,
    DEFAULT_ADULTS,
    DEFAULT_BUDGET,
    DEFAULT_KIDS,
    DEFAULT_ORIGIN,
    CacheKeyBuilder,
    NormalizedSuggestionParams,
    bucket_budget,
)

__all__ = [
    "BUDGET_BUCKET_SIZE",
    "DEFAULT_ADULTS",
    "DEFAULT_BUDGET",
    "DEFAULT_KIDS",
    "DEFAULT_ORIGIN",
    "CacheKeyBuilder",
    "NormalizedSuggestionParams",
    "bucket_budget",
]
