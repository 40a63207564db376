"""Suggestion request normalization and cache key derivation.

Two logically equivalent requests (same origin, budget bucket, vibe set and
party size after defaulting) always map to the same cache key, regardless of
field order, vibe order, or incidental whitespace/case differences.

Malformed input is never rejected: each field falls back to its default.
"""

import hashlib
import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_ORIGIN = "Vancouver"
DEFAULT_BUDGET = 2000
DEFAULT_ADULTS = 2
DEFAULT_KIDS = 0
BUDGET_BUCKET_SIZE = 1000

KEY_PREFIX = "suggestions:"


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _parse_number(value: Any) -> float | None:
    """Parse an int, float or numeric string. Anything else -> None."""
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _parse_int(value: Any, default: int, minimum: int) -> int:
    number = _parse_number(value)
    if number is None or not number.is_integer() or number < minimum:
        return default
    return int(number)


def _optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def bucket_budget(budget: int) -> int:
    """Round a budget to the nearest multiple of 1000, halves rounding up.

    >>> bucket_budget(1499), bucket_budget(1500)
    (1000, 2000)
    """
    return int(math.floor(budget / BUDGET_BUCKET_SIZE + 0.5)) * BUDGET_BUCKET_SIZE


@dataclass(frozen=True)
class NormalizedSuggestionParams:
    """Trip preferences after defaulting and normalization.

    Only ``origin``, ``budget_bucket``, ``vibes`` (as a set), ``adults`` and
    ``kids`` participate in the cache key. The remaining fields are context
    for the AI prompt.
    """
    origin: str = DEFAULT_ORIGIN.lower()
    budget: int = DEFAULT_BUDGET
    vibes: tuple[str, ...] = ()
    adults: int = DEFAULT_ADULTS
    kids: int = DEFAULT_KIDS
    display_origin: str = field(default=DEFAULT_ORIGIN, compare=False)
    additional_details: str | None = field(default=None, compare=False)
    start_date: str | None = field(default=None, compare=False)
    end_date: str | None = field(default=None, compare=False)
    trip_duration: int | None = field(default=None, compare=False)
    budget_style: str | None = field(default=None, compare=False)

    @property
    def budget_bucket(self) -> int:
        return bucket_budget(self.budget)

    def key_tuple(self) -> tuple[str, int, tuple[str, ...], int, int]:
        return (self.origin, self.budget_bucket, tuple(sorted(set(self.vibes))), self.adults, self.kids)


class CacheKeyBuilder:
    """Derives deterministic cache keys from raw suggestion requests."""

    @staticmethod
    def normalize(raw: Mapping[str, Any] | None) -> NormalizedSuggestionParams:
        """Apply the defaulting policy and normalize a raw request body.

        Args:
            raw: Request body. Accepts ``from``, ``budget`` (or the web
                form's ``budgetAmount``), ``vibes``, ``adults``, ``kids``
                and the prompt-only fields ``additionalDetails``,
                ``startDate``, ``endDate``, ``tripDuration``, ``budgetStyle``.
                Non-mappings are treated as an empty body.

        Returns:
            The normalized parameters. Never raises.
        """
        if not isinstance(raw, Mapping):
            raw = {}

        origin_raw = raw.get("from")
        display_origin = DEFAULT_ORIGIN
        if isinstance(origin_raw, str) and origin_raw.strip():
            display_origin = _collapse(origin_raw)

        budget_raw = raw.get("budget")
        if budget_raw is None:
            budget_raw = raw.get("budgetAmount")
        budget_number = _parse_number(budget_raw)
        if budget_number is None or budget_number < 0:
            budget = DEFAULT_BUDGET
        else:
            budget = int(math.floor(budget_number + 0.5))

        vibes: list[str] = []
        vibes_raw = raw.get("vibes")
        if isinstance(vibes_raw, list):
            for item in vibes_raw:
                if not isinstance(item, str):
                    continue
                vibe = _collapse(item).lower()
                if vibe and vibe not in vibes:
                    vibes.append(vibe)

        trip_duration_raw = raw.get("tripDuration")
        trip_duration = _parse_int(trip_duration_raw, 0, 1) or None

        return NormalizedSuggestionParams(
            origin=display_origin.lower(),
            budget=budget,
            vibes=tuple(vibes),
            adults=_parse_int(raw.get("adults"), DEFAULT_ADULTS, 1),
            kids=_parse_int(raw.get("kids"), DEFAULT_KIDS, 0),
            display_origin=display_origin,
            additional_details=_optional_text(raw.get("additionalDetails")),
            start_date=_optional_text(raw.get("startDate")),
            end_date=_optional_text(raw.get("endDate")),
            trip_duration=trip_duration,
            budget_style=_optional_text(raw.get("budgetStyle")),
        )

    @staticmethod
    def build(params: NormalizedSuggestionParams) -> str:
        """Generate the cache key for normalized parameters.

        The key format is ``suggestions:{digest}`` where digest is the first
        32 hex characters of the SHA-256 of the canonical key tuple.

        Example:
            >>> CacheKeyBuilder.build(CacheKeyBuilder.normalize({}))[:12]
            'suggestions:'
        """
        canonical = json.dumps(list(params.key_tuple()), separators=(",", ":"), ensure_ascii=False)
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:32]
        return f"{KEY_PREFIX}{digest}"

    @classmethod
    def build_for_request(cls, raw: Mapping[str, Any] | None) -> str:
        return cls.build(cls.normalize(raw))
