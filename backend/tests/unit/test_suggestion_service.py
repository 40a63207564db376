"""Unit tests for the suggestion request handler.

AI providers are replaced by in-process test doubles; no network access.
"""

import asyncio
from typing import Any

import pytest

from where_next.models import SuggestionRecord, SuggestionSource
from where_next.services.ai_reasoning import TripSuggestionService
from where_next.services.cache import NormalizedSuggestionParams
from where_next.services.suggestions import (
    DEFAULT_SUGGESTIONS,
    SeedCatalog,
    SuggestionRequestHandler,
)
from where_next.services.suggestions import service as handler_module
from where_next.utils.cache import TTLCache
from where_next.utils.metrics import CacheMetrics

AI_RECORD = SuggestionRecord(destination="Kyoto, Japan", estimated_total=2800)
SEED_RECORD = {"destination": "Mexico City, Mexico", "estimatedTotal": 2600}


class FakeTripService(TripSuggestionService):
    """Counts calls and returns (or raises) whatever it is told to."""

    def __init__(self, result: Any = None, error: Exception | None = None, delay: float = 0.0) -> None:
        self._result = [AI_RECORD] if result is None else result
        self._error = error
        self._delay = delay
        self._timeout = 1.0
        self.calls: list[NormalizedSuggestionParams] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "Fake"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        raise AssertionError("suggest_trips is overridden")

    async def suggest_trips(self, params: NormalizedSuggestionParams) -> Any:
        self.calls.append(params)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result

    async def close(self) -> None:
        self.closed = True


class BrokenCache(TTLCache):
    """Cache whose writes always fail."""

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        raise RuntimeError("cache write failed")


def _seeds() -> SeedCatalog:
    return SeedCatalog.from_entries([
        {"origin": "toronto", "budget_bucket": 3000, "suggestions": [SEED_RECORD]},
    ])


def _handler(ai: TripSuggestionService | None = None, **kwargs: Any) -> SuggestionRequestHandler:
    kwargs.setdefault("cache", TTLCache(max_size=10, ttl_seconds=60))
    kwargs.setdefault("metrics", CacheMetrics())
    kwargs.setdefault("seeds", _seeds())
    return SuggestionRequestHandler(ai_service=ai, **kwargs)


@pytest.fixture
def defaults_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make the last step of the fallback chain blow up."""

    def explode() -> list[SuggestionRecord]:
        raise RuntimeError("defaults unavailable")

    monkeypatch.setattr(handler_module, "default_suggestions", explode)


class TestFallbackChain:
    """Tests for AI → seeded → default generation."""

    @pytest.mark.asyncio
    async def test_ai_disabled_no_seed_uses_defaults(self) -> None:
        response = await _handler().handle({"from": "Vancouver", "budget": 2000})
        assert response.source == SuggestionSource.DEFAULT_FALLBACK
        assert response.suggestions
        for suggestion in response.suggestions:
            assert suggestion.destination
            assert suggestion.estimated_total is not None
        assert response.error is None

    @pytest.mark.asyncio
    async def test_ai_disabled_seed_match_uses_seed(self) -> None:
        response = await _handler().handle({"from": " TORONTO ", "budget": 2800})
        assert response.source == SuggestionSource.FALLBACK
        assert [s.destination for s in response.suggestions] == ["Mexico City, Mexico"]

    @pytest.mark.asyncio
    async def test_ai_success(self) -> None:
        ai = FakeTripService()
        response = await _handler(ai).handle({"from": "Toronto", "budget": 3000})
        assert response.source == SuggestionSource.AI
        assert response.suggestions == [AI_RECORD]
        assert ai.calls[0].origin == "toronto"

    @pytest.mark.asyncio
    async def test_ai_dict_output_is_validated(self) -> None:
        ai = FakeTripService(result=[{"destination": "Oslo, Norway", "estimatedTotal": 3100}])
        response = await _handler(ai).handle({})
        assert response.source == SuggestionSource.AI
        assert response.suggestions[0].destination == "Oslo, Norway"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result,error",
        [
            (None, RuntimeError("network down")),
            ("not a list", None),
            ([], None),
            ([{"destination": "No price"}], None),
        ],
    )
    async def test_ai_failure_falls_back_to_seed(self, result: Any, error: Exception | None) -> None:
        ai = FakeTripService(result=result, error=error)
        response = await _handler(ai).handle({"from": "Toronto", "budget": 3000})
        assert response.source == SuggestionSource.FALLBACK
        assert response.error is None
        assert len(ai.calls) == 1

    @pytest.mark.asyncio
    async def test_ai_failure_without_seed_uses_defaults(self) -> None:
        ai = FakeTripService(error=ValueError("bad json"))
        response = await _handler(ai).handle({"from": "Halifax"})
        assert response.source == SuggestionSource.DEFAULT_FALLBACK
        assert response.suggestions == list(DEFAULT_SUGGESTIONS)

    @pytest.mark.asyncio
    async def test_ai_timeout_falls_back(self) -> None:
        ai = FakeTripService(delay=1.0)
        handler = _handler(ai, ai_timeout_seconds=0.01)
        response = await handler.handle({"from": "Toronto", "budget": 3000})
        assert response.source == SuggestionSource.FALLBACK


class TestCaching:
    """Tests for cache short-circuit and metrics."""

    @pytest.mark.asyncio
    async def test_second_identical_request_is_cache_hit(self) -> None:
        ai = FakeTripService()
        handler = _handler(ai)
        body = {"from": "Toronto", "budget": 3000, "vibes": ["food"]}
        first = await handler.handle(body)
        second = await handler.handle(body)
        assert first.source == SuggestionSource.AI
        assert second.source == SuggestionSource.CACHE
        assert second.suggestions == first.suggestions
        assert len(ai.calls) == 1

    @pytest.mark.asyncio
    async def test_equivalent_request_hits_cache(self) -> None:
        ai = FakeTripService()
        handler = _handler(ai)
        await handler.handle({"from": "Toronto", "budget": 3000, "vibes": ["food", "art"]})
        response = await handler.handle({"vibes": ["ART", "food"], "budget": 3200, "from": "toronto "})
        assert response.source == SuggestionSource.CACHE
        assert len(ai.calls) == 1

    @pytest.mark.asyncio
    async def test_fallback_results_are_cached_too(self) -> None:
        handler = _handler()
        await handler.handle({})
        assert (await handler.handle({})).source == SuggestionSource.CACHE

    @pytest.mark.asyncio
    async def test_empty_body_shares_entry_with_explicit_defaults(self) -> None:
        ai = FakeTripService()
        handler = _handler(ai)
        await handler.handle({})
        explicit = {"from": "Vancouver", "budget": 2000, "vibes": [], "adults": 2, "kids": 0}
        assert (await handler.handle(explicit)).source == SuggestionSource.CACHE
        assert len(ai.calls) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_regenerates(self) -> None:
        now = [0.0]
        cache = TTLCache(max_size=10, ttl_seconds=60, clock=lambda: now[0])
        ai = FakeTripService()
        handler = _handler(ai, cache=cache)
        await handler.handle({})
        now[0] = 61.0
        assert (await handler.handle({})).source == SuggestionSource.AI
        assert len(ai.calls) == 2

    @pytest.mark.asyncio
    async def test_cache_stats_accounting(self) -> None:
        handler = _handler(FakeTripService())
        bodies = [{}, {}, {"from": "Paris"}, {}, {"from": "Paris"}]
        responses = [await handler.handle(body) for body in bodies]
        stats = responses[-1].cache_stats
        assert stats is not None
        assert (stats.hits, stats.misses, stats.total) == (3, 2, 5)
        assert stats.hit_rate == pytest.approx(3 / 5)

    @pytest.mark.asyncio
    async def test_stats_include_occupancy(self) -> None:
        handler = _handler()
        await handler.handle({})
        await handler.handle({"from": "Paris"})
        stats = handler.stats()
        assert stats.size == 2
        assert stats.capacity == 10
        assert stats.misses == 2

    @pytest.mark.asyncio
    async def test_mutating_a_response_does_not_touch_the_cache(self) -> None:
        handler = _handler(FakeTripService(result=[AI_RECORD.model_copy(deep=True)]))
        first = await handler.handle({})
        first.suggestions[0].destination = "Nowhere"
        first.suggestions[0].highlights.append("tampered")

        hit = await handler.handle({})
        assert hit.source == SuggestionSource.CACHE
        assert hit.suggestions[0].destination == "Kyoto, Japan"
        assert hit.suggestions[0].highlights == []

        hit.suggestions.clear()
        assert (await handler.handle({})).suggestions == [AI_RECORD]

    @pytest.mark.asyncio
    async def test_mutating_default_response_leaves_defaults_intact(self) -> None:
        response = await _handler().handle({"from": "Halifax"})
        response.suggestions[0].highlights.clear()
        assert DEFAULT_SUGGESTIONS[0].highlights


class TestFailureHandling:
    """Tests for the never-raise contract."""

    @pytest.mark.asyncio
    async def test_cache_write_failure_keeps_ai_result(self) -> None:
        handler = _handler(FakeTripService(), cache=BrokenCache(max_size=10, ttl_seconds=60))
        response = await handler.handle({"from": "Toronto"})
        assert response.source == SuggestionSource.AI
        assert response.suggestions == [AI_RECORD]
        assert response.error is None
        assert response.cache_stats is not None

    @pytest.mark.asyncio
    async def test_cache_write_failure_keeps_seeded_result(self) -> None:
        handler = _handler(cache=BrokenCache(max_size=10, ttl_seconds=60))
        response = await handler.handle({"from": "Toronto", "budget": 3000})
        assert response.source == SuggestionSource.FALLBACK
        assert response.error is None

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("defaults_unavailable")
    async def test_total_failure_returns_defaults_with_error(self) -> None:
        response = await _handler().handle({"from": "Halifax"})
        assert response.source == SuggestionSource.DEFAULT_FALLBACK
        assert response.suggestions == list(DEFAULT_SUGGESTIONS)
        assert response.error == "defaults unavailable"
        assert response.cache_stats is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [None, [], "junk", {"budget": {"nested": True}, "vibes": "food"}])
    async def test_malformed_bodies_still_answer(self, body: Any) -> None:
        response = await _handler().handle(body)
        assert response.suggestions
        assert response.error is None


class TestRequestCoalescing:
    """Tests for concurrent identical misses."""

    @pytest.mark.asyncio
    async def test_concurrent_identical_misses_generate_once(self) -> None:
        ai = FakeTripService(delay=0.05)
        handler = _handler(ai)
        responses = await asyncio.gather(*(handler.handle({"from": "Toronto"}) for _ in range(3)))
        assert len(ai.calls) == 1
        assert all(r.source == SuggestionSource.AI for r in responses)
        assert handler.stats().misses == 3

    @pytest.mark.asyncio
    async def test_concurrent_different_keys_generate_separately(self) -> None:
        ai = FakeTripService(delay=0.01)
        handler = _handler(ai)
        await asyncio.gather(handler.handle({"from": "Toronto"}), handler.handle({"from": "Paris"}))
        assert len(ai.calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("defaults_unavailable")
    async def test_followers_see_leader_failure(self) -> None:
        handler = _handler(FakeTripService(error=RuntimeError("down"), delay=0.02))
        responses = await asyncio.gather(*(handler.handle({"from": "Halifax"}) for _ in range(2)))
        assert all(r.error == "defaults unavailable" for r in responses)
        assert all(r.suggestions for r in responses)

    @pytest.mark.asyncio
    async def test_followers_get_result_when_cache_write_fails(self) -> None:
        ai = FakeTripService(delay=0.02)
        handler = _handler(ai, cache=BrokenCache(max_size=10, ttl_seconds=60))
        responses = await asyncio.gather(*(handler.handle({}) for _ in range(2)))
        assert len(ai.calls) == 1
        assert all(r.source == SuggestionSource.AI and r.error is None for r in responses)


class TestLifecycle:
    """Tests for handler resource management."""

    @pytest.mark.asyncio
    async def test_aclose_closes_ai_service(self) -> None:
        ai = FakeTripService()
        handler = _handler(ai)
        assert handler.ai_enabled is True
        await handler.aclose()
        assert ai.closed is True

    @pytest.mark.asyncio
    async def test_aclose_without_ai(self) -> None:
        handler = _handler()
        assert handler.ai_enabled is False
        await handler.aclose()
