"""Suggestion request handling: cache lookup, fallback chain, response assembly.

Generation order on a cache miss:
1. AI provider (when configured), bounded by a timeout
2. Seeded suggestions for (origin, budget bucket)
3. Hardcoded defaults

Whatever produces the result gets cached. The handler never raises: if
something unexpected breaks, the defaults are returned with an ``error``.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from where_next.config import Settings
from where_next.models import (
    CacheStatsResponse,
    SuggestionRecord,
    SuggestionResponse,
    SuggestionSource,
)
from where_next.services.ai_reasoning import (
    SuggestionGenerationError,
    TripSuggestionService,
    create_ai_service,
)
from where_next.services.cache import CacheKeyBuilder, NormalizedSuggestionParams
from where_next.utils.cache import TTLCache
from where_next.utils.metrics import CacheMetrics

from .defaults import DEFAULT_SUGGESTIONS, default_suggestions
from .seeds import SeedCatalog

logger = logging.getLogger(__name__)

Generated = tuple[list[SuggestionRecord], SuggestionSource]


class SuggestionRequestHandler:
    """Serves suggestion requests from a TTL cache backed by a fallback chain.

    Concurrent misses for the same key share one generation: later requests
    await the in-flight result instead of calling the AI again.
    """

    def __init__(
        self,
        cache: TTLCache,
        metrics: CacheMetrics,
        seeds: SeedCatalog,
        ai_service: TripSuggestionService | None = None,
        ai_timeout_seconds: float = 30.0,
        ttl_seconds: float | None = None,
    ) -> None:
        self._cache = cache
        self._metrics = metrics
        self._seeds = seeds
        self._ai = ai_service
        self._ai_timeout = ai_timeout_seconds
        self._ttl = ttl_seconds
        self._inflight: dict[str, asyncio.Future[Generated]] = {}

    @property
    def ai_enabled(self) -> bool:
        return self._ai is not None

    async def handle(self, body: Mapping[str, Any] | None) -> SuggestionResponse:
        """Answer one suggestion request. Always returns a suggestion list."""
        try:
            return await self._handle(body)
        except Exception as e:
            logger.exception("[SUGGEST] Unhandled error, returning defaults")
            return SuggestionResponse(
                suggestions=[s.model_copy(deep=True) for s in DEFAULT_SUGGESTIONS],
                source=SuggestionSource.DEFAULT_FALLBACK,
                error=str(e) or type(e).__name__,
            )

    def stats(self) -> CacheStatsResponse:
        snapshot = self._metrics.get_stats()
        return CacheStatsResponse(
            **snapshot.model_dump(),
            size=len(self._cache),
            capacity=self._cache.max_size,
        )

    async def aclose(self) -> None:
        if self._ai is not None:
            await self._ai.close()

    async def _handle(self, body: Mapping[str, Any] | None) -> SuggestionResponse:
        params = CacheKeyBuilder.normalize(body)
        key = CacheKeyBuilder.build(params)

        cached = self._cache.get(key)
        if cached is not None:
            self._metrics.record_hit()
            logger.info(f"[SUGGEST] Cache HIT for {params.origin}/{params.budget_bucket}")
            return SuggestionResponse(
                suggestions=[s.model_copy(deep=True) for s in cached],
                source=SuggestionSource.CACHE,
                cache_stats=self._metrics.get_stats(),
            )

        self._metrics.record_miss()
        logger.info(f"[SUGGEST] Cache MISS for {params.origin}/{params.budget_bucket}")

        suggestions, source = await self._join_or_generate(key, params)
        return SuggestionResponse(
            suggestions=list(suggestions),
            source=source,
            cache_stats=self._metrics.get_stats(),
        )

    async def _join_or_generate(self, key: str, params: NormalizedSuggestionParams) -> Generated:
        inflight = self._inflight.get(key)
        if inflight is not None:
            logger.info(f"[SUGGEST] Joining in-flight generation for {params.origin}/{params.budget_bucket}")
            try:
                return await asyncio.shield(inflight)
            except asyncio.CancelledError:
                if not inflight.cancelled():
                    raise
                # Leader was cancelled; generate on our own below.

        future: asyncio.Future[Generated] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await self._generate(params)
            self._store(key, result[0])
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()  # followers still see it; silences "never retrieved"
            raise
        else:
            future.set_result(result)
            return result
        finally:
            if self._inflight.get(key) is future:
                del self._inflight[key]

    def _store(self, key: str, suggestions: list[SuggestionRecord]) -> None:
        # Write failures are logged and swallowed; the caller still gets the result.
        try:
            self._cache.set(key, tuple(s.model_copy(deep=True) for s in suggestions), self._ttl)
        except Exception as e:
            logger.warning(f"[SUGGEST] Cache store failed: {e}")

    async def _generate(self, params: NormalizedSuggestionParams) -> Generated:
        if self._ai is not None:
            provider = self._ai.provider_name
            try:
                raw = await asyncio.wait_for(self._ai.suggest_trips(params), timeout=self._ai_timeout)
                suggestions = self._validate_ai_output(raw)
                logger.info(f"[SUGGEST] {provider} produced {len(suggestions)} suggestions")
                return suggestions, SuggestionSource.AI
            except asyncio.TimeoutError:
                logger.warning(f"[SUGGEST] {provider} timed out after {self._ai_timeout}s, falling back")
            except Exception as e:
                logger.warning(f"[SUGGEST] {provider} failed, falling back: {e}")

        seeded = self._seeds.lookup(params.origin, params.budget_bucket)
        if seeded:
            logger.info(f"[SUGGEST] Using {len(seeded)} seeded suggestions")
            return seeded, SuggestionSource.FALLBACK

        logger.info("[SUGGEST] No seed match, using default suggestions")
        return default_suggestions(), SuggestionSource.DEFAULT_FALLBACK

    @staticmethod
    def _validate_ai_output(raw: Any) -> list[SuggestionRecord]:
        if not isinstance(raw, list) or not raw:
            raise SuggestionGenerationError("AI returned no suggestion list")
        return [
            item if isinstance(item, SuggestionRecord) else SuggestionRecord.model_validate(item)
            for item in raw
        ]


def create_suggestion_handler(settings: Settings) -> SuggestionRequestHandler:
    """Build the process-wide handler from settings.

    Raises:
        SeedDataError: If the seed file is missing or malformed.
    """
    return SuggestionRequestHandler(
        cache=TTLCache(max_size=settings.cache_max_size, ttl_seconds=settings.cache_ttl_seconds),
        metrics=CacheMetrics(),
        seeds=SeedCatalog.from_file(settings.seed_path),
        ai_service=create_ai_service(settings),
        ai_timeout_seconds=settings.ai_timeout_seconds,
    )
