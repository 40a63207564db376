"""AI trip suggestions via OpenAI (primary), Groq or Gemini.

Provider-agnostic base class with three concrete implementations:
- OpenAITripService: OpenAI (or compatible) chat completions via the openai SDK
- GroqTripService:   Groq LPU, llama-3.1-8b-instant (~1.5s)
- GeminiTripService: Google Gemini, gemma-3-4b-it (~6s)

The AI layer only produces suggestions or raises. Falling back to seeded or
default data is the caller's job.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from where_next.config import Settings
from where_next.models import SuggestionRecord
from where_next.services.cache import NormalizedSuggestionParams

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert travel AI assistant. Always respond with valid JSON arrays "
    "containing trip suggestions. Never include explanations outside the JSON structure."
)

SUGGESTION_COUNT = 4
MAX_SUGGESTIONS = 6

RESPONSE_SHAPE = """[
  {
    "id": "1",
    "destination": "City, Country",
    "country": "Country",
    "city": "City",
    "fitScore": 85,
    "description": "Brief description",
    "weather": {"temp": 24, "condition": "Sunny", "icon": "☀️"},
    "crowdLevel": "Low|Medium|High",
    "seasonality": "Description of season",
    "estimatedTotal": 1800,
    "flightBand": {"min": 400, "max": 650},
    "hotelBand": {"min": 90, "max": 150, "style": "Boutique", "area": "Neighborhood"},
    "highlights": ["Highlight 1", "Highlight 2", "Highlight 3", "Highlight 4"],
    "whyItFits": "Why this destination matches their preferences"
  }
]"""


class SuggestionGenerationError(Exception):
    """The provider answered, but not with a usable list of suggestions."""


class TripSuggestionService(ABC):
    """Base class for AI trip suggestion services.

    All prompt construction and JSON parsing lives here.
    Subclasses only implement ``_generate()`` for their specific API client.
    """

    _timeout: float

    @abstractmethod
    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        """Send prompt to the AI provider and return raw text."""
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name for logging."""
        ...

    async def close(self) -> None:
        """Release provider resources. Most SDK clients need nothing."""
        return None

    # ── Utilities ─────────────────────────────────────────────────────

    @staticmethod
    def _sanitize_input(text: str, max_length: int = 500) -> str:
        """Sanitize user input before passing to AI prompts.

        Strips control characters and limits length to prevent
        prompt injection and abuse.
        """
        cleaned = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
        return cleaned[:max_length].strip()

    @staticmethod
    def _extract_json(text: str) -> str:
        if "```json" in text:
            return text.split("```json")[1].split("```")[0].strip()
        if "```" in text:
            return text.split("```")[1].split("```")[0].strip()
        return text.strip()

    def build_prompt(self, params: NormalizedSuggestionParams) -> str:
        origin = self._sanitize_input(params.display_origin, max_length=100)
        vibes = ", ".join(
            self._sanitize_input(v, max_length=50) for v in params.vibes
        ) if params.vibes else "open to anything"
        details = self._sanitize_input(params.additional_details or "", max_length=500)
        duration = f"{params.trip_duration} days" if params.trip_duration else "flexible"
        style = f" ({self._sanitize_input(params.budget_style, max_length=30)} style)" if params.budget_style else ""
        dates = ""
        if params.start_date or params.end_date:
            dates = f"- Dates: {params.start_date or '?'} to {params.end_date or '?'}\n"

        return (
            f"Generate {SUGGESTION_COUNT} personalized trip suggestions based on these preferences:\n\n"
            f"Traveler Details:\n"
            f"- Departing from: {origin}\n"
            f"- Trip duration: {duration}\n"
            f"- Budget: ${params.budget}{style}\n"
            f"- Travelers: {params.adults} adults, {params.kids} kids\n"
            f"- Interests/Vibes: {vibes}\n"
            f"{dates}"
            f"- Additional details: {details or 'None provided'}\n\n"
            f"For each suggestion include realistic pricing for this budget, specific "
            f"highlights, why it fits, typical weather and crowd level, and flight and "
            f"hotel price bands.\n\n"
            f"Return ONLY a JSON array with exactly this structure:\n{RESPONSE_SHAPE}\n\n"
            f"Rules:\n- Diverse destinations\n"
            f"- estimatedTotal must cover flights and hotels for the whole party\n"
            f"- No text outside the JSON array"
        )

    def parse_suggestions(self, text: str) -> list[SuggestionRecord]:
        """Parse a provider response into validated suggestion records.

        Items that fail validation are dropped.

        Raises:
            SuggestionGenerationError: If the response is not JSON, not an
                array, or contains no valid suggestion.
        """
        try:
            data = json.loads(self._extract_json(text or ""))
        except json.JSONDecodeError as e:
            raise SuggestionGenerationError(f"Unparseable response: {e}") from e
        if not isinstance(data, list):
            raise SuggestionGenerationError(f"Expected a JSON array, got {type(data).__name__}")

        suggestions: list[SuggestionRecord] = []
        seen: set[str] = set()
        for item in data[:MAX_SUGGESTIONS]:
            if not isinstance(item, dict):
                continue
            try:
                record = SuggestionRecord.model_validate(item)
            except ValidationError as e:
                logger.info(f"[{self.provider_name}] Dropping invalid suggestion: {e.error_count()} errors")
                continue
            if record.destination.lower() in seen:
                continue
            seen.add(record.destination.lower())
            suggestions.append(record)

        if not suggestions:
            raise SuggestionGenerationError("No valid suggestions in response")
        return suggestions

    async def suggest_trips(self, params: NormalizedSuggestionParams) -> list[SuggestionRecord]:
        prompt = self.build_prompt(params)
        text = await self._generate(prompt)
        suggestions = self.parse_suggestions(text)
        logger.info(f"[{self.provider_name}] Got {len(suggestions)} trip suggestions")
        return suggestions


# ═══════════════════════════════════════════════════════════════════════
# Provider: OpenAI  (primary, chat completions)
# ═══════════════════════════════════════════════════════════════════════

class OpenAITripService(TripSuggestionService):
    """OpenAI (or any OpenAI-compatible endpoint) chat completions."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4",
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        from openai import AsyncOpenAI

        if not api_key:
            raise ValueError("OPENAI_API_KEY not provided")
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )
        self._model_name = model_name
        self._timeout = timeout_seconds
        logger.info(f"[AI] OpenAI ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "OpenAI"

    async def close(self) -> None:
        await self._client.close()

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=0.7,
                    max_tokens=2000,
                ),
                timeout=t,
            )
            content = resp.choices[0].message.content
        except asyncio.TimeoutError:
            logger.warning(f"[OpenAI] Timeout after {t}s")
            raise
        except (IndexError, AttributeError, TypeError) as e:
            raise SuggestionGenerationError(f"Unexpected response shape: {e}") from e
        except Exception as e:
            logger.warning(f"[OpenAI] Error: {e}")
            raise
        if not content:
            raise SuggestionGenerationError("No content received from OpenAI")
        return content.strip()


# ═══════════════════════════════════════════════════════════════════════
# Provider: Groq  (fast LPU inference, ~1.5s)
# ═══════════════════════════════════════════════════════════════════════

class GroqTripService(TripSuggestionService):
    """Groq LPU with Llama 3.1 8B Instant."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "llama-3.1-8b-instant",
        timeout_seconds: float = 15.0,
    ) -> None:
        from groq import AsyncGroq

        if not api_key:
            raise ValueError("GROQ_API_KEY not provided")
        self._client = AsyncGroq(api_key=api_key)
        self._model_name = model_name
        self._timeout = timeout_seconds
        logger.info(f"[AI] Groq ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Groq"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        t = timeout or self._timeout
        try:
            resp = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model_name,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=0.7,
                    max_tokens=2000,
                ),
                timeout=t,
            )
            return (resp.choices[0].message.content or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Groq] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Groq] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Provider: Gemini  (reliable, ~6s)
# ═══════════════════════════════════════════════════════════════════════

class GeminiTripService(TripSuggestionService):
    """Google Gemini with Gemma 3 4B."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemma-3-4b-it",
        timeout_seconds: float = 30.0,
    ) -> None:
        from google import genai

        if not api_key:
            raise ValueError("GEMINI_API_KEY not provided")
        self._client = genai.Client(api_key=api_key)
        self._model_name = model_name
        self._timeout = timeout_seconds
        logger.info(f"[AI] Gemini ready: {self._model_name}")

    @property
    def provider_name(self) -> str:
        return "Gemini"

    async def _generate(self, prompt: str, timeout: float | None = None) -> str:
        t = timeout or self._timeout
        try:
            # Gemma has no system role
            full_prompt = f"{SYSTEM_PROMPT}\n\n{prompt}"
            resp = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model_name,
                    contents=full_prompt,
                ),
                timeout=t,
            )
            return (resp.text or "").strip()
        except asyncio.TimeoutError:
            logger.warning(f"[Gemini] Timeout after {t}s")
            raise
        except Exception as e:
            logger.warning(f"[Gemini] Error: {e}")
            raise


# ═══════════════════════════════════════════════════════════════════════
# Factory: OpenAI → Groq → Gemini
# ═══════════════════════════════════════════════════════════════════════

def create_ai_service(settings: Settings) -> TripSuggestionService | None:
    """Create the best available AI service, or None when AI is off.

    Missing credentials are equivalent to AI being disabled.
    """
    if not settings.ai_enabled:
        logger.info("[AI] Disabled by configuration")
        return None
    if not settings.has_ai_credentials:
        logger.info("[AI] No API keys set, suggestions will use seeded data")
        return None

    timeout = settings.ai_timeout_seconds
    if settings.openai_api_key:
        try:
            return OpenAITripService(
                settings.openai_api_key,
                model_name=settings.openai_model,
                base_url=settings.openai_base_url,
                timeout_seconds=timeout,
            )
        except Exception as e:
            logger.info(f"[AI] OpenAI init failed: {e}")

    if settings.groq_api_key:
        try:
            return GroqTripService(
                settings.groq_api_key, model_name=settings.groq_model, timeout_seconds=timeout
            )
        except Exception as e:
            logger.info(f"[AI] Groq init failed: {e}")

    if settings.gemini_api_key:
        try:
            return GeminiTripService(
                settings.gemini_api_key, model_name=settings.gemini_model, timeout_seconds=timeout
            )
        except Exception as e:
            logger.info(f"[AI] Gemini init failed: {e}")

    logger.info("[AI] No provider configured, suggestions will use seeded data")
    return None
