"""Environment-driven settings.

Values are read from the process environment; a ``.env`` file in the working
directory is loaded first if present.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).parent / "data" / "seed_suggestions.json"

_FALSY = {"0", "false", "no", "off"}


def _env_str(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the suggestion service."""
    ai_enabled: bool = True
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    groq_api_key: str | None = None
    groq_model: str = "llama-3.1-8b-instant"
    gemini_api_key: str | None = None
    gemini_model: str = "gemma-3-4b-it"
    cache_max_size: int = 50
    cache_ttl_seconds: int = 3600
    ai_timeout_seconds: float = 30.0
    seed_path: Path = DEFAULT_SEED_PATH
    cors_origins: list[str] = field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:3001",
            "http://localhost:5173",
        ]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        cors = _env_str("CORS_ORIGINS")
        seed_path = _env_str("SEED_SUGGESTIONS_PATH")
        return cls(
            ai_enabled=(_env_str("WHERE_NEXT_AI_ENABLED") or "true").lower() not in _FALSY,
            openai_api_key=_env_str("OPENAI_API_KEY"),
            openai_base_url=_env_str("OPENAI_BASE_URL") or defaults.openai_base_url,
            openai_model=_env_str("OPENAI_MODEL") or defaults.openai_model,
            groq_api_key=_env_str("GROQ_API_KEY"),
            groq_model=_env_str("GROQ_MODEL") or defaults.groq_model,
            gemini_api_key=_env_str("GEMINI_API_KEY"),
            gemini_model=_env_str("GEMINI_MODEL") or defaults.gemini_model,
            cache_max_size=_env_int("SUGGESTION_CACHE_MAX_SIZE", defaults.cache_max_size),
            cache_ttl_seconds=_env_int("SUGGESTION_CACHE_TTL_SECONDS", defaults.cache_ttl_seconds),
            ai_timeout_seconds=_env_float("AI_TIMEOUT_SECONDS", defaults.ai_timeout_seconds),
            seed_path=Path(seed_path) if seed_path else defaults.seed_path,
            cors_origins=(
                [o.strip() for o in cors.split(",") if o.strip()] if cors else defaults.cors_origins
            ),
        )

    @property
    def has_ai_credentials(self) -> bool:
        return bool(self.openai_api_key or self.groq_api_key or self.gemini_api_key)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
