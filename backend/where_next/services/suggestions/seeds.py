"""Seeded suggestions keyed by (origin, budget bucket).

Seed files are validated when loaded: a malformed entry fails startup
instead of failing the request that happens to hit it.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from where_next.models import SuggestionRecord
from where_next.services.cache import BUDGET_BUCKET_SIZE

logger = logging.getLogger(__name__)


class SeedDataError(Exception):
    """Seed data could not be read or failed validation."""


class SeedKey(NamedTuple):
    origin: str
    budget_bucket: int


class SeedEntry(BaseModel):
    """One seed file entry."""

    origin: str = Field(..., min_length=1)
    budget_bucket: int = Field(..., ge=0)
    suggestions: list[SuggestionRecord] = Field(..., min_length=1)

    @field_validator("origin")
    @classmethod
    def _normalize_origin(cls, value: str) -> str:
        normalized = " ".join(value.split()).lower()
        if not normalized:
            raise ValueError("origin must not be blank")
        return normalized

    @field_validator("budget_bucket")
    @classmethod
    def _check_bucket(cls, value: int) -> int:
        if value % BUDGET_BUCKET_SIZE:
            raise ValueError(f"budget_bucket must be a multiple of {BUDGET_BUCKET_SIZE}")
        return value

    @property
    def key(self) -> SeedKey:
        return SeedKey(self.origin, self.budget_bucket)


class SeedCatalog:
    """Read-only lookup from (normalized origin, budget bucket) to suggestions."""

    def __init__(self, entries: Mapping[SeedKey, Iterable[SuggestionRecord]] | None = None) -> None:
        self._entries: dict[SeedKey, tuple[SuggestionRecord, ...]] = {
            key: tuple(suggestions) for key, suggestions in (entries or {}).items()
        }

    @classmethod
    def from_entries(cls, raw_entries: Any) -> "SeedCatalog":
        """Validate raw seed entries (as decoded from JSON).

        Raises:
            SeedDataError: If the data is not a list, an entry is malformed,
                or two entries share a key.
        """
        if not isinstance(raw_entries, list):
            raise SeedDataError("Seed data must be a list of entries")
        entries: dict[SeedKey, tuple[SuggestionRecord, ...]] = {}
        for index, raw in enumerate(raw_entries):
            try:
                entry = SeedEntry.model_validate(raw)
            except ValidationError as e:
                raise SeedDataError(f"Invalid seed entry #{index}: {e}") from e
            if entry.key in entries:
                raise SeedDataError(f"Duplicate seed entry for {entry.origin}/{entry.budget_bucket}")
            entries[entry.key] = tuple(entry.suggestions)
        return cls(entries)

    @classmethod
    def from_file(cls, path: Path) -> "SeedCatalog":
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SeedDataError(f"Cannot read seed file {path}: {e}") from e
        catalog = cls.from_entries(raw)
        logger.info(f"[SEEDS] Loaded {len(catalog)} seed entries from {path}")
        return catalog

    def lookup(self, origin: str, budget_bucket: int) -> list[SuggestionRecord] | None:
        suggestions = self._entries.get(SeedKey(origin, budget_bucket))
        return list(suggestions) if suggestions else None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
