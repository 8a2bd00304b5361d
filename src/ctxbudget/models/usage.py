"""Session and historical usage models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionUsage(BaseModel):
    """Read-only snapshot of a session's running usage totals."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_creation_tokens: int = 0
    total_cache_read_tokens: int = 0
    api_calls: int = 0
    estimated_cost: float = 0.0
    start_time: datetime
    model: str = ""

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens


class DailyUsage(BaseModel):
    """Usage aggregated over every session merged on one day."""

    model_config = _CAMEL

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_creation_tokens: int = 0
    total_cache_read_tokens: int = 0
    api_calls: int = 0
    estimated_cost: float = 0.0
    start_time: datetime | None = None
    model: str = ""


class AllTimeUsage(BaseModel):
    """Lifetime totals across all merged sessions."""

    model_config = _CAMEL

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost: float = 0.0
    total_api_calls: int = 0


class UsageHistory(BaseModel):
    """Persisted usage history: per-day buckets plus all-time totals."""

    model_config = _CAMEL

    daily: dict[str, DailyUsage] = Field(default_factory=dict)
    all_time: AllTimeUsage = Field(default_factory=AllTimeUsage)
