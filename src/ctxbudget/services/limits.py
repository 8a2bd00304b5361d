"""Context window sizes per model."""

from __future__ import annotations

from collections.abc import Mapping

from ctxbudget.services.cost import DEFAULT_KEY

CONTEXT_LIMITS: dict[str, int] = {
    "claude-opus-4-20250514": 200_000,
    "claude-sonnet-4-20250514": 200_000,
    "claude-sonnet-4-5-20250929": 200_000,
    "claude-3-5-haiku-20241022": 200_000,
    "gpt-5.2": 128_000,
    "gpt-4.1": 128_000,
    DEFAULT_KEY: 200_000,
}


class ContextLimits:
    """Model id -> context window size in tokens, with a ``default`` fallback."""

    def __init__(self, limits: Mapping[str, int] | None = None) -> None:
        table = dict(CONTEXT_LIMITS if limits is None else limits)
        if DEFAULT_KEY not in table:
            raise ValueError(f"context limit table must define a '{DEFAULT_KEY}' entry")
        bad = [model for model, limit in table.items() if limit <= 0]
        if bad:
            raise ValueError(f"context limits must be positive: {', '.join(sorted(bad))}")
        self._limits = table

    @classmethod
    def from_mapping(cls, raw: Mapping[str, int]) -> ContextLimits:
        return cls({model: int(limit) for model, limit in raw.items()})

    def limit_for(self, model: str) -> int:
        return self._limits.get(model, self._limits[DEFAULT_KEY])
