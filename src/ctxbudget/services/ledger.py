"""Per-session usage ledger.

One ledger belongs to one conversation session and is passed to whatever
records usage. There is no locking: a multi-threaded embedder must serialize
calls itself.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from ctxbudget.models.messages import TokenUsage
from ctxbudget.models.usage import SessionUsage
from ctxbudget.services.cost import PricingTable, estimate_cost

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UsageLedger:
    """Running token and cost totals for a single session."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        pricing: PricingTable | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._pricing = pricing or PricingTable()
        self._clock = clock
        self._model = model
        self._zero()

    def _zero(self) -> None:
        self._input_tokens = 0
        self._output_tokens = 0
        self._cache_creation_tokens = 0
        self._cache_read_tokens = 0
        self._api_calls = 0
        self._estimated_cost = 0.0
        self._start_time = self._clock()

    @property
    def model(self) -> str:
        return self._model

    def set_model(self, model: str) -> None:
        """Price subsequent calls with ``model``. Past usage is not repriced."""
        self._model = model

    def track(self, usage: TokenUsage) -> float:
        """Add one completed call's usage. Returns the cost of that call.

        Negative counts are clamped to zero.
        """
        clamped = TokenUsage(
            input_tokens=max(usage.input_tokens, 0),
            output_tokens=max(usage.output_tokens, 0),
            cache_creation_tokens=max(usage.cache_creation_tokens, 0),
            cache_read_tokens=max(usage.cache_read_tokens, 0),
        )
        self._input_tokens += clamped.input_tokens
        self._output_tokens += clamped.output_tokens
        self._cache_creation_tokens += clamped.cache_creation_tokens
        self._cache_read_tokens += clamped.cache_read_tokens
        self._api_calls += 1

        cost = estimate_cost(self._model, clamped, self._pricing).total_cost
        self._estimated_cost += cost
        return cost

    def snapshot(self) -> SessionUsage:
        """Immutable copy of the current totals."""
        return SessionUsage(
            total_input_tokens=self._input_tokens,
            total_output_tokens=self._output_tokens,
            total_cache_creation_tokens=self._cache_creation_tokens,
            total_cache_read_tokens=self._cache_read_tokens,
            api_calls=self._api_calls,
            estimated_cost=self._estimated_cost,
            start_time=self._start_time,
            model=self._model,
        )

    def reset(self) -> None:
        """Zero every counter and restart the clock, keeping the model."""
        self._zero()

    def elapsed(self) -> timedelta:
        return self._clock() - self._start_time
