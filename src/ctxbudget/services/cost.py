"""Model pricing table and cost estimation."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from ctxbudget.models.analytics import CostBreakdown
from ctxbudget.models.messages import TokenUsage

DEFAULT_KEY = "default"


class ModelPrice(BaseModel):
    """USD per million tokens. Cache rates are optional."""

    model_config = ConfigDict(frozen=True)

    input: float = Field(ge=0)
    output: float = Field(ge=0)
    cache_read: float | None = Field(default=None, ge=0)
    cache_creation: float | None = Field(default=None, ge=0)


# Prices per million tokens (USD)
MODEL_PRICING: dict[str, ModelPrice] = {
    "claude-opus-4-20250514": ModelPrice(input=15.0, output=75.0),
    "claude-sonnet-4-20250514": ModelPrice(input=3.0, output=15.0),
    "claude-sonnet-4-5-20250929": ModelPrice(input=3.0, output=15.0),
    "claude-3-5-haiku-20241022": ModelPrice(input=0.25, output=1.25),
    # Unknown models are priced at Sonnet level
    DEFAULT_KEY: ModelPrice(input=3.0, output=15.0),
}


class PricingTable:
    """Model id -> price, with a mandatory ``default`` fallback."""

    def __init__(self, prices: Mapping[str, ModelPrice] | None = None) -> None:
        table = dict(MODEL_PRICING if prices is None else prices)
        if DEFAULT_KEY not in table:
            raise ValueError(f"pricing table must define a '{DEFAULT_KEY}' entry")
        self._prices = table

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, float]]) -> PricingTable:
        """Build a table from plain dicts, e.g. loaded from a config file."""
        return cls({model: ModelPrice.model_validate(dict(entry)) for model, entry in raw.items()})

    def get_pricing(self, model: str) -> ModelPrice:
        """Get pricing for a model, falling back to default."""
        return self._prices.get(model, self._prices[DEFAULT_KEY])

    def __contains__(self, model: object) -> bool:
        return model in self._prices


def estimate_cost(
    model: str,
    usage: TokenUsage,
    table: PricingTable | None = None,
) -> CostBreakdown:
    """Estimate the cost of one batch of token usage.

    Cache tokens are only priced when the model's entry defines cache rates;
    otherwise they cost nothing.
    """
    pricing = (table or PricingTable()).get_pricing(model)
    input_cost = (max(usage.input_tokens, 0) / 1_000_000) * pricing.input
    output_cost = (max(usage.output_tokens, 0) / 1_000_000) * pricing.output
    cache_read_cost = 0.0
    if pricing.cache_read is not None:
        cache_read_cost = (max(usage.cache_read_tokens, 0) / 1_000_000) * pricing.cache_read
    cache_creation_cost = 0.0
    if pricing.cache_creation is not None:
        cache_creation_cost = (
            max(usage.cache_creation_tokens, 0) / 1_000_000
        ) * pricing.cache_creation

    return CostBreakdown(
        model=model,
        input_cost=input_cost,
        output_cost=output_cost,
        cache_read_cost=cache_read_cost,
        cache_creation_cost=cache_creation_cost,
        total_cost=input_cost + output_cost + cache_read_cost + cache_creation_cost,
    )
