"""Cost models."""

from __future__ import annotations

from pydantic import BaseModel


class CostBreakdown(BaseModel):
    """Cost of one batch of token usage, split by token kind."""

    model: str = ""
    input_cost: float = 0.0
    output_cost: float = 0.0
    cache_read_cost: float = 0.0
    cache_creation_cost: float = 0.0
    total_cost: float = 0.0
