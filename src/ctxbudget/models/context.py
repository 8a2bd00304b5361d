"""Context-window evaluation models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator


class Thresholds(BaseModel):
    """Fractions of the context window at which to warn and to compact."""

    model_config = ConfigDict(frozen=True)

    warn: float = 0.70
    compact: float = 0.80

    @model_validator(mode="after")
    def _check_order(self) -> Thresholds:
        for name, value in (("warn", self.warn), ("compact", self.compact)):
            if not 0 < value <= 1:
                raise ValueError(f"{name} threshold must be in (0, 1], got {value}")
        if self.warn > self.compact:
            raise ValueError(
                f"warn threshold ({self.warn}) must not exceed compact threshold ({self.compact})"
            )
        return self


class ContextUsage(BaseModel):
    """How much of a model's context window a message list occupies."""

    model_config = ConfigDict(frozen=True)

    used_tokens: int
    max_tokens: int
    usage_percent: int
    remaining_tokens: int
    should_warn: bool
    should_compact: bool
    is_over_limit: bool = False
