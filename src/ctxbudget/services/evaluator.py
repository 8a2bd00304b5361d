"""Context window usage evaluation."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ctxbudget.models.context import ContextUsage, Thresholds
from ctxbudget.models.messages import Message
from ctxbudget.services.limits import ContextLimits
from ctxbudget.services.tokens import estimate_conversation_tokens

if TYPE_CHECKING:
    from ctxbudget.services.protocols import TokenCounter


class ContextEvaluator:
    """Computes how full a model's context window is for a message list.

    Results are advisory: ``remaining_tokens`` goes negative past the limit and
    ``is_over_limit`` flags it, but nothing is blocked here.
    """

    def __init__(
        self,
        limits: ContextLimits | None = None,
        counter: TokenCounter | None = None,
        thresholds: Thresholds | None = None,
    ) -> None:
        self.limits = limits or ContextLimits()
        self.counter = counter
        self.thresholds = thresholds or Thresholds()

    def evaluate(
        self,
        messages: Sequence[Message],
        model: str,
        thresholds: Thresholds | None = None,
    ) -> ContextUsage:
        """Evaluate ``messages`` against ``model``'s context window."""
        active = thresholds or self.thresholds
        used = estimate_conversation_tokens(messages, self.counter)
        max_tokens = self.limits.limit_for(model)
        # Round half up
        percent = math.floor(used / max_tokens * 100 + 0.5)
        return ContextUsage(
            used_tokens=used,
            max_tokens=max_tokens,
            usage_percent=percent,
            remaining_tokens=max_tokens - used,
            should_warn=percent / 100 >= active.warn,
            should_compact=percent / 100 >= active.compact,
            is_over_limit=used > max_tokens,
        )
