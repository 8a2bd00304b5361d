"""Human-readable rendering of usage and context state."""

from __future__ import annotations

import math
from datetime import UTC, datetime

from ctxbudget.models.context import ContextUsage
from ctxbudget.models.usage import SessionUsage


def format_tokens(tokens: int) -> str:
    """``999``, ``1.5K``, ``2.50M``."""
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.2f}M"
    if tokens >= 1_000:
        return f"{tokens / 1_000:.1f}K"
    return str(tokens)


def format_cost(cost: float) -> str:
    """Four decimals below one cent, two otherwise."""
    if cost < 0.01:
        return f"${cost:.4f}"
    return f"${cost:.2f}"


def usage_summary(usage: SessionUsage) -> str:
    """One-line status: total tokens and cost."""
    return f"{format_tokens(usage.total_tokens)} tokens · {format_cost(usage.estimated_cost)}"


def detailed_usage(usage: SessionUsage, now: datetime | None = None) -> str:
    """Multi-line breakdown of a session snapshot."""
    current = now or datetime.now(UTC)
    minutes = round((current - usage.start_time).total_seconds() / 60)
    lines = [
        f"Session Usage ({minutes} min):",
        f"  Input:  {format_tokens(usage.total_input_tokens)} tokens",
        f"  Output: {format_tokens(usage.total_output_tokens)} tokens",
        f"  Cache:  {format_tokens(usage.total_cache_read_tokens)} read, "
        f"{format_tokens(usage.total_cache_creation_tokens)} created",
        f"  Calls:  {usage.api_calls} API calls",
        f"  Cost:   {format_cost(usage.estimated_cost)}",
        f"  Model:  {usage.model}",
    ]
    return "\n".join(lines)


def context_usage_bar(usage: ContextUsage, width: int = 20) -> str:
    """Fill bar for the context window, e.g. ``🟡 [██████░░] 72%``."""
    filled = min(max(math.floor(usage.usage_percent / 100 * width + 0.5), 0), width)
    if usage.should_compact:
        color = "🔴"
    elif usage.should_warn:
        color = "🟡"
    else:
        color = "🟢"
    return f"{color} [{'█' * filled}{'░' * (width - filled)}] {usage.usage_percent}%"


def context_summary(usage: ContextUsage) -> str:
    """Bar plus a status hint for the status line."""
    if usage.is_over_limit:
        status = " (over context limit)"
    elif usage.should_compact:
        status = " (auto-compact recommended)"
    elif usage.should_warn:
        status = " (approaching limit)"
    else:
        status = ""
    return f"Context: {context_usage_bar(usage)}{status}"


def budget_recommendation(usage: ContextUsage) -> str | None:
    """Advice to show the user, or ``None`` when there is nothing to say."""
    if usage.should_compact:
        return "Consider starting a new conversation or using /compact"
    if usage.should_warn:
        return f"Context is {usage.usage_percent}% full. Consider compacting soon."
    return None


def would_exceed_budget(
    usage: ContextUsage, additional_tokens: int, safety_margin: float = 0.1
) -> bool:
    """True if adding ``additional_tokens`` would pass the limit minus a margin."""
    effective_limit = usage.max_tokens * (1 - safety_margin)
    return usage.used_tokens + additional_tokens > effective_limit
