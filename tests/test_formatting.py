"""Tests for usage and context display helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from ctxbudget.models.context import ContextUsage
from ctxbudget.models.usage import SessionUsage
from ctxbudget.services.formatting import (
    budget_recommendation,
    context_summary,
    context_usage_bar,
    detailed_usage,
    format_cost,
    format_tokens,
    usage_summary,
    would_exceed_budget,
)

START = datetime(2026, 1, 15, 9, 0, tzinfo=UTC)


def context(percent: int, *, max_tokens: int = 1_000) -> ContextUsage:
    used = max_tokens * percent // 100
    return ContextUsage(
        used_tokens=used,
        max_tokens=max_tokens,
        usage_percent=percent,
        remaining_tokens=max_tokens - used,
        should_warn=percent >= 70,
        should_compact=percent >= 80,
        is_over_limit=used > max_tokens,
    )


@pytest.mark.parametrize(
    ("tokens", "expected"),
    [(0, "0"), (999, "999"), (1_000, "1.0K"), (1_530, "1.5K"), (2_500_000, "2.50M")],
)
def test_format_tokens(tokens: int, expected: str) -> None:
    assert format_tokens(tokens) == expected


@pytest.mark.parametrize(
    ("cost", "expected"),
    [(0.0, "$0.0000"), (0.00421, "$0.0042"), (0.01, "$0.01"), (12.346, "$12.35")],
)
def test_format_cost(cost: float, expected: str) -> None:
    assert format_cost(cost) == expected


def test_usage_summary_and_detail() -> None:
    snap = SessionUsage(
        total_input_tokens=1_200,
        total_output_tokens=300,
        total_cache_read_tokens=2_000,
        api_calls=4,
        estimated_cost=0.25,
        start_time=START,
        model="claude-sonnet-4-5-20250929",
    )
    assert usage_summary(snap) == "1.5K tokens · $0.25"

    detail = detailed_usage(snap, now=START + timedelta(minutes=12))
    assert detail.splitlines()[0] == "Session Usage (12 min):"
    assert "Cache:  2.0K read, 0 created" in detail
    assert "Calls:  4 API calls" in detail
    assert detail.endswith("Model:  claude-sonnet-4-5-20250929")


class TestContextBar:
    def test_green_bar(self) -> None:
        assert context_usage_bar(context(50), width=10) == "🟢 [█████░░░░░] 50%"

    def test_yellow_and_red(self) -> None:
        assert context_usage_bar(context(72)).startswith("🟡")
        assert context_usage_bar(context(85)).startswith("🔴")

    def test_overshoot_bar_stays_within_width(self) -> None:
        bar = context_usage_bar(context(150), width=10)
        assert "█" * 10 + "]" in bar
        assert bar.endswith("150%")

    def test_summary_status(self) -> None:
        assert context_summary(context(10)).endswith("10%")
        assert context_summary(context(72)).endswith("(approaching limit)")
        assert context_summary(context(85)).endswith("(auto-compact recommended)")
        assert context_summary(context(150)).endswith("(over context limit)")


class TestBudget:
    def test_recommendation(self) -> None:
        assert budget_recommendation(context(10)) is None
        assert budget_recommendation(context(75)) == "Context is 75% full. Consider compacting soon."
        assert "/compact" in (budget_recommendation(context(90)) or "")

    def test_would_exceed(self) -> None:
        usage = context(50)
        assert would_exceed_budget(usage, 400) is False
        assert would_exceed_budget(usage, 401) is True
        assert would_exceed_budget(usage, 401, safety_margin=0.0) is False
