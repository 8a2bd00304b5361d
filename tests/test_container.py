"""Tests for the per-session service container."""

from __future__ import annotations

from datetime import date

from factories import sized_message, tool_result
from result import Err, Ok, Result

from ctxbudget.config import Config
from ctxbudget.models.messages import TokenUsage, ToolResultBlock
from ctxbudget.models.usage import SessionUsage, UsageHistory
from ctxbudget.services.container import ServiceContainer
from ctxbudget.services.cost import ModelPrice, PricingTable
from ctxbudget.services.limits import ContextLimits


class FakeHistory:
    def __init__(self) -> None:
        self.merged: list[SessionUsage] = []

    def load(self) -> UsageHistory:
        return UsageHistory()

    def merge_session_into_history(
        self, session: SessionUsage, *, today: date | None = None
    ) -> Result[UsageHistory, str]:
        self.merged.append(session)
        return Err("disk full")


def test_create_wires_config(test_config: Config) -> None:
    services = ServiceContainer.create(test_config)
    assert services.model == test_config.model
    assert services.compactor.keep_recent == 10
    assert services.evaluator.thresholds == test_config.thresholds
    assert services.compactor.evaluator is services.evaluator


def test_prepare_turn_truncates_and_compacts(test_config: Config) -> None:
    config = Config(data_dir=test_config.data_dir, keep_recent=2, max_tool_output_chars=200)
    services = ServiceContainer.create(config, limits=ContextLimits({"default": 1_000}))
    messages = [sized_message(300), sized_message(300), sized_message(300), tool_result("r" * 5000)]

    turn = services.prepare_turn(messages)

    assert turn.was_compacted is True
    assert len(turn.messages) == 4
    last = turn.messages[-1].content[0]
    assert isinstance(last, ToolResultBlock)
    assert "chars truncated" in str(last.content)
    assert turn.usage.used_tokens < 1_000
    assert turn.usage.should_compact is False


def test_prepare_turn_small_history_untouched(test_config: Config) -> None:
    services = ServiceContainer.create(test_config)
    messages = [sized_message(10), sized_message(10)]
    turn = services.prepare_turn(messages)
    assert turn.was_compacted is False
    assert turn.messages == messages
    assert turn.usage.used_tokens == 20


def test_record_clear_and_end_session(test_config: Config) -> None:
    pricing = PricingTable({"default": ModelPrice(input=3.0, output=15.0)})
    services = ServiceContainer.create(test_config, pricing=pricing)
    services.record_usage(TokenUsage(input_tokens=1_000_000))
    assert services.ledger.snapshot().estimated_cost == 3.0

    result = services.end_session()
    assert isinstance(result, Ok)
    assert result.ok_value.all_time.total_api_calls == 1
    assert test_config.usage_file.exists()

    services.clear()
    assert services.ledger.snapshot().api_calls == 0
    assert services.model == test_config.model


def test_end_session_error_is_returned(test_config: Config) -> None:
    history = FakeHistory()
    services = ServiceContainer.create(test_config, history=history)
    services.set_model("claude-opus-4-20250514")
    services.record_usage(TokenUsage(output_tokens=10))
    result = services.end_session()
    assert isinstance(result, Err)
    assert history.merged[0].api_calls == 1
    assert history.merged[0].model == "claude-opus-4-20250514"
