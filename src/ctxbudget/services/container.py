"""Session container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from result import Result

from ctxbudget.data.history_store import UsageHistoryStore
from ctxbudget.models.context import ContextUsage
from ctxbudget.models.messages import Message, TokenUsage
from ctxbudget.models.usage import UsageHistory
from ctxbudget.services.compaction import CompactionEngine
from ctxbudget.services.cost import PricingTable
from ctxbudget.services.evaluator import ContextEvaluator
from ctxbudget.services.ledger import UsageLedger
from ctxbudget.services.limits import ContextLimits
from ctxbudget.services.truncation import optimize_messages

if TYPE_CHECKING:
    from ctxbudget.config import Config
    from ctxbudget.services.protocols import HistoryStoreProtocol, TokenCounter


@dataclass(frozen=True, slots=True)
class PreparedTurn:
    """Messages to send for the next model call and the state they were judged by."""

    messages: list[Message]
    usage: ContextUsage
    was_compacted: bool


@dataclass
class ServiceContainer:
    """Everything one conversation session needs. Built once per session."""

    config: Config
    ledger: UsageLedger
    evaluator: ContextEvaluator
    compactor: CompactionEngine
    history: HistoryStoreProtocol

    @classmethod
    def create(
        cls,
        config: Config,
        *,
        pricing: PricingTable | None = None,
        limits: ContextLimits | None = None,
        counter: TokenCounter | None = None,
        history: HistoryStoreProtocol | None = None,
    ) -> ServiceContainer:
        """Factory that wires all dependencies."""
        ledger = UsageLedger(model=config.model, pricing=pricing)
        evaluator = ContextEvaluator(limits=limits, counter=counter, thresholds=config.thresholds)
        compactor = CompactionEngine(evaluator, keep_recent=config.keep_recent)
        return cls(
            config=config,
            ledger=ledger,
            evaluator=evaluator,
            compactor=compactor,
            history=history or UsageHistoryStore(config.usage_file),
        )

    @property
    def model(self) -> str:
        return self.ledger.model

    def set_model(self, model: str) -> None:
        self.ledger.set_model(model)

    def prepare_turn(self, messages: list[Message]) -> PreparedTurn:
        """Bound tool outputs, then compact if the window is nearly full."""
        optimized = optimize_messages(messages, self.config.max_tool_output_chars)
        result = self.compactor.auto_compact_if_needed(optimized, self.model)
        usage = result.usage
        if result.was_compacted or usage is None:
            usage = self.evaluator.evaluate(result.messages, self.model)
        return PreparedTurn(
            messages=result.messages,
            usage=usage,
            was_compacted=result.was_compacted,
        )

    def record_usage(self, usage: TokenUsage) -> float:
        """Feed the provider's reported usage into the ledger."""
        return self.ledger.track(usage)

    def clear(self) -> None:
        """Start the session's accounting over, as on ``/clear``."""
        self.ledger.reset()

    def end_session(self) -> Result[UsageHistory, str]:
        """Merge this session's totals into the persisted history."""
        return self.history.merge_session_into_history(self.ledger.snapshot())
