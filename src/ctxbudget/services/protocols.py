"""Protocol definitions for pluggable engine parts."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Protocol

from result import Result

from ctxbudget.models.messages import Message
from ctxbudget.models.usage import SessionUsage, UsageHistory


class TokenCounter(Protocol):
    """Turns text into a token count. Must be deterministic and monotonic."""

    def count(self, text: str) -> int: ...


class Summarizer(Protocol):
    """Renders evicted messages into a textual digest."""

    def __call__(self, messages: Sequence[Message]) -> str: ...


class HistoryStoreProtocol(Protocol):
    """Interface for persisted usage history."""

    def load(self) -> UsageHistory: ...

    def merge_session_into_history(
        self, session: SessionUsage, *, today: date | None = None
    ) -> Result[UsageHistory, str]: ...
