"""Summarization-based compaction of conversation history.

The oldest messages are replaced by a two-message summary exchange: a user
marker followed by an assistant digest. The most recent ``keep_recent``
messages are kept as the very same objects. Compacting an already compacted
history folds the previous summary pair into the new digest.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ctxbudget.models.messages import Message
from ctxbudget.services.evaluator import ContextEvaluator
from ctxbudget.services.summarizer import SUMMARY_HEADER, summarize

if TYPE_CHECKING:
    from ctxbudget.models.context import ContextUsage
    from ctxbudget.services.protocols import Summarizer

logger = logging.getLogger(__name__)

COMPACTION_MARKER = "[Previous conversation compacted]"
DEFAULT_KEEP_RECENT = 10


@dataclass(frozen=True, slots=True)
class CompactionResult:
    """Outcome of a compaction attempt."""

    messages: list[Message]
    was_compacted: bool
    evicted_count: int = 0
    summary: str = ""
    usage: ContextUsage | None = None


class CompactionEngine:
    """Decides when to compact and produces the shortened history."""

    def __init__(
        self,
        evaluator: ContextEvaluator | None = None,
        summarizer: Summarizer = summarize,
        keep_recent: int = DEFAULT_KEEP_RECENT,
    ) -> None:
        self.evaluator = evaluator or ContextEvaluator()
        self._summarizer = summarizer
        self.keep_recent = keep_recent

    def compact(
        self, messages: list[Message], keep_recent: int | None = None
    ) -> CompactionResult:
        """Replace all but the last ``keep_recent`` messages with a summary pair.

        Lists no longer than ``keep_recent`` are returned untouched. A keep count
        of zero or less evicts the whole history.
        """
        keep = max(self.keep_recent if keep_recent is None else keep_recent, 0)
        if len(messages) <= keep:
            return CompactionResult(messages=messages, was_compacted=False)

        split = len(messages) - keep
        evicted = messages[:split]
        kept = messages[split:]
        digest = self._summarize(evicted)
        compacted = [
            Message.user(COMPACTION_MARKER),
            Message.assistant(digest),
            *kept,
        ]
        logger.info(
            "Compacted %d messages into summary (%d chars), keeping %d recent",
            len(evicted),
            len(digest),
            len(kept),
        )
        return CompactionResult(
            messages=compacted,
            was_compacted=True,
            evicted_count=len(evicted),
            summary=digest,
        )

    def auto_compact_if_needed(
        self,
        messages: list[Message],
        model: str,
        keep_recent: int | None = None,
    ) -> CompactionResult:
        """Compact only when the evaluator says the window is nearly full."""
        usage = self.evaluator.evaluate(messages, model)
        if not usage.should_compact:
            return CompactionResult(messages=messages, was_compacted=False, usage=usage)

        result = self.compact(messages, keep_recent)
        return CompactionResult(
            messages=result.messages,
            was_compacted=result.was_compacted,
            evicted_count=result.evicted_count,
            summary=result.summary,
            usage=usage,
        )

    def _summarize(self, evicted: Sequence[Message]) -> str:
        if self._summarizer is summarize:
            return summarize(evicted)
        try:
            digest = self._summarizer(evicted)
        except Exception:
            logger.warning("Custom summarizer failed, using built-in digest", exc_info=True)
            return summarize(evicted)
        if not digest.strip():
            return f"{SUMMARY_HEADER}\nOriginal messages: {len(evicted)}"
        return digest
