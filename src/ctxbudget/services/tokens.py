"""Approximate token estimation for messages and conversations.

Counts are a character-ratio heuristic, not tokenizer output. The estimate is
deterministic and monotonic in text length, which is all the budget logic
built on top of it relies on.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, assert_never

from ctxbudget.models.messages import Message, TextBlock, ToolResultBlock, ToolUseBlock

if TYPE_CHECKING:
    from ctxbudget.services.protocols import TokenCounter

CHARS_PER_TOKEN = 4


class CharRatioTokenCounter:
    """Estimate tokens as ``ceil(len(text) / chars_per_token)``."""

    def __init__(self, chars_per_token: int = CHARS_PER_TOKEN) -> None:
        if chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        self.chars_per_token = chars_per_token

    def count(self, text: str) -> int:
        if not text:
            return 0
        return math.ceil(len(text) / self.chars_per_token)


DEFAULT_COUNTER = CharRatioTokenCounter()


def estimate_tokens(text: str | None, counter: TokenCounter | None = None) -> int:
    """Estimate tokens in a string. ``None`` and ``""`` count as zero."""
    if not text:
        return 0
    return (counter or DEFAULT_COUNTER).count(text)


def estimate_message_tokens(message: Message, counter: TokenCounter | None = None) -> int:
    """Sum the estimates of every content block in a message."""
    total = 0
    for block in message.content:
        match block:
            case TextBlock():
                total += estimate_tokens(block.text, counter)
            case ToolUseBlock():
                total += estimate_tokens(canonical_json(block.input), counter)
                total += estimate_tokens(block.name, counter)
            case ToolResultBlock():
                total += estimate_tokens(tool_result_text(block.content), counter)
            case _:
                assert_never(block)
    return total


def estimate_conversation_tokens(
    messages: Iterable[Message], counter: TokenCounter | None = None
) -> int:
    """Sum of per-message estimates."""
    return sum(estimate_message_tokens(message, counter) for message in messages)


def canonical_json(value: Any) -> str:
    """Serialize structured tool input to a stable compact form.

    Values that cannot be serialized yield ``""`` and so count as zero tokens.
    """
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return ""


def tool_result_text(content: object) -> str:
    """Extract the text carried by a tool result's content."""
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        text = content.get("text")
        return text if content.get("type") == "text" and isinstance(text, str) else ""
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                text = item.get("text")
                if isinstance(text, str):
                    parts.append(text)
        return "\n".join(parts)
    return ""
