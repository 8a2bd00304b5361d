"""Bounding oversized tool outputs."""

from __future__ import annotations

from collections.abc import Sequence
from typing import assert_never

from ctxbudget.models.messages import ContentBlock, Message, TextBlock, ToolResultBlock, ToolUseBlock

DEFAULT_MAX_TOOL_OUTPUT = 2000
# Room kept in each half for the truncation marker
MARKER_RESERVE = 20


def truncate_tool_output(text: str, max_length: int = DEFAULT_MAX_TOOL_OUTPUT) -> str:
    """Keep the head and tail of ``text`` and mark how much was dropped.

    Text within ``max_length`` is returned unchanged. When ``max_length`` is too
    small to fit the marker, the text is cut to its first ``max_length``
    characters with no marker.
    """
    if len(text) <= max_length:
        return text

    half = max_length // 2 - MARKER_RESERVE
    if half < 0:
        return text[: max(max_length, 0)]

    omitted = len(text) - max_length
    return f"{text[:half]}\n\n... [{omitted} chars truncated] ...\n\n{text[len(text) - half :]}"


def _optimize_block(block: ContentBlock, max_length: int) -> ContentBlock:
    match block:
        case ToolResultBlock():
            if not isinstance(block.content, str):
                return block
            truncated = truncate_tool_output(block.content, max_length)
            if truncated == block.content:
                return block
            return block.model_copy(update={"content": truncated})
        case TextBlock() | ToolUseBlock():
            return block
        case _:
            assert_never(block)


def optimize_messages(
    messages: Sequence[Message], max_length: int = DEFAULT_MAX_TOOL_OUTPUT
) -> list[Message]:
    """Truncate every string tool result; everything else is passed through as-is."""
    optimized: list[Message] = []
    for message in messages:
        blocks = tuple(_optimize_block(block, max_length) for block in message.content)
        if all(new is old for new, old in zip(blocks, message.content, strict=True)):
            optimized.append(message)
        else:
            optimized.append(message.model_copy(update={"content": blocks}))
    return optimized
