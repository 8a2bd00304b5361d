"""Deterministic digest of evicted conversation history.

No model is called. The digest lists what the earlier conversation was about,
which tools ran and which files they touched.
"""

from __future__ import annotations

from collections.abc import Sequence

from ctxbudget.models.messages import Message, TextBlock, ToolUseBlock

SUMMARY_HEADER = "[Previous conversation summary]"
MIN_TOPIC_CHARS = 20
MAX_TOPIC_CHARS = 100
MAX_TOPICS = 5
MAX_FILES = 10
PATH_KEYS = ("file_path", "path")


def summarize(messages: Sequence[Message]) -> str:
    """Render a fixed-format digest of ``messages``.

    Sections with nothing to report are omitted; the header and the original
    message count are always present.
    """
    topics: list[str] = []
    tools: dict[str, None] = {}
    files: dict[str, None] = {}

    for message in messages:
        if message.role == "user":
            chars = sum(
                len(block.text) for block in message.content if isinstance(block, TextBlock)
            )
            if chars > MIN_TOPIC_CHARS:
                topics.append(message.text.split("\n", 1)[0][:MAX_TOPIC_CHARS])
            continue
        for block in message.content:
            if not isinstance(block, ToolUseBlock):
                continue
            if block.name:
                tools.setdefault(block.name)
            for key in PATH_KEYS:
                path = block.input.get(key)
                if path:
                    files.setdefault(str(path))

    parts = [SUMMARY_HEADER]
    if topics:
        parts.append(f"Topics discussed: {'; '.join(topics[:MAX_TOPICS])}")
    if tools:
        parts.append(f"Tools used: {', '.join(tools)}")
    if files:
        parts.append(f"Files modified: {', '.join(list(files)[:MAX_FILES])}")
    parts.append(f"Original messages: {len(messages)}")
    return "\n".join(parts)
