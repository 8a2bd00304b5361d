"""Load conversation transcripts into engine messages.

Two layouts are understood: Claude-style JSONL transcripts (one
``{"type": ..., "message": {...}}`` record per line) and a plain JSON array of
``{"role": ..., "content": ...}`` messages.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path

from ctxbudget.models.messages import (
    ContentBlock,
    Message,
    TextBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUseBlock,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ParsedMessage:
    """A message plus the metadata the transcript recorded alongside it.

    Claude transcripts write each content block of one API response on its own
    line; those lines share ``message_id`` and repeat the response's ``usage``.
    """

    message: Message
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""
    message_id: str = ""
    uuid: str = ""
    timestamp: str = ""


def parse_session_file(path: Path) -> Generator[ParsedMessage]:
    """Stream-parse a transcript file and yield its conversation messages."""
    with open(path, encoding="utf-8") as file:
        head = file.read(1)
        while head and head.isspace():
            head = file.read(1)
        file.seek(0)
        if head == "[":
            yield from _parse_json_array(file.read(), path)
            return

        for line_num, line in enumerate(file, 1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON at %s:%d", path, line_num)
                continue
            if not isinstance(raw, dict):
                continue

            match _as_str(raw.get("type")):
                case "user" | "assistant":
                    parsed = _parse_transcript_record(raw)
                case _:
                    # summary, system, progress and snapshot records carry no turn
                    continue
            if parsed is not None:
                yield parsed


def load_messages(path: Path) -> list[Message]:
    """Convenience wrapper returning only the messages."""
    return [parsed.message for parsed in parse_session_file(path)]


def _parse_json_array(text: str, path: Path) -> Generator[ParsedMessage]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Invalid JSON message array: %s", path)
        return
    if not isinstance(payload, list):
        return
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        parsed = _parse_message_dict(raw)
        if parsed is not None:
            yield parsed


def _parse_transcript_record(raw: dict[str, object]) -> ParsedMessage | None:
    msg = raw.get("message")
    if not isinstance(msg, dict):
        return None
    parsed = _parse_message_dict(msg)
    if parsed is None:
        return None
    parsed.uuid = _as_str(raw.get("uuid"))
    parsed.timestamp = _as_str(raw.get("timestamp"))
    return parsed


def _parse_message_dict(msg: dict[str, object]) -> ParsedMessage | None:
    role = _as_str(msg.get("role"))
    if role not in {"user", "assistant"}:
        return None

    usage_raw = msg.get("usage")
    usage_dict = usage_raw if isinstance(usage_raw, dict) else {}
    usage = TokenUsage(
        input_tokens=_int(usage_dict.get("input_tokens", 0)),
        output_tokens=_int(usage_dict.get("output_tokens", 0)),
        cache_read_tokens=_int(usage_dict.get("cache_read_input_tokens", 0)),
        cache_creation_tokens=_int(usage_dict.get("cache_creation_input_tokens", 0)),
    )

    raw_content = msg.get("content", [])
    blocks: list[ContentBlock] = []
    if isinstance(raw_content, str):
        blocks.append(TextBlock(text=raw_content))
    elif isinstance(raw_content, list):
        for block in raw_content:
            if isinstance(block, str):
                blocks.append(TextBlock(text=block))
            elif isinstance(block, dict):
                parsed_block = _parse_content_block(block)
                if parsed_block is not None:
                    blocks.append(parsed_block)

    return ParsedMessage(
        message=Message(role=role, content=tuple(blocks)),  # type: ignore[arg-type]
        usage=usage,
        model=_as_str(msg.get("model")),
        message_id=_as_str(msg.get("id")),
    )


def _parse_content_block(block: dict[str, object]) -> ContentBlock | None:
    match _as_str(block.get("type")):
        case "text":
            return TextBlock(text=_as_str(block.get("text")))
        case "tool_use":
            tool_input = block.get("input")
            return ToolUseBlock(
                id=_as_str(block.get("id")),
                name=_as_str(block.get("name")),
                input=tool_input if isinstance(tool_input, dict) else {},
            )
        case "tool_result":
            content = block.get("content", "")
            if not isinstance(content, str | list | dict):
                content = _as_str(content)
            return ToolResultBlock(
                tool_use_id=_as_str(block.get("tool_use_id")),
                content=content,
                is_error=bool(block.get("is_error", False)),
            )
        case _:
            # thinking, image and other block kinds do not occupy budget here
            return None


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _int(val: object) -> int:
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(val)
    if isinstance(val, str):
        try:
            return int(float(val))
        except ValueError:
            return 0
    return 0
