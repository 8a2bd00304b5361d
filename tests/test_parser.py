"""Tests for transcript parsing."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ctxbudget.data.parser import load_messages, parse_session_file
from ctxbudget.models.messages import TextBlock, ToolResultBlock, ToolUseBlock


class TestParseJsonl:
    def test_yields_only_conversation_turns(self, sample_session_path: Path) -> None:
        parsed = list(parse_session_file(sample_session_path))
        assert [p.message.role for p in parsed] == ["user", "assistant", "user", "assistant"]

    def test_invalid_line_logged(
        self, sample_session_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            list(parse_session_file(sample_session_path))
        assert "Invalid JSON" in caplog.text

    def test_string_content(self, sample_session_path: Path) -> None:
        first = next(iter(parse_session_file(sample_session_path)))
        assert first.uuid == "uuid-001"
        assert first.timestamp == "2026-01-15T10:00:00Z"
        assert first.message.text.startswith("Please help me fix a bug")

    def test_assistant_blocks_skip_thinking(self, sample_session_path: Path) -> None:
        assistant = list(parse_session_file(sample_session_path))[1]
        kinds = [type(block) for block in assistant.message.content]
        assert kinds == [TextBlock, ToolUseBlock]
        tool = assistant.message.content[1]
        assert isinstance(tool, ToolUseBlock)
        assert tool.name == "Edit"
        assert tool.id == "tool-001"
        assert tool.input["file_path"] == "/src/auth/login.py"

    def test_usage_and_model(self, sample_session_path: Path) -> None:
        assistant = list(parse_session_file(sample_session_path))[1]
        assert assistant.model == "claude-sonnet-4-5-20250929"
        assert assistant.usage.input_tokens == 100
        assert assistant.usage.output_tokens == 50
        assert assistant.usage.cache_read_tokens == 500
        assert assistant.usage.cache_creation_tokens == 200

    def test_tool_result(self, sample_session_path: Path) -> None:
        result_turn = list(parse_session_file(sample_session_path))[2]
        block = result_turn.message.content[0]
        assert isinstance(block, ToolResultBlock)
        assert block.tool_use_id == "tool-001"
        assert "has been updated" in str(block.content)

    def test_blank_and_non_object_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "odd.jsonl"
        path.write_text(
            '{"type": "progress"}\n\n[1, 2]\n"text"\n{"type": "user", "message": "not a dict"}\n'
            '{"type": "user", "message": {"role": "user", "content": "hi"}}\n',
            encoding="utf-8",
        )
        assert [m.text for m in load_messages(path)] == ["hi"]

    def test_stringly_usage_numbers(self, tmp_path: Path) -> None:
        path = tmp_path / "usage.jsonl"
        path.write_text(
            '{"type": "assistant", "message": {"role": "assistant", "content": [], '
            '"usage": {"input_tokens": "12", "output_tokens": 3.7, "cache_read_input_tokens": true}}}\n',
            encoding="utf-8",
        )
        (parsed,) = parse_session_file(path)
        assert parsed.usage.input_tokens == 12
        assert parsed.usage.output_tokens == 3
        assert parsed.usage.cache_read_tokens == 1


class TestParseJsonArray:
    def test_message_array(self, sample_messages_path: Path) -> None:
        messages = load_messages(sample_messages_path)
        assert [m.role for m in messages] == ["user", "assistant", "user"]
        tool = messages[1].content[1]
        assert isinstance(tool, ToolUseBlock)
        assert tool.input == {"command": "ls", "path": "/repo"}

    def test_structured_tool_result_kept(self, sample_messages_path: Path) -> None:
        block = load_messages(sample_messages_path)[2].content[0]
        assert isinstance(block, ToolResultBlock)
        assert block.content == [{"type": "text", "text": "README.md\nsrc"}]

    def test_invalid_array(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "broken.json"
        path.write_text("  [ {", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert load_messages(path) == []
        assert "Invalid JSON message array" in caplog.text


class TestMessageIds:
    def test_split_response_lines_share_id(self, tmp_path: Path) -> None:
        usage = {"input_tokens": 10, "output_tokens": 2}
        lines = [
            {
                "type": "assistant",
                "uuid": f"u{i}",
                "message": {
                    "id": "msg_1",
                    "role": "assistant",
                    "content": [{"type": "text", "text": f"block {i}"}],
                    "usage": usage,
                },
            }
            for i in range(2)
        ]
        path = tmp_path / "split.jsonl"
        path.write_text("\n".join(json.dumps(line) for line in lines), encoding="utf-8")

        parsed = list(parse_session_file(path))
        assert [p.message_id for p in parsed] == ["msg_1", "msg_1"]
        assert [p.uuid for p in parsed] == ["u0", "u1"]

    def test_missing_id_is_empty(self, sample_session_path: Path) -> None:
        assert all(p.message_id == "" for p in parse_session_file(sample_session_path))
