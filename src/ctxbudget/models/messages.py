"""Conversation message models."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["user", "assistant"]


class TokenUsage(BaseModel):
    """Token usage reported by the provider for a single API call."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0


class TextBlock(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str = ""


class ToolUseBlock(BaseModel):
    """A tool invocation requested by the assistant."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: str = ""
    name: str = ""
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """The result of a tool invocation, sent back on a user turn."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str = ""
    content: str | list[Any] | dict[str, Any] = ""
    is_error: bool = False


ContentBlock = Annotated[
    TextBlock | ToolUseBlock | ToolResultBlock,
    Field(discriminator="type"),
]


class Message(BaseModel):
    """One conversation turn. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: tuple[ContentBlock, ...] = ()

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_string_content(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (TextBlock(text=value),)
        return value

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role="user", content=(TextBlock(text=text),))

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role="assistant", content=(TextBlock(text=text),))

    @property
    def text(self) -> str:
        """Text blocks joined by newlines; tool blocks are ignored."""
        return "\n".join(block.text for block in self.content if isinstance(block, TextBlock))
