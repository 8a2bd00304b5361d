"""Pydantic models for ctxbudget."""

from ctxbudget.models.analytics import CostBreakdown
from ctxbudget.models.context import ContextUsage, Thresholds
from ctxbudget.models.messages import (
    ContentBlock,
    Message,
    TextBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUseBlock,
)
from ctxbudget.models.usage import AllTimeUsage, DailyUsage, SessionUsage, UsageHistory

__all__ = [
    "AllTimeUsage",
    "ContentBlock",
    "ContextUsage",
    "CostBreakdown",
    "DailyUsage",
    "Message",
    "SessionUsage",
    "TextBlock",
    "Thresholds",
    "TokenUsage",
    "ToolResultBlock",
    "ToolUseBlock",
    "UsageHistory",
]
