"""Configuration for ctxbudget."""

from dataclasses import dataclass, field
from pathlib import Path

from ctxbudget.models.context import Thresholds
from ctxbudget.services.ledger import DEFAULT_MODEL


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".ctxbudget")
    model: str = DEFAULT_MODEL
    warn_threshold: float = 0.70
    compact_threshold: float = 0.80
    keep_recent: int = 10
    max_tool_output_chars: int = 2000

    @property
    def usage_file(self) -> Path:
        return self.data_dir / "usage.json"

    @property
    def thresholds(self) -> Thresholds:
        return Thresholds(warn=self.warn_threshold, compact=self.compact_threshold)
