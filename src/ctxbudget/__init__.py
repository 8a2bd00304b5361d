"""Context window budgeting and compaction for LLM conversations."""

__version__ = "0.1.0"
