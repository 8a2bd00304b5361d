"""Shared fixtures for ctxbudget tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from factories import FakeClock

from ctxbudget.config import Config

DATA_ROOT = Path(__file__).parent / "data"
SAMPLE_SESSION_PATH = DATA_ROOT / "sample_session.jsonl"
SAMPLE_MESSAGES_PATH = DATA_ROOT / "sample_messages.json"


@pytest.fixture
def sample_session_path() -> Path:
    """Claude-style JSONL transcript."""
    return SAMPLE_SESSION_PATH


@pytest.fixture
def sample_messages_path() -> Path:
    """Plain JSON array of messages."""
    return SAMPLE_MESSAGES_PATH


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config whose history lives in a temporary directory."""
    return Config(data_dir=tmp_path / "ctxbudget")
