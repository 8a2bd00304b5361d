"""JSON-file persistence for usage history.

The file is read, merged and rewritten wholesale on every merge. There is no
file locking: two processes merging at the same moment can lose an update.
"""

from __future__ import annotations

import contextlib
import logging
from datetime import UTC, date, datetime
from pathlib import Path

from pydantic import ValidationError
from result import Err, Ok, Result

from ctxbudget.models.usage import DailyUsage, SessionUsage, UsageHistory

logger = logging.getLogger(__name__)


def day_key(day: date) -> str:
    return day.isoformat()


class UsageHistoryStore:
    """Reads and merges session snapshots into the history file.

    Failures never reach the caller; they are logged through ``log``.
    """

    def __init__(self, path: Path, log: logging.Logger | None = None) -> None:
        self.path = path
        self._log = log or logger

    def load(self) -> UsageHistory:
        """Return the persisted history, or an empty one if it cannot be read."""
        match self._read():
            case Ok(history):
                return history
            case Err(reason):
                self._log.warning("Usage history unavailable, starting empty: %s", reason)
                return UsageHistory()

    def merge_session_into_history(
        self, session: SessionUsage, *, today: date | None = None
    ) -> Result[UsageHistory, str]:
        """Add a session's totals to today's bucket and to the all-time totals.

        Returns the merged history, or ``Err`` when it could not be written.
        An unreadable existing file is replaced by a fresh history.
        """
        history = self.load()
        key = day_key(today or datetime.now(UTC).date())

        bucket = history.daily.get(key)
        if bucket is None:
            bucket = DailyUsage(start_time=session.start_time, model=session.model)
            history.daily[key] = bucket
        bucket.total_input_tokens += session.total_input_tokens
        bucket.total_output_tokens += session.total_output_tokens
        bucket.total_cache_creation_tokens += session.total_cache_creation_tokens
        bucket.total_cache_read_tokens += session.total_cache_read_tokens
        bucket.api_calls += session.api_calls
        bucket.estimated_cost += session.estimated_cost
        bucket.model = session.model or bucket.model

        totals = history.all_time
        totals.total_input_tokens += session.total_input_tokens
        totals.total_output_tokens += session.total_output_tokens
        totals.total_cost += session.estimated_cost
        totals.total_api_calls += session.api_calls

        # The history file is replaced whole or not at all
        staging = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            staging.write_text(history.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
            staging.replace(self.path)
        except OSError as exc:
            self._log.warning("Failed writing usage history to %s", self.path, exc_info=True)
            with contextlib.suppress(OSError):
                staging.unlink(missing_ok=True)
            return Err(f"Could not save usage history: {exc}")
        return Ok(history)

    def _read(self) -> Result[UsageHistory, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Ok(UsageHistory())
        except (OSError, UnicodeDecodeError) as exc:
            return Err(f"cannot read {self.path}: {exc}")
        try:
            return Ok(UsageHistory.model_validate_json(raw))
        except ValidationError as exc:
            return Err(f"corrupt history file {self.path}: {exc.error_count()} error(s)")
