"""JSONL event log for identity and session activity.

One JSON object per line, appended to ``events.jsonl``. When the file
grows past ``max_size_mb`` it is shifted to ``events.1.jsonl`` (older
backups move up, the oldest beyond ``backup_count`` is dropped).
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Events written by this package
EVENTS = frozenset(
    {
        "startup",
        "auth_success",
        "auth_failed",
        "sign_out",
        "profile_reconciled",
        "profile_saved",
        "profile_save_failed",
        "session_boundary",
        "session_purge",
        "session_purge_failed",
        "stale_result_dropped",
        "error",
    }
)


class JSONLLogger:
    """Appends structured events for the signed-in user to a JSONL file."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        max_size_mb: float = 10.0,
        backup_count: int = 3,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".denoise" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.backup_count = backup_count
        self._user_id: str | None = None

    @property
    def log_path(self) -> Path:
        return self.log_dir / "events.jsonl"

    def _backup_path(self, index: int) -> Path:
        return self.log_dir / f"events.{index}.jsonl"

    def set_user_id(self, user_id: str | None) -> None:
        """Attribute later events without an explicit user to this user."""
        self._user_id = user_id

    def _rotate(self) -> None:
        if not self.log_path.exists() or self.log_path.stat().st_size < self.max_size_bytes:
            return

        self._backup_path(self.backup_count).unlink(missing_ok=True)
        for index in range(self.backup_count - 1, 0, -1):
            if self._backup_path(index).exists():
                self._backup_path(index).rename(self._backup_path(index + 1))
        self.log_path.rename(self._backup_path(1))

    def log(self, event: str, *, user_id: str | None = None, **fields: Any) -> None:
        """Append one event. Fields that are None are left out."""
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")

        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "user_id": user_id or self._user_id,
        }
        record.update(fields)

        self._rotate()
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps({k: v for k, v in record.items() if v is not None}) + "\n")

    def log_boundary(
        self,
        transition: str,
        *,
        previous_id: str | None,
        current_id: str | None,
        generation: int,
    ) -> None:
        self.log(
            "session_boundary",
            user_id=current_id or previous_id,
            transition=transition,
            previous_id=previous_id,
            current_id=current_id,
            generation=generation,
        )

    def log_purge(
        self,
        user_id: str,
        success: bool,
        *,
        duration_ms: float,
        error: str | None = None,
    ) -> None:
        self.log(
            "session_purge" if success else "session_purge_failed",
            user_id=user_id,
            duration_ms=round(duration_ms, 1),
            error=None if success else error,
        )


_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Return the process-wide event log, creating it with defaults."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
