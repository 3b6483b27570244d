"""Tests for JSONL logging."""

import json
import tempfile
from pathlib import Path

import pytest

from denoise.logging import JSONLLogger


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def logger(temp_log_dir: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=temp_log_dir)


def read_entries(path: Path) -> list[dict]:
    with open(path) as f:
        return [json.loads(line) for line in f]


def test_log_writes_jsonl(logger: JSONLLogger):
    """Test that logs are written in JSONL format."""
    logger.log("auth_success", user_id="u1")
    logger.log("sign_out", user_id="u2")

    entries = read_entries(logger.log_path)
    assert [e["event"] for e in entries] == ["auth_success", "sign_out"]
    assert entries[0]["user_id"] == "u1"
    assert "timestamp" in entries[0]


def test_none_fields_are_dropped(logger: JSONLLogger):
    logger.log("startup", user_id=None, error=None)

    entry = read_entries(logger.log_path)[0]
    assert entry.keys() == {"timestamp", "event"}


def test_unknown_event_rejected(logger: JSONLLogger):
    with pytest.raises(ValueError, match="chat_started"):
        logger.log("chat_started")
    assert not logger.log_path.exists()


def test_log_boundary(logger: JSONLLogger):
    logger.log_boundary("departure", previous_id="u1", current_id=None, generation=3)

    entry = read_entries(logger.log_path)[0]
    assert entry["event"] == "session_boundary"
    assert entry["transition"] == "departure"
    assert entry["user_id"] == "u1"
    assert entry["previous_id"] == "u1"
    assert entry["generation"] == 3
    assert "current_id" not in entry


def test_log_purge_success_and_failure(logger: JSONLLogger):
    logger.log_purge("u1", True, duration_ms=12.54, error="ignored")
    logger.log_purge("u1", False, duration_ms=3.0, error="HTTP 503")

    ok, failed = read_entries(logger.log_path)
    assert ok["event"] == "session_purge"
    assert ok["duration_ms"] == 12.5
    assert "error" not in ok
    assert failed["event"] == "session_purge_failed"
    assert failed["error"] == "HTTP 503"


def test_set_user_id(logger: JSONLLogger):
    """Test that set_user_id applies to subsequent logs."""
    logger.set_user_id("u42")
    logger.log("profile_saved")
    logger.log("sign_out", user_id="u7")
    logger.set_user_id(None)
    logger.log("startup")

    saved, signed_out, startup = read_entries(logger.log_path)
    assert saved["user_id"] == "u42"
    assert signed_out["user_id"] == "u7"
    assert "user_id" not in startup


def test_rotation_keeps_numbered_backups(temp_log_dir: Path):
    """Test log rotation when max size is exceeded."""
    logger = JSONLLogger(log_dir=temp_log_dir, max_size_mb=0.001, backup_count=2)  # ~1KB

    for _ in range(100):
        logger.log("profile_saved", user_id="u1", error="x" * 100)

    names = sorted(p.name for p in temp_log_dir.glob("events*.jsonl"))
    assert names == ["events.1.jsonl", "events.2.jsonl", "events.jsonl"]
    assert all(e["event"] == "profile_saved" for e in read_entries(temp_log_dir / "events.1.jsonl"))
