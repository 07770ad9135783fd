from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from app.config import AppConfig
from app.logger import JSONFormatter, StructuredLogger


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="registry.auth",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="User signed out: %s",
        args=("a@example.com",),
        exc_info=None,
    )
    record.event = "SIGN_OUT"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger_name"] == "registry.auth"
    assert entry["message"] == "User signed out: a@example.com"
    assert entry["extra"] == {"event": "SIGN_OUT"}


def test_structured_logger_writes_json_to_stream_and_file(tmp_path: Path) -> None:
    stream = io.StringIO()
    log_file = tmp_path / "logs" / "registry.log"
    log = StructuredLogger(name="tests.logger.file", stream=stream, log_file=str(log_file))

    log.info("Vaccination types available: %d", 3, extra={"event": "STATUS"})

    line = json.loads(stream.getvalue().strip())
    assert line["message"] == "Vaccination types available: 3"
    assert line["extra"]["event"] == "STATUS"
    assert "Vaccination types available: 3" in log_file.read_text(encoding="utf-8")


def test_empty_log_file_disables_file_handler() -> None:
    log = StructuredLogger(name="tests.logger.console", stream=io.StringIO(), log_file="")

    assert [type(h) for h in log.logger.handlers] == [logging.StreamHandler]


def test_credentials_in_extra_are_masked() -> None:
    stream = io.StringIO()
    log = StructuredLogger(name="tests.logger.redact", stream=stream, log_file="")

    log.info(
        "Token refreshed",
        extra={"event": "SIGN_IN", "access_token": "eyJhbGci", "password": "hunter2", "attempt": 2},
    )

    entry = json.loads(stream.getvalue().strip())
    assert entry["extra"]["access_token"] == "***"
    assert entry["extra"]["password"] == "***"
    assert entry["extra"]["attempt"] == 2
    assert "hunter2" not in stream.getvalue()


def test_from_config_applies_level_and_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> None:
    log_file = tmp_path / "registry.log"
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_FILE", str(log_file))

    log = StructuredLogger.from_config("tests.logger.config", AppConfig(_env_file=None))
    log.info("hidden")
    log.warning("Failed to load vaccination types: %s", "timeout")

    assert log.logger.level == logging.WARNING
    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["message"] for line in lines] == [
        "Failed to load vaccination types: timeout",
    ]
