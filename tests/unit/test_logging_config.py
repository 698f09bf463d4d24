"""Unit tests for logging and settings."""

import json
import logging
import sys

from notevault.config import Settings
from notevault.logging_config import JSONFormatter, RequestIDFilter, request_id_var


def _record(message: str = "Job %s done") -> logging.LogRecord:
    return logging.LogRecord("notevault.worker", logging.INFO, __file__, 1, message, ("abc",), None)


def test_request_id_filter_uses_context() -> None:
    token = request_id_var.set("req-42")
    try:
        record = _record()
        assert RequestIDFilter().filter(record) is True
        assert record.request_id == "req-42"
    finally:
        request_id_var.reset(token)


def test_request_id_defaults_to_dash() -> None:
    record = _record()
    RequestIDFilter().filter(record)
    assert record.request_id == "-"


def test_json_formatter() -> None:
    record = _record()
    RequestIDFilter().filter(record)
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Job abc done"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "notevault.worker"
    assert payload["request_id"] == "-"


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("bad pdf")
    except ValueError:
        record = logging.LogRecord(
            "notevault", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )
    payload = json.loads(JSONFormatter().format(record))
    assert payload["error"] == "bad pdf"
    assert "ValueError" in payload["traceback"]


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "s3")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("JOB_MAX_ATTEMPTS", "7")
    settings = Settings(_env_file=None)
    assert settings.storage_backend == "s3"
    assert settings.cors_origin_list == ["https://a.example", "https://b.example"]
    assert settings.job_max_attempts == 7
    assert settings.max_upload_bytes == 20 * 1024 * 1024
