"""Tests for structured logging.

Verifies that:
- EG_LOG_FORMAT=json produces valid JSON log lines with required fields.
- EG_LOG_FORMAT=text (or unset) produces human-readable output.
- EG_LOG_LEVEL controls the effective log level.
- Request middleware attaches request_id, path, method, status_code, duration_ms.
- Auth denials reach the audit logger.
"""

from __future__ import annotations

import json
import logging
import sys

from enrollgate.logging_config import StructuredJsonFormatter, log_startup_info, setup_logging


def _record(msg: str, level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="enrollgate",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


# ---------------------------------------------------------------------------
# Unit tests — StructuredJsonFormatter
# ---------------------------------------------------------------------------


class TestStructuredJsonFormatter:
    def test_basic_log_record_is_valid_json(self):
        parsed = json.loads(StructuredJsonFormatter().format(_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["levelname"] == "INFO"
        assert "asctime" in parsed

    def test_structured_extras_appear_in_json(self):
        record = _record("request finished")
        record.request_id = "abc12345"
        record.path = "/enrollments"
        record.method = "GET"
        record.status_code = 403
        record.duration_ms = 1.5
        record.identity = "user1@abc.com"
        parsed = json.loads(StructuredJsonFormatter().format(record))
        assert parsed["request_id"] == "abc12345"
        assert parsed["path"] == "/enrollments"
        assert parsed["status_code"] == 403
        assert parsed["identity"] == "user1@abc.com"

    def test_traceback_appears_as_structured_field(self):
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()
        parsed = json.loads(
            StructuredJsonFormatter().format(_record("failed", logging.ERROR, exc_info))
        )
        assert isinstance(parsed["traceback"], list)
        assert "boom" in "".join(parsed["traceback"])
        assert "exc_info" not in parsed


# ---------------------------------------------------------------------------
# Unit tests — setup_logging
# ---------------------------------------------------------------------------


class TestSetupLogging:
    def test_json_mode_sets_json_formatter(self, monkeypatch):
        monkeypatch.setenv("EG_LOG_FORMAT", "json")
        setup_logging()
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredJsonFormatter)

    def test_default_mode_is_text(self, monkeypatch):
        monkeypatch.delenv("EG_LOG_FORMAT", raising=False)
        setup_logging()
        root = logging.getLogger()
        assert not isinstance(root.handlers[0].formatter, StructuredJsonFormatter)

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("EG_LOG_LEVEL", "WARNING")
        setup_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_log_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("EG_LOG_LEVEL", "NOTAVALIDLEVEL")
        setup_logging()
        assert logging.getLogger().level == logging.INFO


class TestLogStartupInfo:
    def test_startup_log_contains_required_fields(self, caplog):
        with caplog.at_level(logging.INFO, logger="enrollgate"):
            log_startup_info()
        rec = caplog.records[-1]
        assert "enrollgate started" in rec.message
        assert rec.version == "0.1.0"
        assert rec.jwt_secret_status == "configured"
        assert hasattr(rec, "token_ttl_seconds")

    def test_startup_log_dev_secret(self, monkeypatch, caplog):
        monkeypatch.delenv("EG_JWT_SECRET", raising=False)
        with caplog.at_level(logging.INFO, logger="enrollgate"):
            log_startup_info()
        assert caplog.records[-1].jwt_secret_status == "dev-default"

    def test_dev_secret_warning_logged_at_startup(self, monkeypatch, caplog):
        monkeypatch.delenv("EG_JWT_SECRET", raising=False)
        with caplog.at_level(logging.INFO, logger="enrollgate"):
            log_startup_info()
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "EG_JWT_SECRET" in warnings[0].getMessage()

    def test_no_warning_when_secret_configured(self, caplog):
        with caplog.at_level(logging.INFO, logger="enrollgate"):
            log_startup_info()
        assert not [r for r in caplog.records if r.levelno == logging.WARNING]


# ---------------------------------------------------------------------------
# Integration: request middleware and audit log
# ---------------------------------------------------------------------------


class TestRequestLogging:
    async def test_request_logs_structured_fields(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="enrollgate"):
            resp = await client.get("/health")
        assert resp.status_code == 200
        records = [
            r for r in caplog.records if hasattr(r, "request_id") and hasattr(r, "duration_ms")
        ]
        rec = records[-1]
        assert rec.path == "/health"
        assert rec.method == "GET"
        assert rec.status_code == 200
        assert len(rec.request_id) == 8

    async def test_forbidden_request_is_audited(self, client, student_headers, caplog):
        with caplog.at_level(logging.WARNING, logger="enrollgate.audit"):
            resp = await client.get("/users", headers=student_headers)
        assert resp.status_code == 403
        audit = [r for r in caplog.records if r.name == "enrollgate.audit"]
        assert audit
        assert audit[-1].reason == "role_mismatch"
        assert audit[-1].identity == "user1@abc.com"

    async def test_failed_login_is_audited(self, client, caplog):
        with caplog.at_level(logging.WARNING, logger="enrollgate.audit"):
            await client.post("/users/login", json={"username": "x", "password": "y"})
        assert any(getattr(r, "action", None) == "login_failure" for r in caplog.records)
