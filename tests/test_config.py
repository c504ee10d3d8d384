"""Tests for Settings validation and env switches."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from enrollgate.config import Settings, env_flag


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("EG_TOKEN_TTL_SECONDS", raising=False)
        s = Settings()
        assert s.token_ttl_seconds == 300
        assert s.redact_user_passwords is True
        assert s.protect_user_reset is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("EG_TOKEN_TTL_SECONDS", "60")
        monkeypatch.setenv("EG_LOG_FORMAT", "JSON")
        s = Settings()
        assert s.token_ttl_seconds == 60
        assert s.log_format == "json"

    def test_rejects_bad_log_format(self, monkeypatch):
        monkeypatch.setenv("EG_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            Settings()

    def test_rejects_zero_ttl(self, monkeypatch):
        monkeypatch.setenv("EG_TOKEN_TTL_SECONDS", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_cors_origin_list(self):
        s = Settings(cors_origins="http://a, http://b,")
        assert s.cors_origin_list == ["http://a", "http://b"]


class TestEnvFlag:
    @pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
    def test_truthy(self, monkeypatch, raw):
        monkeypatch.setenv("EG_TEST_FLAG", raw)
        assert env_flag("EG_TEST_FLAG", False) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_falsy(self, monkeypatch, raw):
        monkeypatch.setenv("EG_TEST_FLAG", raw)
        assert env_flag("EG_TEST_FLAG", True) is False

    def test_unset_or_unknown_uses_default(self, monkeypatch):
        monkeypatch.delenv("EG_TEST_FLAG", raising=False)
        assert env_flag("EG_TEST_FLAG", True) is True
        monkeypatch.setenv("EG_TEST_FLAG", "maybe")
        assert env_flag("EG_TEST_FLAG", False) is False
