"""
Tests for debtdesk.core.config and debtdesk.core.logging.
"""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from debtdesk.core.config import DEFAULT_MAX_UPLOAD_BYTES, Settings, get_settings, reset_settings
from debtdesk.core.logging import JSONFormatter, redact_sensitive


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.environment == "dev"
        assert settings.log_level == "INFO"
        assert settings.IMPORT_MAX_UPLOAD_BYTES == DEFAULT_MAX_UPLOAD_BYTES
        assert settings.IMPORT_ACCUMULATE_ROW_ERRORS is False
        assert not settings.is_production

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DEBTDESK_ENV", "prod")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("IMPORT_MAX_UPLOAD_BYTES", "2048")
        settings = Settings()
        assert settings.is_production
        assert settings.log_level == "DEBUG"
        assert settings.IMPORT_MAX_UPLOAD_BYTES == 2048

    def test_invalid_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("DEBTDESK_ENV", "qa")
        with pytest.raises(ValidationError):
            Settings()

    def test_cors_origins_parsed(self, monkeypatch):
        monkeypatch.setenv(
            "DEBTDESK_CORS_ORIGINS", "https://app.example.com/, http://localhost:5173 junk"
        )
        assert Settings().cors_allowed_origins == [
            "https://app.example.com",
            "http://localhost:5173",
        ]

    def test_cors_deny_all_by_default(self):
        assert Settings().cors_allowed_origins == []

    def test_get_settings_is_cached(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("DEBTDESK_ENV", "staging")
        assert get_settings() is first
        reset_settings()
        assert get_settings().environment == "staging"


class TestJSONFormatter:
    """Tests for structured log lines."""

    def _format(self, msg: str, **extra) -> dict:
        record = logging.LogRecord("debtdesk.test", logging.INFO, __file__, 1, msg, (), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return json.loads(JSONFormatter(service_name="debtdesk-api", env="dev").format(record))

    def test_core_fields(self):
        line = self._format("hello")
        assert line["msg"] == "hello"
        assert line["level"] == "INFO"
        assert line["service"] == "debtdesk-api"
        assert line["logger"] == "debtdesk.test"

    def test_extra_fields_included(self):
        line = self._format("done", rows_processed=3)
        assert line["rows_processed"] == 3

    def test_sensitive_keys_redacted(self):
        assert self._format("x", api_key="abc")["api_key"] == "[REDACTED]"

    def test_sensitive_values_redacted(self):
        assert redact_sensitive("ssn 123-45-6789") == "ssn [REDACTED]"
        assert redact_sensitive(42) == 42
