"""
Tests for SDK settings and error helpers.
"""

import pytest
from pydantic import ValidationError

from appgram.core.config import Settings
from appgram.core.errors import (
    DEFAULT_ERROR_MESSAGE,
    ErrorCode,
    get_error_message,
    http_error_code,
)
from appgram.schemas.result import ApiError


@pytest.mark.unit
class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("APPGRAM_API_URL", raising=False)
        monkeypatch.delenv("APPGRAM_PROJECT_ID", raising=False)

        settings = Settings(_env_file=None)

        assert settings.APPGRAM_API_URL == "https://api.appgram.dev"
        assert settings.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
        assert settings.FINGERPRINT_STORAGE_KEY == "appgram_fingerprint"
        assert settings.REQUEST_TIMEOUT_SECONDS is None
        assert settings.ENABLE_FINGERPRINTING is True
        assert settings.user_agent == "appgram-sdk/1.0"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APPGRAM_API_URL", "https://example.com/")
        monkeypatch.setenv("APPGRAM_ORG_SLUG", "acme")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.APPGRAM_API_URL == "https://example.com"
        assert settings.APPGRAM_ORG_SLUG == "acme"
        assert settings.REQUEST_TIMEOUT_SECONDS == 2.5

    def test_rejects_non_positive_upload_ceiling(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, MAX_UPLOAD_BYTES=0)


@pytest.mark.unit
class TestErrorHelpers:
    """Tests for error code and message helpers."""

    def test_http_error_code(self):
        assert http_error_code(409) == "HTTP_409"

    def test_error_code_values(self):
        assert ErrorCode.NETWORK_ERROR == "NETWORK_ERROR"
        assert ErrorCode.FILE_TOO_LARGE.value == "FILE_TOO_LARGE"

    @pytest.mark.parametrize(
        "error,expected",
        [
            ("Already voted", "Already voted"),
            ({"message": "Not found"}, "Not found"),
            ({"code": "X"}, "fallback"),
            (ValueError("boom"), "boom"),
            (ValueError(), "fallback"),
            (None, "fallback"),
            ("", "fallback"),
        ],
    )
    def test_get_error_message(self, error, expected):
        assert get_error_message(error, "fallback") == expected

    def test_get_error_message_from_api_error(self):
        error = ApiError(code="HTTP_409", message="Already voted", status_code=409)
        assert get_error_message(error) == "Already voted"

    def test_default_fallback(self):
        assert get_error_message(object()) == DEFAULT_ERROR_MESSAGE
