"""Unit tests for settings validation and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from outline_manager.logging_config import configure_logging
from outline_manager.settings import Settings


def test_settings_defaults():
    """Test default timeout and TLS behaviour."""
    config = Settings(_env_file=None)

    assert config.http_timeout == 5.0
    assert config.verify_tls is True
    assert config.cert_sha256 is None


def test_settings_from_environment(monkeypatch):
    """Test OUTLINE_ prefixed environment variables."""
    monkeypatch.setenv("OUTLINE_API_URL", "https://203.0.113.10:47353/secret/")
    monkeypatch.setenv("OUTLINE_HTTP_TIMEOUT", "2.5")

    config = Settings(_env_file=None)

    assert config.api_url == "https://203.0.113.10:47353/secret"
    assert config.http_timeout == 2.5


def test_settings_normalizes_fingerprint():
    """Test colon-separated lower-case fingerprints are normalised."""
    raw = ":".join(["ab"] * 32)

    config = Settings(_env_file=None, cert_sha256=raw)

    assert config.cert_sha256 == "AB" * 32


@pytest.mark.parametrize("value", ["abc", "ZZ" * 32, "AB" * 33])
def test_settings_rejects_bad_fingerprint(value):
    """Test that non-SHA-256 fingerprints are refused."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, cert_sha256=value)


def test_settings_rejects_bad_timeout():
    """Test that a non-positive timeout is refused."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, http_timeout=0)


def test_settings_log_level():
    """Test log level validation."""
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="verbose")


def test_configure_logging_json():
    """Test that logging is configured from settings."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(Settings(_env_file=None, log_level="WARNING", log_format="json"))

        assert root.level == logging.WARNING
        assert root.handlers[0].formatter._fmt.startswith('{"time"')
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
