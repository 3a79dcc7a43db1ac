"""Unit tests for logging setup and URL redaction."""

import logging

import pytest

from sinnaybot.logging_config import log_with_context, setup_logging
from sinnaybot.middleware.logging_middleware import redact_sensitive_data


def test_redacts_oauth_callback_params():
    url = "http://localhost:8080/spotify/callback?code=secret-code&state=abc123"

    redacted = redact_sensitive_data(url)

    assert "secret-code" not in redacted
    assert "abc123" not in redacted
    assert "code=***REDACTED***" in redacted
    assert "state=***REDACTED***" in redacted


def test_redacts_tokens_and_secrets():
    url = "https://id.twitch.tv/oauth2/token?client_secret=s3cr3t&access_token=tok&client_id=public"

    redacted = redact_sensitive_data(url)

    assert "s3cr3t" not in redacted
    assert "tok&" not in redacted
    assert "client_id=public" in redacted


def test_leaves_response_type_alone():
    url = "https://id.twitch.tv/oauth2/authorize?client_id=x&response_type=code"

    assert redact_sensitive_data(url) == url


def test_setup_logging_writes_json_file(tmp_path):
    root = setup_logging("DEBUG", log_dir=tmp_path)
    try:
        log_with_context(logging.getLogger("sinnaybot.test"), "info", "hello", event_type="unit_test")
        for handler in root.handlers:
            handler.flush()

        content = (tmp_path / "sinnaybot.log").read_text(encoding="utf-8")
        assert '"message": "hello"' in content
        assert '"event_type": "unit_test"' in content
    finally:
        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()


def test_setup_logging_rejects_unknown_level(tmp_path):
    with pytest.raises(ValueError, match="VERBOSE"):
        setup_logging("verbose", log_dir=tmp_path)
