"""
Test log sanitization.

Verifies that VoIPmonitor credentials and session identifiers are redacted
from log events before rendering.
"""

import io
import json
import logging

import structlog

from cdr_assistant.logging_config import (
    configure_logging,
    get_correlation_id,
    sanitize_secrets,
    set_correlation_id,
)


class TestLogSanitization:
    """Tests for secret sanitization processor."""

    def test_redact_password(self):
        """Should redact the service account password."""
        event_dict = {
            'event': 'Login attempt',
            'password': 'SuperSecret123!',
        }
        result = sanitize_secrets(None, None, event_dict)

        assert result['password'] == 'Su***REDACTED***'
        assert result['event'] == 'Login attempt'

    def test_redact_session_id(self):
        """Should redact the SID returned by the login endpoint."""
        event_dict = {'SID': 'a1b2c3d4e5f6', 'session_id': 'abcdef'}
        result = sanitize_secrets(None, None, event_dict)

        assert result['SID'] == 'a1***REDACTED***'
        assert result['session_id'] == 'ab***REDACTED***'

    def test_redact_cookie(self):
        """Should redact cookie headers."""
        event_dict = {'cookie': 'PHPSESSID=a1b2c3d4e5f6'}
        result = sanitize_secrets(None, None, event_dict)

        assert result['cookie'].startswith('PH***REDACTED***')
        assert 'a1b2c3' not in result['cookie']

    def test_suffix_match(self):
        """Keys ending in a sensitive name are redacted too."""
        event_dict = {'voipmonitor_password': 'secret-value', 'upstream_cookie': 'x=1'}
        result = sanitize_secrets(None, None, event_dict)

        assert 'REDACTED' in result['voipmonitor_password']
        assert 'REDACTED' in result['upstream_cookie']

    def test_case_insensitive_matching(self):
        """Should match keys case-insensitively."""
        event_dict = {
            'Password': 'secret',
            'COOKIE': 'PHPSESSID=1',
            'Access-Token': 'token123',
        }
        result = sanitize_secrets(None, None, event_dict)

        assert 'REDACTED' in result['Password']
        assert 'REDACTED' in result['COOKIE']
        assert 'REDACTED' in result['Access-Token']

    def test_nested_request_body(self):
        """Should sanitize the getVoipCalls body nested in a log field."""
        event_dict = {
            'event': 'API call',
            'body': {
                'task': 'getVoipCalls',
                'user': 'support-ro',
                'password': 's3cret-pass',
                'params': {'startTime': '2024-01-01', 'caller': '+15550001'},
            },
        }
        result = sanitize_secrets(None, None, event_dict)

        assert result['body']['password'] == 's3***REDACTED***'
        assert result['body']['user'] == 'support-ro'
        assert result['body']['params'] == {'startTime': '2024-01-01', 'caller': '+15550001'}

    def test_dicts_inside_lists(self):
        """Should sanitize dicts inside lists."""
        event_dict = {'attempts': [{'pass': 'hunter22'}, {'pass': None}], 'ids': [1, 2]}
        result = sanitize_secrets(None, None, event_dict)

        assert result['attempts'][0]['pass'] == 'hu***REDACTED***'
        assert result['attempts'][1]['pass'] is None
        assert result['ids'] == [1, 2]

    def test_short_and_empty_values(self):
        """Short values are fully masked; empty values stay empty."""
        event_dict = {'password': 'abc', 'secret': '', 'token': 12345, 'auth': True}
        result = sanitize_secrets(None, None, event_dict)

        assert result['password'] == '***REDACTED***'
        assert result['secret'] == ''
        assert result['token'] == '***REDACTED***'
        assert result['auth'] is True

    def test_preserve_non_sensitive_fields(self):
        """Should not touch ordinary fields."""
        event_dict = {
            'event': 'Call search completed',
            'request_id': 'req-1',
            'cdr_id': '42',
            'caller': '+15550001',
            'returned': 3,
            'upstream_total': 5,
        }
        result = sanitize_secrets(None, None, event_dict)

        assert result == event_dict


class TestConfigureLogging:
    """End-to-end rendering through the stdlib handler."""

    def teardown_method(self):
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_json_output_is_sanitized(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        stream = io.StringIO()
        configure_logging("INFO", "json", stream=stream)

        set_correlation_id("corr-123")
        structlog.get_logger("cdr_assistant.test").info("Login", username="support-ro", password="s3cret-pass")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "Login"
        assert record["password"] == "s3***REDACTED***"
        assert record["username"] == "support-ro"
        assert record["correlation_id"] == "corr-123"
        assert record["service"] == "cdr-assistant"
        assert record["level"] == "info"

    def test_level_filtering(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        stream = io.StringIO()
        configure_logging("WARNING", "json", stream=stream)

        structlog.get_logger("cdr_assistant.test").info("hidden")

        assert stream.getvalue() == ""

    def test_env_level_overrides_argument(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        stream = io.StringIO()
        configure_logging("DEBUG", "json", stream=stream)

        assert logging.getLogger().level == logging.ERROR


def test_set_correlation_id_generates_value():
    value = set_correlation_id()

    assert value
    assert get_correlation_id() == value
