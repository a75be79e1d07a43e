"""
Tests for logging setup and sensitive data filtering.
"""

import logging

from fitness_tracker.logging_setup import SensitiveDataFilter


def _record(msg: str, args: tuple = ()) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_sensitive_data_filter_openai_key():
    """OpenAI API keys are filtered from log messages."""
    record = _record("https://api.openai.com/v1/chat/completions key sk-1234567890abcdef")

    assert SensitiveDataFilter().filter(record) is True
    assert "sk-1234567890abcdef" not in record.msg
    assert "<REDACTED>" in record.msg


def test_sensitive_data_filter_bearer_token_in_args():
    """Bearer tokens passed as format arguments are redacted too."""
    record = _record("Request headers: %s", ("Authorization: Bearer abc.def-123",))

    SensitiveDataFilter().filter(record)

    assert record.getMessage() == "Request headers: Authorization: Bearer <REDACTED>"


def test_sensitive_data_filter_database_password():
    """Database passwords in connection URLs are redacted."""
    record = _record("Connecting to postgresql+asyncpg://fit:s3cret@db:5432/fit")

    SensitiveDataFilter().filter(record)

    assert "s3cret" not in record.msg
    assert "postgresql+asyncpg://fit:<REDACTED>@db:5432/fit" in record.msg


def test_sensitive_data_filter_normal_message():
    """Normal messages pass through unchanged."""
    record = _record("This is a normal log message")
    original_msg = record.msg

    assert SensitiveDataFilter().filter(record) is True
    assert record.msg == original_msg
