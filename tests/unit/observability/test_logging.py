"""Tests for structured logging."""

import json
from io import StringIO

import structlog

from threadline.observability.logging import (
    get_logger,
    redact_sensitive,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        logger = get_logger("test")
        # Should not raise
        logger.info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        logger = get_logger("test")
        logger.debug("test_message")

    def test_setup_with_pii_redaction(self) -> None:
        """Should configure PII redaction when enabled."""
        setup_logging(level="INFO", format="json", redact_pii=True)
        logger = get_logger("test")
        logger.info("test_message", email="user@example.com")


class TestRedactSensitive:
    """Tests for the redaction processor."""

    def test_redacts_email_by_key(self) -> None:
        """Identity e-mails never reach the log output."""
        event_dict = {"email": "a@x.com", "thread_id": "thread_1"}
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert result["email"] == "[REDACTED]"
        assert result["thread_id"] == "thread_1"

    def test_redacts_conversation_text(self) -> None:
        """Message bodies are treated as sensitive."""
        event_dict = {"user_message": "my card number", "assistant_message": "ok"}
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert result["user_message"] == "[REDACTED]"
        assert result["assistant_message"] == "[REDACTED]"

    def test_redacts_credentials_by_key(self) -> None:
        event_dict = {"api_key": "sk-123", "dsn": "postgresql://u:p@h/db"}
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert result["api_key"] == "[REDACTED]"
        assert result["dsn"] == "[REDACTED]"

    def test_redacts_email_pattern_in_string_value(self) -> None:
        event_dict = {"error": "no session for user@example.com"}
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert "user@example.com" not in result["error"]
        assert "[EMAIL]" in result["error"]

    def test_redacts_bearer_token_in_string_value(self) -> None:
        event_dict = {"error": "rejected header Authorization: Bearer sk-abc.def"}
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert "sk-abc.def" not in result["error"]

    def test_handles_nested_dicts_and_lists(self) -> None:
        event_dict = {
            "user": {"email": "user@example.com", "name": "John"},
            "errors": ["from a@x.com", 3],
        }
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert result["user"]["email"] == "[REDACTED]"
        assert result["user"]["name"] == "John"
        assert result["errors"] == ["from [EMAIL]", 3]

    def test_preserves_non_pii_data(self) -> None:
        event_dict = {
            "event": "run_finished",
            "attempts": 3,
            "status": "completed",
        }
        result = redact_sensitive(None, "info", event_dict)  # type: ignore
        assert result == event_dict


class TestJSONLogging:
    """Tests for JSON log output format."""

    def test_redacted_json_output(self) -> None:
        """Should produce valid JSON with context and without e-mails."""
        output = StringIO()
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                redact_sensitive,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(0),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(output),
            cache_logger_on_first_use=False,
        )

        structlog.contextvars.bind_contextvars(request_id="req-1")
        try:
            structlog.get_logger("test").info("chat_turn_completed", email="a@x.com")
        finally:
            structlog.contextvars.clear_contextvars()

        parsed = json.loads(output.getvalue().strip())
        assert parsed["event"] == "chat_turn_completed"
        assert parsed["request_id"] == "req-1"
        assert parsed["email"] == "[REDACTED]"
