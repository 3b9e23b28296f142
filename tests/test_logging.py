"""Tests for logging configuration."""

import json
import logging

from log_manager.logging_config import ConsoleFormatter, JSONFormatter, setup_logging


def _record(msg: str = "Test message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_basic_format(self):
        """Test basic JSON log format."""
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data

    def test_request_fields(self):
        """Test request middleware fields are included."""
        record = _record("http_request")
        record.method = "GET"
        record.path = "/api/audit/entries"
        record.status_code = 200
        record.duration_ms = 12.5

        data = json.loads(JSONFormatter().format(record))

        assert data["method"] == "GET"
        assert data["path"] == "/api/audit/entries"
        assert data["status_code"] == 200
        assert data["duration_ms"] == 12.5

    def test_audit_fields(self):
        """Test audit echo fields are included."""
        record = _record("[AUDIT:User] login-failed user=0 -> database", logging.WARNING)
        record.object_type = "User"
        record.event_type = "login-failed"
        record.severity = "alert"
        record.userid = 0

        data = json.loads(JSONFormatter().format(record))

        assert data["object_type"] == "User"
        assert data["severity"] == "alert"
        assert data["userid"] == 0

    def test_unrelated_attributes_left_out(self):
        record = _record()
        record.password = "hunter2"

        assert "password" not in json.loads(JSONFormatter().format(record))


class TestConsoleFormatter:
    """Tests for console log formatter."""

    def test_basic_format(self):
        """Test basic console format includes level and message."""
        output = ConsoleFormatter().format(_record())

        assert "INFO" in output
        assert "Test message" in output
        assert "test" in output

    def test_extra_fields_in_brackets(self):
        """Test extra fields appear in brackets."""
        record = _record("Request")
        record.method = "GET"
        record.path = "/health"

        output = ConsoleFormatter().format(record)

        assert "[GET /health" in output

    def test_audit_fields(self):
        record = _record("[AUDIT:Taxonomy] deleted user=3 -> file")
        record.object_type = "Taxonomy"
        record.event_type = "deleted"
        record.severity = "warning"
        record.userid = 3

        output = ConsoleFormatter().format(record)

        assert "Taxonomy/deleted" in output
        assert "severity=warning" in output
        assert "user=3" in output


class TestSetupLogging:
    """Tests for logging setup."""

    def test_setup_replaces_handlers(self):
        """Test setup_logging leaves exactly one root handler."""
        setup_logging(debug=True, json_logs=False)
        setup_logging(debug=True, json_logs=False)

        assert len(logging.getLogger().handlers) == 1

    def test_debug_mode_sets_debug_level(self):
        """Test debug mode sets DEBUG level."""
        setup_logging(debug=True, json_logs=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_json_logs_outside_debug(self):
        """Test production mode uses the JSON formatter."""
        setup_logging(debug=False, json_logs=True)
        root = logging.getLogger()

        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
