"""
Tests for railsync logging utilities.
"""

import json
import logging

import pytest

from railsync.monitoring.logger import (
    ContextLogAdapter,
    JSONFormatter,
    RedactingHandler,
    get_logger,
    log_report_event,
    log_sync_decision,
)
from railsync.monitoring.redaction import PLACEHOLDER, SecretRedactor


def make_record(msg, level=logging.INFO, args=(), **extra):
    record = logging.LogRecord(
        name="railsync.testrail.client",
        level=level,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )
    record.created = 0.0
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class CollectingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestSecretRedactor:
    """Tests for credential redaction."""

    def test_known_secret_is_replaced(self):
        redactor = SecretRedactor()
        redactor.add_secret("s3cr3t-api-key")

        assert redactor.redact("auth failed for s3cr3t-api-key") == f"auth failed for {PLACEHOLDER}"

    def test_short_values_are_ignored(self):
        redactor = SecretRedactor()
        redactor.add_secrets(["", "ab"])
        assert redactor.secrets == set()

    def test_basic_auth_header(self):
        redacted = SecretRedactor().redact("Authorization: Basic cWFAYWNtZTprZXk=")
        assert redacted == f"Authorization: Basic {PLACEHOLDER}"

    def test_api_key_assignment(self):
        redacted = SecretRedactor().redact("testrail_api_key='abc123', project=7")
        assert "abc123" not in redacted
        assert "project=7" in redacted

    def test_redact_dict_is_recursive(self):
        redactor = SecretRedactor(secrets={"hunter22"})
        data = {"outer": {"inner": ["hunter22", 5]}, "plain": "ok"}

        assert redactor.redact_dict(data) == {
            "outer": {"inner": [PLACEHOLDER, 5]},
            "plain": "ok",
        }


class TestJSONFormatter:
    """Tests for the JSON formatter."""

    def test_includes_context_fields(self):
        record = make_record("Result submitted", case_id=42, run_id=101, event_type="submitted")

        data = json.loads(JSONFormatter().format(record))

        assert data["timestamp"] == "1970-01-01T00:00:00+00:00"
        assert data["level"] == "INFO"
        assert data["logger"] == "railsync.testrail.client"
        assert data["message"] == "Result submitted"
        assert data["case_id"] == 42
        assert data["run_id"] == 101
        assert data["event_type"] == "submitted"
        assert "suite_id" not in data

    def test_redacts_output(self):
        redactor = SecretRedactor(secrets={"s3cr3t-api-key"})
        record = make_record("request failed: %s", args=("key=s3cr3t-api-key",))

        output = JSONFormatter(redactor=redactor).format(record)

        assert "s3cr3t-api-key" not in output
        assert PLACEHOLDER in output


class TestRedactingHandler:
    """Tests for the redacting wrapper handler."""

    def test_wrapped_handler_receives_redacted_copy(self):
        inner = CollectingHandler()
        handler = RedactingHandler(inner, SecretRedactor(secrets={"s3cr3t-api-key"}))
        record = make_record("using %s", args=("s3cr3t-api-key",))

        handler.emit(record)

        assert inner.records[0].getMessage() == f"using {PLACEHOLDER}"
        assert record.getMessage() == "using s3cr3t-api-key"


class TestLoggerHelpers:
    """Tests for get_logger and the structured log helpers."""

    def test_get_logger_with_context(self):
        logger = get_logger("railsync.test", suite_id=3)
        assert isinstance(logger, ContextLogAdapter)
        assert get_logger("railsync.test").name == "railsync.test"

    def test_context_is_stamped(self, caplog):
        logger = get_logger("railsync.test", suite_id=3)
        with caplog.at_level(logging.INFO):
            logger.info("hello")
        assert caplog.records[0].suite_id == 3

    @pytest.mark.parametrize(
        "decision, kwargs, expected, level",
        [
            ("skip", {"case_id": 5}, "Skipping (already mapped to C5): Login", logging.INFO),
            ("create", {"case_id": 6}, "Created case C6: Login - add tag @C6 to the scenario", logging.INFO),
            ("fail", {"reason": "HTTP 400"}, "Failed to create case for 'Login': HTTP 400", logging.ERROR),
        ],
    )
    def test_log_sync_decision(self, caplog, decision, kwargs, expected, level):
        with caplog.at_level(logging.INFO, logger="railsync.sync"):
            log_sync_decision(decision, "Login", suite_id=1, **kwargs)

        record = caplog.records[0]
        assert record.getMessage() == expected
        assert record.levelno == level
        assert record.decision == decision
        assert record.suite_id == 1

    def test_log_report_event(self, caplog):
        with caplog.at_level(logging.INFO, logger="railsync.reporting"):
            log_report_event("submitted", "exec-1", scenario="Login", case_id=42, run_id=101,
                             data={"status": "PASSED"})

        record = caplog.records[0]
        assert record.getMessage() == "Result submitted: 'Login' (C42)"
        assert record.execution_id == "exec-1"
        assert record.status == "PASSED"
