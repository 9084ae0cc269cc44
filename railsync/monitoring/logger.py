"""
Logging configuration and utilities for railsync.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler

from railsync.config.settings import Settings, get_settings
from railsync.monitoring.redaction import SecretRedactor

# Record attributes surfaced by the JSON formatter when present.
CONTEXT_FIELDS = (
    "decision",
    "event_type",
    "scenario",
    "execution_id",
    "suite_id",
    "case_id",
    "run_id",
    "source",
)

_redactor = SecretRedactor()


def get_redactor() -> SecretRedactor:
    """Return the process-wide redactor used by railsync handlers."""
    return _redactor


class JSONFormatter(logging.Formatter):
    """JSON log formatter with optional redaction."""

    def __init__(self, *args, redactor: Optional[SecretRedactor] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.redactor = redactor

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.redactor:
            log_data = self.redactor.redact_dict(log_data)

        return json.dumps(log_data, default=str)


class RedactingHandler(logging.Handler):
    """Log handler that redacts messages before passing to wrapped handler."""

    def __init__(self, handler: logging.Handler, redactor: Optional[SecretRedactor] = None):
        super().__init__()
        self.handler = handler
        self.redactor = redactor or get_redactor()
        self.setLevel(handler.level)

    def emit(self, record: logging.LogRecord) -> None:
        """Emit redacted record to wrapped handler."""
        try:
            self.handler.emit(self.redactor.redact_record(record))
        except Exception:
            self.handleError(record)


class ContextLogAdapter(logging.LoggerAdapter):
    """Log adapter that stamps fixed context onto every record."""

    def process(
        self, msg: str, kwargs: Dict[str, Any]
    ) -> tuple[str, Dict[str, Any]]:
        """Add adapter context to log records."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    redact_logs: bool = True,
    settings: Optional[Settings] = None,
    secrets: Iterable[str] = (),
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (defaults to settings)
        log_format: Log format 'json' or 'text' (defaults to settings)
        log_file: Optional log file path (defaults to settings)
        redact_logs: Whether to redact credentials in log output
        settings: Settings to read defaults and the API key from
        secrets: Extra literal values to redact

    Returns:
        Root logger instance
    """
    settings = settings or get_settings()

    level = log_level or settings.log_level
    format_type = log_format or settings.log_format
    file_path = log_file or settings.log_file

    numeric_level = getattr(logging, level.upper())

    redactor = get_redactor() if redact_logs else None
    if redactor:
        redactor.add_secret(settings.testrail_api_key)
        redactor.add_secrets(secrets)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if format_type == "json":
        console_handler: logging.Handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(JSONFormatter(redactor=redactor))
    else:
        console = Console(stderr=True)
        console_handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
        )

    console_handler.setLevel(numeric_level)

    # JSON formatter already redacts
    if redactor and format_type != "json":
        console_handler = RedactingHandler(console_handler, redactor)

    root_logger.addHandler(console_handler)

    if file_path:
        file_handler: logging.Handler = logging.FileHandler(file_path)
        file_handler.setLevel(numeric_level)

        if format_type == "json":
            file_handler.setFormatter(JSONFormatter(redactor=redactor))
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                )
            )
            if redactor:
                file_handler = RedactingHandler(file_handler, redactor)

        root_logger.addHandler(file_handler)

    root_logger.setLevel(numeric_level)

    # httpx logs full request lines at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger("railsync")
    logger.info(
        "railsync logging initialized",
        extra={
            "log_level": level,
            "log_format": format_type,
            "log_file": file_path,
        },
    )

    return root_logger


def get_logger(name: str, **context: Any) -> logging.Logger:
    """
    Get a logger instance with optional context.

    Args:
        name: Logger name
        **context: Additional context to include in logs

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if context:
        return ContextLogAdapter(logger, context)

    return logger


def log_sync_decision(
    decision: str,
    scenario: str,
    suite_id: Optional[int] = None,
    case_id: Optional[int] = None,
    source: Optional[str] = None,
    reason: Optional[str] = None,
) -> None:
    """
    Log one synchronization decision (skip, create or fail) for a scenario.

    Args:
        decision: "skip", "create" or "fail"
        scenario: Scenario title
        suite_id: Target suite
        case_id: Existing or newly created case id
        source: Source document of the scenario
        reason: Failure reason for "fail"
    """
    logger = logging.getLogger("railsync.sync")

    extra: Dict[str, Any] = {"decision": decision, "scenario": scenario}
    if suite_id is not None:
        extra["suite_id"] = suite_id
    if case_id is not None:
        extra["case_id"] = case_id
    if source:
        extra["source"] = source

    if decision == "skip":
        logger.info(f"Skipping (already mapped to C{case_id}): {scenario}", extra=extra)
    elif decision == "create":
        logger.info(
            f"Created case C{case_id}: {scenario} - add tag @C{case_id} to the scenario",
            extra=extra,
        )
    else:
        logger.error(f"Failed to create case for '{scenario}': {reason}", extra=extra)


def log_report_event(
    event_type: str,
    execution_id: str,
    scenario: Optional[str] = None,
    case_id: Optional[int] = None,
    run_id: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None,
    level: int = logging.INFO,
) -> None:
    """
    Log a reporting decision for one scenario execution.

    Args:
        event_type: "mapped", "unmapped", "submitted", "failed", "skipped" or "aborted"
        execution_id: Unique id of the scenario execution
        scenario: Scenario title
        case_id: Resolved case id
        run_id: Active run id
        data: Additional event data
        level: Log level
    """
    logger = logging.getLogger("railsync.reporting")

    extra: Dict[str, Any] = {
        "event_type": event_type,
        "execution_id": execution_id,
    }
    if scenario is not None:
        extra["scenario"] = scenario
    if case_id is not None:
        extra["case_id"] = case_id
    if run_id is not None:
        extra["run_id"] = run_id
    if data:
        extra.update(data)

    label = f"C{case_id}" if case_id is not None else "no case"
    logger.log(level, f"Result {event_type}: '{scenario}' ({label})", extra=extra)
