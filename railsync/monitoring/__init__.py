"""
Monitoring module exports.
"""

from railsync.monitoring.logger import (
    get_logger,
    get_redactor,
    log_report_event,
    log_sync_decision,
    setup_logging,
    JSONFormatter,
    RedactingHandler,
)
from railsync.monitoring.redaction import SecretRedactor

__all__ = [
    "setup_logging",
    "get_logger",
    "get_redactor",
    "log_sync_decision",
    "log_report_event",
    "JSONFormatter",
    "RedactingHandler",
    "SecretRedactor",
]
