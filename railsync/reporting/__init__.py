"""
Reporting module exports.
"""

from railsync.reporting.result_reporter import ResultReporter
from railsync.reporting.run_lifecycle import RunLifecycleManager
from railsync.reporting.session import ReportingSession

__all__ = [
    "RunLifecycleManager",
    "ResultReporter",
    "ReportingSession",
]
