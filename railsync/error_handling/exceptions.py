"""
Exception hierarchy for the railsync pipeline.

Errors are split by how far they may travel: setup errors abort the
integration's own initialization, per-item and reporting errors are logged
and dropped so that they never reach the test verdict.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class RailSyncError(Exception):
    """Base exception for all railsync errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class RecoverableError(RailSyncError):
    """Base class for errors that are logged and dropped by the caller."""
    pass


class FatalError(RailSyncError):
    """Base class for errors that abort the integration's setup."""
    pass


class ConfigurationError(FatalError):
    """Raised when the integration is enabled but misconfigured."""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.setting = setting
        self.details.update({"setting": setting})


class RemoteAPIError(RailSyncError):
    """Transport or HTTP failure talking to the test-management system."""

    def __init__(
        self,
        message: str,
        endpoint: str,
        status_code: Optional[int] = None,
        response_body: str = "",
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint
        self.status_code = status_code
        self.response_body = response_body
        self.details.update({
            "endpoint": endpoint,
            "status_code": status_code,
        })


class SuiteResolutionError(FatalError):
    """Raised when a suite can neither be found nor created."""

    def __init__(
        self,
        message: str,
        suite_name: Optional[str] = None,
        project_id: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.suite_name = suite_name
        self.project_id = project_id
        self.details.update({
            "suite_name": suite_name,
            "project_id": project_id
        })


class CaseCreationError(RecoverableError):
    """Raised (and captured in a failed outcome) when a case cannot be created."""

    def __init__(
        self,
        message: str,
        title: str,
        suite_id: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.title = title
        self.suite_id = suite_id
        self.details.update({
            "title": title,
            "suite_id": suite_id
        })


class RunCreationError(FatalError):
    """Raised when the remote run for this execution cannot be created."""

    def __init__(
        self,
        message: str,
        run_name: str,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.run_name = run_name
        self.details.update({"run_name": run_name})


class RunLifecycleError(FatalError):
    """Raised on an illegal run state transition, e.g. opening twice."""

    def __init__(
        self,
        message: str,
        current_state: str,
        attempted: str,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted = attempted
        self.details.update({
            "current_state": current_state,
            "attempted": attempted
        })


class ResultSubmissionError(RecoverableError):
    """Raised when a result cannot be posted to the active run."""

    def __init__(
        self,
        message: str,
        run_id: int,
        case_id: int,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.run_id = run_id
        self.case_id = case_id
        self.details.update({
            "run_id": run_id,
            "case_id": case_id
        })


class RunCloseError(RecoverableError):
    """Raised when the active run cannot be closed."""

    def __init__(
        self,
        message: str,
        run_id: int,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.run_id = run_id
        self.details.update({"run_id": run_id})
