"""
Error handling for railsync.

Setup errors (configuration, suite resolution, run creation) abort the
integration; case, result and close errors are recovered by logging.
"""

from .exceptions import (
    RailSyncError,
    RecoverableError,
    FatalError,
    ConfigurationError,
    RemoteAPIError,
    SuiteResolutionError,
    CaseCreationError,
    RunCreationError,
    RunLifecycleError,
    ResultSubmissionError,
    RunCloseError,
)

__all__ = [
    "RailSyncError",
    "RecoverableError",
    "FatalError",
    "ConfigurationError",
    "RemoteAPIError",
    "SuiteResolutionError",
    "CaseCreationError",
    "RunCreationError",
    "RunLifecycleError",
    "ResultSubmissionError",
    "RunCloseError",
]
