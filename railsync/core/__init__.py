"""
Core module exports.
"""

from railsync.core.interfaces import ConfigProvider, RemoteTestRepository
from railsync.core.tags import (
    extract_case_id,
    format_case_id_tag,
    has_known_case_id,
)
from railsync.core.types import (
    Case,
    CaseCreationOutcome,
    CasePriority,
    Result,
    ResultStatus,
    Run,
    RunState,
    ScenarioRecord,
    Suite,
    SyncAction,
    SyncReport,
)

__all__ = [
    # Interfaces
    "RemoteTestRepository",
    "ConfigProvider",
    # Tags
    "has_known_case_id",
    "extract_case_id",
    "format_case_id_tag",
    # Types
    "Case",
    "CaseCreationOutcome",
    "CasePriority",
    "Result",
    "ResultStatus",
    "Run",
    "RunState",
    "ScenarioRecord",
    "Suite",
    "SyncAction",
    "SyncReport",
]
