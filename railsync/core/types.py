"""
Core data models and types for the railsync pipeline.
"""

from enum import Enum, IntEnum
from pathlib import Path
from typing import List, Optional, Set

from pydantic import BaseModel, Field, field_validator


class CasePriority(IntEnum):
    """TestRail priority ids used for generated cases."""

    MEDIUM = 2
    CRITICAL = 4

    @classmethod
    def for_scenario(cls, is_smoke: bool) -> "CasePriority":
        return cls.CRITICAL if is_smoke else cls.MEDIUM


class ResultStatus(IntEnum):
    """TestRail result status ids."""

    PASSED = 1
    BLOCKED = 2
    UNTESTED = 3
    RETEST = 4
    FAILED = 5

    @property
    def label(self) -> str:
        return self.name


class RunState(str, Enum):
    """Lifecycle of the single run owned by a test-execution process."""

    IDLE = "idle"
    OPEN = "open"
    CLOSED = "closed"


class Suite(BaseModel):
    """A named grouping of cases in the remote system."""

    id: int = Field(..., ge=1)
    name: str
    description: str = ""


class Case(BaseModel):
    """A remote record representing one scenario."""

    id: int = Field(..., ge=1)
    title: str
    priority: CasePriority = CasePriority.MEDIUM


class Run(BaseModel):
    """A remote record grouping cases for one execution."""

    id: int = Field(..., ge=1)
    name: str
    description: str = ""
    suite_id: int
    include_all: bool = True
    case_ids: Optional[Set[int]] = None


class Result(BaseModel):
    """Outcome of one case within a run."""

    case_id: int = Field(..., ge=1)
    status: ResultStatus
    comment: str = ""
    elapsed_seconds: int = Field(0, ge=0, description="0 means omitted")

    def to_payload(self) -> dict:
        """Render the body expected by add_result_for_case."""
        payload = {"status_id": int(self.status), "comment": self.comment}
        if self.elapsed_seconds > 0:
            payload["elapsed"] = f"{self.elapsed_seconds}s"
        return payload


class ScenarioRecord(BaseModel):
    """A scenario title and its tags as found in the specification corpus."""

    title: str
    tags: List[str] = Field(default_factory=list)
    source: Optional[Path] = None
    line: Optional[int] = Field(None, description="1-based line of the Scenario: line")
    resolved_case_id: Optional[int] = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, value: List[str]) -> List[str]:
        """Keep first occurrence order while dropping repeats."""
        return list(dict.fromkeys(value))

    @property
    def is_smoke(self) -> bool:
        return any(tag.lower() == "@smoke" for tag in self.tags)


class CaseCreationOutcome(BaseModel):
    """Either a created case or the reason creation failed."""

    ok: bool
    case: Optional[Case] = None
    reason: Optional[str] = None

    @classmethod
    def created(cls, case: Case) -> "CaseCreationOutcome":
        return cls(ok=True, case=case)

    @classmethod
    def failed(cls, reason: str) -> "CaseCreationOutcome":
        return cls(ok=False, reason=reason)

    @property
    def case_id(self) -> Optional[int]:
        return self.case.id if self.case else None


class SyncAction(BaseModel):
    """Instruction to append a case-id tag to a scenario in its source document."""

    scenario: ScenarioRecord
    case_id: int
    tag: str


class SyncReport(BaseModel):
    """Summary of one synchronization pass."""

    suite_id: int
    scanned: int = 0
    skipped: int = 0
    created: int = 0
    failed: int = 0
    actions: List[SyncAction] = Field(default_factory=list)
    failed_titles: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0
