"""
Shared fixtures for railsync tests.
"""

import threading
from typing import Iterable, List, Optional, Tuple

import pytest

from railsync.config.settings import Settings
from railsync.core.interfaces import RemoteTestRepository
from railsync.core.types import (
    Case,
    CaseCreationOutcome,
    CasePriority,
    Result,
    Run,
    Suite,
)
from railsync.error_handling.exceptions import RunCloseError, RunCreationError


class FakeRepository(RemoteTestRepository):
    """In-memory repository recording every call."""

    def __init__(self, first_case_id: int = 42) -> None:
        self.suites: List[Suite] = []
        self.cases: List[Tuple[int, str, bool]] = []
        self.runs: List[dict] = []
        self.results: List[Tuple[int, Result]] = []
        self.closed_runs: List[int] = []
        self.suite_calls = 0
        self.fail_titles: set = set()
        self.fail_run = False
        self.fail_submit: Optional[Exception] = None
        self.fail_close = False
        self._next_case_id = first_case_id
        self._lock = threading.Lock()

    def find_or_create_suite(self, project_id: int, name: str, description: str) -> Suite:
        self.suite_calls += 1
        for suite in self.suites:
            if suite.name == name:
                return suite
        suite = Suite(id=len(self.suites) + 1, name=name, description=description)
        self.suites.append(suite)
        return suite

    def create_case(self, suite_id: int, title: str, is_smoke: bool) -> CaseCreationOutcome:
        with self._lock:
            self.cases.append((suite_id, title, is_smoke))
            if title in self.fail_titles:
                return CaseCreationOutcome.failed(f"remote refused '{title}'")
            case = Case(
                id=self._next_case_id,
                title=title,
                priority=CasePriority.for_scenario(is_smoke),
            )
            self._next_case_id += 1
            return CaseCreationOutcome.created(case)

    def create_run(
        self,
        project_id: int,
        name: str,
        description: str,
        suite_id: int,
        case_ids: Optional[Iterable[int]] = None,
    ) -> Run:
        if self.fail_run:
            raise RunCreationError("remote unavailable", run_name=name)
        selected = set(case_ids or ())
        self.runs.append(
            {
                "project_id": project_id,
                "name": name,
                "description": description,
                "suite_id": suite_id,
                "include_all": not selected,
                "case_ids": selected,
            }
        )
        return Run(
            id=100 + len(self.runs),
            name=name,
            description=description,
            suite_id=suite_id,
            include_all=not selected,
            case_ids=selected or None,
        )

    def submit_result(self, run_id: int, result: Result) -> None:
        if self.fail_submit is not None:
            raise self.fail_submit
        with self._lock:
            self.results.append((run_id, result))

    def close_run(self, run_id: int) -> None:
        if self.fail_close:
            raise RunCloseError("remote unavailable", run_id=run_id)
        self.closed_runs.append(run_id)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def enabled_settings() -> Settings:
    return Settings(
        _env_file=None,
        testrail_enabled=True,
        testrail_url="https://acme.testrail.io",
        testrail_username="qa@acme.test",
        testrail_api_key="s3cr3t-api-key",
        testrail_project_id=7,
    )


@pytest.fixture
def write_feature():
    """Write a feature file below a directory and return its path."""

    def _write(directory, name: str, content: str):
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write

