"""
Suite-level wiring of run lifecycle and result reporting.

A test runner creates one session at suite start, forwards its scenario
events to it and finishes it at suite end. A misconfigured or unreachable
TestRail turns the session into a disabled one; the tests still run.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

from railsync.config.settings import Settings
from railsync.core.interfaces import RemoteTestRepository
from railsync.error_handling.exceptions import FatalError
from railsync.monitoring.logger import get_logger
from railsync.reporting.result_reporter import ResultReporter
from railsync.reporting.run_lifecycle import RunLifecycleManager
from railsync.sync.suite_resolver import SuiteResolver
from railsync.testrail.client import TestRailClient

logger = get_logger(__name__)

RUN_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ReportingSession:
    """Run lifecycle plus reporter for one test-execution process."""

    def __init__(
        self,
        lifecycle: RunLifecycleManager,
        reporter: Optional[ResultReporter] = None,
        client: Optional[TestRailClient] = None,
    ) -> None:
        self.lifecycle = lifecycle
        self.reporter = reporter or ResultReporter(lifecycle)
        self._client = client

    @classmethod
    def disabled(cls) -> "ReportingSession":
        """A session that never talks to the remote system."""
        return cls(RunLifecycleManager(None, project_id=0, enabled=False))

    @classmethod
    def start(
        cls,
        settings: Settings,
        suite_name: str,
        suite_description: str = "",
        run_name_prefix: str = "Test Run",
        run_description: str = "Automated test execution",
        case_ids: Optional[Iterable[int]] = None,
        repository: Optional[RemoteTestRepository] = None,
        now: Optional[datetime] = None,
    ) -> "ReportingSession":
        """
        Validate configuration, resolve the suite and open a run.

        Never raises for configuration or remote failures: they are logged
        and a disabled session is returned.
        """
        if not settings.testrail_enabled:
            logger.info("TestRail integration is disabled - skipping initialization")
            return cls.disabled()

        client: Optional[TestRailClient] = None
        try:
            settings.validate_integration()
            if repository is None:
                client = TestRailClient.from_settings(settings)
                repository = client

            suite_id = SuiteResolver(repository, settings.testrail_project_id).resolve(
                suite_name, suite_description
            )
            lifecycle = RunLifecycleManager(repository, settings.testrail_project_id)
            run_name = f"{run_name_prefix} - {(now or datetime.now()).strftime(RUN_TIMESTAMP_FORMAT)}"
            lifecycle.open(run_name, suite_id, case_ids, run_description)
        except FatalError as exc:
            logger.error(
                f"Failed to initialize TestRail reporting, continuing without it: {exc.message}",
                extra={"error_code": exc.error_code},
            )
            if client is not None:
                client.close()
            return cls.disabled()
        except Exception as exc:
            logger.error(
                f"Unexpected error initializing TestRail reporting, continuing without it: {exc}"
            )
            if client is not None:
                client.close()
            return cls.disabled()

        logger.info("TestRail reporter initialized successfully")
        return cls(lifecycle, ResultReporter(lifecycle, repository), client)

    @property
    def active(self) -> bool:
        return self.lifecycle.is_open

    def on_scenario_start(
        self, execution_id: str, title: str, tags: Iterable[str]
    ) -> Optional[int]:
        if not self.lifecycle.enabled:
            return None
        return self.reporter.on_scenario_start(execution_id, title, tags)

    def on_scenario_finish(
        self, execution_id: str, passed: bool, error_message: Optional[str] = None
    ) -> bool:
        if not self.lifecycle.enabled:
            return False
        return self.reporter.on_scenario_finish(execution_id, passed, error_message)

    def on_scenario_aborted(self, execution_id: str) -> None:
        if self.lifecycle.enabled:
            self.reporter.on_scenario_aborted(execution_id)

    def finish(self) -> None:
        """Close the run and release the HTTP client."""
        try:
            self.lifecycle.close()
        finally:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "ReportingSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.finish()
