"""
Ownership of the single remote run of a test-execution process.
"""

import threading
from typing import Iterable, Optional

from railsync.core.interfaces import RemoteTestRepository
from railsync.core.types import Run, RunState
from railsync.error_handling.exceptions import RunCloseError, RunLifecycleError
from railsync.monitoring.logger import get_logger

logger = get_logger(__name__)


class RunLifecycleManager:
    """
    Owns the IDLE -> OPEN -> CLOSED state machine of one run.

    One instance is constructed per test-execution process and handed to
    the per-scenario reporter. The run id is written once, when the run is
    opened before any scenario starts, and only read afterwards.
    """

    def __init__(
        self,
        repository: Optional[RemoteTestRepository],
        project_id: int,
        enabled: bool = True,
    ) -> None:
        """
        Initialize the manager.

        Args:
            repository: Remote repository; may be None when disabled
            project_id: Project the run is created in
            enabled: Deployment toggle for the remote integration
        """
        if enabled and repository is None:
            raise ValueError("repository is required when the integration is enabled")

        self.repository = repository
        self.project_id = project_id
        self._enabled = enabled
        self._state = RunState.IDLE
        self._run: Optional[Run] = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def run(self) -> Optional[Run]:
        return self._run

    @property
    def run_id(self) -> Optional[int]:
        return self._run.id if self._run else None

    @property
    def is_open(self) -> bool:
        return self._enabled and self._state is RunState.OPEN

    def open(
        self,
        run_name: str,
        suite_id: int,
        case_ids: Optional[Iterable[int]] = None,
        description: str = "",
    ) -> Optional[Run]:
        """
        Create the remote run and move to OPEN.

        Args:
            run_name: Name of the run
            suite_id: Suite the run belongs to
            case_ids: Explicit case subset; all cases are included when empty
            description: Run description

        Returns:
            The created run, or None when the integration is disabled

        Raises:
            RunLifecycleError: if called outside IDLE
            RunCreationError: if the remote run cannot be created
        """
        if not self._enabled:
            logger.info("TestRail integration is disabled - not opening a run")
            return None

        with self._lock:
            if self._state is not RunState.IDLE:
                raise RunLifecycleError(
                    f"Cannot open run '{run_name}': a run was already opened "
                    f"(state={self._state.value}, run_id={self.run_id})",
                    current_state=self._state.value,
                    attempted="open",
                )

            run = self.repository.create_run(
                self.project_id, run_name, description, suite_id, case_ids
            )
            self._run = run
            self._state = RunState.OPEN

        logger.info(
            f"Run opened: {run.name} (ID: {run.id}, include_all={run.include_all})",
            extra={"run_id": run.id, "suite_id": suite_id},
        )
        return run

    def close(self) -> None:
        """Close the run if one is open; otherwise log and do nothing."""
        if not self._enabled:
            logger.debug("TestRail integration is disabled - nothing to close")
            return

        with self._lock:
            if self._state is RunState.IDLE:
                logger.warning("No active test run to close")
                return
            if self._state is RunState.CLOSED:
                logger.debug(f"Run {self.run_id} is already closed")
                return

            run_id = self.run_id
            self._state = RunState.CLOSED

        try:
            self.repository.close_run(run_id)
            logger.info(f"Run closed: {run_id}", extra={"run_id": run_id})
        except RunCloseError as exc:
            logger.error(exc.message, extra={"run_id": run_id})
        except Exception as exc:
            logger.error(f"Unexpected error closing run {run_id}: {exc}", extra={"run_id": run_id})
