"""
Per-scenario result reporting.

Reporting must never change a test verdict: every failure on this path is
converted into a log line.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from railsync.core.interfaces import RemoteTestRepository
from railsync.core.tags import extract_case_id
from railsync.core.types import Result, ResultStatus
from railsync.monitoring.logger import get_logger, log_report_event
from railsync.reporting.run_lifecycle import RunLifecycleManager

logger = get_logger(__name__)


@dataclass(frozen=True)
class _PendingScenario:
    title: str
    case_id: Optional[int]
    started_at: float


class ResultReporter:
    """
    Maps scenario executions to case ids and posts their outcomes.

    Scenarios may execute concurrently; pending executions are kept in a
    lock-guarded dict keyed by execution id, never by title, since titles
    repeat across parameterized scenarios.
    """

    def __init__(
        self,
        lifecycle: RunLifecycleManager,
        repository: Optional[RemoteTestRepository] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.lifecycle = lifecycle
        self.repository = repository or lifecycle.repository
        self._clock = clock
        self._pending: Dict[str, _PendingScenario] = {}
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def on_scenario_start(
        self, execution_id: str, title: str, tags: Iterable[str]
    ) -> Optional[int]:
        """
        Remember which case (if any) this execution reports to.

        Returns:
            The resolved case id, or None
        """
        case_id = extract_case_id(tags)
        with self._lock:
            self._pending[execution_id] = _PendingScenario(
                title=title, case_id=case_id, started_at=self._clock()
            )

        if case_id is None:
            log_report_event(
                "unmapped", execution_id, scenario=title, level=logging.DEBUG
            )
        else:
            log_report_event(
                "mapped", execution_id, scenario=title, case_id=case_id,
                level=logging.DEBUG,
            )
        return case_id

    def on_scenario_aborted(self, execution_id: str) -> None:
        """Forget an execution that will never finish; nothing is submitted."""
        with self._lock:
            pending = self._pending.pop(execution_id, None)
        if pending is not None:
            log_report_event(
                "aborted", execution_id, scenario=pending.title,
                case_id=pending.case_id, level=logging.WARNING,
            )

    def on_scenario_finish(
        self,
        execution_id: str,
        passed: bool,
        error_message: Optional[str] = None,
    ) -> bool:
        """
        Submit the outcome of an execution to the open run.

        Never raises.

        Returns:
            True if a result was submitted
        """
        try:
            return self._report(execution_id, passed, error_message)
        except Exception as exc:
            logger.error(
                f"Failed to report result for execution {execution_id}: {exc}",
                extra={"execution_id": execution_id},
            )
            return False

    def _report(
        self, execution_id: str, passed: bool, error_message: Optional[str]
    ) -> bool:
        with self._lock:
            pending = self._pending.pop(execution_id, None)

        if pending is None:
            logger.debug(f"No start recorded for execution {execution_id}")
            return False
        if not self.lifecycle.enabled or pending.case_id is None:
            return False

        run_id = self.lifecycle.run_id
        if not self.lifecycle.is_open or run_id is None:
            log_report_event(
                "skipped", execution_id, scenario=pending.title,
                case_id=pending.case_id, data={"reason": "no open run"},
                level=logging.DEBUG,
            )
            return False

        elapsed = max(0, int(self._clock() - pending.started_at))
        result = Result(
            case_id=pending.case_id,
            status=ResultStatus.PASSED if passed else ResultStatus.FAILED,
            comment=self._comment(pending.title, passed, error_message),
            elapsed_seconds=elapsed,
        )

        try:
            self.repository.submit_result(run_id, result)
        except Exception as exc:
            log_report_event(
                "failed", execution_id, scenario=pending.title,
                case_id=pending.case_id, run_id=run_id,
                data={"error": str(exc)}, level=logging.ERROR,
            )
            return False

        log_report_event(
            "submitted", execution_id, scenario=pending.title,
            case_id=pending.case_id, run_id=run_id,
            data={"status": result.status.label, "elapsed_seconds": elapsed},
        )
        return True

    @staticmethod
    def _comment(title: str, passed: bool, error_message: Optional[str]) -> str:
        if passed:
            return "Test passed successfully"
        comment = f"Test failed: {title}"
        if error_message:
            comment = f"{comment}\n\n{error_message}"
        return comment
