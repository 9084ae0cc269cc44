"""
Creation of remote cases for scenarios that have no case-id tag yet.

A pass is best effort per scenario: a failed creation is logged and the
scenario stays untagged for a later pass, while the remaining scenarios are
still processed.
"""

from typing import Iterable

from railsync.core.interfaces import RemoteTestRepository
from railsync.core.tags import extract_case_id, format_case_id_tag
from railsync.core.types import ScenarioRecord, SyncAction, SyncReport
from railsync.monitoring.logger import get_logger, log_sync_decision

logger = get_logger(__name__)


class CaseSynchronizer:
    """Drives a scenario source against a remote repository for one suite."""

    def __init__(
        self,
        scanner: Iterable[ScenarioRecord],
        repository: RemoteTestRepository,
        suite_id: int,
    ) -> None:
        """
        Initialize the synchronizer.

        Args:
            scanner: Restartable source of scenarios, usually a ScenarioCorpusScanner
            repository: Remote test repository
            suite_id: Suite new cases are created in
        """
        self.scanner = scanner
        self.repository = repository
        self.suite_id = suite_id

    def synchronize(self) -> SyncReport:
        """
        Run one synchronization pass.

        Returns:
            Report listing the tags the caller must persist into the corpus
        """
        report = SyncReport(suite_id=self.suite_id)

        for scenario in self.scanner:
            report.scanned += 1
            source = str(scenario.source) if scenario.source else None

            existing = extract_case_id(scenario.tags)
            if existing is not None:
                report.skipped += 1
                log_sync_decision(
                    "skip", scenario.title, suite_id=self.suite_id,
                    case_id=existing, source=source,
                )
                continue

            outcome = self.repository.create_case(
                self.suite_id, scenario.title, scenario.is_smoke
            )
            if not outcome.ok:
                report.failed += 1
                report.failed_titles.append(scenario.title)
                log_sync_decision(
                    "fail", scenario.title, suite_id=self.suite_id,
                    source=source, reason=outcome.reason,
                )
                continue

            case_id = outcome.case_id
            report.created += 1
            report.actions.append(
                SyncAction(
                    scenario=scenario.model_copy(update={"resolved_case_id": case_id}),
                    case_id=case_id,
                    tag=format_case_id_tag(case_id),
                )
            )
            log_sync_decision(
                "create", scenario.title, suite_id=self.suite_id,
                case_id=case_id, source=source,
            )

        logger.info(
            f"Synchronization finished: {report.scanned} scanned, {report.created} created, "
            f"{report.skipped} skipped, {report.failed} failed",
            extra={"suite_id": self.suite_id},
        )
        return report
