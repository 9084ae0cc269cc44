"""One-shot synchronization of one or more feature directories into their suites."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from railsync.config.settings import Settings
from railsync.core.interfaces import RemoteTestRepository
from railsync.core.types import SyncReport
from railsync.corpus.scanner import ScenarioCorpusScanner
from railsync.corpus.tag_writer import CaseTagWriter
from railsync.error_handling.exceptions import ConfigurationError
from railsync.monitoring.logger import get_logger
from railsync.sync.case_synchronizer import CaseSynchronizer
from railsync.sync.suite_resolver import SuiteResolver
from railsync.testrail.client import TestRailClient

logger = get_logger(__name__)


@dataclass
class SyncTarget:
    """A feature directory and the suite its scenarios belong to."""

    name: str
    description: str
    features_dir: Union[str, Path]


def run_sync(
    settings: Settings,
    targets: List[SyncTarget],
    repository: Optional[RemoteTestRepository] = None,
    write_tags: bool = False,
) -> Dict[str, SyncReport]:
    """
    Synchronize every target and optionally write the new tags back.

    Args:
        settings: Settings; the integration must be enabled and valid
        targets: Directories and their suites
        repository: Repository to use instead of a TestRailClient
        write_tags: Rewrite feature files with the new @C tags

    Returns:
        Report per suite name

    Raises:
        ConfigurationError: if the integration is disabled or misconfigured
        SuiteResolutionError: if a suite cannot be resolved
    """
    if not settings.testrail_enabled:
        raise ConfigurationError(
            "TestRail integration is disabled; set TESTRAIL_ENABLED=true to sync",
            setting="testrail_enabled",
        )
    settings.validate_integration()

    client: Optional[TestRailClient] = None
    if repository is None:
        client = TestRailClient.from_settings(settings)
        repository = client
    writer = CaseTagWriter() if write_tags else None
    reports: Dict[str, SyncReport] = {}

    try:
        for target in targets:
            logger.info(f"Syncing suite '{target.name}' from {target.features_dir}")
            suite_id = SuiteResolver(repository, settings.testrail_project_id).resolve(
                target.name, target.description
            )
            report = CaseSynchronizer(
                ScenarioCorpusScanner(target.features_dir), repository, suite_id
            ).synchronize()

            if writer and report.actions:
                written = writer.apply(report.actions)
                logger.info(f"Wrote {written} case tags for suite '{target.name}'")

            reports[target.name] = report
    finally:
        if client is not None:
            client.close()

    return reports
