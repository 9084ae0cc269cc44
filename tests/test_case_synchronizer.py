"""
Tests for CaseSynchronizer.
"""

import logging

from railsync.corpus.scanner import ScenarioCorpusScanner
from railsync.corpus.tag_writer import CaseTagWriter
from railsync.core.types import ScenarioRecord
from railsync.sync.case_synchronizer import CaseSynchronizer


class TestCaseSynchronizer:
    """Tests for one synchronization pass."""

    def test_untagged_smoke_scenario_creates_critical_case(self, repository, caplog):
        scenarios = [ScenarioRecord(title="User logs in with valid credentials", tags=["@Smoke", "@UI"])]

        with caplog.at_level(logging.INFO):
            report = CaseSynchronizer(scenarios, repository, suite_id=1).synchronize()

        assert repository.cases == [(1, "User logs in with valid credentials", True)]
        assert report.created == 1
        assert report.actions[0].case_id == 42
        assert report.actions[0].tag == "@C42"
        assert report.actions[0].scenario.resolved_case_id == 42
        assert "add tag @C42 to the scenario" in caplog.text

    def test_tagged_scenario_is_skipped(self, repository, caplog):
        scenarios = [ScenarioRecord(title="User logs out", tags=["@C1234"])]

        with caplog.at_level(logging.INFO):
            report = CaseSynchronizer(scenarios, repository, suite_id=1).synchronize()

        assert repository.cases == []
        assert report.skipped == 1
        assert report.created == 0
        assert "already mapped to C1234" in caplog.text

    def test_failure_does_not_stop_the_pass(self, repository, caplog):
        repository.fail_titles.add("Broken")
        scenarios = [
            ScenarioRecord(title="First"),
            ScenarioRecord(title="Broken"),
            ScenarioRecord(title="Last"),
        ]

        with caplog.at_level(logging.ERROR):
            report = CaseSynchronizer(scenarios, repository, suite_id=1).synchronize()

        assert report.scanned == 3
        assert report.created == 2
        assert report.failed == 1
        assert report.failed_titles == ["Broken"]
        assert report.success is False
        assert [a.scenario.title for a in report.actions] == ["First", "Last"]
        assert "Failed to create case for 'Broken'" in caplog.text

    def test_parameterized_duplicates_each_get_a_case(self, repository):
        scenarios = [ScenarioRecord(title="Same"), ScenarioRecord(title="Same")]

        report = CaseSynchronizer(scenarios, repository, suite_id=1).synchronize()

        assert [a.case_id for a in report.actions] == [42, 43]

    def test_second_pass_after_tagging_creates_nothing(self, repository, tmp_path, write_feature):
        write_feature(
            tmp_path, "login.feature",
            "Feature: Login\n\n  @Smoke\n  Scenario: Sign in\n\n  Scenario: Sign out\n",
        )
        scanner = ScenarioCorpusScanner(tmp_path)

        first = CaseSynchronizer(scanner, repository, suite_id=1).synchronize()
        CaseTagWriter().apply(first.actions)
        second = CaseSynchronizer(scanner, repository, suite_id=1).synchronize()

        assert first.created == 2
        assert second.created == 0
        assert second.skipped == 2
        assert len(repository.cases) == 2
