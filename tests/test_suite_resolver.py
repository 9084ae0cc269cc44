"""
Tests for SuiteResolver.
"""

import threading
from unittest.mock import MagicMock

import pytest

from railsync.core.types import Suite
from railsync.error_handling.exceptions import SuiteResolutionError
from railsync.sync.suite_resolver import SuiteResolver


class TestSuiteResolver:
    """Tests for SuiteResolver."""

    def test_resolves_once(self, repository):
        resolver = SuiteResolver(repository, project_id=7)

        first = resolver.resolve("API Test Automation", "API scenarios")
        second = resolver.resolve("API Test Automation")

        assert first == second == resolver.suite_id
        assert repository.suite_calls == 1
        assert resolver.suite.name == "API Test Automation"

    def test_unresolved_suite_id_raises(self, repository):
        with pytest.raises(SuiteResolutionError, match="not been resolved"):
            SuiteResolver(repository, project_id=7).suite_id

    def test_rebinding_to_other_suite_raises(self, repository):
        resolver = SuiteResolver(repository, project_id=7)
        resolver.resolve("API")

        with pytest.raises(SuiteResolutionError, match="already bound"):
            resolver.resolve("UI")

    def test_repository_error_propagates(self):
        repository = MagicMock()
        repository.find_or_create_suite.side_effect = SuiteResolutionError(
            "Failed to get or create suite 'API'", suite_name="API", project_id=7
        )
        resolver = SuiteResolver(repository, project_id=7)

        with pytest.raises(SuiteResolutionError):
            resolver.resolve("API")
        assert resolver.suite is None

    def test_concurrent_resolution_calls_remote_once(self):
        repository = MagicMock()
        repository.find_or_create_suite.return_value = Suite(id=5, name="API")
        resolver = SuiteResolver(repository, project_id=7)
        results = []

        threads = [
            threading.Thread(target=lambda: results.append(resolver.resolve("API")))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [5] * 8
        repository.find_or_create_suite.assert_called_once_with(7, "API", "")
