"""
Core interfaces and abstract base classes for railsync.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from railsync.core.types import CaseCreationOutcome, Result, Run, Suite


class RemoteTestRepository(ABC):
    """Abstract interface over the remote test-management API.

    Every operation is a single blocking remote exchange from the caller's
    point of view. Synchronization and reporting depend on this interface
    only, never on a concrete HTTP client.
    """

    @abstractmethod
    def find_or_create_suite(
        self, project_id: int, name: str, description: str
    ) -> Suite:
        """
        Return the first suite named ``name`` in the project, creating it if absent.

        Args:
            project_id: Remote project identifier
            name: Exact suite name to match
            description: Description used when the suite has to be created

        Returns:
            The existing or newly created suite

        Raises:
            SuiteResolutionError: if suites cannot be listed or created
        """
        pass

    @abstractmethod
    def create_case(
        self, suite_id: int, title: str, is_smoke: bool
    ) -> CaseCreationOutcome:
        """
        Create a case for a scenario.

        Remote failures are reported through a failed outcome, not raised.
        """
        pass

    @abstractmethod
    def create_run(
        self,
        project_id: int,
        name: str,
        description: str,
        suite_id: int,
        case_ids: Optional[Iterable[int]] = None,
    ) -> Run:
        """
        Create a run; all cases of the suite are included when ``case_ids`` is empty.

        Raises:
            RunCreationError: if the run cannot be created
        """
        pass

    @abstractmethod
    def submit_result(self, run_id: int, result: Result) -> None:
        """
        Post a result for one case of a run.

        Raises:
            ResultSubmissionError: if the result cannot be posted
        """
        pass

    @abstractmethod
    def close_run(self, run_id: int) -> None:
        """
        Close a run.

        Raises:
            RunCloseError: if the run cannot be closed
        """
        pass


class ConfigProvider(ABC):
    """Abstract interface for configuration management."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        pass

    @abstractmethod
    def get_required(self, key: str) -> Any:
        """Get required configuration value, raise if missing."""
        pass

    @abstractmethod
    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        pass
