"""Find-or-create of the suite a process synchronizes and reports against."""

import threading
from typing import Optional

from railsync.core.interfaces import RemoteTestRepository
from railsync.core.types import Suite
from railsync.error_handling.exceptions import SuiteResolutionError
from railsync.monitoring.logger import get_logger

logger = get_logger(__name__)


class SuiteResolver:
    """
    Resolves a named suite once and holds its id for the process lifetime.

    The id is written once, before scenarios start, and only read afterwards.
    """

    def __init__(self, repository: RemoteTestRepository, project_id: int) -> None:
        self.repository = repository
        self.project_id = project_id
        self._suite: Optional[Suite] = None
        self._lock = threading.Lock()

    def resolve(self, name: str, description: str = "") -> int:
        """
        Return the id of suite ``name``, creating the suite on first use.

        Raises:
            SuiteResolutionError: if the suite cannot be listed or created
        """
        with self._lock:
            if self._suite is not None:
                if self._suite.name != name:
                    raise SuiteResolutionError(
                        f"Resolver already bound to suite '{self._suite.name}'",
                        suite_name=name,
                        project_id=self.project_id,
                    )
                return self._suite.id

            self._suite = self.repository.find_or_create_suite(
                self.project_id, name, description
            )
            logger.info(
                f"Resolved suite '{name}' to ID {self._suite.id}",
                extra={"suite_id": self._suite.id},
            )
            return self._suite.id

    @property
    def suite(self) -> Optional[Suite]:
        return self._suite

    @property
    def suite_id(self) -> int:
        if self._suite is None:
            raise SuiteResolutionError(
                "Suite has not been resolved yet", project_id=self.project_id
            )
        return self._suite.id
