"""HTTP client for the TestRail API v2.

Implements RemoteTestRepository with a blocking httpx client and HTTP basic
auth (username + API key). Failed calls are never retried; each operation
maps transport and HTTP failures onto its own error type so that callers can
decide what is fatal.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Optional

import httpx

from railsync.config.settings import Settings
from railsync.core.interfaces import RemoteTestRepository
from railsync.core.types import Case, CaseCreationOutcome, CasePriority, Result, Run, Suite
from railsync.error_handling.exceptions import (
    CaseCreationError,
    ConfigurationError,
    RemoteAPIError,
    ResultSubmissionError,
    RunCloseError,
    RunCreationError,
    SuiteResolutionError,
)
from railsync.monitoring.logger import get_logger

logger = get_logger(__name__)

API_PREFIX = "index.php?/api/v2/"
AUTOMATED_CASE_TYPE_ID = 1
DEFAULT_SECTION_NAME = "Automated Scenarios"


def _items(payload: Any, key: str) -> List[Dict[str, Any]]:
    """Accept both the bare-list and the paginated response shapes."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get(key), list):
        return payload[key]
    raise ValueError(f"Unexpected {key} payload: {str(payload)[:200]}")


class TestRailClient(RemoteTestRepository):
    """Blocking TestRail API client."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        *,
        base_url: str,
        username: str,
        api_key: str,
        project_id: Optional[int] = None,
        http_client: Optional[httpx.Client] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not base_url:
            raise ConfigurationError("base_url is required", setting="testrail_url")
        if not username or not api_key:
            raise ConfigurationError(
                "username and api_key are required", setting="testrail_api_key"
            )

        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            auth=(username, api_key),
            headers={"Content-Type": "application/json"},
            timeout=timeout_seconds,
        )
        self._timeout = float(timeout_seconds)
        self.project_id = project_id

        self._suite_projects: Dict[int, int] = {}
        self._suite_names: Dict[int, str] = {}
        self._sections: Dict[int, int] = {}
        self._section_lock = threading.Lock()

        logger.info(f"TestRail client initialized for {self._base_url}")

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: Optional[httpx.Client] = None
    ) -> "TestRailClient":
        """Build a client from validated settings."""
        settings.validate_integration()
        return cls(
            base_url=settings.testrail_url,
            username=settings.testrail_username,
            api_key=settings.testrail_api_key,
            project_id=settings.testrail_project_id,
            http_client=http_client,
            timeout_seconds=settings.testrail_timeout_seconds,
        )

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #
    def _url(self, endpoint: str) -> str:
        return f"{self._base_url}/{API_PREFIX}{endpoint}"

    def _raise_for_status(self, endpoint: str, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        body = resp.text
        message = body[:200] if body else f"HTTP {resp.status_code}"

        try:
            payload = resp.json()
            if isinstance(payload, dict):
                message = payload.get("error", message)
        except ValueError:
            pass

        raise RemoteAPIError(
            f"TestRail {endpoint} returned {resp.status_code}: {message}",
            endpoint=endpoint,
            status_code=resp.status_code,
            response_body=body,
        )

    def _request(
        self, method: str, endpoint: str, json: Optional[Dict[str, Any]] = None
    ) -> Any:
        try:
            resp = self._client.request(
                method,
                self._url(endpoint),
                json=json,
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RemoteAPIError(
                f"TestRail {endpoint} request failed: {exc}",
                endpoint=endpoint,
                cause=exc,
            ) from exc

        self._raise_for_status(endpoint, resp)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteAPIError(
                f"TestRail {endpoint} returned invalid JSON",
                endpoint=endpoint,
                status_code=resp.status_code,
                response_body=resp.text,
                cause=exc,
            ) from exc

    def _get(self, endpoint: str) -> Any:
        return self._request("GET", endpoint)

    def _post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("POST", endpoint, json=payload or {})

    def close(self) -> None:
        """Release the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "TestRailClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Suites
    # ------------------------------------------------------------------ #
    def find_or_create_suite(
        self, project_id: int, name: str, description: str
    ) -> Suite:
        try:
            for entry in _items(self._get(f"get_suites/{project_id}"), "suites"):
                if entry.get("name") == name:
                    suite = Suite(
                        id=entry["id"],
                        name=name,
                        description=entry.get("description") or "",
                    )
                    logger.info(f"Found existing suite: {name} (ID: {suite.id})")
                    break
            else:
                created = self._post(
                    f"add_suite/{project_id}",
                    {"name": name, "description": description},
                )
                suite = Suite(id=created["id"], name=name, description=description)
                logger.info(f"Created new suite: {name} (ID: {suite.id})")
        except (RemoteAPIError, KeyError, TypeError, ValueError) as exc:
            raise SuiteResolutionError(
                f"Failed to get or create suite '{name}': {exc}",
                suite_name=name,
                project_id=project_id,
                cause=exc,
            ) from exc

        self._suite_projects[suite.id] = project_id
        self._suite_names[suite.id] = name
        return suite

    # ------------------------------------------------------------------ #
    # Cases
    # ------------------------------------------------------------------ #
    def _project_for_suite(self, suite_id: int) -> int:
        project_id = self._suite_projects.get(suite_id) or self.project_id
        if project_id:
            return project_id
        suite = self._get(f"get_suite/{suite_id}")
        self._suite_projects[suite_id] = suite["project_id"]
        return suite["project_id"]

    def _section_for_suite(self, suite_id: int) -> int:
        """Return (and cache) the section new cases of a suite are added to."""
        with self._section_lock:
            if suite_id in self._sections:
                return self._sections[suite_id]

            project_id = self._project_for_suite(suite_id)
            sections = _items(
                self._get(f"get_sections/{project_id}&suite_id={suite_id}"), "sections"
            )
            roots = [entry for entry in sections if not entry.get("parent_id")]
            if roots or sections:
                section_id = (roots or sections)[0]["id"]
            else:
                name = self._suite_names.get(suite_id, DEFAULT_SECTION_NAME)
                created = self._post(
                    f"add_section/{project_id}", {"suite_id": suite_id, "name": name}
                )
                section_id = created["id"]
                logger.info(f"Created section '{name}' (ID: {section_id}) in suite {suite_id}")

            self._sections[suite_id] = section_id
            return section_id

    def create_case(
        self, suite_id: int, title: str, is_smoke: bool
    ) -> CaseCreationOutcome:
        priority = CasePriority.for_scenario(is_smoke)
        try:
            section_id = self._section_for_suite(suite_id)
            created = self._post(
                f"add_case/{section_id}",
                {
                    "title": title,
                    "type_id": AUTOMATED_CASE_TYPE_ID,
                    "priority_id": int(priority),
                },
            )
            case = Case(id=created["id"], title=title, priority=priority)
        except (RemoteAPIError, KeyError, TypeError, ValueError) as exc:
            error = CaseCreationError(
                f"Failed to create test case '{title}': {exc}",
                title=title,
                suite_id=suite_id,
                cause=exc,
            )
            logger.error(error.message, extra={"suite_id": suite_id})
            return CaseCreationOutcome.failed(error.message)

        logger.debug(f"Created test case: {title} (ID: C{case.id})")
        return CaseCreationOutcome.created(case)

    # ------------------------------------------------------------------ #
    # Runs and results
    # ------------------------------------------------------------------ #
    def create_run(
        self,
        project_id: int,
        name: str,
        description: str,
        suite_id: int,
        case_ids: Optional[Iterable[int]] = None,
    ) -> Run:
        selected = set(case_ids or ())
        payload: Dict[str, Any] = {
            "suite_id": suite_id,
            "name": name,
            "description": description,
            "include_all": not selected,
        }
        if selected:
            payload["case_ids"] = sorted(selected)

        try:
            created = self._post(f"add_run/{project_id}", payload)
            run = Run(
                id=created["id"],
                name=name,
                description=description,
                suite_id=suite_id,
                include_all=not selected,
                case_ids=selected or None,
            )
        except (RemoteAPIError, KeyError, TypeError, ValueError) as exc:
            raise RunCreationError(
                f"Failed to create test run '{name}': {exc}",
                run_name=name,
                cause=exc,
            ) from exc

        logger.info(f"Created test run: {name} (ID: {run.id})", extra={"run_id": run.id})
        return run

    def submit_result(self, run_id: int, result: Result) -> None:
        try:
            self._post(
                f"add_result_for_case/{run_id}/{result.case_id}", result.to_payload()
            )
        except RemoteAPIError as exc:
            raise ResultSubmissionError(
                f"Failed to add result for case C{result.case_id}: {exc}",
                run_id=run_id,
                case_id=result.case_id,
                cause=exc,
            ) from exc

    def close_run(self, run_id: int) -> None:
        try:
            self._post(f"close_run/{run_id}")
        except RemoteAPIError as exc:
            raise RunCloseError(
                f"Failed to close test run {run_id}: {exc}",
                run_id=run_id,
                cause=exc,
            ) from exc
        logger.info(f"Closed test run: {run_id}", extra={"run_id": run_id})
