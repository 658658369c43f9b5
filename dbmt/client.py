"""HTTP client for the migration orchestration service."""

import time
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .api.models import MigrationRequest
from .exceptions import DBMTError
from .models.migration import MigrationStatus

logger = logging.getLogger(__name__)

ORCHESTRATOR_PATH = "/migration-orchestrator"
VALIDATION_PATH = "/validation-service"

TERMINAL_STATUSES = {MigrationStatus.COMPLETED.value, MigrationStatus.FAILED.value}


class OrchestratorClientError(DBMTError):
    """Raised when a request to the service fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OrchestratorClient:
    """
    Client for the orchestration and validation endpoints.

    Submits one request per migration and polls the status endpoint
    afterwards; progress is whatever the service has recorded so far.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_retries: int = 3
    ):
        """
        Initialize the client.

        Args:
            base_url: Service root URL
            token: Bearer token sent with every request
            session: Custom requests session
            timeout: Per-request timeout in seconds
            max_retries: Retries for idempotent requests
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session = session or self._create_session(max_retries)

    def _create_session(self, max_retries: int) -> requests.Session:
        """Create a requests session that retries GETs."""
        session = requests.Session()

        # POSTs create rows, so only GETs are retried
        retries = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )

        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        return session

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.token}"}

        try:
            response = self._session.request(
                method, url, json=json, params=params, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise OrchestratorClientError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise OrchestratorClientError(
                self._error_message(response), status_code=response.status_code
            )

        return response.json()

    @staticmethod
    def _error_message(response: Any) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"

    def start_migration(self, request: Union[MigrationRequest, Dict[str, Any]]) -> Dict[str, Any]:
        """
        Submit a migration.

        Returns:
            The dry-run analysis, or ``{"migrationId", "status": "started"}``
        """
        if isinstance(request, MigrationRequest):
            payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        else:
            payload = request
        return self._request("POST", ORCHESTRATOR_PATH, json=payload)

    def get_migration_status(
        self,
        migration_id: Optional[str] = None
    ) -> Union[Optional[Dict[str, Any]], List[Dict[str, Any]]]:
        """Get one migration row (None when unknown), or all rows without an id."""
        params = {"id": migration_id} if migration_id else None
        return self._request("GET", ORCHESTRATOR_PATH, params=params)

    def get_migration_logs(self, migration_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"{ORCHESTRATOR_PATH}/logs", params={"id": migration_id})

    def validate_migration(self, migration_id: str, validation_type: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            VALIDATION_PATH,
            json={"migrationId": migration_id, "validationType": validation_type},
        )

    def list_validation_reports(self, migration_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", VALIDATION_PATH, params={"migrationId": migration_id})

    def wait_for_completion(
        self,
        migration_id: str,
        poll_interval: float = 1.0,
        timeout: float = 60.0
    ) -> Dict[str, Any]:
        """Poll a migration until it completes or fails."""
        deadline = time.monotonic() + timeout

        while True:
            migration = self.get_migration_status(migration_id)
            if migration is None:
                raise OrchestratorClientError(f"Migration not found: {migration_id}")

            logger.debug(
                f"Migration {migration_id}: {migration['status']} "
                f"({migration['progress_percentage']}%)"
            )
            if migration["status"] in TERMINAL_STATUSES:
                return migration

            if time.monotonic() >= deadline:
                raise OrchestratorClientError(
                    f"Timed out waiting for migration {migration_id} "
                    f"(last status {migration['status']})"
                )
            time.sleep(poll_interval)
