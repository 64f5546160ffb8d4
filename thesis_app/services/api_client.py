"""
API Client - Thesis Defense Platform
thesis_app/services/api_client.py

Thin requests-based client used by the Streamlit dashboard. DASHBOARD_API_URL
may point at the server root (http://host:8000) or at the versioned API
behind a gateway (http://gateway/thesis/api/v1), so each read is tried as
{API_V1_PREFIX}/route first and as the bare route second. fetch_first()
walks the candidates and keeps the first usable JSON body.

A path is skipped when:
    - the route is not served there (404/405 without an entity error code)
    - the server answers any other non-2xx status (error message recorded)
    - the body is not JSON, or is a JSON object with ok == false
    - the request itself fails (connection refused, timeout)

A 404 carrying an entity error code (e.g. EVALUATION_NOT_FOUND) means the
route exists and the record does not; its message is recorded and no further
candidates are tried.

Nothing is raised; callers check FetchResult.ok.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import requests

from thesis_app.config import settings

logger = logging.getLogger(__name__)

ROUTE_MISSING_STATUSES = (404, 405)
ROUTE_MISSING_CODES = ("HTTP_404", "HTTP_405")


@dataclass
class FetchResult:
    """Outcome of fetch_first()."""
    data: Optional[Any] = None
    path: Optional[str] = None
    status_code: Optional[int] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.path is not None


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return fallback


def _route_missing(status_code: int, payload: Any) -> bool:
    """404/405 from the router itself, as opposed to a record lookup that found nothing."""
    if status_code not in ROUTE_MISSING_STATUSES:
        return False
    if not isinstance(payload, dict):
        return True
    error_code = payload.get("error_code")
    return not error_code or error_code in ROUTE_MISSING_CODES


def api_paths(route: str) -> List[str]:
    """Versioned path first, then the bare route for bases that already end in the prefix."""
    route = "/" + route.lstrip("/")
    return [f"{settings.API_V1_PREFIX}{route}", route]


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        actor_id: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.DASHBOARD_API_URL).rstrip("/")
        self.timeout = timeout or settings.DASHBOARD_REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        if actor_id:
            self.headers["X-Actor-Id"] = actor_id

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch_first(self, paths: Sequence[str], params: Optional[Dict[str, Any]] = None) -> FetchResult:
        """
        GET each candidate path in order and return the first usable JSON body.

        Args:
            paths: Candidate paths relative to base_url (or absolute URLs).
            params: Query parameters sent with every attempt.
        """
        result = FetchResult()

        for path in paths:
            try:
                resp = self.session.get(self.url(path), params=params, headers=self.headers, timeout=self.timeout)
            except requests.RequestException as e:
                result.errors.append(f"{path}: {e}")
                continue

            try:
                payload = resp.json()
            except ValueError:
                payload = None

            if _route_missing(resp.status_code, payload):
                logger.debug(f"{path} returned {resp.status_code}; trying next candidate")
                continue
            if resp.status_code == 404:
                result.errors.append(_error_message(payload, f"{path} returned 404"))
                result.status_code = resp.status_code
                break
            if not resp.ok:
                result.errors.append(_error_message(payload, f"{path} returned {resp.status_code}"))
                continue
            if payload is None:
                result.errors.append(f"{path} returned a non-JSON body")
                continue
            if isinstance(payload, dict) and payload.get("ok") is False:
                result.errors.append(_error_message(payload, f"{path} reported ok=false"))
                continue

            result.data = payload
            result.path = path
            result.status_code = resp.status_code
            return result

        if result.errors:
            logger.warning(f"No candidate endpoint succeeded: {'; '.join(result.errors)}")
        return result

    def health(self) -> Optional[Dict[str, Any]]:
        return self.fetch_first(["/health"]).data

    def group_rankings(self, limit: Optional[int] = None) -> FetchResult:
        params = {"limit": limit} if limit else None
        return self.fetch_first(api_paths("/rankings/groups"), params)

    def student_rankings(self, limit: Optional[int] = None) -> FetchResult:
        params = {"limit": limit} if limit else None
        return self.fetch_first(api_paths("/rankings/students"), params)

    def evaluation_detail(self, evaluation_id: str) -> FetchResult:
        return self.fetch_first(api_paths(f"/evaluations/{evaluation_id}"))

    def evaluations(self, status: Optional[str] = None, limit: int = 50, offset: int = 0) -> FetchResult:
        params: Dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        return self.fetch_first(api_paths("/evaluations"), params)

    def reports_summary(self, days: int = 30) -> FetchResult:
        return self.fetch_first(api_paths("/reports/summary"), {"days": days})
