from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)


class TaskClientError(Exception):
    """
    Failure talking to the task API.

    message is the server-provided message when the API answered with an error
    envelope, or None for transport failures and unparseable bodies.
    """

    def __init__(
        self,
        message: Optional[str],
        status_code: Optional[int] = None,
        kind: Optional[str] = None,
        details: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        super().__init__(message or f"Task API request failed (status={status_code})")
        self.message = message
        self.status_code = status_code
        self.kind = kind
        self.details = details or []


# PUBLIC_INTERFACE
class TaskClient:
    """
    HTTP client for the task API.

    Every request carries the caller id header; responses are unwrapped from the
    {"data": ...} envelope. Pass http_client to reuse a configured httpx.Client
    (FastAPI's TestClient works too).
    """

    def __init__(
        self,
        base_url: str,
        user_id: str,
        *,
        http_client: Optional[httpx.Client] = None,
        user_id_header: str = "X-User-Id",
        timeout: float = 10.0,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._headers = {user_id_header: user_id}
        self._http = http_client or httpx.Client(timeout=timeout)
        self._owns_http = http_client is None

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "TaskClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """POST /task and return the created task."""
        return self._request("POST", "/task", json=dict(data))

    def get(self, task_id: str) -> Dict[str, Any]:
        """GET /task/{id} and return the task."""
        return self._request("GET", f"/task/{task_id}")

    def update(self, task_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """PUT /task/{id} and return the updated task."""
        return self._request("PUT", f"/task/{task_id}", json=dict(data))

    def list(self) -> List[Dict[str, Any]]:
        """GET /task and return the caller's tasks."""
        return self._request("GET", "/task")

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self._base}{path}"
        try:
            response = self._http.request(method, url, json=json, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.warning("Task API %s %s failed: %s", method, url, exc)
            raise TaskClientError(None) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            if not isinstance(body, dict):
                raise TaskClientError(None, status_code=response.status_code)
            raise TaskClientError(
                body.get("message"),
                status_code=response.status_code,
                kind=body.get("error"),
                details=body.get("detail"),
            )

        if not isinstance(body, dict) or "data" not in body:
            raise TaskClientError(None, status_code=response.status_code)
        return body["data"]
