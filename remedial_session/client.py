"""HTTP client for the remedial session service."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

import requests

from reading_core.errors import InputError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

SESSION_PATH = "/api/remedial/session"
STATUS_PATH = "/api/remedial/session/status"

SERVER_UNREACHABLE = "Could not reach the server. Please try again."


class SessionApiClient:
    """Thin wrapper over the session endpoints.

    Args:
        base_url: Service root, e.g. "http://localhost:5000"
        timeout: Per-request timeout in seconds
        http: Optional ``requests.Session`` to reuse connections
    """

    def __init__(self, base_url: str, timeout: float = 10.0, http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    def submit_session(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a full session submission; returns the decoded response body."""
        return self._request("post", SESSION_PATH, json=payload)

    def fetch_progress(self, student_id: str, approved_schedule_id: int) -> Dict[str, Any]:
        params = {"studentId": student_id, "approvedScheduleId": approved_schedule_id}
        return self._request("get", SESSION_PATH, params=params)

    def fetch_status(
        self,
        approved_schedule_id: int,
        subject_id: int,
        student_ids: Iterable[str],
        phonemic_id: Optional[int] = None,
    ) -> Dict[str, Dict[str, bool]]:
        payload = {
            "approvedScheduleId": approved_schedule_id,
            "subjectId": subject_id,
            "phonemicId": phonemic_id,
            "studentIds": list(student_ids),
        }
        return self._request("post", STATUS_PATH, json=payload).get("statusByStudent", {})

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise PersistenceError(SERVER_UNREACHABLE) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("error") or response.reason or "Request failed."
        if response.status_code == 400:
            raise InputError(message)
        if response.status_code == 404:
            raise NotFoundError(message)
        if not response.ok:
            raise PersistenceError(message)
        return body
