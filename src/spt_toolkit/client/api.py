"""
Module: client.api

Purpose:
    REST client for the student persistence backend.

    Every call carries the SessionContext's bearer token. A 401/403 response
    cancels the session and raises SessionExpiredError; any other failure
    (HTTP error, timeout, connection reset) raises UpstreamError with the
    backend's ``error`` message when one is provided. Idempotent requests
    (GET/PUT/DELETE) are wrapped in the client's RetryPolicy; POSTs are sent
    once.

Key Functions:
    - login() / signup(): Credentials -> SessionContext

Key Classes:
    - ApiClient: Student CRUD, CO/PO calculation, semester upload

Dependencies:
    - requests: HTTP
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from spt_toolkit.core.models import COSummary, CourseOutcomeTarget, MarkRecord, POSummary, Student
from spt_toolkit.core.utils.serialization import deserialize_students
from spt_toolkit.errors import SessionExpiredError, UpstreamError

from .retry import RetryPolicy
from .session import DEFAULT_API_URL, SessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
SEMESTER_UPLOAD_FIELDS = ("internal", "assignment", "classTest", "semester")
_IDEMPOTENT = frozenset({"GET", "PUT", "DELETE"})


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        return str(payload.get("error") or payload.get("message") or "")
    return ""


def _send(
    http: requests.Session,
    session: SessionContext,
    method: str,
    path: str,
    timeout: float,
    **kwargs,
) -> Any:
    """Single request with error mapping. Returns decoded JSON ({} for empty bodies)."""
    session.check()
    url = session.url(path)
    try:
        response = http.request(method, url, headers=session.headers(), timeout=timeout, **kwargs)
    except requests.exceptions.Timeout as e:
        raise UpstreamError(f"{method} {path} timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise UpstreamError(f"{method} {path} failed: {e}") from e

    if response.status_code in (401, 403):
        session.cancel()
        raise SessionExpiredError(
            "Session expired. Please log in again.",
            status_code=response.status_code,
            detail=_error_detail(response),
        )
    if not response.ok:
        detail = _error_detail(response)
        raise UpstreamError(
            f"{method} {path} returned {response.status_code}{f': {detail}' if detail else ''}",
            status_code=response.status_code,
            detail=detail,
        )
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(f"{method} {path} returned invalid JSON", status_code=response.status_code) from e


def _authenticate(
    endpoint: str,
    email: str,
    password: str,
    base_url: str,
    http: Optional[requests.Session],
    timeout: float,
) -> SessionContext:
    anonymous = SessionContext(base_url)
    try:
        payload = _send(http or requests.Session(), anonymous, "POST", endpoint, timeout,
                        json={"email": email, "password": password})
    except SessionExpiredError as e:
        # No session exists yet; a 401 here means rejected credentials
        raise UpstreamError(e.detail or "Invalid credentials!", status_code=e.status_code, detail=e.detail) from e
    token = payload.get("token") if isinstance(payload, dict) else None
    if not token:
        detail = payload.get("error", "") if isinstance(payload, dict) else ""
        raise UpstreamError(detail or "Invalid credentials!", detail=detail)
    logger.info(f"Authenticated {email} against {anonymous.base_url}")
    return SessionContext(anonymous.base_url, token)


def login(
    email: str,
    password: str,
    *,
    base_url: str = DEFAULT_API_URL,
    http: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> SessionContext:
    """
    Log in and return a session.

    Raises:
        UpstreamError: Bad credentials or backend failure
    """
    return _authenticate("/api/login", email, password, base_url, http, timeout)


def signup(
    email: str,
    password: str,
    *,
    base_url: str = DEFAULT_API_URL,
    http: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> SessionContext:
    """Create an account and return its session."""
    return _authenticate("/api/signup", email, password, base_url, http, timeout)


class ApiClient:
    """
    Backend client bound to one session.

    Usage:
        client = ApiClient(login("a@b.c", "pw"))
        students = client.list_students()
        co, po = client.get_co_po(students[0].student_id)
    """

    def __init__(
        self,
        session: SessionContext,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retry: Optional[RetryPolicy] = None,
        http: Optional[requests.Session] = None,
    ):
        self.session = session
        self.timeout = timeout
        self.retry = retry or RetryPolicy()
        self._http = http or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        if method in _IDEMPOTENT:
            return self.retry.call(_send, self._http, self.session, method, path, self.timeout, **kwargs)
        return _send(self._http, self.session, method, path, self.timeout, **kwargs)

    # ─────────────────────────────────────────────────────────────────────────
    # Students
    # ─────────────────────────────────────────────────────────────────────────

    def list_students(self) -> List[Student]:
        """All students; records without a valid string student_id are dropped."""
        payload = self._request("GET", "/students")
        students = deserialize_students(payload)
        logger.info(f"Fetched {len(students)} students")
        return students

    def create_student(self, student: Student) -> Any:
        return self._request("POST", "/students", json=student.to_dict())

    def update_marks(self, student_id: str, marks: Sequence[MarkRecord]) -> Any:
        return self._request("PUT", f"/students/{student_id}", json={"marks": [m.to_dict() for m in marks]})

    def update_targets(self, student_id: str, targets: Sequence[CourseOutcomeTarget]) -> Any:
        return self._request(
            "PUT",
            f"/students/{student_id}",
            json={"courseOutcomes": [t.to_dict() for t in targets]},
        )

    def delete_student(self, student_id: str) -> None:
        self._request("DELETE", f"/students/{student_id}")
        logger.info(f"Deleted student {student_id}")

    # ─────────────────────────────────────────────────────────────────────────
    # Attainment
    # ─────────────────────────────────────────────────────────────────────────

    def get_co_po(self, student_id: str) -> Tuple[Dict[str, COSummary], Dict[str, POSummary]]:
        """
        Backend CO/PO summaries for one student.

        Returns:
            (CO id -> COSummary, PO id -> POSummary); malformed entries skipped
        """
        payload = self._request("GET", f"/students/calculate-co-po/{student_id}")
        if not isinstance(payload, dict):
            raise UpstreamError(f"Unexpected CO/PO payload for {student_id}")
        co = _parse_summaries(payload.get("coSummary"), COSummary, student_id)
        po = _parse_summaries(payload.get("poSummary"), POSummary, student_id)
        return {s.co_id: s for s in co}, {s.po_id: s for s in po}

    def upload_semester_results(self, files: Mapping[str, Path]) -> Dict[str, Any]:
        """
        Upload semester workbooks for server-side calculation.

        Args:
            files: Form field -> workbook path; fields are "internal",
                "assignment", "classTest" and "semester"

        Raises:
            ValueError: Unknown form field
            FileNotFoundError: Missing workbook
        """
        unknown = set(files) - set(SEMESTER_UPLOAD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown upload fields: {sorted(unknown)}")
        with ExitStack() as stack:
            parts = {
                name: (Path(path).name, stack.enter_context(open(path, "rb")))
                for name, path in files.items()
            }
            return self._request("POST", "/students/upload-semester-results", files=parts)


def _parse_summaries(raw: Any, model, student_id: str) -> list:
    items = []
    for entry in raw if isinstance(raw, list) else []:
        try:
            items.append(model.from_dict(entry))
        except (ValueError, AttributeError, TypeError) as e:
            logger.warning(f"Skipping malformed summary for {student_id}: {e}")
    return items
