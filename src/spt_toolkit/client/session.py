"""
Module: client.session

Purpose:
    Explicit session value passed to every backend call. Replaces any
    process-wide token store: the token travels with the context, and the
    first 401/403 sets the cancellation flag so in-flight work can stop.

Key Classes:
    - SessionContext: base URL, bearer token, cancellation flag
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict

from spt_toolkit.errors import SessionExpiredError

DEFAULT_API_URL = "http://localhost:5000"


@dataclass
class SessionContext:
    """
    Authenticated backend session.

    Attributes:
        base_url: Backend root, without trailing slash
        token: Bearer token ("" before login)
        cancelled: Set once the backend rejects the token

    Example:
        >>> session = SessionContext("http://localhost:5000", "abc")
        >>> session.headers()
        {'Authorization': 'Bearer abc'}
    """

    base_url: str = DEFAULT_API_URL
    token: str = ""
    cancelled: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def cancel(self) -> None:
        """Mark the session expired; pending operations stop at their next check."""
        self.cancelled.set()

    def check(self) -> None:
        """
        Raises:
            SessionExpiredError: If the session has been cancelled
        """
        if self.cancelled.is_set():
            raise SessionExpiredError("Session expired. Please log in again.", status_code=401)

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"
