"""
Module: errors

Purpose:
    Exception hierarchy shared by the toolkit. The attainment engine itself
    never raises for bad marks (it degrades to zero/excluded contributions);
    these exceptions cover the collaborators around it: configuration,
    spreadsheet import, the persistence backend and report export.

Key Classes:
    - SptError: Base class for all toolkit errors
    - ConfigError: Invalid configuration value
    - MalformedRowError: Imported row missing an identity field
    - UpstreamError: Backend failure (retryable)
    - SessionExpiredError: Backend rejected the session (fatal)
    - ExportError: Report could not be written

Used By:
    - spt_toolkit.config
    - spt_toolkit.importing.spreadsheet
    - spt_toolkit.client
    - spt_toolkit.output
"""

from __future__ import annotations

from typing import Optional


class SptError(Exception):
    """Base class for toolkit errors."""
    pass


class ConfigError(SptError):
    """Raised when a configuration value is invalid."""
    pass


class MalformedRowError(SptError):
    """
    An imported spreadsheet row lacks a required identity field.

    Only the offending row is dropped; the rest of the batch is imported.

    Attributes:
        row_number: 1-based sheet row number (header is row 1)
        missing: Names of the missing fields
    """

    def __init__(self, message: str, row_number: int = 0, missing: tuple[str, ...] = ()):
        super().__init__(message)
        self.row_number = row_number
        self.missing = missing


class UpstreamError(SptError):
    """
    The persistence backend failed or timed out.

    Retryable under a RetryPolicy.

    Attributes:
        status_code: HTTP status if a response was received
        detail: Backend ``error`` message, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class SessionExpiredError(UpstreamError):
    """The backend rejected the session token; re-authentication is required."""
    pass


class ExportError(SptError):
    """A report file could not be written."""
    pass
