"""
Client Package

Backend REST client, explicit session context, retry policy and the
bulk CO summary fetcher.
"""

from .session import DEFAULT_API_URL, SessionContext
from .retry import NO_RETRY, RetryPolicy
from .api import ApiClient, login, signup
from .fetcher import fetch_co_summaries

__all__ = [
    "DEFAULT_API_URL",
    "SessionContext",
    "NO_RETRY",
    "RetryPolicy",
    "ApiClient",
    "login",
    "signup",
    "fetch_co_summaries",
]
