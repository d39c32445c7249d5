"""
Module: client.retry

Purpose:
    Generic retry wrapper for fallible calls. Independent of the engine and
    of HTTP: anything raising UpstreamError can be wrapped.

Key Classes:
    - RetryPolicy: fixed attempts and delay, injectable sleep
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from spt_toolkit.errors import ConfigError, SessionExpiredError, UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry UpstreamError up to max_attempts with a fixed delay.

    SessionExpiredError is never retried.

    Attributes:
        max_attempts: Total attempts including the first (3 = up to 2 retries)
        delay: Seconds between attempts
        sleep: Sleep function (tests pass a fake)
    """

    max_attempts: int = 3
    delay: float = 1.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ConfigError(f"delay must be >= 0, got {self.delay}")

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """
        Call fn, retrying on UpstreamError.

        Raises:
            SessionExpiredError: Immediately, on the first occurrence
            UpstreamError: The last error once attempts are exhausted
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except SessionExpiredError:
                raise
            except UpstreamError as e:
                if attempt == self.max_attempts:
                    logger.error(f"Giving up after {attempt} attempts: {e}")
                    raise
                logger.warning(f"Attempt {attempt}/{self.max_attempts} failed: {e}; retrying in {self.delay}s")
                self.sleep(self.delay)
        raise AssertionError("unreachable")


NO_RETRY = RetryPolicy(max_attempts=1, delay=0.0)
