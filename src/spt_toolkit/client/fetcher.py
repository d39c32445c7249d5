"""
Module: client.fetcher

Purpose:
    Fetch CO summaries for many students.

    Sequential by default with a short pause between requests; with
    max_workers > 1 a thread pool is used instead. A student whose fetch
    fails gets an empty summary and the others continue. An expired session
    cancels everything still pending and is raised once.

Key Functions:
    - fetch_co_summaries(): student ids -> {student_id: {co_id: COSummary}}
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional

from spt_toolkit.core.models import COSummary
from spt_toolkit.errors import SessionExpiredError, UpstreamError

from .api import ApiClient

logger = logging.getLogger(__name__)

DEFAULT_THROTTLE = 0.1

Summaries = Dict[str, Dict[str, COSummary]]


def _fetch_one(client: ApiClient, student_id: str) -> Dict[str, COSummary]:
    client.session.check()
    try:
        co, _po = client.get_co_po(student_id)
    except SessionExpiredError:
        raise
    except UpstreamError as e:
        logger.warning(f"Could not fetch CO data for {student_id}: {e}")
        return {}
    return co


def fetch_co_summaries(
    client: ApiClient,
    student_ids: Iterable[str],
    *,
    max_workers: int = 1,
    throttle: float = DEFAULT_THROTTLE,
    sleep: Callable[[float], None] = time.sleep,
) -> Summaries:
    """
    Fetch CO summaries.

    Args:
        client: Bound API client
        student_ids: Ids to fetch; blank or duplicate ids are skipped
        max_workers: 1 = sequential, >1 = thread pool of that size
        throttle: Seconds between sequential requests
        sleep: Sleep function (tests pass a fake)

    Returns:
        student_id -> CO id -> COSummary, in input order

    Raises:
        SessionExpiredError: Once, after cancelling pending fetches
    """
    ids: List[str] = []
    for student_id in student_ids:
        if not isinstance(student_id, str) or not student_id.strip():
            logger.warning(f"Cannot fetch CO data: student id is invalid ({student_id!r})")
            continue
        if student_id not in ids:
            ids.append(student_id)

    if max_workers <= 1:
        results: Summaries = {}
        for i, student_id in enumerate(ids):
            if i and throttle > 0:
                sleep(throttle)
            results[student_id] = _fetch_one(client, student_id)
        logger.info(f"Fetched CO data for {len(results)} students")
        return results

    futures: Dict[str, Future] = {}
    expired: Optional[SessionExpiredError] = None
    executor = ThreadPoolExecutor(max_workers=max_workers)
    try:
        for student_id in ids:
            futures[student_id] = executor.submit(_fetch_one, client, student_id)
        results = {}
        for student_id, future in futures.items():
            try:
                results[student_id] = future.result()
            except SessionExpiredError as e:
                expired = e
                client.session.cancel()
                for pending in futures.values():
                    pending.cancel()
                break
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    if expired is not None:
        logger.error("Session expired; remaining fetches cancelled")
        raise expired
    logger.info(f"Fetched CO data for {len(results)} students ({max_workers} workers)")
    return results
