# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Cursor-driven paged fetch and concurrent batch fan-out.

:class:`PagingBatchEngine` holds no state between calls. :meth:`fetch` walks
the store's cursor protocol one page at a time, bounded by the requested
count. :meth:`fan_out` runs independent operations concurrently and collects
every outcome.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from ..core._error_codes import REMOTE_INVALID_RESPONSE
from ..core.errors import BatchItemError, RemoteIOError
from ..core.results import BatchFailure, BatchResult, QueryResult

logger = logging.getLogger(__name__)

MAX_COUNT = 1024
MAX_PAGE_SIZE = 100

T = TypeVar("T")
PageFetcher = Callable[[Optional[str], int], Mapping[str, Any]]


def clamp_count(count: int) -> int:
    """Clamp a requested record count to ``[1, 1024]``."""
    return min(max(1, int(count)), MAX_COUNT)


class PagingBatchEngine:
    """
    Paged fetch and batch fan-out.

    :param max_workers: Thread pool size for :meth:`fan_out`. ``None`` starts one
        worker per item.
    :type max_workers: int or None
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.max_workers = max_workers

    def fetch(
        self,
        query_page: PageFetcher,
        decode: Callable[[Dict[str, Any]], T],
        count: int,
        *,
        start_cursor: Optional[str] = None,
    ) -> QueryResult[T]:
        """
        Fetch up to ``count`` records, one page at a time.

        Pages are requested sequentially with ``page_size = min(count, 100)``.
        The loop stops once the accumulated records reach ``count`` or the store
        reports no further page, so it ends even if the store always claims
        more. Overshoot from the last page is truncated.

        The reported ``cursor`` is always the last cursor the store returned,
        even when records of that page were truncated. ``has_more`` mirrors the
        store: it is true only when the store reported another page and handed
        back a cursor for it. Truncation alone never sets it.

        Any page failure propagates; nothing accumulated so far is returned.

        :param query_page: ``query_page(cursor, page_size)`` returning a raw
            ``{"results", "next_cursor", "has_more"}`` page.
        :param decode: Converts one raw result into a record.
        :param count: Requested number of records, clamped to ``[1, 1024]``.
        :param start_cursor: Cursor to resume from; ``None`` starts at the beginning.
        :rtype: ~notion_table.core.results.QueryResult
        """
        max_count = clamp_count(count)
        page_size = min(max_count, MAX_PAGE_SIZE)

        records: List[T] = []
        cursor = start_cursor
        server_has_more = True
        pages = 0
        while server_has_more and len(records) < max_count:
            response = query_page(cursor, page_size)
            results = response.get("results")
            if not isinstance(results, list):
                raise RemoteIOError(
                    "Query response is missing a 'results' list",
                    subcode=REMOTE_INVALID_RESPONSE,
                )
            pages += 1
            records.extend(decode(item) for item in results)
            cursor = response.get("next_cursor")
            server_has_more = bool(response.get("has_more")) and cursor is not None

        truncated = len(records) > max_count
        if truncated:
            records = records[:max_count]
        logger.debug(
            "Fetched %d record(s) in %d page(s) (page_size=%d, truncated=%s)",
            len(records),
            pages,
            page_size,
            truncated,
        )
        return QueryResult(records=records, cursor=cursor, has_more=server_has_more)

    def fan_out(self, operation: Callable[[Any], T], items: Sequence[Dict[str, Any]]) -> BatchResult[T]:
        """
        Run ``operation`` on every item concurrently and partition the outcomes.

        Every operation runs to completion; a failure never cancels its
        siblings. Successes and failures each keep input order. A failure that
        is not an :class:`Exception` is wrapped in
        :class:`~notion_table.core.errors.BatchItemError`.

        :rtype: ~notion_table.core.results.BatchResult
        """
        if not items:
            return BatchResult()
        workers = self.max_workers or len(items)
        with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
            futures = [pool.submit(operation, item) for item in items]

        succeeded: List[T] = []
        failed: List[BatchFailure] = []
        for item, future in zip(items, futures):
            exc = future.exception()
            if exc is None:
                succeeded.append(future.result())
                continue
            error = exc if isinstance(exc, Exception) else BatchItemError(exc)
            failed.append(BatchFailure(data=item, error=error))
        logger.info("Batch finished: %d succeeded, %d failed", len(succeeded), len(failed))
        return BatchResult(succeeded=succeeded, failed=failed)


__all__ = ["PagingBatchEngine", "clamp_count", "MAX_COUNT", "MAX_PAGE_SIZE"]
