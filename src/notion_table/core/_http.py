# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
HTTP client with automatic retry logic, timeout handling, and optional session support.

This module provides :class:`~notion_table.core._http._HttpClient`, a wrapper
around the requests library that adds configurable retry behavior for transient
network errors and throttling responses, timeout management based on HTTP
method types, and optional connection pooling via session reuse.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Optional

import requests

from ._error_codes import TRANSIENT_STATUS_CODES

logger = logging.getLogger(__name__)


class _HttpClient:
    """
    HTTP client with configurable retry logic, timeout handling, and optional session support.

    :param retries: Maximum number of attempts. Default is 5.
    :type retries: :class:`int` | None
    :param backoff: Base delay in seconds between retry attempts. Default is 0.5.
    :type backoff: :class:`float` | None
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    :param max_backoff: Upper bound for a single retry delay. Default is 60.0.
    :type max_backoff: :class:`float` | None
    :param jitter: Add +/-25% random variation to retry delays.
    :type jitter: :class:`bool` | None
    :param retry_transient_errors: Retry 429/502/503/504 responses.
    :type retry_transient_errors: :class:`bool` | None
    :param session: Optional requests.Session for connection pooling.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        retries: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        max_backoff: Optional[float] = None,
        jitter: Optional[bool] = None,
        retry_transient_errors: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.max_attempts = retries if retries is not None else 5
        self.base_delay = backoff if backoff is not None else 0.5
        self.max_backoff = max_backoff if max_backoff is not None else 60.0
        self.default_timeout: Optional[float] = timeout
        self.jitter = jitter if jitter is not None else True
        self.retry_transient_errors = retry_transient_errors if retry_transient_errors is not None else True
        self.transient_status_codes = set(TRANSIENT_STATUS_CODES)
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Execute an HTTP request with automatic retry logic and timeout management.

        Applies default timeouts based on HTTP method (120s for POST/PATCH/DELETE, 30s
        for others), retries on network errors and on transient status codes with
        exponential backoff. The last transient response is returned as-is once
        attempts are exhausted.

        :param method: HTTP method (GET, POST, PATCH, DELETE).
        :type method: :class:`str`
        :param url: Target URL for the request.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``requests.request()`` or
            ``session.request()``, including headers, json, params.
        :return: HTTP response object.
        :rtype: :class:`requests.Response`
        :raises requests.exceptions.RequestException: If all retry attempts fail.
        """
        if "timeout" not in kwargs:
            if self.default_timeout is not None:
                kwargs["timeout"] = self.default_timeout
            else:
                m = (method or "").lower()
                kwargs["timeout"] = 120 if m in ("post", "patch", "delete") else 30

        for attempt in range(self.max_attempts):
            try:
                logger.debug("%s %s (attempt %d/%d)", method.upper(), url, attempt + 1, self.max_attempts)
                if self._session is not None:
                    response = self._session.request(method, url, **kwargs)
                else:
                    response = requests.request(method, url, **kwargs)
            except requests.exceptions.RequestException as exc:
                if attempt == self.max_attempts - 1:
                    raise
                delay = self._calculate_retry_delay(attempt)
                logger.warning("%s %s failed (%s); retrying in %.2fs", method.upper(), url, exc, delay)
                time.sleep(delay)
                continue

            if (
                self.retry_transient_errors
                and response.status_code in self.transient_status_codes
                and attempt < self.max_attempts - 1
            ):
                delay = self._calculate_retry_delay(attempt, response)
                logger.warning(
                    "%s %s returned %d; retrying in %.2fs", method.upper(), url, response.status_code, delay
                )
                time.sleep(delay)
                continue
            return response

        raise RuntimeError("Unexpected end of retry loop")

    def _calculate_retry_delay(self, attempt: int, response: Optional[requests.Response] = None) -> float:
        """
        Calculate the delay before the next retry attempt.

        A valid integer ``Retry-After`` header wins (capped at ``max_backoff``);
        otherwise ``base_delay * 2**attempt`` capped at ``max_backoff``, with
        +/-25% jitter when enabled.

        :param attempt: Zero-based retry attempt number.
        :type attempt: int
        :param response: Response carrying an optional ``Retry-After`` header.
        :type response: requests.Response or None
        :return: Delay in seconds, always >= 0.
        :rtype: float
        """
        if response is not None and "Retry-After" in (response.headers or {}):
            try:
                retry_after = int(response.headers["Retry-After"])
                return min(retry_after, self.max_backoff)
            except (ValueError, TypeError):
                pass

        delay = min(self.base_delay * (2**attempt), self.max_backoff)
        if self.jitter:
            jitter_range = delay * 0.25
            delay = max(0, delay + random.uniform(-jitter_range, jitter_range))
        return delay

    def close(self) -> None:
        """
        Close the HTTP client and release resources.

        If a session was provided, this method closes it. Safe to call multiple times.
        """
        if self._session is not None:
            self._session.close()
            self._session = None
