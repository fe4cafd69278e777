# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"


@dataclass(frozen=True)
class NotionConfig:
    """
    Configuration settings for Notion table operations.

    :param base_url: Root URL of the Notion REST API (default: ``https://api.notion.com/v1``).
    :type base_url: str
    :param notion_version: Value sent in the ``Notion-Version`` header.
    :type notion_version: str
    :param http_retries: Maximum number of attempts for HTTP requests (default: 5).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds for exponential backoff (default: 0.5).
    :type http_backoff: float or None
    :param http_max_backoff: Maximum delay between retry attempts in seconds (default: 60.0).
    :type http_max_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param http_jitter: Whether to add jitter to retry delays (default: True).
    :type http_jitter: bool or None
    :param http_retry_transient_errors: Whether to retry 429, 502, 503 and 504 responses (default: True).
    :type http_retry_transient_errors: bool or None
    :param batch_max_workers: Worker threads for ``create_many``. ``None`` starts one per item.
    :type batch_max_workers: int or None
    """

    base_url: str = DEFAULT_BASE_URL
    notion_version: str = DEFAULT_NOTION_VERSION

    # HTTP retry and resilience configuration
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_max_backoff: Optional[float] = None
    http_timeout: Optional[float] = None
    http_jitter: Optional[bool] = None
    http_retry_transient_errors: Optional[bool] = None

    # Batch fan-out
    batch_max_workers: Optional[int] = None

    @classmethod
    def from_env(cls) -> "NotionConfig":
        """
        Create a configuration instance from ``NOTION_*`` environment variables.

        Unset variables keep the defaults; HTTP settings left as ``None`` are
        resolved by the HTTP client.

        :return: Configuration instance.
        :rtype: ~notion_table.core.config.NotionConfig
        """
        retries = os.getenv("NOTION_HTTP_RETRIES", "").strip()
        timeout = os.getenv("NOTION_HTTP_TIMEOUT", "").strip()
        return cls(
            base_url=os.getenv("NOTION_API_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            notion_version=os.getenv("NOTION_VERSION", "").strip() or DEFAULT_NOTION_VERSION,
            http_retries=int(retries) if retries else None,  # Will default to 5 in _HttpClient
            http_timeout=float(timeout) if timeout else None,  # Method-dependent defaults in _HttpClient
        )
