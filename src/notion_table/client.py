# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import requests

from .core.config import NotionConfig
from .data._notion import _NotionClient
from .data.paging import PagingBatchEngine
from .models.schema import Schema
from .table import NotionTable


class NotionClient:
    """
    High-level client for a Notion workspace.

    Owns the HTTP connection and hands out :class:`~notion_table.table.NotionTable`
    instances bound to individual databases. The raw endpoint groups are available
    as ``client.pages``, ``client.databases`` and ``client.blocks``.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager pools connections in a
        ``requests.Session`` and closes it on exit::

            with NotionClient(token) as client:
                tasks = client.table(TASKS_DB, schema)
                tasks.create({"title": "Ship it"})

    **Without Context Manager**:
        The transport is created lazily on first use. Call ``close()`` when done::

            client = NotionClient(token)
            try:
                client.table(TASKS_DB, schema).find_many()
            finally:
                client.close()

    :param token: Notion integration token.
    :type token: :class:`str`
    :param config: Optional configuration for API version, timeouts, retries and
        batch concurrency. Defaults to :meth:`~notion_table.core.config.NotionConfig.from_env`.
    :type config: ~notion_table.core.config.NotionConfig or None

    :raises ValueError: If ``token`` is missing or empty.
    """

    def __init__(self, token: str, config: Optional[NotionConfig] = None) -> None:
        self._token = (token or "").strip()
        if not self._token:
            raise ValueError("token is required.")
        self._config = config or NotionConfig.from_env()
        self._transport: Optional[_NotionClient] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False

    def __enter__(self) -> "NotionClient":
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the transport and the pooled session, if any.

        Safe to call multiple times.
        """
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    def _get_transport(self) -> _NotionClient:
        if self._transport is None:
            self._transport = _NotionClient(self._token, self._config, session=self._session)
        return self._transport

    @property
    def config(self) -> NotionConfig:
        return self._config

    @property
    def pages(self):
        return self._get_transport().pages

    @property
    def databases(self):
        return self._get_transport().databases

    @property
    def blocks(self):
        return self._get_transport().blocks

    def table(self, database_id: str, schema: Union[Schema, Mapping[str, Any]], **kwargs: Any) -> NotionTable:
        """
        Bind a typed table to a database.

        Keyword arguments are passed to :class:`~notion_table.table.NotionTable`
        (``cache``, ``hooks``, ``validator``...). Unless an ``engine`` is given,
        batch concurrency follows ``config.batch_max_workers``.

        :param database_id: Notion database id.
        :type database_id: str
        :param schema: Field declarations.
        :rtype: ~notion_table.table.NotionTable

        Example::

            tasks = client.table(TASKS_DB, {
                "title": {"type": "title", "required": True},
                "status": "select",
                "due": "date",
            })
        """
        if "engine" not in kwargs:
            kwargs["engine"] = PagingBatchEngine(max_workers=self._config.batch_max_workers)
        return NotionTable(self, database_id, schema, **kwargs)


__all__ = ["NotionClient"]
