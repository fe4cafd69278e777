# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Low-level Notion REST client.

Exposes the endpoint groups the table layer needs, shaped like the official
SDKs: ``pages.retrieve/create/update``, ``databases.query``,
``blocks.children.list/append`` and ``blocks.delete``. Every call returns the
decoded JSON body; failures raise :class:`~notion_table.core.errors.HttpError`
or :class:`~notion_table.core.errors.RemoteIOError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..core._error_codes import REMOTE_INVALID_RESPONSE, REMOTE_NETWORK, TRANSIENT_STATUS_CODES
from ..core._http import _HttpClient
from ..core.config import NotionConfig
from ..core.errors import HttpError, RemoteIOError

logger = logging.getLogger(__name__)

_BODY_EXCERPT = 300


class _NotionClient:
    """Notion REST API client: pages, database queries and block children."""

    def __init__(self, token: str, config: Optional[NotionConfig] = None, session: Optional[requests.Session] = None):
        if not token:
            raise ValueError("token is required.")
        self._token = token
        self.config = config or NotionConfig.from_env()
        self.api = self.config.base_url.rstrip("/")
        self._http = _HttpClient(
            retries=self.config.http_retries,
            backoff=self.config.http_backoff,
            timeout=self.config.http_timeout,
            max_backoff=self.config.http_max_backoff,
            jitter=self.config.http_jitter,
            retry_transient_errors=self.config.http_retry_transient_errors,
            session=session,
        )
        self.pages = _Pages(self)
        self.databases = _Databases(self)
        self.blocks = _Blocks(self)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Notion-Version": self.config.notion_version,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.api}/{path.lstrip('/')}"
        try:
            r = self._http._request(method, url, headers=self._headers(), **kwargs)
        except requests.exceptions.RequestException as exc:
            raise RemoteIOError(
                f"{method.upper()} {path} failed: {exc}",
                subcode=REMOTE_NETWORK,
                details={"url": url},
                is_transient=True,
            ) from exc
        if r.status_code >= 400:
            raise self._http_error(method, path, r)
        try:
            body = r.json()
        except ValueError as exc:
            raise RemoteIOError(
                f"{method.upper()} {path} returned a non-JSON body",
                subcode=REMOTE_INVALID_RESPONSE,
                details={"url": url},
            ) from exc
        if not isinstance(body, dict):
            raise RemoteIOError(
                f"{method.upper()} {path} returned {type(body).__name__}, expected an object",
                subcode=REMOTE_INVALID_RESPONSE,
                details={"url": url},
            )
        return body

    @staticmethod
    def _http_error(method: str, path: str, r: requests.Response) -> HttpError:
        service_code = None
        message = None
        try:
            body = r.json()
            if isinstance(body, dict):
                service_code = body.get("code")
                message = body.get("message")
        except ValueError:
            pass
        text = getattr(r, "text", "") or ""
        retry_after = None
        raw_retry = (r.headers or {}).get("Retry-After")
        if raw_retry is not None:
            try:
                retry_after = int(raw_retry)
            except (TypeError, ValueError):
                retry_after = None
        logger.warning("%s %s -> %d %s", method.upper(), path, r.status_code, service_code or "")
        return HttpError(
            f"{method.upper()} {path} failed with {r.status_code}: {message or text[:_BODY_EXCERPT]}",
            status_code=r.status_code,
            is_transient=r.status_code in TRANSIENT_STATUS_CODES,
            service_error_code=service_code,
            request_id=(r.headers or {}).get("x-request-id"),
            body_excerpt=text[:_BODY_EXCERPT] or None,
            retry_after=retry_after,
        )

    def close(self) -> None:
        self._http.close()


class _Pages:
    def __init__(self, client: _NotionClient) -> None:
        self._client = client

    def retrieve(self, page_id: str) -> Dict[str, Any]:
        return self._client._request("get", f"pages/{page_id}")

    def create(
        self,
        *,
        parent: Dict[str, Any],
        properties: Dict[str, Any],
        children: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"parent": parent, "properties": properties}
        if children:
            payload["children"] = children
        return self._client._request("post", "pages", json=payload)

    def update(
        self,
        page_id: str,
        *,
        properties: Optional[Dict[str, Any]] = None,
        archived: Optional[bool] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if properties is not None:
            payload["properties"] = properties
        if archived is not None:
            payload["archived"] = archived
        return self._client._request("patch", f"pages/{page_id}", json=payload)


class _Databases:
    def __init__(self, client: _NotionClient) -> None:
        self._client = client

    def query(
        self,
        database_id: str,
        *,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if filter is not None:
            payload["filter"] = filter
        if sorts:
            payload["sorts"] = sorts
        if start_cursor:
            payload["start_cursor"] = start_cursor
        if page_size is not None:
            payload["page_size"] = int(page_size)
        return self._client._request("post", f"databases/{database_id}/query", json=payload)


class _BlockChildren:
    def __init__(self, client: _NotionClient) -> None:
        self._client = client

    def list(self, block_id: str, *, start_cursor: Optional[str] = None, page_size: Optional[int] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if start_cursor:
            params["start_cursor"] = start_cursor
        if page_size is not None:
            params["page_size"] = int(page_size)
        return self._client._request("get", f"blocks/{block_id}/children", params=params or None)

    def append(self, block_id: str, *, children: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._client._request("patch", f"blocks/{block_id}/children", json={"children": children})


class _Blocks:
    def __init__(self, client: _NotionClient) -> None:
        self._client = client
        self.children = _BlockChildren(client)

    def delete(self, block_id: str) -> Dict[str, Any]:
        return self._client._request("delete", f"blocks/{block_id}")
