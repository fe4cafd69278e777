# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
In-process record cache.

The cache is best-effort: entries never expire and are only dropped by explicit
invalidation. Every write path of :class:`~notion_table.table.NotionTable`
deletes the ``page:<id>`` key it touched; a read interleaved with a write on the
same key may still observe the old snapshot.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, TypeVar

V = TypeVar("V")


def page_cache_key(record_id: str) -> str:
    """Return the cache key used for a record snapshot."""
    return f"page:{record_id}"


class MemoryCache:
    """
    Dict-backed key-value cache with ``get``/``set``/``delete``/``clear``.

    Example::

        cache = MemoryCache()
        orders = client.table(ORDERS_DB, schema, cache=cache)
        archive = client.table(ARCHIVE_DB, schema, cache=cache)  # shares snapshots
    """

    def __init__(self) -> None:
        self._store: Dict[str, Any] = {}

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        return self._store.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)


__all__ = ["MemoryCache", "page_cache_key"]
