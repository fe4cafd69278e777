# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Sort and hook declarations used by :class:`~notion_table.table.NotionTable`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .record import TableRecord

WhereCondition = Mapping[str, Any]
"""Field name to a scalar (equality shorthand) or an ``{operator: operand}`` dict."""

ASCENDING = "ascending"
DESCENDING = "descending"


@dataclass(frozen=True)
class SortOption:
    """
    One sort key. Listed order is sort priority: the first key is primary.

    :param field: Schema field name, or ``created_at`` / ``updated_at``.
    :type field: str
    :param direction: ``"ascending"`` or ``"descending"`` (``"asc"``/``"desc"`` accepted).
    :type direction: str
    """

    field: str
    direction: str = ASCENDING


SortLike = Union[SortOption, Mapping[str, str], tuple]


@dataclass
class TableHooks:
    """
    Optional lifecycle callbacks.

    ``before_create`` and ``before_update`` may return a transformed payload;
    returning ``None`` keeps the payload unchanged.

    Example::

        def stamp(data):
            return {**data, "source": "import"}

        tasks.hooks = TableHooks(before_create=stamp, after_delete=audit.log_delete)
    """

    before_create: Optional[Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]] = None
    after_create: Optional[Callable[[TableRecord], Any]] = None
    before_update: Optional[Callable[[str, Dict[str, Any]], Optional[Dict[str, Any]]]] = None
    after_update: Optional[Callable[[str, TableRecord], Any]] = None
    before_delete: Optional[Callable[[str], Any]] = None
    after_delete: Optional[Callable[[str], Any]] = None


__all__ = ["WhereCondition", "SortOption", "SortLike", "TableHooks", "ASCENDING", "DESCENDING"]
