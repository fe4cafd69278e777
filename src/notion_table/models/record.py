# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Record data model for Notion table pages.

Provides a strongly-typed representation of decoded pages with dict-like
access to the schema fields.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Union

RecordId = str
Timestamp = Union[_dt.datetime, str, None]


@dataclass
class TableRecord:
    """
    Decoded page with record metadata.

    :param id: Page id assigned by the store.
    :type id: str
    :param created_at: Page creation time.
    :type created_at: datetime | str | None
    :param updated_at: Last edit time.
    :type updated_at: datetime | str | None
    :param is_deleted: Whether the page is archived (soft-deleted).
    :type is_deleted: bool
    :param data: Schema field values.
    :type data: dict[str, Any]

    Example::

        record = tasks.find_by_id(task_id)
        print(record.id, record.is_deleted)
        print(record["title"])
        for name in record:
            print(name, record[name])
    """

    id: RecordId
    created_at: Timestamp = None
    updated_at: Timestamp = None
    is_deleted: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        """
        Dictionary-like field access.

        :raises KeyError: If the field doesn't exist.
        """
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def keys(self):
        return self.data.keys()

    def values(self):
        return self.data.values()

    def items(self):
        return self.data.items()

    def to_dict(self) -> Dict[str, Any]:
        """
        Return only the schema field values.

        :rtype: dict[str, Any]
        """
        return dict(self.data)

    def to_full_dict(self) -> Dict[str, Any]:
        """
        Return field values merged with ``id``, ``created_at``, ``updated_at`` and ``is_deleted``.

        :rtype: dict[str, Any]
        """
        out = dict(self.data)
        out.update(
            {
                "id": self.id,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
                "is_deleted": self.is_deleted,
            }
        )
        return out

    @classmethod
    def from_page(
        cls,
        page: Dict[str, Any],
        data: Dict[str, Any],
        *,
        parse_timestamp: Optional[Any] = None,
    ) -> "TableRecord":
        """
        Build a record from a raw page payload and its already-decoded fields.

        :param page: Raw page object (``id``, ``created_time``, ``last_edited_time``, ``archived``).
        :type page: dict[str, Any]
        :param data: Decoded field values.
        :type data: dict[str, Any]
        :param parse_timestamp: Optional callable applied to the timestamp strings.
        :return: Record instance.
        :rtype: TableRecord
        """
        created = page.get("created_time")
        updated = page.get("last_edited_time")
        if parse_timestamp is not None:
            created = parse_timestamp(created)
            updated = parse_timestamp(updated)
        return cls(
            id=str(page.get("id", "")),
            created_at=created,
            updated_at=updated,
            is_deleted=bool(page.get("archived", False) or page.get("in_trash", False)),
            data=data,
        )


__all__ = ["TableRecord", "RecordId"]
