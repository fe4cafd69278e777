# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Result types for notion-table operations.

- :class:`QueryResult`: bounded result of a paged ``find_many`` call.
- :class:`BatchResult`: partition of a batch operation into successes and failures.
- :class:`BatchFailure`: one failed batch item with the input it was given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """
    Records returned by one paged query.

    :param records: Decoded records, at most the requested count.
    :type records: :class:`list`
    :param cursor: Last cursor reported by the store. Pass it back as
        ``find_many(cursor=...)`` to continue where the store stopped.
    :type cursor: :class:`str` | None
    :param has_more: Whether more matching records exist beyond this result.
    :type has_more: :class:`bool`

    Example::

        page = tasks.find_many({"status": "Open"}, count=50)
        while page.has_more:
            page = tasks.find_many({"status": "Open"}, count=50, cursor=page.cursor)
    """

    records: List[T] = field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = False

    def __iter__(self) -> Iterator[T]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> T:
        return self.records[index]


@dataclass(frozen=True)
class BatchFailure:
    """
    A failed batch item.

    :param data: The input payload exactly as it was passed in.
    :type data: dict
    :param error: The exception raised for this item, never ``None``.
    :type error: :class:`BaseException`
    """

    data: Dict[str, Any]
    error: BaseException


@dataclass(frozen=True)
class BatchResult(Generic[T]):
    """
    Outcome of a fan-out batch operation.

    Both lists keep input order among their own entries; ``len(succeeded) +
    len(failed)`` always equals the number of inputs.

    :param succeeded: Results of the items that completed.
    :type succeeded: :class:`list`
    :param failed: One :class:`BatchFailure` per item that raised.
    :type failed: :class:`list` of :class:`BatchFailure`
    """

    succeeded: List[T] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


__all__ = ["QueryResult", "BatchFailure", "BatchResult"]
