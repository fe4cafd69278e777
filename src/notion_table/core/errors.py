# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured error hierarchy for the notion-table SDK.

The hierarchy separates three failure shapes that callers must be able to
tell apart:

- :class:`ValidationError` and the configuration errors are raised before any
  remote effect took place.
- :class:`RecordRefetchError` means the remote write happened but the
  confirmation read came back empty.
- :class:`BatchItemError` (or the original exception) is what a single item of
  a batch carries in :class:`~notion_table.core.results.BatchFailure`.

Remote failures surface as :class:`RemoteIOError`, or its subclass
:class:`HttpError` when the store answered with a non-success status.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional

from ._error_codes import http_subcode

__all__ = [
    "NotionTableError",
    "ValidationError",
    "ConfigurationError",
    "UnsupportedFieldTypeError",
    "UnsupportedOperatorError",
    "RemoteIOError",
    "HttpError",
    "RecordRefetchError",
    "BatchItemError",
]


class NotionTableError(Exception):
    """Base structured error for the notion-table SDK."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the error to a plain dictionary.

        :return: Dictionary with message, code, subcode, status, details, source,
            transient flag and timestamp.
        :rtype: dict[str, Any]
        """
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(NotionTableError):
    """A write payload or query argument violates the table schema."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details, source="client")


class ConfigurationError(NotionTableError):
    """A schema or query references something the SDK does not know."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="configuration_error", subcode=subcode, details=details, source="client")


class UnsupportedFieldTypeError(ConfigurationError):
    pass


class UnsupportedOperatorError(ConfigurationError):
    pass


class RemoteIOError(NotionTableError):
    """Any failure reported by, or while talking to, the remote store."""

    def __init__(
        self,
        message: str,
        *,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(
            message,
            code="remote_io_error",
            subcode=subcode,
            details=details,
            source="server",
            is_transient=is_transient,
        )


class HttpError(RemoteIOError):
    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        service_error_code: Optional[str] = None,
        request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if request_id is not None:
            d["request_id"] = request_id
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        if retry_after is not None:
            d["retry_after"] = retry_after
        super().__init__(message, subcode=http_subcode(status_code), details=d, is_transient=is_transient)
        self.code = "http_error"
        self.status_code = status_code


class RecordRefetchError(NotionTableError):
    """The remote write succeeded but reading the record back returned nothing."""

    def __init__(self, message: str, *, record_id: Optional[str] = None, subcode: Optional[str] = None):
        details = {"record_id": record_id} if record_id is not None else None
        super().__init__(message, code="refetch_error", subcode=subcode, details=details, source="client")
        self.record_id = record_id


class BatchItemError(NotionTableError):
    """Normalized failure for a batch item whose failure reason was not an exception."""

    def __init__(self, reason: Any) -> None:
        super().__init__(str(reason), code="batch_item_error", details={"reason": repr(reason)}, source="client")
        self.reason = reason
