# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the notion-table SDK.

This module contains configuration, the HTTP client, the record cache, result
types and the error hierarchy.
"""

from .errors import (
    NotionTableError,
    ValidationError,
    ConfigurationError,
    UnsupportedFieldTypeError,
    UnsupportedOperatorError,
    RemoteIOError,
    HttpError,
    RecordRefetchError,
    BatchItemError,
)
from .results import QueryResult, BatchResult, BatchFailure

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
    "QueryResult",
    "BatchResult",
    "BatchFailure",
]
