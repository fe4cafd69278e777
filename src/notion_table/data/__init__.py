# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the notion-table SDK.

This module contains the property converter, the write validator, the query
translator, the paging and batch engine, and the Notion REST transport.
"""

from .converter import SchemaConverter
from .validator import SchemaValidator
from .query import QueryTranslator
from .paging import PagingBatchEngine

__all__ = ["SchemaConverter", "SchemaValidator", "QueryTranslator", "PagingBatchEngine"]
