# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the notion-table SDK.

- :class:`~notion_table.models.schema.PropertyConfig`: Field declaration.
- :class:`~notion_table.models.schema.FieldType`: Closed set of property types.
- :class:`~notion_table.models.record.TableRecord`: Decoded page with dict-like access.
- :class:`~notion_table.models.query.SortOption`: Sort key.
- :class:`~notion_table.models.query.TableHooks`: Lifecycle callbacks.

Note:
    This ``__init__.py`` does NOT import/export models. Import directly from the
    specific module files.
"""

__all__ = []
