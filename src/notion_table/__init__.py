# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema-typed tables over Notion databases.

Example::

    from notion_table import NotionClient

    with NotionClient(token) as client:
        tasks = client.table(TASKS_DB, {"title": {"type": "title", "required": True}})
        tasks.create({"title": "Ship it"})
"""

from .client import NotionClient
from .table import NotionTable

__version__ = "0.1.0"

__all__ = ["NotionClient", "NotionTable", "__version__"]
