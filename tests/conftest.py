# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures for notion-table tests.

:class:`FakeNotion` is an in-memory stand-in for the Notion REST endpoint groups
(``pages``, ``databases``, ``blocks``). It stores pages in a dict, supports
cursor paging and a small subset of filters, and counts every call so tests can
assert how many remote round trips an operation made.
"""

import copy
import itertools
import threading
from collections import Counter

import pytest

from notion_table.core.config import NotionConfig
from notion_table.core.errors import HttpError

DATABASE_ID = "db-123"
TIMESTAMP = "2024-01-01T00:00:00.000Z"
MAX_CHILDREN = 100


def _plain(items):
    return "".join(i.get("plain_text") or (i.get("text") or {}).get("content", "") for i in items or [])


def _check_children(children):
    if len(children or []) > MAX_CHILDREN:
        raise HttpError(
            f"body.children.length should be <= {MAX_CHILDREN}", status_code=400, service_error_code="validation_error"
        )


def _property_value(prop):
    """Reduce a stored property to a comparable Python value."""
    kind = prop.get("type")
    raw = prop.get(kind)
    if kind in ("title", "rich_text"):
        return _plain(raw)
    if kind in ("select", "status"):
        return raw.get("name") if raw else None
    if kind == "multi_select":
        return [o["name"] for o in raw or []]
    if kind == "date":
        return raw.get("start") if raw else None
    return raw


def _matches(page, notion_filter):
    if not notion_filter:
        return True
    for clause in notion_filter["and"]:
        prop = page["properties"].get(clause["property"])
        kind = next(k for k in clause if k != "property")
        op, operand = next(iter(clause[kind].items()))
        value = _property_value(prop) if prop else None
        if op == "equals" and value != operand:
            return False
        if op == "does_not_equal" and value == operand:
            return False
        if op == "contains" and (value is None or operand not in value):
            return False
        if op == "is_empty" and value not in (None, "", []):
            return False
        if op == "is_not_empty" and value in (None, "", []):
            return False
        if op == "greater_than" and not (value is not None and value > operand):
            return False
    return True


class _Pages:
    def __init__(self, store):
        self._store = store

    def retrieve(self, page_id):
        self._store.calls["pages.retrieve"] += 1
        if page_id in self._store.fail_retrieve or page_id not in self._store.pages:
            raise HttpError(f"Could not find page {page_id}", status_code=404, service_error_code="object_not_found")
        return copy.deepcopy(self._store.pages[page_id])

    def create(self, *, parent, properties, children=None):
        self._store.calls["pages.create"] += 1
        _check_children(children)
        title = _plain(next((p.get("title") for p in properties.values() if "title" in p), []))
        if title in self._store.fail_create_titles:
            raise HttpError(f"Rejected page '{title}'", status_code=400, service_error_code="validation_error")
        page_id = self._store.next_id("page")
        stored = {}
        for name, prop in properties.items():
            kind = next(iter(prop))
            stored[name] = {"id": name, "type": kind, kind: copy.deepcopy(prop[kind])}
        with self._store.lock:
            self._store.pages[page_id] = {
                "object": "page",
                "id": page_id,
                "parent": parent,
                "created_time": TIMESTAMP,
                "last_edited_time": TIMESTAMP,
                "archived": False,
                "properties": stored,
            }
            self._store.children[page_id] = [
                dict(block, id=self._store.next_id("block")) for block in children or []
            ]
        return {"object": "page", "id": page_id}

    def update(self, page_id, *, properties=None, archived=None):
        self._store.calls["pages.update"] += 1
        page = self._store.pages[page_id]
        for name, prop in (properties or {}).items():
            kind = next(iter(prop))
            page["properties"][name] = {"id": name, "type": kind, kind: copy.deepcopy(prop[kind])}
        if archived is not None:
            page["archived"] = archived
        page["last_edited_time"] = "2024-01-02T00:00:00.000Z"
        return copy.deepcopy(page)


class _Databases:
    def __init__(self, store):
        self._store = store

    def query(self, database_id, *, filter=None, sorts=None, start_cursor=None, page_size=None):
        self._store.calls["databases.query"] += 1
        self._store.queries.append({"filter": filter, "sorts": sorts, "start_cursor": start_cursor, "page_size": page_size})
        matching = [
            p for p in self._store.pages.values()
            if not p["archived"] and _matches(p, filter)
        ]
        offset = int(start_cursor) if start_cursor else 0
        size = page_size or 100
        window = matching[offset : offset + size]
        more = offset + size < len(matching)
        return {
            "object": "list",
            "results": copy.deepcopy(window),
            "next_cursor": str(offset + size) if more else None,
            "has_more": more,
        }


class _BlockChildren:
    def __init__(self, store):
        self._store = store

    def list(self, block_id, *, start_cursor=None, page_size=None):
        self._store.calls["blocks.children.list"] += 1
        return {"results": copy.deepcopy(self._store.children.get(block_id, [])), "next_cursor": None, "has_more": False}

    def append(self, block_id, *, children):
        self._store.calls["blocks.children.append"] += 1
        _check_children(children)
        added = [dict(block, id=self._store.next_id("block")) for block in children]
        self._store.children.setdefault(block_id, []).extend(added)
        return {"results": added}


class _Blocks:
    def __init__(self, store):
        self._store = store
        self.children = _BlockChildren(store)

    def delete(self, block_id):
        self._store.calls["blocks.delete"] += 1
        for blocks in self._store.children.values():
            blocks[:] = [b for b in blocks if b["id"] != block_id]
        return {"id": block_id, "archived": True}


class FakeNotion:
    """In-memory Notion workspace exposing the endpoint groups a table uses."""

    def __init__(self):
        self.pages = {}
        self.children = {}
        self.calls = Counter()
        self.queries = []
        self.fail_create_titles = set()
        self.fail_retrieve = set()
        self.lock = threading.RLock()
        self._ids = itertools.count(1)
        self.pages_api = _Pages(self)
        self.databases = _Databases(self)
        self.blocks = _Blocks(self)

    def next_id(self, prefix):
        with self.lock:
            return f"{prefix}-{next(self._ids)}"


class FakeClient:
    """Client facade handing the fake endpoint groups to :class:`NotionTable`."""

    def __init__(self, store):
        self.store = store
        self.pages = store.pages_api
        self.databases = store.databases
        self.blocks = store.blocks


@pytest.fixture
def notion():
    """Fresh in-memory Notion store."""
    return FakeNotion()


@pytest.fixture
def fake_client(notion):
    return FakeClient(notion)


@pytest.fixture
def database_id():
    return DATABASE_ID


@pytest.fixture
def task_schema():
    """Schema used by most table tests."""
    return {
        "title": {"type": "title", "required": True},
        "status": {"type": "select", "options": ["Open", "Done"]},
        "tags": "multi_select",
        "estimate": "number",
        "done": "checkbox",
        "due": "date",
        "notes": "rich_text",
    }


@pytest.fixture
def test_config():
    """Configuration with fast, deterministic HTTP settings."""
    return NotionConfig(
        base_url="https://api.example.com/v1",
        http_retries=1,
        http_backoff=0.1,
        http_timeout=5,
        http_jitter=False,
    )
