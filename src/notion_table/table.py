# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Schema-typed CRUD and query surface over one Notion database."""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .content.blocks import MAX_BLOCKS_PER_REQUEST, BlockEnhancer, batch_blocks, to_blocks as default_to_blocks
from .core._error_codes import REFETCH_EMPTY, VALIDATION_UPSERT_NON_EQUALITY
from .core.cache import MemoryCache, page_cache_key
from .core.errors import RecordRefetchError, ValidationError
from .core.results import BatchResult, QueryResult
from .data.converter import SchemaConverter, parse_date
from .data.paging import PagingBatchEngine
from .data.query import QueryTranslator
from .data.validator import SchemaValidator
from .models.query import SortLike, TableHooks, WhereCondition
from .models.record import TableRecord
from .models.schema import Schema, build_schema

logger = logging.getLogger(__name__)

BODY_KEY = "body"


class NotionTable:
    """
    Typed data access for one Notion database.

    Every record handed back has been decoded through the schema exactly once;
    raw property payloads never reach the caller.

    :param client: Remote client exposing ``pages``, ``databases`` and ``blocks``
        (see :class:`~notion_table.client.NotionClient`).
    :param database_id: Id of the database the table is bound to.
    :type database_id: str
    :param schema: Field declarations; plain dicts are passed through
        :func:`~notion_table.models.schema.build_schema`.
    :param cache: Record cache, shared across tables if the same object is passed.
    :param validator: Write-payload validator.
    :param translator: ``where``/sort translator.
    :param converter: Property converter.
    :param engine: Paging and batch engine.
    :param to_blocks: Markdown to block conversion for ``body`` content.
    :param enhancer: Block-type normalizer applied to every produced block.
    :param hooks: Lifecycle callbacks; may also be assigned later via ``table.hooks``.

    Example::

        tasks = NotionTable(
            client=client,
            database_id=TASKS_DB,
            schema={"title": {"type": "title", "required": True}, "status": "select"},
        )
        task = tasks.create({"title": "Write docs", "status": "Open", "body": "# Plan"})
        open_tasks = tasks.find_many({"status": "Open"}, sorts=[("title", "asc")])
        tasks.update(task.id, {"status": "Done"})
        tasks.delete(task.id)
    """

    def __init__(
        self,
        client: Any,
        database_id: str,
        schema: Union[Schema, Mapping[str, Any]],
        *,
        cache: Optional[MemoryCache] = None,
        validator: Optional[SchemaValidator] = None,
        translator: Optional[QueryTranslator] = None,
        converter: Optional[SchemaConverter] = None,
        engine: Optional[PagingBatchEngine] = None,
        to_blocks: Optional[Callable[[str], List[Dict[str, Any]]]] = None,
        enhancer: Optional[BlockEnhancer] = None,
        hooks: Optional[TableHooks] = None,
    ) -> None:
        if not database_id:
            raise ValueError("database_id is required.")
        self._client = client
        self.database_id = database_id
        self.schema = build_schema(schema)
        self._cache = cache if cache is not None else MemoryCache()
        self._validator = validator or SchemaValidator()
        self._converter = converter or SchemaConverter()
        self._translator = translator or QueryTranslator(self._converter)
        self._engine = engine or PagingBatchEngine()
        self._to_blocks = to_blocks or default_to_blocks
        self._enhancer = enhancer or BlockEnhancer()
        self.hooks = hooks or TableHooks()

    # ----------------------------------------------------------------- reads

    def find_many(
        self,
        where: Optional[WhereCondition] = None,
        *,
        count: int = 100,
        sorts: Union[None, SortLike, Iterable[SortLike]] = None,
        cursor: Optional[str] = None,
    ) -> QueryResult[TableRecord]:
        """
        Query records matching ``where``.

        :param where: Field conditions; keys are AND-ed. ``None``/``{}`` means no filter.
        :param count: Maximum records to return, clamped to ``[1, 1024]``.
        :type count: int
        :param sorts: Sort option(s); first is primary. Empty uses the store order.
        :param cursor: Resume from the ``cursor`` of a previous result.
        :type cursor: str or None
        :return: Records with the last store cursor and a ``has_more`` flag.
        :rtype: ~notion_table.core.results.QueryResult
        :raises ~notion_table.core.errors.RemoteIOError: If any page fetch fails;
            no partial result is returned.
        """
        notion_filter = self._translator.build_filter(self.schema, where or {})
        notion_sorts = self._translator.build_sort(sorts, self.schema)

        def query_page(start_cursor: Optional[str], page_size: int) -> Dict[str, Any]:
            return self._client.databases.query(
                self.database_id,
                filter=notion_filter,
                sorts=notion_sorts or None,
                start_cursor=start_cursor,
                page_size=page_size,
            )

        return self._engine.fetch(query_page, self._to_record, count, start_cursor=cursor)

    def find_one(
        self,
        where: Optional[WhereCondition] = None,
        *,
        sorts: Union[None, SortLike, Iterable[SortLike]] = None,
    ) -> Optional[TableRecord]:
        """Return the first record matching ``where``, or ``None``."""
        result = self.find_many(where, count=1, sorts=sorts)
        return result.records[0] if result.records else None

    def find_by_id(self, record_id: str, *, cache: bool = False) -> Optional[TableRecord]:
        """
        Fetch one record by id.

        With ``cache=True`` a cached snapshot is returned when present, and a
        fetched record is stored. The cache holds its own copy and every hit
        returns a fresh one, so mutating a returned record never changes what
        later reads see. Any lookup failure, including not-found, returns ``None``.

        :rtype: ~notion_table.models.record.TableRecord or None
        """
        key = page_cache_key(record_id)
        if cache:
            cached = self._cache.get(key)
            if cached is not None:
                return copy.deepcopy(cached)

        try:
            page = self._client.pages.retrieve(record_id)
            record = self._to_record(page)
        except Exception as exc:
            logger.warning("Lookup of record %s failed; returning None: %s", record_id, exc)
            return None

        if cache:
            self._cache.set(key, copy.deepcopy(record))
        return record

    # ---------------------------------------------------------------- writes

    def create(self, data: Mapping[str, Any]) -> TableRecord:
        """
        Create a record.

        A ``body`` key holds markdown text that becomes the page content. The
        first 100 blocks go with the create request; the rest are appended in
        batches of 100.

        :return: The created record, read back from the store.
        :raises ~notion_table.core.errors.ValidationError: Before any remote call.
        :raises ~notion_table.core.errors.RecordRefetchError: If the page was created
            but could not be read back.
        """
        self._validator.validate(self.schema, data)
        payload = dict(data)
        if self.hooks.before_create:
            payload = self.hooks.before_create(payload) or payload

        properties = self._converter.to_external(self.schema, payload)
        children = self._content_blocks(payload.get(BODY_KEY))

        response = self._client.pages.create(
            parent={"database_id": self.database_id},
            properties=properties,
            children=children[:MAX_BLOCKS_PER_REQUEST] if children else None,
        )
        record_id = response["id"]
        if children and len(children) > MAX_BLOCKS_PER_REQUEST:
            self._append_blocks(record_id, children[MAX_BLOCKS_PER_REQUEST:])
        logger.debug("Created record %s in %s", record_id, self.database_id)

        record = self.find_by_id(record_id)
        if record is None:
            raise RecordRefetchError(
                f"Record {record_id} was created but could not be read back",
                record_id=record_id,
                subcode=REFETCH_EMPTY,
            )
        if self.hooks.after_create:
            self.hooks.after_create(record)
        return record

    def create_many(self, records: List[Mapping[str, Any]]) -> BatchResult[TableRecord]:
        """
        Create records concurrently.

        Each item runs the full :meth:`create` pipeline on its own; one failure
        does not stop the others.

        :return: Created records and per-item failures, each in input order.
        :rtype: ~notion_table.core.results.BatchResult
        """
        return self._engine.fan_out(self.create, list(records))

    def update(self, record_id: str, data: Mapping[str, Any]) -> None:
        """
        Update the supplied fields of a record.

        Required fields absent from ``data`` are not validated; supplied ones are.
        A truthy ``body`` replaces the page content.
        """
        self._validator.validate(self.schema, data, partial=True)
        payload = dict(data)
        if self.hooks.before_update:
            payload = self.hooks.before_update(record_id, payload) or payload

        properties = self._converter.to_external(self.schema, payload)
        self._client.pages.update(record_id, properties=properties)

        body = payload.get(BODY_KEY)
        if body:
            self._replace_content(record_id, body)

        self._cache.delete(page_cache_key(record_id))
        logger.debug("Updated record %s", record_id)

        if self.hooks.after_update:
            record = self.find_by_id(record_id)
            if record is not None:
                self.hooks.after_update(record_id, record)

    def update_many(self, where: Optional[WhereCondition], update: Mapping[str, Any], *, count: int = 1024) -> int:
        """
        Apply ``update`` to every record matching ``where``, one after another.

        Not atomic: a failure stops the loop with earlier updates kept.

        :return: Number of records updated.
        :rtype: int
        """
        result = self.find_many(where, count=count)
        updated = 0
        for record in result.records:
            self.update(record.id, update)
            updated += 1
        return updated

    def upsert(
        self,
        where: WhereCondition,
        *,
        insert: Optional[Mapping[str, Any]] = None,
        update: Optional[Mapping[str, Any]] = None,
    ) -> TableRecord:
        """
        Update the first record matching ``where``, or create one.

        ``where`` must be a flat equality map (scalars or ``{"equals": v}``); its
        values seed the created record together with ``insert`` (``insert`` wins
        on conflicts). ``update`` is only used when a record is found, ``insert``
        only when none is. The created record is not re-checked against ``where``.

        :raises ~notion_table.core.errors.ValidationError: If ``where`` uses any
            operator other than equality.
        """
        seed = self._equality_values(where)
        existing = self.find_one(where)
        if existing is not None:
            self.update(existing.id, dict(update or {}))
            refreshed = self.find_by_id(existing.id)
            if refreshed is None:
                raise RecordRefetchError(
                    f"Record {existing.id} was updated but could not be read back",
                    record_id=existing.id,
                    subcode=REFETCH_EMPTY,
                )
            return refreshed
        return self.create({**seed, **dict(insert or {})})

    def delete(self, record_id: str) -> None:
        """Archive (soft-delete) a record. It stays readable with ``is_deleted=True``."""
        if self.hooks.before_delete:
            self.hooks.before_delete(record_id)
        self._client.pages.update(record_id, archived=True)
        self._cache.delete(page_cache_key(record_id))
        logger.debug("Archived record %s", record_id)
        if self.hooks.after_delete:
            self.hooks.after_delete(record_id)

    def delete_many(self, where: Optional[WhereCondition] = None) -> int:
        """
        Archive every record matching ``where`` (up to 1024), one after another.

        :return: Number of records archived.
        :rtype: int
        """
        result = self.find_many(where, count=1024)
        deleted = 0
        for record in result.records:
            self.delete(record.id)
            deleted += 1
        return deleted

    def restore(self, record_id: str) -> None:
        """Un-archive a record."""
        self._client.pages.update(record_id, archived=False)
        self._cache.delete(page_cache_key(record_id))
        logger.debug("Restored record %s", record_id)

    def clear_cache(self) -> None:
        self._cache.clear()

    # --------------------------------------------------------------- helpers

    def _to_record(self, page: Dict[str, Any]) -> TableRecord:
        data = self._converter.from_external(self.schema, page.get("properties") or {})
        return TableRecord.from_page(page, data, parse_timestamp=parse_date)

    def _content_blocks(self, body: Optional[str]) -> Optional[List[Dict[str, Any]]]:
        if not body:
            return None
        return self._enhancer.enhance_blocks(self._to_blocks(str(body)))

    def _replace_content(self, record_id: str, body: str) -> None:
        block_ids: List[str] = []
        cursor: Optional[str] = None
        while True:
            listing = self._client.blocks.children.list(record_id, start_cursor=cursor)
            block_ids.extend(block["id"] for block in listing.get("results", []))
            cursor = listing.get("next_cursor")
            if not listing.get("has_more") or not cursor:
                break
        for block_id in block_ids:
            self._client.blocks.delete(block_id)
        self._append_blocks(record_id, self._content_blocks(body) or [])

    def _append_blocks(self, record_id: str, blocks: List[Dict[str, Any]]) -> None:
        for batch in batch_blocks(blocks):
            self._client.blocks.children.append(record_id, children=batch)

    def _equality_values(self, where: WhereCondition) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for name, condition in (where or {}).items():
            if isinstance(condition, Mapping):
                if set(condition) != {"equals"}:
                    raise ValidationError(
                        f"upsert 'where' only accepts equality conditions; got {sorted(condition)} for '{name}'",
                        subcode=VALIDATION_UPSERT_NON_EQUALITY,
                        details={"field": name, "operators": sorted(condition)},
                    )
                values[name] = condition["equals"]
            else:
                values[name] = condition
        return values


__all__ = ["NotionTable", "BODY_KEY"]
