# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Translation of typed ``where`` conditions and sort options into Notion's
database-query ``filter`` and ``sorts`` payloads.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

from ..core._error_codes import (
    CONFIG_UNSUPPORTED_OPERATOR,
    VALIDATION_SORT_DIRECTION,
    VALIDATION_UNKNOWN_FIELD,
)
from ..core.errors import UnsupportedOperatorError, ValidationError
from ..models.query import ASCENDING, DESCENDING, SortLike, SortOption, WhereCondition
from ..models.schema import DateRange, FieldType, PropertyConfig, Schema, TEXT_TYPES
from .converter import SchemaConverter

_EMPTY_OPS = frozenset({"is_empty", "is_not_empty"})
_TEXT_OPS = frozenset(
    {"equals", "does_not_equal", "contains", "does_not_contain", "starts_with", "ends_with"}
) | _EMPTY_OPS
_NUMBER_OPS = frozenset(
    {
        "equals",
        "does_not_equal",
        "greater_than",
        "less_than",
        "greater_than_or_equal_to",
        "less_than_or_equal_to",
    }
) | _EMPTY_OPS
_CHECKBOX_OPS = frozenset({"equals", "does_not_equal"})
_SELECT_OPS = frozenset({"equals", "does_not_equal"}) | _EMPTY_OPS
_CONTAINS_OPS = frozenset({"contains", "does_not_contain"}) | _EMPTY_OPS
# Relative date operators take an empty object as operand
_RELATIVE_DATE_OPS = frozenset(
    {"past_week", "past_month", "past_year", "next_week", "next_month", "next_year", "this_week"}
)
_DATE_OPS = (
    frozenset({"equals", "before", "after", "on_or_before", "on_or_after"}) | _EMPTY_OPS | _RELATIVE_DATE_OPS
)


def operators_for(field_type: FieldType) -> FrozenSet[str]:
    """Return the filter operators a field type supports."""
    if field_type in TEXT_TYPES:
        return _TEXT_OPS
    if field_type in (FieldType.NUMBER, FieldType.UNIQUE_ID):
        return _NUMBER_OPS
    if field_type is FieldType.CHECKBOX:
        return _CHECKBOX_OPS
    if field_type in (FieldType.SELECT, FieldType.STATUS):
        return _SELECT_OPS
    if field_type in (FieldType.MULTI_SELECT, FieldType.PEOPLE, FieldType.RELATION):
        return _CONTAINS_OPS
    if field_type in (FieldType.DATE, FieldType.CREATED_TIME, FieldType.LAST_EDITED_TIME):
        return _DATE_OPS
    if field_type is FieldType.FILES:
        return _EMPTY_OPS
    return frozenset()


_TIMESTAMP_SORT_FIELDS = {"created_at": "created_time", "updated_at": "last_edited_time"}
_DIRECTIONS = {
    "ascending": ASCENDING,
    "asc": ASCENDING,
    "descending": DESCENDING,
    "desc": DESCENDING,
}


class QueryTranslator:
    """
    Build Notion query payloads from typed conditions.

    Example::

        translator = QueryTranslator()
        translator.build_filter(schema, {"status": "Open", "title": {"contains": "bug"}})
        # {"and": [{"property": "status", "select": {"equals": "Open"}},
        #          {"property": "title", "title": {"contains": "bug"}}]}
        translator.build_sort([SortOption("due", "descending")])
        # [{"property": "due", "direction": "descending"}]
    """

    def __init__(self, converter: Optional[SchemaConverter] = None) -> None:
        self._converter = converter or SchemaConverter()

    def build_filter(self, schema: Schema, where: Optional[WhereCondition]) -> Optional[Dict[str, Any]]:
        """
        Translate a ``where`` mapping into a filter.

        Scalars are shorthand for ``{"equals": value}``. Top-level keys are AND-ed.

        :return: ``None`` when ``where`` is empty, else ``{"and": [...]}``.
        :raises ~notion_table.core.errors.ValidationError: If a key is not a schema field.
        :raises ~notion_table.core.errors.UnsupportedOperatorError: If an operator is not
            valid for the field type.
        """
        if not where:
            return None
        clauses: List[Dict[str, Any]] = []
        for name, condition in where.items():
            config = schema.get(name)
            if config is None:
                raise ValidationError(
                    f"Cannot filter on unknown field '{name}'",
                    subcode=VALIDATION_UNKNOWN_FIELD,
                    details={"field": name},
                )
            ops = condition if isinstance(condition, Mapping) else {"equals": condition}
            for op, operand in ops.items():
                clauses.extend(self._build_clause(name, config, op, operand))
        return {"and": clauses} if clauses else None

    def _build_clause(self, name: str, config: PropertyConfig, op: str, operand: Any) -> List[Dict[str, Any]]:
        t = config.type
        if op not in operators_for(t):
            raise UnsupportedOperatorError(
                f"Operator '{op}' is not supported for field '{name}' of type {t.value}",
                subcode=CONFIG_UNSUPPORTED_OPERATOR,
                details={"field": name, "type": t.value, "operator": op},
            )
        if op in _EMPTY_OPS:
            if operand is False:
                op = "is_not_empty" if op == "is_empty" else "is_empty"
            return [self._clause(name, t, op, True)]
        if op in _RELATIVE_DATE_OPS:
            return [self._clause(name, t, op, {})]
        if op == "equals" and isinstance(operand, DateRange) and operand.end is not None:
            return [
                self._clause(name, t, "on_or_after", self._converter.encode_operand(config, operand.start)),
                self._clause(name, t, "on_or_before", self._converter.encode_operand(config, operand.end)),
            ]
        return [self._clause(name, t, op, self._converter.encode_operand(config, operand))]

    @staticmethod
    def _clause(name: str, field_type: FieldType, op: str, operand: Any) -> Dict[str, Any]:
        if field_type in (FieldType.CREATED_TIME, FieldType.LAST_EDITED_TIME):
            return {"timestamp": field_type.value, field_type.value: {op: operand}}
        return {"property": name, field_type.value: {op: operand}}

    def build_sort(
        self,
        sorts: Union[None, SortLike, Iterable[SortLike]],
        schema: Optional[Schema] = None,
    ) -> List[Dict[str, Any]]:
        """
        Translate sort options, preserving their order.

        ``created_at`` and ``updated_at`` sort on the page timestamps unless
        ``schema`` declares a property with that name, which then wins.

        :return: List of sort entries; empty means "store default order".
        :raises ~notion_table.core.errors.ValidationError: On an unknown direction.
        """
        if not sorts:
            return []
        if isinstance(sorts, (SortOption, Mapping)) or (
            isinstance(sorts, tuple) and len(sorts) == 2 and all(isinstance(s, str) for s in sorts)
        ):
            sorts = [sorts]
        out: List[Dict[str, Any]] = []
        for item in sorts:
            option = _as_sort_option(item)
            direction = _DIRECTIONS.get(str(option.direction).lower())
            if direction is None:
                raise ValidationError(
                    f"Invalid sort direction {option.direction!r} for '{option.field}'",
                    subcode=VALIDATION_SORT_DIRECTION,
                    details={"field": option.field, "direction": option.direction},
                )
            timestamp = None if schema and option.field in schema else _TIMESTAMP_SORT_FIELDS.get(option.field)
            if timestamp is not None:
                out.append({"timestamp": timestamp, "direction": direction})
            else:
                out.append({"property": option.field, "direction": direction})
        return out


def _as_sort_option(item: SortLike) -> SortOption:
    if isinstance(item, SortOption):
        return item
    if isinstance(item, Mapping):
        return SortOption(item["field"], item.get("direction", ASCENDING))
    field, direction = item
    return SortOption(field, direction)


__all__ = ["QueryTranslator", "operators_for"]
