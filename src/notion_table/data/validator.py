# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Write-payload validation against a table schema."""

from __future__ import annotations

import datetime as _dt
import numbers
from typing import Any, Mapping

from ..core._error_codes import (
    VALIDATION_READ_ONLY,
    VALIDATION_REQUIRED_EMPTY,
    VALIDATION_REQUIRED_MISSING,
    VALIDATION_TYPE_MISMATCH,
)
from ..core.errors import ValidationError
from ..models.schema import DateRange, FieldType, NotionFile, NotionUser, Schema, TEXT_TYPES

# Types whose empty value is the empty string
_BLANK_TEXT_TYPES = frozenset({FieldType.TITLE, FieldType.RICH_TEXT})


def is_empty_value(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple)) and len(value) == 0)


def _is_clearing_value(field_type: FieldType, value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return field_type.list_valued
    return field_type in _BLANK_TEXT_TYPES


def _is_str_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def matches_type(field_type: FieldType, value: Any) -> bool:
    """
    Return whether ``value`` has the runtime shape ``field_type`` expects.

    Only the shapes the converter decodes back are accepted: dates are
    :class:`datetime.date`/:class:`datetime.datetime` or a :class:`DateRange`
    of them, people are :class:`NotionUser` items and files are
    :class:`NotionFile` items.
    """
    if field_type in TEXT_TYPES or field_type in (FieldType.SELECT, FieldType.STATUS):
        return isinstance(value, str)
    if field_type is FieldType.NUMBER:
        return isinstance(value, numbers.Real) and not isinstance(value, bool)
    if field_type is FieldType.CHECKBOX:
        return isinstance(value, bool)
    if field_type in (FieldType.MULTI_SELECT, FieldType.RELATION):
        return _is_str_list(value)
    if field_type is FieldType.DATE:
        if isinstance(value, DateRange):
            return isinstance(value.start, _dt.date) and isinstance(value.end, _dt.date)
        return isinstance(value, _dt.date)
    if field_type is FieldType.PEOPLE:
        return isinstance(value, (list, tuple)) and all(isinstance(v, NotionUser) for v in value)
    if field_type is FieldType.FILES:
        return isinstance(value, (list, tuple)) and all(isinstance(v, NotionFile) for v in value)
    return False


class SchemaValidator:
    """
    Validate typed write payloads.

    Rules, per supplied field that the schema declares:

    - read-only types (formula, timestamps, unique id) cannot be written;
    - a required field cannot be set to ``None``, ``""`` or ``[]``;
    - ``""`` is only a value for title and rich text fields and ``[]`` only for
      list types; anything else is cleared with ``None``;
    - a non-``None`` value must match the declared type.

    With ``partial=False`` (create) every required field must also be present.
    With ``partial=True`` (update) absent fields are left alone. Keys the schema
    does not declare are ignored.
    """

    def validate(self, schema: Schema, data: Mapping[str, Any], *, partial: bool = False) -> None:
        """
        :raises ~notion_table.core.errors.ValidationError: On the first violation found.
        """
        if not partial:
            for name, config in schema.items():
                if config.required and name not in data:
                    raise ValidationError(
                        f"Required field '{name}' is missing",
                        subcode=VALIDATION_REQUIRED_MISSING,
                        details={"field": name},
                    )

        for name, value in data.items():
            config = schema.get(name)
            if config is None:
                continue
            if config.type.read_only:
                raise ValidationError(
                    f"Field '{name}' ({config.type.value}) is read-only",
                    subcode=VALIDATION_READ_ONLY,
                    details={"field": name, "type": config.type.value},
                )
            if is_empty_value(value):
                if config.required:
                    raise ValidationError(
                        f"Required field '{name}' cannot be empty",
                        subcode=VALIDATION_REQUIRED_EMPTY,
                        details={"field": name},
                    )
                if not _is_clearing_value(config.type, value):
                    raise ValidationError(
                        f"Field '{name}' ({config.type.value}) cannot be set to {value!r}; use None to clear it",
                        subcode=VALIDATION_TYPE_MISMATCH,
                        details={"field": name, "type": config.type.value, "value_type": type(value).__name__},
                    )
                continue
            if not matches_type(config.type, value):
                raise ValidationError(
                    f"Field '{name}' expects {config.type.value}, got {type(value).__name__}",
                    subcode=VALIDATION_TYPE_MISMATCH,
                    details={"field": name, "type": config.type.value, "value_type": type(value).__name__},
                )


__all__ = ["SchemaValidator", "is_empty_value", "matches_type"]
