# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema declarations for Notion tables.

A schema maps field names to :class:`PropertyConfig` entries. Field types form a
closed set (:class:`FieldType`); an unknown type string is rejected when the
schema is built, not when it is first used.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from ..core._error_codes import CONFIG_UNKNOWN_FIELD_TYPE
from ..core.errors import UnsupportedFieldTypeError


class FieldType(str, Enum):
    """Notion property types understood by the converter and the query translator."""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    SELECT = "select"
    STATUS = "status"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    PEOPLE = "people"
    FILES = "files"
    RELATION = "relation"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    # Read-only: computed by the store
    FORMULA = "formula"
    CREATED_TIME = "created_time"
    LAST_EDITED_TIME = "last_edited_time"
    UNIQUE_ID = "unique_id"

    @property
    def read_only(self) -> bool:
        return self in _READ_ONLY_TYPES

    @property
    def list_valued(self) -> bool:
        return self in _LIST_TYPES


_READ_ONLY_TYPES = frozenset(
    {FieldType.FORMULA, FieldType.CREATED_TIME, FieldType.LAST_EDITED_TIME, FieldType.UNIQUE_ID}
)
_LIST_TYPES = frozenset({FieldType.MULTI_SELECT, FieldType.PEOPLE, FieldType.FILES, FieldType.RELATION})

TEXT_TYPES = frozenset(
    {FieldType.TITLE, FieldType.RICH_TEXT, FieldType.URL, FieldType.EMAIL, FieldType.PHONE_NUMBER}
)


def coerce_field_type(value: Union[str, FieldType]) -> FieldType:
    """
    Resolve a field type from its tag string.

    :raises ~notion_table.core.errors.UnsupportedFieldTypeError: If the tag is not a known type.
    """
    if isinstance(value, FieldType):
        return value
    try:
        return FieldType(value)
    except ValueError:
        raise UnsupportedFieldTypeError(
            f"Unsupported field type: {value!r}",
            subcode=CONFIG_UNKNOWN_FIELD_TYPE,
            details={"type": value},
        ) from None


@dataclass(frozen=True)
class PropertyConfig:
    """
    Declaration of one table field.

    :param type: Field type, as :class:`FieldType` or its tag string.
    :type type: FieldType or str
    :param required: Reject empty values (and, on create, omission).
    :type required: bool
    :param options: Allowed option names for select-like fields. Informational.
    :type options: tuple[str, ...]

    Example::

        PropertyConfig("select", required=True, options=("Open", "Done"))
    """

    type: FieldType
    required: bool = False
    options: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", coerce_field_type(self.type))
        object.__setattr__(self, "options", tuple(self.options))


Schema = Mapping[str, PropertyConfig]


def build_schema(fields: Mapping[str, Union[PropertyConfig, Mapping[str, Any], str]]) -> Schema:
    """
    Build an immutable schema.

    Values may be :class:`PropertyConfig` instances, dicts with ``type`` /
    ``required`` / ``options`` keys, or a bare type string.

    :param fields: Field name to declaration.
    :return: Read-only mapping of field name to :class:`PropertyConfig`.
    :rtype: Mapping[str, PropertyConfig]

    Example::

        schema = build_schema({
            "name": {"type": "title", "required": True},
            "tags": "multi_select",
            "due": PropertyConfig(FieldType.DATE),
        })
    """
    out = {}
    for name, spec in fields.items():
        if isinstance(spec, PropertyConfig):
            out[name] = spec
        elif isinstance(spec, (str, FieldType)):
            out[name] = PropertyConfig(spec)
        else:
            out[name] = PropertyConfig(
                spec["type"],
                required=bool(spec.get("required", False)),
                options=tuple(spec.get("options", ())),
            )
    return MappingProxyType(out)


@dataclass(frozen=True)
class DateRange:
    """A date property value spanning ``start`` to ``end``. A single day is a plain date."""

    start: Union[_dt.date, _dt.datetime, str]
    end: Union[_dt.date, _dt.datetime, str]


@dataclass(frozen=True)
class NotionUser:
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class NotionFile:
    """A file attachment. ``type`` is ``"external"`` or ``"file"`` (store-hosted)."""

    name: str
    url: str
    type: str = "external"


__all__ = [
    "FieldType",
    "TEXT_TYPES",
    "coerce_field_type",
    "PropertyConfig",
    "Schema",
    "build_schema",
    "DateRange",
    "NotionUser",
    "NotionFile",
]
