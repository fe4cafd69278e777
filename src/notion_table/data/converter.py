# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Bidirectional mapping between typed field values and Notion property payloads.

:class:`SchemaConverter` is stateless. Both directions dispatch on
:class:`~notion_table.models.schema.FieldType`; every member is handled
explicitly and anything else raises
:class:`~notion_table.core.errors.UnsupportedFieldTypeError`.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, List, Mapping, Optional, Union

from ..content.blocks import rich_text
from ..core._error_codes import CONFIG_READ_ONLY_FIELD_TYPE, CONFIG_UNKNOWN_FIELD_TYPE
from ..core.errors import UnsupportedFieldTypeError
from ..models.schema import DateRange, FieldType, NotionFile, NotionUser, PropertyConfig, Schema

DateValue = Union[_dt.date, _dt.datetime, str]


def format_date(value: Optional[DateValue]) -> Optional[str]:
    """Render a date, datetime or ISO string as ISO 8601."""
    if value is None:
        return None
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.isoformat()
    return str(value)


def parse_date(value: Optional[str]) -> Optional[Union[_dt.date, _dt.datetime]]:
    """
    Parse an ISO 8601 string from the store.

    Date-only strings become :class:`datetime.date`; anything with a time part
    becomes an aware or naive :class:`datetime.datetime`. Unparseable input is
    returned unchanged.
    """
    if value is None or not isinstance(value, str):
        return value
    text = value.strip()
    try:
        if len(text) == 10:
            return _dt.date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return _dt.datetime.fromisoformat(text)
    except ValueError:
        return value


def _rich_text(content: Optional[str]) -> List[Dict[str, Any]]:
    if content is None:
        return []
    return rich_text(str(content))


def _plain_text(items: Optional[List[Dict[str, Any]]]) -> str:
    parts = []
    for item in items or []:
        if "plain_text" in item:
            parts.append(item.get("plain_text") or "")
        else:
            parts.append(((item.get("text") or {}).get("content")) or "")
    return "".join(parts)


def _user_id(user: Union[str, NotionUser, Mapping[str, Any]]) -> str:
    if isinstance(user, NotionUser):
        return user.id
    if isinstance(user, Mapping):
        return str(user["id"])
    return str(user)


def _encode_file(item: Union[str, NotionFile]) -> Dict[str, Any]:
    if isinstance(item, str):
        item = NotionFile(name=item.rsplit("/", 1)[-1] or item, url=item)
    if item.type == "file":
        return {"name": item.name, "type": "file", "file": {"url": item.url}}
    return {"name": item.name, "type": "external", "external": {"url": item.url}}


def _decode_file(raw: Mapping[str, Any]) -> NotionFile:
    kind = raw.get("type", "external")
    url = (raw.get(kind) or {}).get("url", "")
    return NotionFile(name=raw.get("name", ""), url=url, type=kind)


def _decode_user(raw: Mapping[str, Any]) -> NotionUser:
    person = raw.get("person") or {}
    return NotionUser(
        id=str(raw.get("id", "")),
        name=raw.get("name"),
        email=person.get("email"),
        avatar_url=raw.get("avatar_url"),
    )


def _decode_formula(raw: Optional[Mapping[str, Any]]) -> Any:
    if not raw:
        return None
    kind = raw.get("type")
    value = raw.get(kind) if kind else None
    if kind == "date":
        return _decode_date(value)
    return value


def _decode_date(raw: Optional[Mapping[str, Any]]) -> Any:
    if not raw:
        return None
    start = parse_date(raw.get("start"))
    end = raw.get("end")
    if end:
        return DateRange(start=start, end=parse_date(end))
    return start


def encode_date(value: Union[DateValue, DateRange, None]) -> Optional[Dict[str, Any]]:
    """Encode a date-like value as a Notion ``{"start", "end"}`` object."""
    if value is None:
        return None
    if isinstance(value, DateRange):
        return {"start": format_date(value.start), "end": format_date(value.end)}
    return {"start": format_date(value), "end": None}


class SchemaConverter:
    """
    Convert between typed field values and Notion property payloads.

    Example::

        converter = SchemaConverter()
        props = converter.to_external(schema, {"title": "Ship it", "tags": ["ops"]})
        # {"title": {"title": [...]}, "tags": {"multi_select": [{"name": "ops"}]}}
        data = converter.from_external(schema, page["properties"])
    """

    def to_external(self, schema: Schema, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Encode the supplied fields. Keys missing from ``data`` are omitted
        (left unchanged remotely); keys missing from ``schema`` are ignored.

        :param schema: Table schema.
        :param data: Partial typed payload.
        :return: Notion ``properties`` payload.
        :rtype: dict[str, Any]
        :raises ~notion_table.core.errors.UnsupportedFieldTypeError: For read-only or unknown types.
        """
        properties: Dict[str, Any] = {}
        for name, value in data.items():
            config = schema.get(name)
            if config is None:
                continue
            properties[name] = self.encode_value(config, value)
        return properties

    def from_external(self, schema: Schema, properties: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Decode every schema field from a page's ``properties`` payload.

        Fields absent from the payload decode to ``None`` (``[]`` for list types);
        payload properties outside the schema are ignored.

        :rtype: dict[str, Any]
        """
        data: Dict[str, Any] = {}
        for name, config in schema.items():
            raw = properties.get(name) if properties else None
            data[name] = self.decode_value(config, raw)
        return data

    def encode_value(self, config: PropertyConfig, value: Any) -> Dict[str, Any]:
        """Encode one field value into its property object."""
        t = config.type
        if t in (FieldType.TITLE, FieldType.RICH_TEXT):
            return {t.value: _rich_text(value)}
        if t in (FieldType.URL, FieldType.EMAIL, FieldType.PHONE_NUMBER):
            return {t.value: value if value != "" else None}
        if t is FieldType.NUMBER:
            return {"number": value}
        if t is FieldType.CHECKBOX:
            return {"checkbox": bool(value)}
        if t in (FieldType.SELECT, FieldType.STATUS):
            return {t.value: {"name": str(value)} if value not in (None, "") else None}
        if t is FieldType.MULTI_SELECT:
            return {"multi_select": [{"name": str(v)} for v in (value or [])]}
        if t is FieldType.DATE:
            return {"date": encode_date(value)}
        if t is FieldType.PEOPLE:
            return {"people": [{"object": "user", "id": _user_id(u)} for u in (value or [])]}
        if t is FieldType.FILES:
            return {"files": [_encode_file(f) for f in (value or [])]}
        if t is FieldType.RELATION:
            return {"relation": [{"id": str(r)} for r in (value or [])]}
        if t.read_only:
            raise UnsupportedFieldTypeError(
                f"Field type {t.value!r} is computed by the store and cannot be written",
                subcode=CONFIG_READ_ONLY_FIELD_TYPE,
                details={"type": t.value},
            )
        raise UnsupportedFieldTypeError(
            f"Unsupported field type: {t!r}", subcode=CONFIG_UNKNOWN_FIELD_TYPE, details={"type": str(t)}
        )

    def encode_operand(self, config: PropertyConfig, value: Any) -> Any:
        """
        Encode a filter operand the way the store expects it for the field type.

        Equality operands use the same rules as :meth:`encode_value`, reduced to the
        scalar the filter compares against (option name, user id, ISO date...).
        """
        t = config.type
        if isinstance(value, bool) and t is not FieldType.CHECKBOX:
            return value
        if t in (FieldType.DATE, FieldType.CREATED_TIME, FieldType.LAST_EDITED_TIME):
            if isinstance(value, DateRange):
                return format_date(value.start)
            return format_date(value)
        if t is FieldType.PEOPLE:
            return _user_id(value)
        if t is FieldType.RELATION:
            return str(value)
        if t is FieldType.NUMBER or t is FieldType.UNIQUE_ID:
            return value
        if t is FieldType.CHECKBOX:
            return bool(value)
        if value is None:
            return None
        return str(value)

    def decode_value(self, config: PropertyConfig, raw: Optional[Mapping[str, Any]]) -> Any:
        """Decode one property object into a typed value."""
        t = config.type
        if raw is None:
            return [] if t.list_valued else None
        if t in (FieldType.TITLE, FieldType.RICH_TEXT):
            return _plain_text(raw.get(t.value))
        if t in (FieldType.URL, FieldType.EMAIL, FieldType.PHONE_NUMBER, FieldType.NUMBER):
            return raw.get(t.value)
        if t is FieldType.CHECKBOX:
            return bool(raw.get("checkbox", False))
        if t in (FieldType.SELECT, FieldType.STATUS):
            option = raw.get(t.value)
            return option.get("name") if option else None
        if t is FieldType.MULTI_SELECT:
            return [o.get("name") for o in raw.get("multi_select") or []]
        if t is FieldType.DATE:
            return _decode_date(raw.get("date"))
        if t is FieldType.PEOPLE:
            return [_decode_user(u) for u in raw.get("people") or []]
        if t is FieldType.FILES:
            return [_decode_file(f) for f in raw.get("files") or []]
        if t is FieldType.RELATION:
            return [str(r.get("id")) for r in raw.get("relation") or []]
        if t is FieldType.FORMULA:
            return _decode_formula(raw.get("formula"))
        if t in (FieldType.CREATED_TIME, FieldType.LAST_EDITED_TIME):
            return parse_date(raw.get(t.value))
        if t is FieldType.UNIQUE_ID:
            uid = raw.get("unique_id") or {}
            number = uid.get("number")
            prefix = uid.get("prefix")
            if prefix and number is not None:
                return f"{prefix}-{number}"
            return number
        raise UnsupportedFieldTypeError(
            f"Unsupported field type: {t!r}", subcode=CONFIG_UNKNOWN_FIELD_TYPE, details={"type": str(t)}
        )


__all__ = ["SchemaConverter", "encode_date", "format_date", "parse_date"]
