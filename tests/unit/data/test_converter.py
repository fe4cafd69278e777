# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for SchemaConverter encoding and decoding."""

import datetime as dt
import unittest

from notion_table.content.blocks import MAX_TEXT_LENGTH
from notion_table.core.errors import UnsupportedFieldTypeError
from notion_table.data.converter import SchemaConverter, encode_date, parse_date
from notion_table.data.validator import SchemaValidator
from notion_table.models.schema import DateRange, NotionFile, NotionUser, PropertyConfig, build_schema


class TestSchemaConverterEncode(unittest.TestCase):
    def setUp(self):
        self.converter = SchemaConverter()
        self.schema = build_schema(
            {
                "name": "title",
                "notes": "rich_text",
                "count": "number",
                "active": "checkbox",
                "stage": "select",
                "state": "status",
                "labels": "multi_select",
                "when": "date",
                "owners": "people",
                "attachments": "files",
                "links": "relation",
                "site": "url",
                "mail": "email",
                "phone": "phone_number",
                "score": "formula",
            }
        )

    def test_text_types(self):
        props = self.converter.to_external(self.schema, {"name": "Hello", "notes": ""})
        self.assertEqual(props["name"], {"title": [{"type": "text", "text": {"content": "Hello"}}]})
        self.assertEqual(props["notes"], {"rich_text": []})

    def test_scalar_types(self):
        props = self.converter.to_external(
            self.schema,
            {"count": 3.5, "active": True, "stage": "Open", "state": "", "site": "https://x.io", "mail": ""},
        )
        self.assertEqual(props["count"], {"number": 3.5})
        self.assertEqual(props["active"], {"checkbox": True})
        self.assertEqual(props["stage"], {"select": {"name": "Open"}})
        self.assertEqual(props["state"], {"status": None})
        self.assertEqual(props["site"], {"url": "https://x.io"})
        self.assertEqual(props["mail"], {"email": None})

    def test_list_types(self):
        props = self.converter.to_external(
            self.schema,
            {
                "labels": ["a", "b"],
                "owners": ["u1", NotionUser(id="u2")],
                "attachments": ["https://cdn.example.com/report.pdf", NotionFile("x", "https://h/x", type="file")],
                "links": ["p1"],
            },
        )
        self.assertEqual(props["labels"], {"multi_select": [{"name": "a"}, {"name": "b"}]})
        self.assertEqual(props["owners"]["people"], [{"object": "user", "id": "u1"}, {"object": "user", "id": "u2"}])
        self.assertEqual(
            props["attachments"]["files"],
            [
                {"name": "report.pdf", "type": "external", "external": {"url": "https://cdn.example.com/report.pdf"}},
                {"name": "x", "type": "file", "file": {"url": "https://h/x"}},
            ],
        )
        self.assertEqual(props["links"], {"relation": [{"id": "p1"}]})

    def test_dates(self):
        self.assertEqual(encode_date(dt.date(2024, 3, 1)), {"start": "2024-03-01", "end": None})
        self.assertEqual(
            encode_date(DateRange(dt.date(2024, 3, 1), dt.date(2024, 3, 5))),
            {"start": "2024-03-01", "end": "2024-03-05"},
        )
        self.assertEqual(self.converter.to_external(self.schema, {"when": None}), {"when": {"date": None}})

    def test_unknown_keys_are_skipped(self):
        self.assertEqual(self.converter.to_external(self.schema, {"body": "text", "extra": 1}), {})

    def test_read_only_type_cannot_be_encoded(self):
        with self.assertRaises(UnsupportedFieldTypeError):
            self.converter.to_external(self.schema, {"score": 1})


class TestSchemaConverterDecode(unittest.TestCase):
    def setUp(self):
        self.converter = SchemaConverter()

    def test_decode_page_properties(self):
        schema = build_schema(
            {
                "name": "title",
                "stage": "select",
                "labels": "multi_select",
                "when": "date",
                "owners": "people",
                "attachments": "files",
                "links": "relation",
                "score": "formula",
                "ticket": "unique_id",
                "made": "created_time",
                "active": "checkbox",
            }
        )
        properties = {
            "name": {"type": "title", "title": [{"plain_text": "Hel"}, {"plain_text": "lo"}]},
            "stage": {"type": "select", "select": {"id": "1", "name": "Open"}},
            "labels": {"type": "multi_select", "multi_select": [{"name": "a"}]},
            "when": {"type": "date", "date": {"start": "2024-03-01", "end": "2024-03-05"}},
            "owners": {
                "type": "people",
                "people": [{"id": "u1", "name": "Ana", "person": {"email": "ana@example.com"}}],
            },
            "attachments": {"type": "files", "files": [{"name": "f", "type": "file", "file": {"url": "https://h/f"}}]},
            "links": {"type": "relation", "relation": [{"id": "p9"}]},
            "score": {"type": "formula", "formula": {"type": "number", "number": 42}},
            "ticket": {"type": "unique_id", "unique_id": {"prefix": "TCK", "number": 7}},
            "made": {"type": "created_time", "created_time": "2024-01-01T10:00:00.000Z"},
            "active": {"type": "checkbox", "checkbox": False},
            "outside": {"type": "number", "number": 1},
        }

        data = self.converter.from_external(schema, properties)

        self.assertEqual(data["name"], "Hello")
        self.assertEqual(data["stage"], "Open")
        self.assertEqual(data["labels"], ["a"])
        self.assertEqual(data["when"], DateRange(dt.date(2024, 3, 1), dt.date(2024, 3, 5)))
        self.assertEqual(data["owners"], [NotionUser(id="u1", name="Ana", email="ana@example.com")])
        self.assertEqual(data["attachments"], [NotionFile("f", "https://h/f", type="file")])
        self.assertEqual(data["links"], ["p9"])
        self.assertEqual(data["score"], 42)
        self.assertEqual(data["ticket"], "TCK-7")
        self.assertEqual(data["made"], dt.datetime(2024, 1, 1, 10, tzinfo=dt.timezone.utc))
        self.assertIs(data["active"], False)
        self.assertNotIn("outside", data)

    def test_missing_properties_decode_to_empty(self):
        schema = build_schema({"name": "title", "labels": "multi_select", "stage": "select", "n": "number"})
        data = self.converter.from_external(schema, {})
        self.assertEqual(data, {"name": None, "labels": [], "stage": None, "n": None})

    def test_empty_select_and_single_date(self):
        self.assertIsNone(self.converter.decode_value(PropertyConfig("select"), {"select": None}))
        self.assertEqual(
            self.converter.decode_value(PropertyConfig("date"), {"date": {"start": "2024-03-01", "end": None}}),
            dt.date(2024, 3, 1),
        )

    def test_encoded_values_decode_back(self):
        schema = build_schema(
            {
                "name": "title",
                "notes": "rich_text",
                "n": "number",
                "active": "checkbox",
                "stage": "select",
                "state": "status",
                "labels": "multi_select",
                "when": "date",
                "owners": "people",
                "attachments": "files",
                "links": "relation",
                "site": "url",
                "mail": "email",
                "phone": "phone_number",
            }
        )
        base = {
            "name": "Ship",
            "notes": "Release notes",
            "n": 4,
            "active": True,
            "stage": "Done",
            "state": "In progress",
            "labels": ["x", "y"],
            "owners": [NotionUser("u1"), NotionUser("u2")],
            "attachments": [
                NotionFile("spec.pdf", "https://cdn.example.com/spec.pdf"),
                NotionFile("x", "https://h/x", type="file"),
            ],
            "links": ["p1"],
            "site": "https://example.com",
            "mail": "ana@example.com",
            "phone": "+1 555 0100",
        }
        dates = [
            dt.date(2024, 3, 1),
            dt.datetime(2024, 3, 1, 10, 30, tzinfo=dt.timezone.utc),
            DateRange(dt.date(2024, 3, 1), dt.date(2024, 3, 5)),
        ]
        for when in dates:
            with self.subTest(when=when):
                data = dict(base, when=when)
                SchemaValidator().validate(schema, data)
                encoded = self.converter.to_external(schema, data)
                self.assertEqual(self.converter.from_external(schema, encoded), data)

    def test_cleared_values_decode_to_empty(self):
        schema = build_schema({"notes": "rich_text", "stage": "select", "labels": "multi_select", "when": "date"})
        encoded = self.converter.to_external(schema, {"notes": "", "stage": None, "labels": [], "when": None})
        self.assertEqual(
            self.converter.from_external(schema, encoded), {"notes": "", "stage": None, "labels": [], "when": None}
        )

    def test_long_text_is_split_and_joined(self):
        schema = build_schema({"name": "title", "notes": "rich_text"})
        text = "abcde" * 900

        encoded = self.converter.to_external(schema, {"name": text, "notes": text})

        for key in ("name", "notes"):
            items = encoded[key][schema[key].type.value]
            self.assertEqual([len(i["text"]["content"]) for i in items], [MAX_TEXT_LENGTH, MAX_TEXT_LENGTH, 500])
        self.assertEqual(self.converter.from_external(schema, encoded), {"name": text, "notes": text})


class TestParseDate(unittest.TestCase):
    def test_parse_variants(self):
        self.assertEqual(parse_date("2024-02-03"), dt.date(2024, 2, 3))
        self.assertEqual(parse_date("2024-02-03T04:05:06+00:00"), dt.datetime(2024, 2, 3, 4, 5, 6, tzinfo=dt.timezone.utc))
        self.assertIsNone(parse_date(None))
        self.assertEqual(parse_date("not a date"), "not a date")
