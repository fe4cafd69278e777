# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for QueryTranslator filter and sort payloads."""

import datetime as dt

import pytest

from notion_table.core._error_codes import VALIDATION_SORT_DIRECTION, VALIDATION_UNKNOWN_FIELD
from notion_table.core.errors import UnsupportedOperatorError, ValidationError
from notion_table.data.query import QueryTranslator, operators_for
from notion_table.models.query import SortOption
from notion_table.models.schema import DateRange, FieldType, build_schema


@pytest.fixture
def translator():
    return QueryTranslator()


@pytest.fixture
def schema():
    return build_schema(
        {
            "title": "title",
            "status": "select",
            "tags": "multi_select",
            "n": "number",
            "done": "checkbox",
            "due": "date",
            "owner": "people",
            "made": "created_time",
        }
    )


class TestBuildFilter:
    def test_empty_where_is_none(self, translator, schema):
        assert translator.build_filter(schema, {}) is None
        assert translator.build_filter(schema, None) is None

    def test_scalar_is_equality_shorthand(self, translator, schema):
        assert translator.build_filter(schema, {"status": "Open", "done": True}) == {
            "and": [
                {"property": "status", "select": {"equals": "Open"}},
                {"property": "done", "checkbox": {"equals": True}},
            ]
        }

    def test_operator_conditions(self, translator, schema):
        result = translator.build_filter(
            schema,
            {"title": {"contains": "bug", "starts_with": "Fix"}, "n": {"greater_than": 3}, "tags": {"contains": "ops"}},
        )
        assert result["and"] == [
            {"property": "title", "title": {"contains": "bug"}},
            {"property": "title", "title": {"starts_with": "Fix"}},
            {"property": "n", "number": {"greater_than": 3}},
            {"property": "tags", "multi_select": {"contains": "ops"}},
        ]

    def test_empty_operators(self, translator, schema):
        result = translator.build_filter(schema, {"status": {"is_empty": True}, "tags": {"is_empty": False}})
        assert result["and"] == [
            {"property": "status", "select": {"is_empty": True}},
            {"property": "tags", "multi_select": {"is_not_empty": True}},
        ]

    def test_date_operands(self, translator, schema):
        result = translator.build_filter(
            schema,
            {"due": {"on_or_after": dt.date(2024, 1, 1), "past_week": True}},
        )
        assert result["and"] == [
            {"property": "due", "date": {"on_or_after": "2024-01-01"}},
            {"property": "due", "date": {"past_week": {}}},
        ]

    def test_date_range_equality_expands(self, translator, schema):
        result = translator.build_filter(schema, {"due": DateRange(dt.date(2024, 1, 1), dt.date(2024, 1, 31))})
        assert result["and"] == [
            {"property": "due", "date": {"on_or_after": "2024-01-01"}},
            {"property": "due", "date": {"on_or_before": "2024-01-31"}},
        ]

    def test_people_operand_is_user_id(self, translator, schema):
        result = translator.build_filter(schema, {"owner": {"contains": {"id": "u1"}}})
        assert result["and"] == [{"property": "owner", "people": {"contains": "u1"}}]

    def test_timestamp_field_uses_timestamp_filter(self, translator, schema):
        result = translator.build_filter(schema, {"made": {"after": "2024-01-01"}})
        assert result["and"] == [{"timestamp": "created_time", "created_time": {"after": "2024-01-01"}}]

    def test_unknown_field(self, translator, schema):
        with pytest.raises(ValidationError) as exc_info:
            translator.build_filter(schema, {"nope": 1})
        assert exc_info.value.subcode == VALIDATION_UNKNOWN_FIELD

    def test_unsupported_operator(self, translator, schema):
        with pytest.raises(UnsupportedOperatorError) as exc_info:
            translator.build_filter(schema, {"done": {"greater_than": 1}})
        assert exc_info.value.details["operator"] == "greater_than"

    def test_operator_sets(self):
        assert "contains" in operators_for(FieldType.RICH_TEXT)
        assert "contains" not in operators_for(FieldType.SELECT)
        assert operators_for(FieldType.FORMULA) == frozenset()


class TestBuildSort:
    def test_none_and_empty(self, translator):
        assert translator.build_sort(None) == []
        assert translator.build_sort([]) == []

    def test_forms_and_order(self, translator):
        result = translator.build_sort(
            [SortOption("n", "desc"), {"field": "title"}, ("updated_at", "DESCENDING")]
        )
        assert result == [
            {"property": "n", "direction": "descending"},
            {"property": "title", "direction": "ascending"},
            {"timestamp": "last_edited_time", "direction": "descending"},
        ]

    def test_schema_property_wins_over_timestamp_alias(self, translator, schema):
        declared = build_schema({"title": "title", "created_at": "date"})

        result = translator.build_sort([("created_at", "desc"), ("updated_at", "asc")], declared)

        assert result == [
            {"property": "created_at", "direction": "descending"},
            {"timestamp": "last_edited_time", "direction": "ascending"},
        ]
        assert translator.build_sort(("created_at", "asc"), schema) == [
            {"timestamp": "created_time", "direction": "ascending"}
        ]

    def test_single_option(self, translator):
        assert translator.build_sort(("title", "asc")) == [{"property": "title", "direction": "ascending"}]
        assert translator.build_sort(SortOption("title")) == [{"property": "title", "direction": "ascending"}]

    def test_invalid_direction(self, translator):
        with pytest.raises(ValidationError) as exc_info:
            translator.build_sort([SortOption("n", "sideways")])
        assert exc_info.value.subcode == VALIDATION_SORT_DIRECTION
