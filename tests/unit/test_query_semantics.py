"""Tests for predicate matching, sort specs and pagination helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from patientflow.core.errors import InvalidQueryError
from patientflow.runtime.query import (
    Page,
    SortField,
    collation_key,
    filter_records,
    matches,
    paginate,
    sort_records,
    strict_equals,
    total_pages,
)


class TestStrictEquals:
    @pytest.mark.parametrize(
        "expected,actual",
        [
            (42, 42),
            (42, 42.0),
            (Decimal("1.5"), 1.5),
            ("a", "a"),
            (True, True),
            (None, None),
            ([1, 2], [1, 2]),
            ({"a": 1}, {"a": 1}),
        ],
    )
    def test_equal(self, expected, actual):
        assert strict_equals(expected, actual) is True

    @pytest.mark.parametrize(
        "expected,actual",
        [
            (42, "42"),
            (True, 1),
            (0, False),
            (None, 0),
            (None, ""),
            ([1, 2], (1, 2)),
        ],
    )
    def test_not_equal(self, expected, actual):
        assert strict_equals(expected, actual) is False


class TestMatches:
    def test_empty_predicate_matches(self):
        assert matches({"id": "x"}, {}) is True
        assert matches({"id": "x"}, None) is True

    def test_casefold_containment(self):
        assert matches({"city": "STRASSE"}, {"city": "straße"}) is True

    def test_empty_string_predicate_matches_any_string(self):
        assert matches({"name": "Alice"}, {"name": ""}) is True

    def test_absent_field(self):
        assert matches({"id": "x"}, {"name": "a"}) is False

    def test_filter_records_preserves_order_and_copies(self):
        records = [{"id": "1", "s": "open"}, {"id": "2", "s": "closed"}, {"id": "3", "s": "reopened"}]
        result = filter_records(records, {"s": "open"})

        assert [r["id"] for r in result] == ["1", "3"]
        result[0]["s"] = "changed"
        assert records[0]["s"] == "open"


class TestSortField:
    def test_ascending(self):
        assert SortField.parse("name") == SortField(field="name", descending=False)

    def test_descending(self):
        assert SortField.parse("-updated_date") == SortField(field="updated_date", descending=True)

    def test_only_leading_dash_is_stripped(self):
        assert SortField.parse("-date-received").field == "date-received"


class TestCollation:
    def test_falsy_values_are_empty(self):
        assert collation_key(None) == collation_key("")
        assert collation_key(0) == collation_key("")

    def test_numbers_compare_as_strings(self):
        records = [{"id": "a", "n": 10}, {"id": "b", "n": 9}]
        assert [r["id"] for r in sort_records(records, "n")] == ["a", "b"]

    def test_sort_records_accepts_sort_field(self):
        records = [{"id": "a", "n": "x"}, {"id": "b", "n": "y"}]
        assert [r["id"] for r in sort_records(records, SortField("n", True))] == ["b", "a"]

    def test_character_classes_rank_before_letters(self):
        values = ["apple", "1st", "~tilde", "_under", " lead"]
        assert sorted(values, key=collation_key) == [" lead", "_under", "~tilde", "1st", "apple"]

    def test_no_sort_returns_copy_of_order(self):
        records = [{"id": "b"}, {"id": "a"}]
        assert sort_records(records, None) == records


class TestPaginate:
    def test_slices(self):
        page = paginate([{"id": str(i)} for i in range(12)], 2, 5)

        assert isinstance(page, Page)
        assert [r["id"] for r in page.data] == ["5", "6", "7", "8", "9"]
        assert page.pagination.total_pages == 3

    @pytest.mark.parametrize("total,limit,expected", [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2)])
    def test_total_pages(self, total, limit, expected):
        assert total_pages(total, limit) == expected

    def test_rejects_bool_page(self):
        with pytest.raises(InvalidQueryError):
            paginate([], True, 10)

    def test_invalid_query_error_is_value_error(self):
        with pytest.raises(ValueError):
            paginate([], 1, 0)
