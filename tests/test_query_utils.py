"""
Tests for utils/query.py — list params and mock-API SQL builders
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.query import (
    build_list_params,
    build_order_clause,
    build_ordering,
    build_where_clause,
    parse_ordering,
)


class TestBuildOrdering:
    def test_ascending_is_bare_field(self):
        assert build_ordering("name", "asc") == "name"

    def test_descending_prefixed(self):
        assert build_ordering("name", "desc") == "-name"

    def test_no_field(self):
        assert build_ordering(None, "desc") is None
        assert build_ordering("", "asc") is None


class TestBuildListParams:
    def test_minimal(self):
        assert build_list_params(1, 10) == {"page": 1, "page_size": 10}

    def test_search_stripped(self):
        assert build_list_params(1, 10, search_text="  smith ")["search"] == "smith"

    def test_filters_pass_through(self):
        params = build_list_params(2, 5, filters={"region": "1", "district": ""})
        assert params == {"region": "1", "page": 2, "page_size": 5}

    def test_filters_never_override_core_keys(self):
        params = build_list_params(3, 10, filters={"page": 99, "search": "x"})
        assert params["page"] == 3
        assert "search" not in params


class TestParseOrdering:
    def test_ascending(self):
        assert parse_ordering("name", {"name"}) == ("name", "asc")

    def test_descending(self):
        assert parse_ordering("-name", {"name"}) == ("name", "desc")

    def test_none(self):
        assert parse_ordering(None, {"name"}) is None

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Invalid ordering field"):
            parse_ordering("password", {"name"})


class TestBuildWhereClause:
    def test_empty(self):
        assert build_where_clause() == ("", [])

    def test_filters_whitelisted(self):
        where, params = build_where_clause(
            filters={"station": "100", "evil; DROP": "x"},
            filter_columns={"station"},
        )
        assert where == "WHERE CAST(station AS TEXT) = ?"
        assert params == ["100"]

    def test_search_ors_columns(self):
        where, params = build_where_clause(search="Smith", search_columns=("a", "b"))
        assert "LOWER(COALESCE(a, '')) LIKE ?" in where
        assert " OR " in where
        assert params == ["%smith%", "%smith%"]

    def test_filter_and_search_combined(self):
        where, params = build_where_clause(
            search="x", search_columns=("a",),
            filters={"region": "1"}, filter_columns={"region"},
        )
        assert where.count(" AND ") == 1
        assert params == ["1", "%x%"]


class TestBuildOrderClause:
    def test_default(self):
        assert build_order_clause(None) == "ORDER BY id ASC"

    def test_secondary_id_key(self):
        assert build_order_clause(("name", "desc")) == "ORDER BY name DESC, id ASC"

    def test_id_alone(self):
        assert build_order_clause(("id", "desc")) == "ORDER BY id DESC"
